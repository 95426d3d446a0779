"""Argument parsing functionality for hvm."""

import argparse
from constants import Constants


def _add_tool_argument(parser):
    parser.add_argument("tool",
                        help="Binary name, i.e: consul, nomad, packer, terraform, vagrant, vault",
                        action="store", type=str.lower,
                        choices=Constants.SUPPORTED_TOOLS,
                        metavar="TOOL")


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="hvm",
        description=(
            "hvm - Locally curate HashiCorp binaries for command line use"
        ),
        add_help=True,
    )

    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file (default: ~/.hvm/hvm.log)",
                        action="store",
                        type=str)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (default: ~/.hvm/hvm.yaml)",
                        action="store",
                        type=str)
    parser.add_argument("--home",
                        dest="HVM_HOME",
                        help="Install tree root (default: ~/.hvm)",
                        action="store",
                        type=str)
    parser.add_argument("--bin-dir",
                        dest="BIN_DIR",
                        help="Directory for active-version links (default: ~/bin)",
                        action="store",
                        type=str)

    subparsers = parser.add_subparsers(dest="COMMAND", metavar="COMMAND")
    subparsers.required = True

    install_parser = subparsers.add_parser(
        "install",
        help="Install a binary at the latest available or specified version",
        description=(
            "Install a supported binary at the specified version for the host "
            "architecture and operating system; if the version is omitted, the "
            "latest available version is installed."
        ),
    )
    _add_tool_argument(install_parser)
    install_parser.add_argument("POSITIONAL_VERSION",
                                help="Version to install (same as --version)",
                                nargs="?",
                                metavar="VERSION")
    install_parser.add_argument("-v", "--version",
                                dest="VERSION",
                                help="Version to install",
                                action="store",
                                type=str)
    install_parser.add_argument("--os",
                                dest="OS",
                                help="Target operating system (default: host)",
                                action="store",
                                type=str.lower)
    install_parser.add_argument("--arch",
                                dest="ARCH",
                                help="Target architecture (default: host)",
                                action="store",
                                type=str.lower)

    use_parser = subparsers.add_parser(
        "use",
        help="Use a specific installed binary version",
        description="Point ~/bin/<tool> at an installed version of the binary.",
    )
    _add_tool_argument(use_parser)
    use_parser.add_argument("-v", "--version",
                            dest="VERSION",
                            help="Version to activate",
                            action="store",
                            type=str)

    subparsers.add_parser(
        "info",
        help="Host information and active versions",
    )

    return parser.parse_args(argv)
