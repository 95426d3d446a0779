"""hvm - Locally curate HashiCorp binaries for command line use

    Installs tool releases side by side under ~/.hvm/<tool>/<version>/ after
    verifying them against the published SHA256SUMS, and selects the active
    version through a symlink at ~/bin/<tool>.

    Returns:
        int: Exit code
"""
import logging
import sys
import time

from constants import ExitCodes, Tools
from common.errors import AlreadyInstalledError, HvmError, InvalidVersionError, NotInstalledError
from common.host import bin_dir, host_name, host_platform
from common.logging_utils import extra_context, is_debug_enabled
from args import parse_args
from cli_config import setup_runtime

import installer
import releases

logger = logging.getLogger(__name__)


def run_install(args, home):
    """Resolve, validate and install the requested version of a tool.

    Args:
        args: Parsed CLI arguments.
        home (str): hvm home directory.

    Returns:
        InstalledVersion: The new installation.
    """
    tool = releases.to_tool(args.tool)
    requested = args.VERSION or args.POSITIONAL_VERSION
    if args.VERSION and args.POSITIONAL_VERSION and args.VERSION != args.POSITIONAL_VERSION:
        raise InvalidVersionError(
            f"conflicting versions given: {args.POSITIONAL_VERSION} and --version {args.VERSION}"
        )

    if requested:
        if not releases.is_valid_version(tool, requested):
            raise InvalidVersionError(f"{requested} is not a version of {tool.value} that can be installed")
        version = requested
    else:
        version = releases.latest_version(tool)

    if installer.is_installed(home, tool, version):
        if requested:
            raise AlreadyInstalledError(f"{tool.value} version {version} appears to be already installed")
        raise AlreadyInstalledError(f"latest {tool.value} version {version} is already installed")

    host_os, host_arch = host_platform()
    os_name = args.OS or host_os
    arch = args.ARCH or host_arch
    logger.info("Installing %s version %s for %s/%s", tool.value, version, os_name, arch)
    installed = installer.install(tool, version, os_name, arch, home)
    print(f"Installed {tool.value} ({os_name}/{arch}) version {version}")
    return installed


def run_use(args, home):
    """Make an installed version the active one on the PATH.

    Args:
        args: Parsed CLI arguments.
        home (str): hvm home directory.

    Returns:
        str: The link path.
    """
    tool = releases.to_tool(args.tool)
    if not args.VERSION:
        raise InvalidVersionError("use: unknown binary version; please use --version <version>")
    if not installer.is_installed(home, tool, args.VERSION):
        raise NotInstalledError(
            f"{tool.value} version {args.VERSION} is not installed; run 'hvm install {tool.value} {args.VERSION}' first"
        )
    link = installer.activate(home, bin_dir(), tool, args.VERSION)
    print(f"Using {tool.value} version {args.VERSION} ({link})")
    return link


def run_info(_args, home):
    """Print basic host facts and the active version of each tool."""
    os_name, arch = host_platform()
    rows = [
        ("OS", os_name),
        ("Architecture", arch),
        ("Hostname", host_name()),
        ("Date/Time", time.strftime("%a %b %d %H:%M:%S %Y")),
    ]
    links = bin_dir()
    for tool in Tools:
        active = installer.active_version(home, links, tool)
        installed = installer.installed_versions(home, tool)
        if active or installed:
            rows.append((f"{tool.value} version", active or "(none active)"))
            rows.append((f"{tool.value} installed", ", ".join(installed) or "-"))
    width = max(len(label) for label, _ in rows)
    print("Basic system factoids:")
    for label, value in rows:
        print(f"{label + ':':<{width + 1}} {value}")


COMMANDS = {
    "install": run_install,
    "use": run_use,
    "info": run_info,
}


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    try:
        home = setup_runtime(args)
    except (HvmError, OSError) as exc:
        logging.error("%s", exc)
        sys.exit(ExitCodes.ERROR.value)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action=args.COMMAND),
        )

    try:
        COMMANDS[args.COMMAND](args, home)
    except (HvmError, OSError) as exc:
        logging.error("%s failed: %s", args.COMMAND, exc)
        sys.exit(ExitCodes.ERROR.value)
    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
