"""Constants used in the project."""

import logging
import os
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    ERROR = 1


class SourceProtocol(Enum):
    """Where the release metadata for a tool comes from.

    Args:
        Enum (string): Source protocol kinds.
    """

    CHECKPOINT = "checkpoint"
    HTML_LISTING = "html_listing"
    NONE = "none"


class Tools(Enum):
    """Tools known to the program.

    Args:
        Enum (string): Binary names as published on the releases site.
    """

    CONSUL = "consul"
    CONSUL_TEMPLATE = "consul-template"
    ENVCONSUL = "envconsul"
    NOMAD = "nomad"
    PACKER = "packer"
    SENTINEL = "sentinel"
    TERRAFORM = "terraform"
    VAGRANT = "vagrant"
    VAULT = "vault"

    @property
    def protocol(self) -> SourceProtocol:
        """Return the metadata source protocol for this tool."""
        return TOOL_PROTOCOLS[self]


TOOL_PROTOCOLS = {
    Tools.CONSUL: SourceProtocol.CHECKPOINT,
    Tools.NOMAD: SourceProtocol.CHECKPOINT,
    Tools.PACKER: SourceProtocol.CHECKPOINT,
    Tools.TERRAFORM: SourceProtocol.CHECKPOINT,
    Tools.VAGRANT: SourceProtocol.CHECKPOINT,
    Tools.VAULT: SourceProtocol.HTML_LISTING,
    # Recognised names without a usable metadata source
    Tools.CONSUL_TEMPLATE: SourceProtocol.NONE,
    Tools.ENVCONSUL: SourceProtocol.NONE,
    Tools.SENTINEL: SourceProtocol.NONE,
}


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    CHECKPOINT_URL = "https://checkpoint-api.hashicorp.com"
    RELEASES_URL = "https://releases.hashicorp.com"
    USER_AGENT = "hvm-oss-http-client"
    SUPPORTED_TOOLS = [t.value for t in Tools]

    # Seconds; checkpoint is a tiny JSON call, archives can be large
    CHECKPOINT_TIMEOUT = 2
    REQUEST_TIMEOUT = 30
    DOWNLOAD_TIMEOUT = 300
    DOWNLOAD_CHUNK_SIZE = 64 * 1024

    # Oldest version on the listing pages; enumeration stops here
    FLOOR_VERSION = "0.1.0"
    # Anything the checkpoint API reports below this is not a real release
    MIN_LATEST_VERSION = "0.0.1"
    # Nomad SHA256SUMS entries carry a "./" prefix from this release on
    NOMAD_MANIFEST_BOUNDARY = "0.7.0-beta1"

    HVM_DIRNAME = ".hvm"
    BIN_DIRNAME = "bin"
    LOG_FILENAME = "hvm.log"
    CONFIG_FILENAME = "hvm.yaml"
    LOCK_FILENAME = ".lock"

    # Resolved at startup by cli_config; None means "derive from user home"
    HVM_HOME: Optional[str] = None
    BIN_DIR: Optional[str] = None
    LOG_LEVEL = "INFO"

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

    ENV_HVM_HOME = "HVM_HOME"
    ENV_BIN_DIR = "HVM_BIN_DIR"
    ENV_LOG_LEVEL = "HVM_LOG_LEVEL"


# Config file keys mapped onto Constants attributes, with their coercion
_CONFIG_KEYS = {
    "hvm_home": ("HVM_HOME", str),
    "bin_dir": ("BIN_DIR", str),
    "checkpoint_url": ("CHECKPOINT_URL", str),
    "releases_url": ("RELEASES_URL", str),
    "request_timeout": ("REQUEST_TIMEOUT", float),
    "checkpoint_timeout": ("CHECKPOINT_TIMEOUT", float),
    "download_timeout": ("DOWNLOAD_TIMEOUT", float),
    "log_level": ("LOG_LEVEL", lambda v: str(v).upper()),
}


def _load_yaml_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load the YAML config file, returning an empty dict when absent or malformed.

    Args:
        path: Explicit config path; defaults to ``~/.hvm/hvm.yaml``.

    Returns:
        dict: Parsed top-level mapping.
    """
    import yaml  # pylint: disable=import-outside-toplevel

    if not path:
        path = os.path.join(os.path.expanduser("~"), Constants.HVM_DIRNAME, Constants.CONFIG_FILENAME)
    if not os.path.isfile(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Ignoring unreadable config file %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring config file %s: top level is not a mapping", path)
        return {}
    return data


def apply_config(cfg: Dict[str, Any]) -> None:
    """Apply recognised config keys onto Constants; unknown keys are ignored."""
    for key, (attr, coerce) in _CONFIG_KEYS.items():
        if key not in cfg or cfg[key] is None:
            continue
        try:
            setattr(Constants, attr, coerce(cfg[key]))
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid config value for %s: %r", key, cfg[key])
