"""CLI configuration: config file, environment and flag overrides.

Precedence, lowest to highest: built-in Constants, YAML config file,
environment variables, CLI flags. Resolution happens once at startup so the
rest of the program only reads Constants.
"""

from __future__ import annotations

import logging
import os

from constants import Constants, _load_yaml_config, apply_config
from common.errors import HomeDirUnavailableError
from common.host import hvm_home
from common.logging_utils import add_file_handler, configure_logging

logger = logging.getLogger(__name__)


def apply_env_overrides() -> None:
    """Apply HVM_* environment variables onto Constants."""
    env_home = os.environ.get(Constants.ENV_HVM_HOME)
    if env_home and env_home.strip():
        Constants.HVM_HOME = env_home.strip()
    env_bin = os.environ.get(Constants.ENV_BIN_DIR)
    if env_bin and env_bin.strip():
        Constants.BIN_DIR = env_bin.strip()
    env_level = os.environ.get(Constants.ENV_LOG_LEVEL)
    if env_level and env_level.strip():
        Constants.LOG_LEVEL = env_level.strip().upper()


def apply_cli_overrides(args) -> None:
    """Apply CLI flags onto Constants; flags left unset keep earlier values."""
    if getattr(args, "HVM_HOME", None):
        Constants.HVM_HOME = args.HVM_HOME
    if getattr(args, "BIN_DIR", None):
        Constants.BIN_DIR = args.BIN_DIR
    if getattr(args, "LOG_LEVEL", None):
        Constants.LOG_LEVEL = str(args.LOG_LEVEL).upper()


def load_configuration(args) -> None:
    """Resolve Constants from config file, environment and CLI flags."""
    apply_config(_load_yaml_config(getattr(args, "CONFIG", None)))
    apply_env_overrides()
    apply_cli_overrides(args)


def setup_runtime(args) -> str:
    """One-time process setup: configuration, logging and the hvm home.

    Returns:
        str: The hvm home directory, guaranteed to exist.

    Raises:
        HomeDirUnavailableError: The hvm home cannot be resolved, created or logged to.
    """
    load_configuration(args)
    configure_logging(Constants.LOG_LEVEL)

    home = hvm_home()
    try:
        os.makedirs(home, exist_ok=True)
    except OSError as exc:
        raise HomeDirUnavailableError(f"cannot create hvm home {home}: {exc}") from exc

    log_file = getattr(args, "LOG_FILE", None) or os.path.join(home, Constants.LOG_FILENAME)
    try:
        add_file_handler(log_file)
    except OSError as exc:
        raise HomeDirUnavailableError(f"failed to open log file {log_file}: {exc}") from exc
    logger.debug("hvm home is %s, logging to %s", home, log_file)
    return home
