"""Host facts: platform naming as used by release archives, plus user paths."""
from __future__ import annotations

import os
import platform
import socket
from pathlib import Path
from typing import Tuple

from constants import Constants
from common.errors import HomeDirUnavailableError

# platform.machine() values mapped to release archive arch names
_ARCH_MAP = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "armv6l": "arm",
    "armv7l": "arm",
}


def host_platform() -> Tuple[str, str]:
    """Return (os, arch) for the running host in release archive naming."""
    os_name = platform.system().lower()
    machine = platform.machine().lower()
    return os_name, _ARCH_MAP.get(machine, machine)


def host_name() -> str:
    return socket.gethostname()


def user_home() -> str:
    """Return the user's home directory.

    Raises:
        HomeDirUnavailableError: When it cannot be determined.
    """
    try:
        home = str(Path.home())
    except (RuntimeError, KeyError) as exc:
        raise HomeDirUnavailableError(f"unable to determine user home directory: {exc}") from exc
    if not home or home == "~":
        raise HomeDirUnavailableError("unable to determine user home directory")
    return home


def hvm_home() -> str:
    """Root of the install tree: configured value or ``~/.hvm``."""
    if Constants.HVM_HOME:
        return os.path.abspath(os.path.expanduser(Constants.HVM_HOME))
    return os.path.join(user_home(), Constants.HVM_DIRNAME)


def bin_dir() -> str:
    """Directory holding the active-version links: configured value or ``~/bin``."""
    if Constants.BIN_DIR:
        return os.path.abspath(os.path.expanduser(Constants.BIN_DIR))
    return os.path.join(user_home(), Constants.BIN_DIRNAME)
