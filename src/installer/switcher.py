"""Active-version selection through a symlink in the bin directory.

``<bin_dir>/<tool>`` is either absent or a symlink owned by hvm pointing at
``<hvm_home>/<tool>/<version>/<tool>``. Anything else at that path belongs to
the user and is never touched.
"""
from __future__ import annotations

import contextlib
import logging
import os
from typing import Optional, Union

from constants import Tools
from common.errors import DirectoryCreateError, SymlinkConflictError
from releases.resolver import to_tool

from .state import executable_path, version_from_target

logger = logging.getLogger(__name__)


def link_path(bin_dir: str, name: Union[str, Tools]) -> str:
    return os.path.join(bin_dir, to_tool(name).value)


def activate(hvm_home: str, bin_dir: str, name: Union[str, Tools], version: str) -> str:
    """Point ``<bin_dir>/<tool>`` at the installed ``version``.

    The caller is responsible for checking the version is installed. An
    existing hvm link is replaced by renaming a fresh link over it, so the
    path never resolves to two versions and is never left missing.

    Returns:
        str: The link path.

    Raises:
        SymlinkConflictError: A non-symlink entry occupies the link path, or
            the link cannot be written.
        DirectoryCreateError: ``bin_dir`` cannot be created.
    """
    tool = to_tool(name)
    link = link_path(bin_dir, tool)
    target = os.path.abspath(executable_path(hvm_home, tool, version))

    if os.path.lexists(link) and not os.path.islink(link):
        logger.error("Refusing to replace %s: not a symbolic link", link)
        raise SymlinkConflictError(link)

    try:
        os.makedirs(bin_dir, exist_ok=True)
    except OSError as exc:
        raise DirectoryCreateError(f"cannot create {bin_dir}: {exc}") from exc

    staging = os.path.join(bin_dir, f".{tool.value}.hvm-link")
    try:
        if os.path.lexists(staging):
            os.unlink(staging)
        os.symlink(target, staging)
        os.replace(staging, link)
    except OSError as exc:
        with contextlib.suppress(OSError):
            if os.path.islink(staging):
                os.unlink(staging)
        logger.error("Cannot link %s to %s: %s", link, target, exc)
        raise SymlinkConflictError(link, f"cannot link {link} to {target}: {exc}") from exc
    logger.info("Activated %s %s: %s -> %s", tool.value, version, link, target)
    return link


def active_version(hvm_home: str, bin_dir: str, name: Union[str, Tools]) -> Optional[str]:
    """Return the version the tool's link points at, or None when unset or foreign."""
    link = link_path(bin_dir, name)
    if not os.path.islink(link):
        return None
    # Relative link targets are relative to the link's own directory
    target = os.path.join(os.path.dirname(link), os.readlink(link))
    return version_from_target(hvm_home, name, target)
