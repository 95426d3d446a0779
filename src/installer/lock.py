"""Per-tool advisory lock serialising installs of the same tool."""
from __future__ import annotations

import contextlib
import fcntl
import logging
import os

from constants import Constants
from common.errors import DirectoryCreateError

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def tool_lock(tool_dir: str):
    """Hold an exclusive ``flock`` on ``<tool_dir>/.lock`` for the duration of the block.

    Blocks until any concurrent holder releases it. The lock file is left in
    place; only the lock itself is released.
    """
    try:
        os.makedirs(tool_dir, exist_ok=True)
    except OSError as exc:
        raise DirectoryCreateError(f"cannot create {tool_dir}: {exc}") from exc
    path = os.path.join(tool_dir, Constants.LOCK_FILENAME)
    try:
        fd = os.open(path, os.O_RDWR | os.O_CREAT, 0o644)
    except OSError as exc:
        raise DirectoryCreateError(f"cannot open lock file {path}: {exc}") from exc
    try:
        logger.debug("Waiting for lock %s", path)
        fcntl.flock(fd, fcntl.LOCK_EX)
        try:
            yield path
        finally:
            fcntl.flock(fd, fcntl.LOCK_UN)
    finally:
        os.close(fd)
