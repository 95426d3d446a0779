"""Exact-match validation of a requested version against upstream releases."""
from __future__ import annotations

import logging
from typing import Union

from constants import Tools

from . import resolver

logger = logging.getLogger(__name__)


def is_valid_version(name: Union[str, Tools], requested: str) -> bool:
    """Return True when ``requested`` is exactly one of the tool's known versions.

    No normalisation or range matching is applied. Callers wanting "latest"
    skip validation and resolve the latest version instead.
    """
    known = resolver.all_versions(name)
    valid = requested in known
    if not valid:
        logger.info("%s is not a known version of %s", requested, resolver.to_tool(name).value)
    return valid
