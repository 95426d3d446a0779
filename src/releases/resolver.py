"""Release metadata resolution.

Callers ask for the latest version or the full set of known versions of a
tool; which upstream source answers depends on the tool's ``SourceProtocol``.
"""
from __future__ import annotations

import logging
from typing import List, Union

from constants import SourceProtocol, Tools
from common.errors import UnsupportedToolError

from . import checkpoint, listing

logger = logging.getLogger(__name__)


def to_tool(name: Union[str, Tools]) -> Tools:
    """Coerce a tool name to ``Tools``.

    Raises:
        UnsupportedToolError: The name is not a known tool.
    """
    if isinstance(name, Tools):
        return name
    try:
        return Tools(str(name).strip().lower())
    except ValueError as exc:
        raise UnsupportedToolError(f"{name} is not a supported binary") from exc


def _require_source(tool: Tools) -> SourceProtocol:
    protocol = tool.protocol
    if protocol is SourceProtocol.NONE:
        logger.warning("%s has no release metadata source", tool.value)
        raise UnsupportedToolError(f"{tool.value} is currently unsupported")
    return protocol


def latest_version(name: Union[str, Tools]) -> str:
    """Return the latest released version of a tool.

    Raises:
        UnsupportedToolError, NetworkFailureError, UnparsableMetadataError
    """
    tool = to_tool(name)
    protocol = _require_source(tool)
    if protocol is SourceProtocol.CHECKPOINT:
        latest = checkpoint.fetch_latest_version(tool)
    else:
        latest = listing.latest_from_listing(listing.fetch_listing(tool), tool)
    logger.info("Latest %s version is %s", tool.value, latest)
    return latest


def all_versions(name: Union[str, Tools]) -> List[str]:
    """Return known versions of a tool, newest first, down to the floor version.

    Every supported tool publishes a directory index, so enumeration always
    scrapes it regardless of where ``latest_version`` looks.
    """
    tool = to_tool(name)
    _require_source(tool)
    versions = listing.versions_from_listing(listing.fetch_listing(tool), tool)
    logger.debug("Found %d %s versions", len(versions), tool.value)
    return versions
