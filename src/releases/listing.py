"""Releases directory-index scraping.

The releases site serves each tool as a generated index: a parent-directory
anchor (``../``) followed by one anchor per release, newest first, whose text
is ``<tool>_<version>``. Parsing is split from fetching so the scanner can be
exercised against captured markup.
"""
from __future__ import annotations

import logging
from html.parser import HTMLParser
from typing import List, Optional

from constants import Constants, Tools
from common.errors import UnparsableMetadataError
from common.http_client import get_text
from common.logging_utils import extra_context, is_debug_enabled

logger = logging.getLogger(__name__)

PARENT_DIR_ENTRY = "../"


class _AnchorTextParser(HTMLParser):
    """Collect the visible text of every ``<a>`` element in document order."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.anchors: List[str] = []
        self._current: Optional[List[str]] = None

    def handle_starttag(self, tag, attrs):
        if tag == "a":
            self._current = []

    def handle_endtag(self, tag):
        if tag == "a" and self._current is not None:
            self.anchors.append("".join(self._current).strip())
            self._current = None

    def handle_data(self, data):
        if self._current is not None:
            self._current.append(data)


def anchor_texts(markup: str) -> List[str]:
    """Return anchor texts from ``markup`` in document order."""
    parser = _AnchorTextParser()
    parser.feed(markup)
    parser.close()
    return parser.anchors


def _release_versions(markup: str, tool: Tools):
    """Yield versions from release anchors, skipping the parent entry and foreign links."""
    prefix = f"{tool.value}_"
    for text in anchor_texts(markup):
        if text == PARENT_DIR_ENTRY or not text.startswith(prefix):
            continue
        version = text[len(prefix):]
        if version:
            yield version


def latest_from_listing(markup: str, tool: Tools) -> str:
    """Return the first (newest) release version listed in ``markup``.

    Raises:
        UnparsableMetadataError: No release anchor was found.
    """
    for version in _release_versions(markup, tool):
        return version
    raise UnparsableMetadataError(
        f"could not determine latest version of {tool.value}: no releases in listing"
    )


def versions_from_listing(markup: str, tool: Tools, floor: str = Constants.FLOOR_VERSION) -> List[str]:
    """Return listed versions newest first, stopping once ``floor`` is reached.

    ``floor`` itself is included. A listing that ends before the floor is not
    an error; whatever was gathered is returned.
    """
    versions: List[str] = []
    for version in _release_versions(markup, tool):
        versions.append(version)
        if version == floor:
            break
    else:
        logger.debug("Listing for %s ended before floor version %s", tool.value, floor)
    return versions


def listing_url(tool: Tools) -> str:
    return f"{Constants.RELEASES_URL}/{tool.value}/"


def fetch_listing(tool: Tools) -> str:
    """Download the releases index page for ``tool``."""
    url = listing_url(tool)
    if is_debug_enabled(logger):
        logger.debug(
            "Fetching release listing",
            extra=extra_context(event="fetch", component="listing", action="GET", target=url),
        )
    return get_text(url, context=f"{tool.value} release listing", timeout=Constants.REQUEST_TIMEOUT)
