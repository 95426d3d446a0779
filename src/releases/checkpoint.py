"""Checkpoint API client: latest released version of a tool.

The endpoint answers ``GET /v1/check/<tool>`` with a JSON object whose
``current_version`` field names the newest release. The value is treated as
untrusted and must parse as a version at or above ``MIN_LATEST_VERSION``.
"""
from __future__ import annotations

import json
import logging

from packaging import version

from constants import Constants, Tools
from common.errors import UnparsableMetadataError
from common.http_client import get_text
from common.logging_utils import extra_context, is_debug_enabled, safe_url

logger = logging.getLogger(__name__)


def checkpoint_url(tool: Tools) -> str:
    return f"{Constants.CHECKPOINT_URL}/v1/check/{tool.value}"


def parse_current_version(body: str, tool: Tools) -> str:
    """Extract and sanity-check ``current_version`` from a checkpoint response body.

    Raises:
        UnparsableMetadataError: Body is not JSON, lacks the field, or the
            value is not a plausible release version.
    """
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, TypeError) as exc:
        logger.error("Checkpoint response for %s is not JSON: %s", tool.value, exc)
        raise UnparsableMetadataError(
            f"could not determine latest version of {tool.value}: response is not JSON"
        ) from exc
    current = data.get("current_version") if isinstance(data, dict) else None
    if not isinstance(current, str) or not current.strip():
        raise UnparsableMetadataError(
            f"could not determine latest version of {tool.value}: no current_version in response"
        )
    current = current.strip()
    try:
        parsed = version.Version(current)
    except version.InvalidVersion as exc:
        logger.error("Unexpected checkpoint value for %s: %r", tool.value, current)
        raise UnparsableMetadataError(
            f"could not determine latest version of {tool.value}: {current!r} is not a version"
        ) from exc
    if parsed < version.Version(Constants.MIN_LATEST_VERSION):
        logger.error("Unexpected checkpoint value for %s: %r", tool.value, current)
        raise UnparsableMetadataError(
            f"could not determine latest version of {tool.value}: {current!r} is below {Constants.MIN_LATEST_VERSION}"
        )
    return current


def fetch_latest_version(tool: Tools) -> str:
    """Ask the checkpoint API for the latest version of ``tool``."""
    url = checkpoint_url(tool)
    if is_debug_enabled(logger):
        logger.debug(
            "Querying checkpoint",
            extra=extra_context(event="fetch", component="checkpoint", action="GET", target=safe_url(url)),
        )
    body = get_text(
        url,
        context="checkpoint",
        timeout=Constants.CHECKPOINT_TIMEOUT,
        headers={"Accept": "application/json"},
    )
    return parse_current_version(body, tool)
