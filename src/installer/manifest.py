"""SHA256SUMS manifest download and parsing."""
from __future__ import annotations

import logging
import re

from packaging import version

from constants import Constants, Tools
from common.errors import ManifestFetchError, ManifestParseError
from common.http_client import get_text
from releases.models import ChecksumManifest, Release

logger = logging.getLogger(__name__)

_HEX_SHA256 = re.compile(r"^[0-9a-fA-F]{64}$")
_RELATIVE_PREFIX = "./"


def manifest_url(release: Release) -> str:
    return f"{Constants.RELEASES_URL}/{release.tool.value}/{release.version}/{release.manifest_name()}"


def strips_relative_prefix(release: Release) -> bool:
    """True when this release's manifest names carry a ``./`` prefix to drop.

    Only nomad changed its manifest style, at ``NOMAD_MANIFEST_BOUNDARY``.

    Raises:
        ManifestParseError: The nomad version cannot be compared.
    """
    if release.tool is not Tools.NOMAD:
        return False
    try:
        current = version.Version(release.version)
    except version.InvalidVersion as exc:
        raise ManifestParseError(
            f"cannot compare nomad version {release.version!r} to the manifest boundary"
        ) from exc
    return current >= version.Version(Constants.NOMAD_MANIFEST_BOUNDARY)


def parse_manifest(text: str, release: Release) -> ChecksumManifest:
    """Parse ``<digest>  <filename>`` lines into a manifest.

    Blank lines are skipped; a line with any other shape, or a digest that is
    not 64 hex characters, makes the whole manifest unusable.

    Raises:
        ManifestParseError: Malformed content or no entries at all.
    """
    strip_prefix = strips_relative_prefix(release)
    digests = {}
    for lineno, line in enumerate(text.splitlines(), start=1):
        fields = line.split()
        if not fields:
            continue
        if len(fields) != 2:
            raise ManifestParseError(
                f"{release.manifest_name()} line {lineno}: expected '<digest> <filename>'"
            )
        digest, filename = fields
        if not _HEX_SHA256.match(digest):
            raise ManifestParseError(
                f"{release.manifest_name()} line {lineno}: {digest!r} is not a SHA-256 digest"
            )
        if strip_prefix and filename.startswith(_RELATIVE_PREFIX):
            filename = filename[len(_RELATIVE_PREFIX):]
        digests[filename] = digest.lower()
    if not digests:
        raise ManifestParseError(f"{release.manifest_name()} contains no checksums")
    logger.debug("Parsed %d checksums from %s", len(digests), release.manifest_name())
    return ChecksumManifest(release=release, digests=digests)


def fetch_manifest(release: Release) -> ChecksumManifest:
    """Download and parse the checksum manifest for ``release``."""
    text = get_text(
        manifest_url(release),
        context=f"{release.tool.value} {release.version} checksums",
        timeout=Constants.REQUEST_TIMEOUT,
        error_cls=ManifestFetchError,
    )
    return parse_manifest(text, release)
