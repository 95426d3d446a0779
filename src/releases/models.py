"""Data models for releases and installations."""

import os
from dataclasses import dataclass
from typing import Dict

from constants import Tools


@dataclass(frozen=True)
class Release:
    """A (tool, version) pair known to exist upstream."""
    tool: Tools
    version: str

    def archive_name(self, os_name: str, arch: str) -> str:
        """Platform archive filename, e.g. ``consul_1.4.2_linux_amd64.zip``."""
        return f"{self.tool.value}_{self.version}_{os_name}_{arch}.zip"

    def manifest_name(self) -> str:
        return f"{self.tool.value}_{self.version}_SHA256SUMS"


@dataclass(frozen=True)
class ChecksumManifest:
    """Archive filename -> hex SHA-256 digest for one release."""
    release: Release
    digests: Dict[str, str]

    def digest_for(self, filename: str) -> str:
        """Return the digest for ``filename`` or an empty string when absent."""
        return self.digests.get(filename, "")


@dataclass(frozen=True)
class InstalledVersion:
    """A verified, extracted release under the install tree."""
    tool: Tools
    version: str
    path: str

    @property
    def directory(self) -> str:
        return os.path.dirname(self.path)
