"""Error types raised by the release and install pipeline.

Each class maps to one reportable failure condition so the CLI can tell the
user exactly which phase failed. All derive from ``HvmError``; nothing in the
pipeline exits the process itself.
"""
from __future__ import annotations


class HvmError(Exception):
    """Base class for every reportable hvm failure."""


class HomeDirUnavailableError(HvmError):
    """The user home or hvm home directory cannot be determined or created."""


class NetworkFailureError(HvmError):
    """Transport error or non-2xx response from an upstream endpoint."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class UnparsableMetadataError(HvmError):
    """An upstream document could not be parsed or failed sanity checks."""


class UnsupportedToolError(HvmError):
    """The tool has no release metadata source."""


class InvalidVersionError(HvmError):
    """The requested version is not a known release of the tool."""


class AlreadyInstalledError(HvmError):
    """The requested version is already present in the install tree."""


class NotInstalledError(HvmError):
    """Activation was requested for a version that was never installed."""


class ChecksumMismatchError(HvmError):
    """The downloaded archive does not match its published digest."""


class MissingChecksumError(ChecksumMismatchError):
    """The manifest has no entry for the platform archive."""


class DirectoryCreateError(HvmError):
    """A directory in the install tree or bin path could not be created."""


class SymlinkConflictError(HvmError):
    """Something other than a symbolic link occupies the bin path."""

    def __init__(self, path: str, message: str | None = None):
        super().__init__(
            message or f"{path} exists and is not a symbolic link; refusing to replace it"
        )
        self.path = path


class ManifestFetchError(NetworkFailureError):
    """The checksum manifest could not be downloaded."""


class ManifestParseError(UnparsableMetadataError):
    """The checksum manifest could not be interpreted."""


class ArchiveExtractError(HvmError):
    """The verified archive could not be unpacked into the install tree."""


class ArchiveWriteError(HvmError):
    """A downloaded archive could not be written into the install tree."""
