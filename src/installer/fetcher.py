"""Checksum-verified installation of a release into the install tree.

Layout produced: ``<hvm_home>/<tool>/<version>/<tool>``. The executable only
appears once the archive digest has matched the published manifest, so its
presence is the install record.
"""
from __future__ import annotations

import contextlib
import logging
import os
import shutil
import zipfile
from typing import Union

from constants import Constants, Tools
from common.errors import (
    AlreadyInstalledError,
    ArchiveExtractError,
    DirectoryCreateError,
    HvmError,
    MissingChecksumError,
)
from common.http_client import download_verified
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from releases.models import InstalledVersion, Release
from releases.resolver import to_tool

from .lock import tool_lock
from .manifest import fetch_manifest
from .state import is_installed

logger = logging.getLogger(__name__)


def archive_url(release: Release, archive: str, digest: str) -> str:
    """Download URL carrying the expected digest for verification."""
    return (
        f"{Constants.RELEASES_URL}/{release.tool.value}/{release.version}/"
        f"{archive}?checksum=sha256:{digest}"
    )


def install(
    name: Union[str, Tools],
    version: str,
    os_name: str,
    arch: str,
    hvm_home: str,
) -> InstalledVersion:
    """Fetch, verify and unpack ``version`` of a tool for the given platform.

    Each phase must succeed before the next runs; any failure aborts the
    install and leaves no executable behind.

    Raises:
        DirectoryCreateError: The version directory cannot be created.
        ManifestFetchError / ManifestParseError: The checksum manifest is unusable.
        MissingChecksumError: The manifest has no entry for this platform archive.
        NetworkFailureError / ChecksumMismatchError: Archive download failed verification.
        ArchiveExtractError: The archive does not contain the executable.
        AlreadyInstalledError: Another invocation finished the same install first.
    """
    tool = to_tool(name)
    release = Release(tool, version)
    tool_dir = os.path.join(hvm_home, tool.value)
    target_dir = os.path.join(tool_dir, version)

    with tool_lock(tool_dir):
        if is_installed(hvm_home, tool, version):
            raise AlreadyInstalledError(f"{tool.value} version {version} appears to be already installed")

        created = not os.path.isdir(target_dir)
        try:
            os.makedirs(target_dir, exist_ok=True)
        except OSError as exc:
            logger.error("Directory creation error: %s", exc)
            raise DirectoryCreateError(f"cannot create {target_dir}: {exc}") from exc

        try:
            path = _fetch_into(release, os_name, arch, target_dir)
        except (HvmError, OSError):
            if created:
                with contextlib.suppress(OSError):
                    os.rmdir(target_dir)
            raise

    logger.info("Installed %s %s (%s/%s) at %s", tool.value, version, os_name, arch, path)
    return InstalledVersion(tool=tool, version=version, path=path)


def _fetch_into(release: Release, os_name: str, arch: str, target_dir: str) -> str:
    manifest = fetch_manifest(release)
    archive = release.archive_name(os_name, arch)
    digest = manifest.digest_for(archive)
    if not digest:
        logger.error("No checksum for %s in %s", archive, release.manifest_name())
        raise MissingChecksumError(
            f"{release.manifest_name()} has no checksum for {archive}; "
            f"{release.tool.value} {release.version} may not be published for {os_name}/{arch}"
        )

    url = archive_url(release, archive, digest)
    archive_path = os.path.join(target_dir, archive)
    with Timer() as t:
        download_verified(url, archive_path, context=f"{release.tool.value} {release.version} archive")
    if is_debug_enabled(logger):
        logger.debug(
            "Archive downloaded",
            extra=extra_context(
                event="download", component="fetcher", outcome="verified",
                target=safe_url(url), duration_ms=t.duration_ms(),
            ),
        )
    try:
        return _extract_executable(archive_path, release.tool, target_dir)
    finally:
        with contextlib.suppress(FileNotFoundError):
            os.remove(archive_path)


def _extract_executable(archive_path: str, tool: Tools, target_dir: str) -> str:
    """Unpack the ``<tool>`` member into ``target_dir`` via a temporary name."""
    final = os.path.join(target_dir, tool.value)
    partial = os.path.join(target_dir, f".{tool.value}.partial")
    try:
        with zipfile.ZipFile(archive_path) as zf:
            member = _find_member(zf, tool.value)
            if member is None:
                raise ArchiveExtractError(f"{os.path.basename(archive_path)} does not contain {tool.value}")
            with zf.open(member) as src, open(partial, "wb") as dst:
                shutil.copyfileobj(src, dst)
        os.chmod(partial, 0o755)
        os.replace(partial, final)
    except zipfile.BadZipFile as exc:
        raise ArchiveExtractError(f"{os.path.basename(archive_path)} is not a valid zip archive: {exc}") from exc
    except OSError as exc:
        raise ArchiveExtractError(f"cannot unpack {tool.value} into {target_dir}: {exc}") from exc
    finally:
        with contextlib.suppress(FileNotFoundError):
            os.remove(partial)
    return final


def _find_member(zf: zipfile.ZipFile, name: str):
    """Prefer a top-level member called ``name``; fall back to one nested deeper."""
    nested = None
    for info in zf.infolist():
        if info.is_dir():
            continue
        if info.filename == name:
            return info
        if nested is None and os.path.basename(info.filename) == name:
            nested = info
    return nested
