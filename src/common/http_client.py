"""Shared HTTP helpers used by the release resolver and the fetcher.

Encapsulates common request/timeout error handling so modules avoid
duplicating try/except blocks. Transport problems are raised as
``NetworkFailureError``; nothing here retries or exits the process.
"""
from __future__ import annotations

import hashlib
import logging
import os
from typing import Any, Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import requests

from constants import Constants
from common.errors import ArchiveWriteError, ChecksumMismatchError, NetworkFailureError
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)


def _default_headers(headers: Optional[dict]) -> dict:
    merged = {"User-Agent": Constants.USER_AGENT}
    if headers:
        merged.update(headers)
    return merged


def safe_get(
    url: str,
    *,
    context: str,
    timeout: Optional[float] = None,
    headers: Optional[dict] = None,
    **kwargs: Any,
) -> requests.Response:
    """Perform a GET request with consistent error handling and DEBUG traces.

    Args:
        url: Target URL.
        context: Human-readable source tag for logs and errors (e.g., "checkpoint").
        timeout: Seconds; defaults to Constants.REQUEST_TIMEOUT.
        headers: Extra request headers; the hvm User-Agent is always sent.
        **kwargs: Passed through to requests.get.

    Returns:
        requests.Response: The HTTP response object, whatever its status.

    Raises:
        NetworkFailureError: On timeout or connection failure.
    """
    safe_target = safe_url(url)
    effective_timeout = timeout if timeout is not None else Constants.REQUEST_TIMEOUT
    with Timer() as t:
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request",
                extra=extra_context(
                    event="http_request",
                    component="http_client",
                    action="GET",
                    target=safe_target,
                    context=context,
                ),
            )
        try:
            res = requests.get(
                url,
                timeout=effective_timeout,
                headers=_default_headers(headers),
                **kwargs,
            )
        except requests.Timeout as exc:
            logger.error("%s request timed out after %s seconds", context, effective_timeout)
            raise NetworkFailureError(
                f"{context} request to {safe_target} timed out after {effective_timeout} seconds"
            ) from exc
        except requests.RequestException as exc:  # includes ConnectionError
            logger.error("%s connection error: %s", context, exc)
            raise NetworkFailureError(f"{context} connection error: {exc}") from exc
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    action="GET",
                    status_code=res.status_code,
                    duration_ms=t.duration_ms(),
                    target=safe_target,
                    context=context,
                ),
            )
        return res


def get_text(
    url: str,
    *,
    context: str,
    timeout: Optional[float] = None,
    headers: Optional[dict] = None,
    error_cls: type = NetworkFailureError,
) -> str:
    """GET ``url`` and return its body, raising ``error_cls`` on any non-2xx status."""
    res = safe_get(url, context=context, timeout=timeout, headers=headers)
    if not 200 <= res.status_code < 300:
        logger.warning(
            "%s returned HTTP %s for %s", context, res.status_code, safe_url(url)
        )
        raise error_cls(
            f"{context} request to {safe_url(url)} failed with HTTP {res.status_code}",
            res.status_code,
        )
    return res.text


def split_checksum(url: str) -> Tuple[str, Optional[str], Optional[str]]:
    """Pull a ``checksum=<algo>:<hex>`` query parameter out of ``url``.

    Returns:
        Tuple of (url without the checksum parameter, algorithm or None, digest or None).
    """
    parts = urlsplit(url)
    query = parse_qsl(parts.query, keep_blank_values=True)
    algo = digest = None
    kept = []
    for key, value in query:
        if key == "checksum":
            algo, _, digest = value.partition(":")
            algo = algo.lower() or None
            digest = digest.lower()
        else:
            kept.append((key, value))
    clean = urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(kept), parts.fragment))
    return clean, algo, digest


def download_verified(
    url: str,
    dest: str,
    *,
    context: str,
    timeout: Optional[float] = None,
) -> str:
    """Stream ``url`` to ``dest``, verifying the digest embedded in the URL.

    The URL must carry ``?checksum=<algo>:<hex>``. Bytes are hashed while they
    are written to a ``.part`` sibling of ``dest``; only a matching digest
    renames it into place. On any failure the partial file is removed.

    Returns:
        str: The verified hex digest.

    Raises:
        ChecksumMismatchError: Missing, unsupported or non-matching checksum.
        NetworkFailureError: Transport failure or non-2xx status.
        ArchiveWriteError: The archive cannot be written to disk.
    """
    clean_url, algo, expected = split_checksum(url)
    if not algo or not expected:
        raise ChecksumMismatchError(f"no checksum supplied for {safe_url(clean_url)}")
    try:
        hasher = hashlib.new(algo)
    except ValueError as exc:
        raise ChecksumMismatchError(f"unsupported checksum algorithm: {algo}") from exc

    effective_timeout = timeout if timeout is not None else Constants.DOWNLOAD_TIMEOUT
    partial = f"{dest}.part"
    res = safe_get(clean_url, context=context, timeout=effective_timeout, stream=True)
    try:
        if not 200 <= res.status_code < 300:
            raise NetworkFailureError(
                f"{context} download of {safe_url(clean_url)} failed with HTTP {res.status_code}",
                res.status_code,
            )
        with open(partial, "wb") as fh:
            for chunk in res.iter_content(chunk_size=Constants.DOWNLOAD_CHUNK_SIZE):
                if chunk:
                    hasher.update(chunk)
                    fh.write(chunk)
    except requests.RequestException as exc:
        _discard(partial)
        raise NetworkFailureError(f"{context} download interrupted: {exc}") from exc
    except OSError as exc:
        _discard(partial)
        raise ArchiveWriteError(f"cannot write {partial}: {exc}") from exc
    except BaseException:
        _discard(partial)
        raise
    finally:
        res.close()

    actual = hasher.hexdigest()
    if actual != expected:
        _discard(partial)
        logger.error(
            "Checksum mismatch for %s: expected %s, got %s",
            safe_url(clean_url), expected, actual,
        )
        raise ChecksumMismatchError(
            f"checksum mismatch for {safe_url(clean_url)}: expected {algo}:{expected}, got {algo}:{actual}"
        )
    try:
        os.replace(partial, dest)
    except OSError as exc:
        _discard(partial)
        raise ArchiveWriteError(f"cannot move {partial} to {dest}: {exc}") from exc
    if is_debug_enabled(logger):
        logger.debug(
            "Download verified",
            extra=extra_context(
                event="download_verified",
                component="http_client",
                outcome="success",
                target=safe_url(clean_url),
                context=context,
            ),
        )
    return actual


def _discard(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("Could not remove partial download %s: %s", path, exc)
