"""Install tree management.

- manifest.py: SHA256SUMS download and parsing
- fetcher.py: checksum-verified download and unpacking of a release
- state.py: installed-version checks against the install tree
- switcher.py: active-version symlinks in the bin directory
- lock.py: per-tool advisory lock around installs
"""

from .fetcher import install  # noqa: F401
from .state import executable_path, installed_versions, is_installed  # noqa: F401
from .switcher import activate, active_version, link_path  # noqa: F401

__all__ = [
    "install",
    "executable_path",
    "installed_versions",
    "is_installed",
    "activate",
    "active_version",
    "link_path",
]
