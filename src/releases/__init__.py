"""Release metadata package.

- checkpoint.py: latest version from the structured checkpoint API
- listing.py: directory-index scraping for latest and all versions
- resolver.py: per-tool dispatch between the two sources
- validator.py: exact-match version validation
"""

from .models import ChecksumManifest, InstalledVersion, Release  # noqa: F401
from .resolver import all_versions, latest_version, to_tool  # noqa: F401
from .validator import is_valid_version  # noqa: F401

__all__ = [
    "ChecksumManifest",
    "InstalledVersion",
    "Release",
    "all_versions",
    "latest_version",
    "to_tool",
    "is_valid_version",
]
