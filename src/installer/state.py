"""Install state, read straight from the install tree."""
from __future__ import annotations

import os
from typing import Optional, Union

from constants import Tools
from releases.resolver import to_tool


def executable_path(hvm_home: str, name: Union[str, Tools], version: str) -> str:
    """``<hvm_home>/<tool>/<version>/<tool>``"""
    tool = to_tool(name)
    return os.path.join(hvm_home, tool.value, version, tool.value)


def is_installed(hvm_home: str, name: Union[str, Tools], version: str) -> bool:
    """True when the tool's executable exists for ``version``, however it got there."""
    return os.path.isfile(executable_path(hvm_home, name, version))


def installed_versions(hvm_home: str, name: Union[str, Tools]) -> list:
    """Versions with an executable present, sorted by name."""
    tool = to_tool(name)
    tool_dir = os.path.join(hvm_home, tool.value)
    if not os.path.isdir(tool_dir):
        return []
    return sorted(v for v in os.listdir(tool_dir) if is_installed(hvm_home, tool, v))


def version_from_target(hvm_home: str, name: Union[str, Tools], target: str) -> Optional[str]:
    """Map a link target back to the version directory it points into, if any."""
    tool = to_tool(name)
    tool_dir = os.path.realpath(os.path.join(hvm_home, tool.value))
    resolved = os.path.realpath(target)
    if os.path.basename(resolved) != tool.value:
        return None
    version_dir = os.path.dirname(resolved)
    if os.path.dirname(version_dir) != tool_dir:
        return None
    return os.path.basename(version_dir)
