"""Common interface for the wrapped external CLI tools."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Any

from loguru import logger

from .errors import ToolNotFoundError, UnsupportedVersionError

log = logger.bind(stage="tools")

_VERSION_RE = re.compile(r"(\d+)\.(\d+)")


class CliTool(ABC):
    """An external program wrapped for use by the splitter.

    Subclasses report their installed version and run with tool-specific
    options. Tests substitute fakes implementing the same two methods.
    """

    name: str = ""
    min_version: tuple[int, int] = (0, 0)

    def __init__(self, binary: str | None = None) -> None:
        self.binary = binary or self.name

    @abstractmethod
    def is_installed(self) -> str | None:
        """Return the installed version string, or None if unavailable."""

    @abstractmethod
    def execute(self, options: Any) -> Any:
        """Run the tool. Raises a SplitError subclass on failure."""


def parse_version(version: str) -> tuple[int, int] | None:
    """Extract (major, minor) from a version string like ``6.1.1-3ubuntu5``.

    Returns None for git snapshot builds (``N-112345-g...``) and other
    strings without a dotted number.
    """
    match = _VERSION_RE.match(version.lstrip("nv"))
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


def check_tools(*tools: CliTool) -> dict[str, str]:
    """Verify every tool is installed and recent enough.

    Returns a mapping of tool name to version.
    Raises ToolNotFoundError or UnsupportedVersionError on the first problem.
    """
    versions: dict[str, str] = {}
    for tool in tools:
        version = tool.is_installed()
        if version is None:
            raise ToolNotFoundError(tool.name)

        parsed = parse_version(version)
        if parsed is None:
            log.warning(f"Could not parse {tool.name} version '{version}', assuming supported")
        elif parsed < tool.min_version:
            raise UnsupportedVersionError(tool.name, version)

        log.info(f"{tool.name} v. {version} found")
        versions[tool.name] = version
    return versions
