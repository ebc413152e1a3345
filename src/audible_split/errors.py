"""Exception hierarchy for the chapter splitter."""


class SplitError(Exception):
    """Base exception for all splitter errors."""


class ConfigError(SplitError):
    """Invalid or missing configuration."""


class ToolNotFoundError(SplitError):
    """A required external tool is not installed or not on PATH."""

    def __init__(self, tool: str) -> None:
        super().__init__(f"Couldn't find {tool} in path")
        self.tool = tool


class UnsupportedVersionError(SplitError):
    """An external tool is installed but too old."""

    def __init__(self, tool: str, version: str) -> None:
        super().__init__(f"{tool} version {version} not supported")
        self.tool = tool
        self.version = version


class ProbeError(SplitError):
    """Chapter extraction failed (unreadable file or unparsable output)."""


class DuplicateOutputError(SplitError):
    """Two or more chapters would be written to the same output file."""

    def __init__(self, path, track_nrs: list[int]) -> None:
        tracks = ", ".join(str(n) for n in track_nrs)
        super().__init__(
            f"Chapters {tracks} would all be written to {path}; "
            f"add {{track_nr}} to the template"
        )
        self.path = path
        self.track_nrs = track_nrs


class OutputDirError(SplitError):
    """The output directory could not be created."""


class MissingTagError(SplitError, KeyError):
    """A required metadata tag is absent from the probe output."""

    def __init__(self, tag: str, where: str) -> None:
        super().__init__(f"Missing '{tag}' tag in {where}")
        self.tag = tag
        self.where = where

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return self.args[0]


class ExternalToolError(SplitError):
    """An external subprocess (ffmpeg, ffprobe) failed."""

    def __init__(self, tool: str, exit_code: int, stderr: str) -> None:
        super().__init__(f"{tool} exited with code {exit_code}: {stderr}")
        self.tool = tool
        self.exit_code = exit_code
        self.stderr = stderr
