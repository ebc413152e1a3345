"""FFmpeg wrapper -- cuts one chapter out of the container into an MP3."""

import re
import subprocess

from loguru import logger

from .errors import ExternalToolError
from .models import TranscodeJob
from .tools import CliTool

log = logger.bind(stage="ffmpeg")

_VERSION_LINE = re.compile(r"ffmpeg version (?P<version>\S+)")

CODEC = "libmp3lame"


def build_command(binary: str, job: TranscodeJob) -> list[str]:
    """Build the ffmpeg argument list for one chapter.

    Timestamps go through verbatim; ``-qscale:a`` takes the LAME VBR level.
    """
    return [
        binary,
        "-nostdin",
        "-v",
        "error",
        "-activation_bytes",
        job.activation_bytes,
        "-ss",
        job.start,
        "-to",
        job.end,
        "-i",
        str(job.input_file),
        "-codec:a",
        CODEC,
        "-qscale:a",
        str(job.quality),
        "-metadata",
        f"title={job.title}",
        "-metadata",
        f"track={job.track_nr}",
        str(job.output_file),
    ]


def _redact(cmd: list[str]) -> list[str]:
    redacted = list(cmd)
    if "-activation_bytes" in redacted:
        redacted[redacted.index("-activation_bytes") + 1] = "***"
    return redacted


class FFmpeg(CliTool):
    name = "ffmpeg"
    min_version = (3, 0)

    def is_installed(self) -> str | None:
        try:
            result = subprocess.run(
                [self.binary, "-version"], capture_output=True, text=True
            )
        except OSError:
            return None
        for line in result.stdout.splitlines():
            match = _VERSION_LINE.search(line)
            if match:
                return match.group("version")
        return None

    def execute(self, options: TranscodeJob) -> None:
        """Transcode one chapter.

        Raises ExternalToolError carrying ffmpeg's stderr on non-zero exit.
        """
        cmd = build_command(self.binary, options)
        log.debug(f"Transcode command: {' '.join(_redact(cmd))}")
        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as exc:
            raise ExternalToolError(self.name, 127, str(exc)) from exc
        if result.returncode != 0:
            raise ExternalToolError(self.name, result.returncode, result.stderr)
