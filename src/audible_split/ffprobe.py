"""FFprobe wrapper -- reads container tags and chapter markers as JSON."""

import json
import subprocess
from pathlib import Path

from loguru import logger

from .errors import ProbeError
from .models import Chapter, ProbeResult
from .tools import CliTool

log = logger.bind(stage="ffprobe")


def _run_ffprobe(binary: str, args: list[str]) -> subprocess.CompletedProcess:
    """Run ffprobe quietly with compact JSON output."""
    return subprocess.run(
        [binary, "-v", "quiet", "-print_format", "json=c=1"] + args,
        capture_output=True,
        text=True,
    )


def parse_probe_output(raw: str) -> ProbeResult:
    """Parse ``-show_chapters -show_format`` JSON into a ProbeResult.

    Raises ProbeError on invalid JSON or missing keys.
    """
    try:
        data = json.loads(raw)
        tags = data["format"].get("tags", {})
        chapters = [
            Chapter(
                start=str(ch["start_time"]),
                end=str(ch["end_time"]),
                index=int(ch["id"]),
                tags=ch.get("tags", {}),
            )
            for ch in data["chapters"]
        ]
    except json.JSONDecodeError as exc:
        raise ProbeError(f"ffprobe returned invalid JSON: {exc}") from exc
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise ProbeError(f"Unexpected ffprobe output: {exc!r}") from exc

    return ProbeResult(tags=tags, chapters=tuple(chapters))


class FFprobe(CliTool):
    name = "ffprobe"
    min_version = (3, 0)

    def is_installed(self) -> str | None:
        try:
            result = _run_ffprobe(self.binary, ["-show_versions"])
        except OSError:
            return None
        try:
            data = json.loads(result.stdout)
            version = data["program_version"]["version"]
        except (json.JSONDecodeError, KeyError, TypeError):
            return None
        return version if isinstance(version, str) else None

    def execute(self, options: Path) -> ProbeResult:
        """Probe ``options`` (the input file) for tags and chapters."""
        input_file = Path(options)
        log.debug(f"Probing {input_file}")
        try:
            result = _run_ffprobe(
                self.binary, ["-show_chapters", "-show_format", str(input_file)]
            )
        except OSError as exc:
            raise ProbeError(f"Could not run {self.binary}: {exc}") from exc

        if result.returncode != 0:
            raise ProbeError(
                f"ffprobe exited with code {result.returncode} for {input_file}: "
                f"{result.stderr.strip()}"
            )

        probe = parse_probe_output(result.stdout)
        log.debug(f"Found {len(probe.chapters)} chapters in {input_file.name}")
        return probe
