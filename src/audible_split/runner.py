"""Split runner -- checks tools, probes chapters and dispatches jobs."""

from __future__ import annotations

from loguru import logger

from .config import SplitConfig
from .errors import OutputDirError
from .ffmpeg import FFmpeg
from .ffprobe import FFprobe
from .jobs import build_jobs
from .models import RunResult
from .orchestrator import SplitOrchestrator
from .progress import ProgressTracker
from .tools import CliTool, check_tools

log = logger.bind(stage="runner")


class SplitRunner:
    """Splits one audiobook into per-chapter MP3 files.

    The probe and transcode tools default to the real ffprobe/ffmpeg
    wrappers and can be replaced with fakes.
    """

    def __init__(
        self,
        config: SplitConfig,
        progress: ProgressTracker,
        prober: CliTool | None = None,
        transcoder: CliTool | None = None,
    ) -> None:
        self.config = config
        self.progress = progress
        self.prober = prober or FFprobe(config.ffprobe_bin)
        self.transcoder = transcoder or FFmpeg(config.ffmpeg_bin)

    def run(self) -> RunResult:
        """Run the whole split.

        Raises SplitError subclasses for fatal problems (missing tools,
        unreadable input, missing title tags) before any job starts.
        Per-chapter failures are folded into the returned RunResult.
        """
        params = self.config.to_params()
        check_tools(self.prober, self.transcoder)

        probe = self.prober.execute(params.input_file)
        book_title = probe.tags.get("title", "<untitled>")
        log.info(f"'{book_title}': {len(probe.chapters)} chapters")
        for chapter in probe.chapters:
            log.info(
                f"Chapter {chapter.index + 1} from {chapter.start} to {chapter.end}"
            )

        jobs = build_jobs(probe, params)

        try:
            params.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OutputDirError(
                f"Could not create output directory {params.output_dir}: {exc}"
            ) from exc

        orchestrator = SplitOrchestrator(
            transcoder=self.transcoder,
            progress=self.progress,
            max_workers=self.config.max_workers,
        )
        result = orchestrator.run(jobs)

        if not result.ok:
            log.warning(f"{result.failed} of {result.total} chapters failed")
        return result
