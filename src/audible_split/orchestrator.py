"""Parallel chapter transcoding and outcome aggregation.

Every job runs independently on a thread pool. A job's body is strictly
sequential (skip check, transcode, report, advance) and always yields
exactly one JobOutcome, so a failing chapter never stops its siblings.
"""

import functools
import operator
import time
from collections.abc import Iterable
from concurrent.futures import Future, ThreadPoolExecutor, as_completed

import psutil
from loguru import logger

from .jobs import should_run
from .models import JobOutcome, RunResult, TranscodeJob
from .progress import ProgressTracker
from .tools import CliTool

log = logger.bind(stage="orchestrator")


def reduce_outcomes(outcomes: Iterable[JobOutcome]) -> RunResult:
    """Fold outcomes into one RunResult. Any failure makes the result fail."""
    return functools.reduce(
        operator.add, map(RunResult.from_outcome, outcomes), RunResult()
    )


class SplitOrchestrator:
    """Runs transcode jobs concurrently and reports each outcome.

    Attributes:
        transcoder: Tool that executes a single TranscodeJob
        progress: Shared progress handle, the only state workers mutate
        max_workers: Configured pool size (0 = one worker per CPU)
    """

    def __init__(
        self,
        transcoder: CliTool,
        progress: ProgressTracker,
        max_workers: int = 0,
    ) -> None:
        self.transcoder = transcoder
        self.progress = progress
        self.max_workers = max_workers

    def run(self, jobs: list[TranscodeJob]) -> RunResult:
        """Run all jobs to a terminal state and return the aggregated result."""
        if not jobs:
            log.warning("No chapters to transcode")
            self.progress.start(0)
            self.progress.finish("Nothing to do")
            return RunResult()

        workers = self._calculate_max_workers(len(jobs))
        log.info(f"Transcoding {len(jobs)} chapters with {workers} workers")
        self.progress.start(len(jobs))

        outcomes: list[JobOutcome] = []
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures: dict[Future, TranscodeJob] = {
                executor.submit(self._run_single_safe, job): job for job in jobs
            }
            for future in as_completed(futures):
                outcomes.append(future.result())

        result = reduce_outcomes(outcomes)
        self.progress.finish(self._summary(result))
        return result

    def _run_single_safe(self, job: TranscodeJob) -> JobOutcome:
        """Run one job, converting any error into a failed outcome.

        Reports the outcome and advances progress exactly once.
        """
        start = time.monotonic()
        try:
            run = should_run(job)
            if run:
                self.transcoder.execute(job)
        except Exception as e:
            elapsed = time.monotonic() - start
            detail = getattr(e, "stderr", None) or str(e)
            log.debug(f"Chapter {job.track_nr} failed: {e!r}")
            self.progress.report(
                f"Chapter {job.track_nr} failed: {detail.strip()}", err=True
            )
            self.progress.advance()
            return JobOutcome.failed(job, detail, elapsed)

        if not run:
            self.progress.report(
                f"Chapter {job.track_nr} skipped, {job.output_file.name} exists"
            )
            self.progress.advance()
            return JobOutcome.skipped(job)

        elapsed = time.monotonic() - start
        log.debug(f"Chapter {job.track_nr} -> {job.output_file}")
        self.progress.report(f"Chapter {job.track_nr} done in {elapsed:.0f}s")
        self.progress.advance()
        return JobOutcome.succeeded(job, elapsed)

    def _calculate_max_workers(self, job_count: int) -> int:
        """Pool size: configured value or CPU count, capped by job count."""
        if self.max_workers > 0:
            workers = self.max_workers
            log.debug(f"Using configured max_workers: {workers}")
        else:
            workers = psutil.cpu_count() or 1
            log.debug(f"Auto-calculated max_workers: {workers}")
        return max(1, min(workers, job_count))

    @staticmethod
    def _summary(result: RunResult) -> str:
        return (
            f"Split complete: {result.succeeded} transcoded, "
            f"{result.skipped} skipped, {result.failed} failed"
        )
