"""Core enums and data types for the chapter splitter.

Types:
    Chapter       -- One chapter marker as reported by ffprobe.
    ProbeResult   -- Container-level tags plus the ordered chapter list.
    RunParameters -- Immutable settings for a single run.
    TranscodeJob  -- Everything ffmpeg needs to cut one chapter.
    JobStatus     -- Terminal state of a job (skipped, succeeded, failed).
    JobOutcome    -- A job paired with its terminal state.
    RunResult     -- Aggregate of all outcomes; combines with ``+``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

DEFAULT_TEMPLATE = "{title}_{track_nr}.mp3"
DEFAULT_QUALITY = 6
MIN_QUALITY = 0
MAX_QUALITY = 9


class JobStatus(StrEnum):
    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def _freeze(tags: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(tags))


@dataclass(frozen=True)
class Chapter:
    """A labeled time interval inside the source container.

    ``start`` and ``end`` are kept as the strings ffprobe printed; ffmpeg is
    the authority on their format, so they are never parsed here.
    """

    start: str
    end: str
    index: int
    tags: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tags", _freeze(self.tags))


@dataclass(frozen=True)
class ProbeResult:
    tags: Mapping[str, str]
    chapters: tuple[Chapter, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "tags", _freeze(self.tags))
        object.__setattr__(self, "chapters", tuple(self.chapters))


@dataclass(frozen=True)
class RunParameters:
    input_file: Path
    output_dir: Path
    activation_bytes: str = field(default="", repr=False)
    quality: int = DEFAULT_QUALITY
    template: str = DEFAULT_TEMPLATE

    def __post_init__(self) -> None:
        if not MIN_QUALITY <= self.quality <= MAX_QUALITY:
            raise ValueError(
                f"quality must be between {MIN_QUALITY} and {MAX_QUALITY}, "
                f"got {self.quality}"
            )


@dataclass(frozen=True)
class TranscodeJob:
    """One chapter's worth of transcode work.

    ``activation_bytes`` is excluded from repr so jobs can be logged safely.
    """

    input_file: Path
    start: str
    end: str
    title: str
    track_nr: int
    quality: int
    output_file: Path
    activation_bytes: str = field(default="", repr=False)


@dataclass(frozen=True)
class JobOutcome:
    job: TranscodeJob
    status: JobStatus
    detail: str = ""
    elapsed: float = 0.0

    @classmethod
    def skipped(cls, job: TranscodeJob) -> JobOutcome:
        return cls(job=job, status=JobStatus.SKIPPED)

    @classmethod
    def succeeded(cls, job: TranscodeJob, elapsed: float = 0.0) -> JobOutcome:
        return cls(job=job, status=JobStatus.SUCCEEDED, elapsed=elapsed)

    @classmethod
    def failed(cls, job: TranscodeJob, detail: str, elapsed: float = 0.0) -> JobOutcome:
        return cls(job=job, status=JobStatus.FAILED, detail=detail, elapsed=elapsed)


@dataclass(frozen=True)
class RunResult:
    """Aggregate result of a run.

    Forms a commutative monoid under ``+``: ``RunResult()`` is the identity,
    counts add up and ``ok`` stays False once any side has failed.
    """

    ok: bool = True
    skipped: int = 0
    succeeded: int = 0
    failed: int = 0

    @classmethod
    def from_outcome(cls, outcome: JobOutcome) -> RunResult:
        if outcome.status == JobStatus.SKIPPED:
            return cls(skipped=1)
        if outcome.status == JobStatus.SUCCEEDED:
            return cls(succeeded=1)
        return cls(ok=False, failed=1)

    def __add__(self, other: RunResult) -> RunResult:
        if not isinstance(other, RunResult):
            return NotImplemented
        return RunResult(
            ok=self.ok and other.ok,
            skipped=self.skipped + other.skipped,
            succeeded=self.succeeded + other.succeeded,
            failed=self.failed + other.failed,
        )

    @property
    def total(self) -> int:
        return self.skipped + self.succeeded + self.failed

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1
