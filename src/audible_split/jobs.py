"""Job building and skip-existing detection."""

from pathlib import Path
from typing import Mapping

from loguru import logger

from .errors import DuplicateOutputError, MissingTagError
from .models import Chapter, ProbeResult, RunParameters, TranscodeJob
from .sanitize import format_filename

log = logger.bind(stage="jobs")


def _require_title(tags: Mapping[str, str], where: str) -> str:
    try:
        return tags["title"]
    except KeyError:
        raise MissingTagError("title", where) from None


def build_job(
    chapter: Chapter, book_tags: Mapping[str, str], params: RunParameters
) -> TranscodeJob:
    """Turn one chapter into a self-contained transcode job.

    Raises MissingTagError if the chapter or the book has no title tag.
    """
    track_nr = chapter.index + 1
    title = _require_title(chapter.tags, f"chapter {chapter.index}")
    book_title = _require_title(book_tags, "container tags")

    output_file = format_filename(
        params.template, book_title, track_nr, title, params.output_dir
    )
    return TranscodeJob(
        input_file=params.input_file,
        start=chapter.start,
        end=chapter.end,
        title=title,
        track_nr=track_nr,
        quality=params.quality,
        output_file=output_file,
        activation_bytes=params.activation_bytes,
    )


def build_jobs(probe: ProbeResult, params: RunParameters) -> list[TranscodeJob]:
    """Build one job per chapter, in chapter order.

    Raises DuplicateOutputError if the template maps several chapters to
    the same file.
    """
    jobs = [build_job(chapter, probe.tags, params) for chapter in probe.chapters]

    by_path: dict[Path, list[int]] = {}
    for job in jobs:
        by_path.setdefault(job.output_file, []).append(job.track_nr)
    for path, track_nrs in by_path.items():
        if len(track_nrs) > 1:
            raise DuplicateOutputError(path, track_nrs)

    log.debug(f"Built {len(jobs)} jobs for {params.input_file.name}")
    return jobs


def should_run(job: TranscodeJob) -> bool:
    """Return False when the job's output file already exists.

    Presence alone counts as done; a partial file left by a crashed run is
    not detected.
    """
    if job.output_file.exists():
        log.debug(f"Output exists, skipping track {job.track_nr}: {job.output_file}")
        return False
    return True
