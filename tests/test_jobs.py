"""Tests for jobs.py -- job building and skip-existing detection."""

from pathlib import Path

import pytest

from audible_split.errors import DuplicateOutputError, MissingTagError
from audible_split.jobs import build_job, build_jobs, should_run
from audible_split.models import Chapter, ProbeResult, RunParameters


def _params(tmp_path: Path, **kwargs) -> RunParameters:
    defaults = {
        "input_file": tmp_path / "book.aax",
        "output_dir": tmp_path / "out",
        "activation_bytes": "cafebabe",
        "quality": 4,
    }
    defaults.update(kwargs)
    return RunParameters(**defaults)


def _chapter(index: int, title: str | None = None) -> Chapter:
    tags = {"title": title or f"Chapter {index + 1}"}
    return Chapter(start=f"{index * 10}.0", end=f"{index * 10 + 10}.0", index=index, tags=tags)


class TestBuildJob:
    def test_track_nr_is_one_based(self, tmp_path):
        job = build_job(_chapter(0), {"title": "Book"}, _params(tmp_path))
        assert job.track_nr == 1

    def test_fields_copied(self, tmp_path):
        params = _params(tmp_path)
        job = build_job(_chapter(2, "Bran"), {"title": "Book"}, params)
        assert job.input_file == params.input_file
        assert job.start == "20.0"
        assert job.end == "30.0"
        assert job.title == "Bran"
        assert job.quality == 4
        assert job.activation_bytes == "cafebabe"

    def test_output_path_from_template(self, tmp_path):
        params = _params(tmp_path, template="{track_nr} {track_title} {title}")
        job = build_job(_chapter(120, "Bran the broken"), {"title": "Game of Thrones"}, params)
        assert job.output_file == tmp_path / "out" / "121_Bran_the_broken_Game_of_Thrones.mp3"

    def test_missing_chapter_title(self, tmp_path):
        chapter = Chapter(start="0", end="1", index=0, tags={})
        with pytest.raises(MissingTagError, match="chapter 0"):
            build_job(chapter, {"title": "Book"}, _params(tmp_path))

    def test_missing_book_title(self, tmp_path):
        with pytest.raises(KeyError):
            build_job(_chapter(0), {"artist": "Someone"}, _params(tmp_path))


class TestBuildJobs:
    def test_one_job_per_chapter_in_order(self, tmp_path):
        probe = ProbeResult(
            tags={"title": "Book"}, chapters=tuple(_chapter(i) for i in range(5))
        )
        jobs = build_jobs(probe, _params(tmp_path))
        assert [j.track_nr for j in jobs] == [1, 2, 3, 4, 5]
        assert len({j.output_file for j in jobs}) == 5

    def test_no_chapters(self, tmp_path):
        probe = ProbeResult(tags={"title": "Book"}, chapters=())
        assert build_jobs(probe, _params(tmp_path)) == []


class TestShouldRun:
    def test_runs_when_missing(self, tmp_path):
        job = build_job(_chapter(0), {"title": "Book"}, _params(tmp_path))
        assert should_run(job) is True

    def test_skips_when_present(self, tmp_path):
        job = build_job(_chapter(0), {"title": "Book"}, _params(tmp_path))
        job.output_file.parent.mkdir(parents=True)
        job.output_file.write_bytes(b"")
        assert should_run(job) is False

    def test_directory_at_path_counts_as_present(self, tmp_path):
        job = build_job(_chapter(0), {"title": "Book"}, _params(tmp_path))
        job.output_file.mkdir(parents=True)
        assert should_run(job) is False


class TestDuplicateOutputs:
    def test_template_without_track_nr_is_rejected(self, tmp_path):
        probe = ProbeResult(
            tags={"title": "Book"}, chapters=tuple(_chapter(i) for i in range(3))
        )
        with pytest.raises(DuplicateOutputError) as excinfo:
            build_jobs(probe, _params(tmp_path, template="{title}"))
        assert excinfo.value.track_nrs == [1, 2, 3]
        assert excinfo.value.path == tmp_path / "out" / "Book.mp3"

    def test_titles_colliding_after_sanitize(self, tmp_path):
        chapters = (_chapter(0, "Part: One"), _chapter(1, "Part; One"), _chapter(2, "Two"))
        probe = ProbeResult(tags={"title": "Book"}, chapters=chapters)
        with pytest.raises(DuplicateOutputError) as excinfo:
            build_jobs(probe, _params(tmp_path, template="{track_title}"))
        assert excinfo.value.track_nrs == [1, 2]

    def test_unique_titles_without_track_nr_allowed(self, tmp_path):
        probe = ProbeResult(
            tags={"title": "Book"}, chapters=tuple(_chapter(i) for i in range(3))
        )
        jobs = build_jobs(probe, _params(tmp_path, template="{track_title}"))
        assert len({j.output_file for j in jobs}) == 3
