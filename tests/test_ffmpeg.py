"""Tests for the ffmpeg wrapper."""

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from audible_split.errors import ExternalToolError
from audible_split.ffmpeg import FFmpeg, build_command
from audible_split.models import TranscodeJob

VERSION_OUTPUT = """\
ffmpeg version 4.1.3 Copyright (c) 2000-2019 the FFmpeg developers
built with gcc 8 (Debian 8.3.0-6)
configuration: --enable-libmp3lame
"""


def _job() -> TranscodeJob:
    return TranscodeJob(
        input_file=Path("book.aax"),
        start="78.994286",
        end="200.100000",
        title="Chapter 2",
        track_nr=2,
        quality=6,
        output_file=Path("out/Book_2.mp3"),
        activation_bytes="1a2b3c4d",
    )


def _mock_result(stdout: str = "", returncode: int = 0, stderr: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(
        args=[], returncode=returncode, stdout=stdout, stderr=stderr,
    )


class TestBuildCommand:
    def test_full_command(self):
        assert build_command("ffmpeg", _job()) == [
            "ffmpeg",
            "-nostdin",
            "-v", "error",
            "-activation_bytes", "1a2b3c4d",
            "-ss", "78.994286",
            "-to", "200.100000",
            "-i", "book.aax",
            "-codec:a", "libmp3lame",
            "-qscale:a", "6",
            "-metadata", "title=Chapter 2",
            "-metadata", "track=2",
            str(Path("out/Book_2.mp3")),
        ]

    def test_timestamps_passed_verbatim(self):
        job = TranscodeJob(
            input_file=Path("b.aax"), start="01:02:03.5", end="garbage", title="t",
            track_nr=1, quality=0, output_file=Path("o.mp3"),
        )
        cmd = build_command("ffmpeg", job)
        assert cmd[cmd.index("-ss") + 1] == "01:02:03.5"
        assert cmd[cmd.index("-to") + 1] == "garbage"
        assert cmd[cmd.index("-qscale:a") + 1] == "0"


class TestExecute:
    @patch("audible_split.ffmpeg.subprocess.run")
    def test_success(self, mock_run):
        mock_run.return_value = _mock_result()
        FFmpeg().execute(_job())
        assert mock_run.call_args.args[0][0] == "ffmpeg"

    @patch("audible_split.ffmpeg.subprocess.run")
    def test_failure_carries_stderr(self, mock_run):
        mock_run.return_value = _mock_result(
            returncode=1, stderr="[aax] mismatch in checksums!\n"
        )
        with pytest.raises(ExternalToolError) as excinfo:
            FFmpeg().execute(_job())
        assert excinfo.value.exit_code == 1
        assert excinfo.value.stderr == "[aax] mismatch in checksums!\n"
        assert excinfo.value.tool == "ffmpeg"

    @patch("audible_split.ffmpeg.subprocess.run", side_effect=FileNotFoundError("ffmpeg"))
    def test_spawn_failure_wrapped(self, mock_run):
        with pytest.raises(ExternalToolError) as excinfo:
            FFmpeg().execute(_job())
        assert excinfo.value.exit_code == 127

    @patch("audible_split.ffmpeg.subprocess.run")
    def test_activation_bytes_not_logged(self, mock_run):
        from loguru import logger

        mock_run.return_value = _mock_result()
        messages = []
        handler_id = logger.add(messages.append, level="DEBUG")
        try:
            FFmpeg().execute(_job())
        finally:
            logger.remove(handler_id)
        assert messages
        assert not any("1a2b3c4d" in str(m) for m in messages)


class TestIsInstalled:
    @patch("audible_split.ffmpeg.subprocess.run")
    def test_parses_version(self, mock_run):
        mock_run.return_value = _mock_result(VERSION_OUTPUT)
        assert FFmpeg().is_installed() == "4.1.3"

    @patch("audible_split.ffmpeg.subprocess.run")
    def test_git_build_version(self, mock_run):
        mock_run.return_value = _mock_result("ffmpeg version N-112345-g0123abc Copyright\n")
        assert FFmpeg().is_installed() == "N-112345-g0123abc"

    @patch("audible_split.ffmpeg.subprocess.run", side_effect=FileNotFoundError("ffmpeg"))
    def test_not_installed(self, mock_run):
        assert FFmpeg().is_installed() is None

    @patch("audible_split.ffmpeg.subprocess.run")
    def test_unexpected_output(self, mock_run):
        mock_run.return_value = _mock_result("something else entirely\n")
        assert FFmpeg().is_installed() is None
