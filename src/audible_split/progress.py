"""Thread-safe progress display shared by all transcode workers."""

from __future__ import annotations

import threading
from typing import IO

import click

_CLEAR_LINE = "\r\x1b[2K"


class ProgressTracker:
    """A job counter with a single live status line.

    Every method takes the same lock, so concurrent workers can advance the
    counter and print messages without lost updates or torn lines. When
    ``live`` is False (default for non-TTY output) the bar is not drawn but
    messages are still printed.

    Attributes:
        total: Number of jobs expected
        position: Number of jobs that reached a terminal state
    """

    def __init__(
        self,
        total: int = 0,
        file: IO[str] | None = None,
        live: bool | None = None,
        width: int = 30,
    ) -> None:
        self._file = file
        if live is None:
            stream = file if file is not None else click.get_text_stream("stdout")
            live = bool(getattr(stream, "isatty", lambda: False)())
        self._live = live
        self._width = width
        self._total = total
        self._position = 0
        self._finished = False
        self._lock = threading.Lock()

    @property
    def total(self) -> int:
        return self._total

    @property
    def position(self) -> int:
        return self._position

    @property
    def finished(self) -> bool:
        return self._finished

    def start(self, total: int) -> None:
        """Reset the counter for a run of ``total`` jobs and draw the bar."""
        with self._lock:
            self._total = total
            self._position = 0
            self._finished = False
            self._render()

    def advance(self) -> None:
        """Count one more job as terminal."""
        with self._lock:
            if self._finished:
                raise RuntimeError("advance() called after finish()")
            self._position += 1
            self._render()

    def report(self, message: str, err: bool = False) -> None:
        """Print a message line above the live bar.

        ``err`` sends the line to stderr. When the tracker was given an
        explicit ``file``, every line goes to that file and ``err`` is ignored.
        """
        with self._lock:
            self._clear()
            click.echo(message, file=self._file, err=err and self._file is None)
            if not self._finished:
                self._render()

    def finish(self, message: str) -> None:
        """Replace the bar with a final message. Must be called exactly once."""
        with self._lock:
            if self._finished:
                raise RuntimeError("finish() called twice")
            self._finished = True
            self._clear()
            click.echo(message, file=self._file)

    def _render(self) -> None:
        if not self._live:
            return
        if self._total:
            filled = self._width * self._position // self._total
        else:
            filled = self._width
        bar = "#" * filled + "-" * (self._width - filled)
        click.echo(
            f"\r[{bar}] {self._position}/{self._total}", file=self._file, nl=False
        )

    def _clear(self) -> None:
        if self._live:
            click.echo(_CLEAR_LINE, file=self._file, nl=False)
