"""Output filename formatting and sanitization."""

import re
import string
from pathlib import Path

from loguru import logger

from .models import DEFAULT_TEMPLATE

log = logger.bind(stage="sanitize")

MP3_SUFFIX = ".mp3"

_UNSAFE_CHARS = re.compile(r"[^0-9A-Za-z.\-]")

PLACEHOLDERS = frozenset({"title", "track_nr", "track_title"})


def sanitize_filename(filename: str) -> str:
    """Replace every character outside ``[0-9A-Za-z.-]`` with an underscore.

    Runs over the whole name, template literals included. Idempotent.
    """
    return _UNSAFE_CHARS.sub("_", filename)


def _check_fields(template: str) -> None:
    """Reject any field other than a bare recognized placeholder.

    Attribute or index lookups (``{title.upper}``, ``{track_nr[0]}``),
    conversions (``!r``) and nested fields in a format spec are refused.
    """
    for _, field, format_spec, conversion in string.Formatter().parse(template):
        if field is None:
            continue
        if field not in PLACEHOLDERS:
            raise KeyError(field)
        if conversion is not None:
            raise ValueError(f"conversion !{conversion} not allowed")
        if format_spec and "{" in format_spec:
            raise ValueError("nested fields not allowed")


def _substitute(template: str, book_title: str, track_nr: int, chapter_title: str) -> str:
    _check_fields(template)
    return template.format(
        title=book_title,
        track_nr=track_nr,
        track_title=chapter_title,
    )


def format_filename(
    template: str,
    book_title: str,
    track_nr: int,
    chapter_title: str,
    output_dir: Path,
) -> Path:
    """Build the sanitized output path for one chapter.

    Recognized placeholders are ``{title}`` (book), ``{track_nr}`` (1-based)
    and ``{track_title}`` (chapter). ``.mp3`` is appended unless the template
    already ends with it. Templates that fail to substitute fall back to
    ``{title}_{track_nr}.mp3``.
    """
    if not template.endswith(MP3_SUFFIX):
        template += MP3_SUFFIX

    try:
        name = _substitute(template, book_title, track_nr, chapter_title)
    except (KeyError, IndexError, ValueError, AttributeError, TypeError) as exc:
        log.warning(
            f"Invalid template '{template}' ({type(exc).__name__}: {exc}), "
            f"using default '{DEFAULT_TEMPLATE}'"
        )
        name = _substitute(DEFAULT_TEMPLATE, book_title, track_nr, chapter_title)

    return output_dir / sanitize_filename(name)
