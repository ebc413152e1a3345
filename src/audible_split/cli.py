"""CLI entry point for the chapter splitter."""

import sys
from pathlib import Path

import click
from loguru import logger
from pydantic import ValidationError

from .config import SplitConfig
from .errors import SplitError
from .models import DEFAULT_QUALITY, DEFAULT_TEMPLATE, MAX_QUALITY, MIN_QUALITY
from .progress import ProgressTracker
from .runner import SplitRunner

log = logger.bind(stage="cli")


@click.command()
@click.option(
    "-i",
    "--input",
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="Audiobook file to split (e.g. .aax).",
)
@click.option(
    "-a",
    "--activation-bytes",
    default=None,
    help="Activation bytes used to decrypt the input.",
)
@click.option(
    "-o",
    "--output",
    "output_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Output directory. [default: output/]",
)
@click.option(
    "-q",
    "--quality",
    type=click.IntRange(MIN_QUALITY, MAX_QUALITY),
    default=None,
    help=f"MP3 VBR quality, 0 (best) to 9. [default: {DEFAULT_QUALITY}]",
)
@click.option(
    "-t",
    "--template",
    default=None,
    help=(
        "Output file name template. Placeholders: {title}, {track_nr}, "
        f"{{track_title}}. [default: {DEFAULT_TEMPLATE}]"
    ),
)
@click.option(
    "-j",
    "--jobs",
    "max_workers",
    type=click.IntRange(min=0),
    default=None,
    help="Parallel transcodes (0 = one per CPU).",
)
@click.option("-d", "--debug", is_flag=True, help="Enable debug logging.")
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to .env file.",
)
def main(
    input_file: Path,
    activation_bytes: str | None,
    output_dir: Path | None,
    quality: int | None,
    template: str | None,
    max_workers: int | None,
    debug: bool,
    config_file: str | None,
) -> None:
    """Split an audiobook into one MP3 file per chapter."""
    # Pass CLI flags as kwargs; unset flags fall through to env / .env
    config_kwargs: dict[str, object] = {"input_file": input_file}
    for key, value in (
        ("activation_bytes", activation_bytes),
        ("output_dir", output_dir),
        ("quality", quality),
        ("template", template),
        ("max_workers", max_workers),
    ):
        if value is not None:
            config_kwargs[key] = value
    if debug:
        config_kwargs["log_level"] = "DEBUG"
    if config_file:
        config_kwargs["_env_file"] = config_file

    try:
        config = SplitConfig(**config_kwargs)  # type: ignore[arg-type]
    except ValidationError as exc:
        raise click.UsageError(str(exc)) from exc
    config.setup_logging()

    log.debug(
        f"Starting split: input={input_file} output={config.output_dir} "
        f"quality={config.quality} template={config.template!r}"
    )

    runner = SplitRunner(config=config, progress=ProgressTracker())
    try:
        result = runner.run()
    except SplitError as exc:
        log.debug(f"Fatal: {exc!r}")
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    sys.exit(result.exit_code)
