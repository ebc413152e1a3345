"""Splitter configuration via pydantic-settings (.env + env vars)."""

import sys
from pathlib import Path

from loguru import logger
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError
from .models import (
    DEFAULT_QUALITY,
    DEFAULT_TEMPLATE,
    MAX_QUALITY,
    MIN_QUALITY,
    RunParameters,
)


class SplitConfig(BaseSettings):
    """All splitter configuration with layered resolution:
    .env file < environment variables < constructor kwargs.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    # -- Input / output --
    input_file: Path | None = None
    output_dir: Path = Path("output")
    activation_bytes: str = Field(default="", repr=False)

    # -- Encoding --
    quality: int = Field(default=DEFAULT_QUALITY, ge=MIN_QUALITY, le=MAX_QUALITY)
    template: str = DEFAULT_TEMPLATE

    # -- Parallelism --
    max_workers: int = Field(default=0, ge=0)  # 0 = auto (CPU-based)

    # -- External tools --
    ffmpeg_bin: str = "ffmpeg"
    ffprobe_bin: str = "ffprobe"

    # -- Logging --
    log_level: str = "INFO"
    log_file: Path | None = None

    def to_params(self) -> RunParameters:
        """Freeze the run-relevant settings into RunParameters."""
        if self.input_file is None:
            raise ConfigError("No input file configured")
        return RunParameters(
            input_file=self.input_file,
            output_dir=self.output_dir,
            activation_bytes=self.activation_bytes,
            quality=self.quality,
            template=self.template,
        )

    def setup_logging(self) -> None:
        """Configure loguru for the splitter."""
        logger.remove()  # Remove default stderr handler

        log_format = (
            "{time:YYYY-MM-DDTHH:mm:ssZ} | {level:<8} | "
            "{extra[stage]:<12} | {message}"
        )

        def _default_extra(record):
            record["extra"].setdefault("stage", "")
            return True

        logger.add(
            sys.stderr,
            format=log_format,
            level=self.log_level.upper(),
            filter=_default_extra,
        )

        if self.log_file is not None:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            logger.add(
                str(self.log_file),
                format=log_format,
                level="DEBUG",
                rotation="10 MB",
                retention="30 days",
                filter=_default_extra,
            )
