"""Logging setup.

All modules log through loguru's shared ``logger``; ``LogConfig.setup()``
replaces its default handler with the configured console/file sinks.
"""

import sys
from pathlib import Path

from loguru import logger


class LogConfig:
    """Configures loguru sinks."""

    console_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
        "<level>{message}</level>"
    )
    file_format = (
        "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
        "{level: <8} | "
        "{name}:{function}:{line} | "
        "{message}"
    )

    def __init__(
        self,
        level: str = "INFO",
        log_to_console: bool = True,
        log_to_file: bool = False,
        log_file_path: str = "logs/app.log",
        rotation: str = "100 MB",
        retention: str = "30 days",
    ):
        self.level = level.upper()
        self.log_to_console = log_to_console
        self.log_to_file = log_to_file
        self.log_file_path = Path(log_file_path)
        self.rotation = rotation
        self.retention = retention

    @classmethod
    def from_settings(cls, settings, level: str | None = None) -> "LogConfig":
        """Build from a Settings instance; ``level`` overrides the configured one."""
        return cls(
            level=level or settings.log_level,
            log_to_console=settings.log_to_console,
            log_to_file=settings.log_to_file,
            log_file_path=settings.log_file_path,
            rotation=settings.log_rotation,
            retention=settings.log_retention,
        )

    def setup(self) -> None:
        """Remove the default handler and add the configured sinks."""
        logger.remove()

        if self.log_to_console:
            # stderr keeps CLI output on stdout clean
            logger.add(
                sys.stderr,
                format=self.console_format,
                level=self.level,
                colorize=True,
                backtrace=True,
                diagnose=False,
            )

        if self.log_to_file:
            self.log_file_path.parent.mkdir(parents=True, exist_ok=True)
            logger.add(
                str(self.log_file_path),
                format=self.file_format,
                level=self.level,
                rotation=self.rotation,
                retention=self.retention,
                compression="zip",
                enqueue=True,
            )

        logger.debug(
            f"Logger initialized - Console: {self.log_to_console}, "
            f"File: {self.log_to_file}, Level: {self.level}"
        )
