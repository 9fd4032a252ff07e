# fleet_gps_sync/common/logger.py
"""
Logging configuration for the fleet_gps_sync package.

All modules create their loggers with logging.getLogger(__name__), so they
hang off the 'fleet_gps_sync' package logger configured here. Handlers are
attached once at process start (API factory, scripts, tests).
"""

import logging
import sys
from pathlib import Path

from fleet_gps_sync.config import LoggingConfig

__all__: list[str] = ['PACKAGE_LOGGER_NAME', 'setup_logger']

PACKAGE_LOGGER_NAME: str = 'fleet_gps_sync'


def setup_logger(
    logging_level: int | None = None,
    config: LoggingConfig | None = None,
) -> logging.Logger:
    """
    Set up logging for the fleet_gps_sync package.

    Idempotent: every call clears the package logger's handlers and rebuilds
    them, so reconfiguring (e.g. after loading a config file) never produces
    duplicate log lines.

    Args:
        logging_level: Console level used when no config object is provided.
            Defaults to logging.INFO.
        config: Optional validated LoggingConfig. When given, console level
            comes from config.console_level and a file handler is attached
            if config.file_path is set; logging_level is ignored.

    Returns:
        The package-level logger ('fleet_gps_sync').

    Example:
        >>> setup_logger(logging_level=logging.DEBUG)
        >>> setup_logger(config=load_config('config/sync_config.yaml').logging)
    """
    package_logger: logging.Logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    package_logger.handlers.clear()

    log_format: logging.Formatter = logging.Formatter(
        fmt='%(asctime)s - %(levelname)-8s - [%(name)s] - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )

    # --- Console handler ---
    if logging_level is None:
        logging_level = logging.INFO
    console_level: int = (
        config.get_console_level_int() if config is not None else logging_level
    )

    console_handler: logging.Handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(log_format)
    console_handler.setLevel(console_level)
    package_logger.addHandler(console_handler)

    # --- File handler (config only) ---
    file_level: int | None = config.get_file_level_int() if config else None

    if config is not None and config.file_path is not None and file_level is not None:
        log_file_path: Path = config.file_path
        log_file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler: logging.FileHandler = logging.FileHandler(
            filename=str(log_file_path),
            mode='a',
            encoding='utf-8',
        )
        file_handler.setFormatter(log_format)
        file_handler.setLevel(file_level)
        package_logger.addHandler(file_handler)

    # The logger must pass everything any handler wants to see.
    effective_level: int = console_level
    if file_level is not None and config is not None and config.file_path is not None:
        effective_level = min(console_level, file_level)

    package_logger.setLevel(effective_level)

    return package_logger
