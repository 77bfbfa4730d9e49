"""Structured logging infrastructure with verbosity levels and progress tracking."""

import copy
import logging
import logging.handlers
import time
from typing import Any, Dict, Optional

import colorlog

from models import PageOutcome

LOGGER_NAME = 'confluence_page_backup'


def setup_logging(
    verbosity: int = 0,
    log_file: Optional[str] = None,
    log_format: Optional[str] = None,
    date_format: Optional[str] = None,
    level: Optional[str] = None
) -> logging.Logger:
    """
    Set up structured logging with configurable verbosity levels.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2+=DEBUG)
        log_file: Optional path to log file
        log_format: Optional custom log format string
        date_format: Optional custom date format string
        level: Optional explicit log level string (overrides verbosity)

    Returns:
        Configured logger instance
    """
    if level:
        allowed_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        level_upper = level.upper()
        if level_upper not in allowed_levels:
            raise ValueError(
                f"Invalid log level '{level}'. Must be one of: {sorted(allowed_levels)}"
            )
        log_level = getattr(logging, level_upper)
    elif verbosity >= 2:
        log_level = logging.DEBUG
    elif verbosity >= 1:
        log_level = logging.INFO
    else:
        log_level = logging.WARNING

    if log_format is None:
        log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    if date_format is None:
        date_format = '%Y-%m-%d %H:%M:%S'

    # Only the package logger gets handlers; requests/urllib3 stay at the root default
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)
    logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(colorlog.ColoredFormatter(
        fmt='%(log_color)s' + log_format,
        datefmt=date_format,
        log_colors={
            'DEBUG': 'cyan',
            'INFO': 'green',
            'WARNING': 'yellow',
            'ERROR': 'red',
            'CRITICAL': 'red,bg_white',
        }
    ))
    logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5,
                encoding='utf-8'
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(logging.Formatter(fmt=log_format, datefmt=date_format))
            logger.addHandler(file_handler)

            logger.info(f"Logging to file: {log_file}")
        except OSError as e:
            logger.warning(f"Failed to set up file logging: {str(e)}")

    logger.debug(f"Log level: {logging.getLevelName(log_level)}")
    return logger


class ProgressTracker:
    """Context manager counting page and image outcomes over one export run."""

    def __init__(self, total_pages: int, logger: Optional[logging.Logger] = None):
        """
        Initialize progress tracker.

        Args:
            total_pages: Number of pages the run will process
            logger: Logger for progress lines; the package logger by default
        """
        self.total_pages = total_pages
        self.pages_exported = 0
        self.pages_failed = 0
        self.images_saved = 0
        self.images_failed = 0
        self.start_time: Optional[float] = None
        self.logger = logger or logging.getLogger(LOGGER_NAME)

    @property
    def pages_processed(self) -> int:
        return self.pages_exported + self.pages_failed

    def __enter__(self) -> 'ProgressTracker':
        self.start_time = time.time()
        self.logger.info(f"Starting export of {self.total_pages} page(s)")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Log the run summary at a level matching how much failed."""
        if self.start_time is None:
            return

        elapsed = time.time() - self.start_time
        if self.pages_failed > 0 and self.pages_failed == self.total_pages:
            log_method = self.logger.error
        elif self.pages_failed > 0 or self.images_failed > 0:
            log_method = self.logger.warning
        else:
            log_method = self.logger.info

        log_method(
            f"Pages: {self.pages_exported} exported, {self.pages_failed} failed "
            f"({self.pages_processed}/{self.total_pages} processed)"
        )
        log_method(f"Images: {self.images_saved} saved, {self.images_failed} failed")
        log_method(f"Elapsed Time: {elapsed:.1f}s")

    def record(self, outcome: PageOutcome) -> None:
        """Count one finished page and its images."""
        if outcome.succeeded:
            self.pages_exported += 1
        else:
            self.pages_failed += 1

        failed_images = len(outcome.failed_images)
        self.images_failed += failed_images
        self.images_saved += len(outcome.images) - failed_images

        # Every 10 pages, and after every failed page
        if self.pages_processed % 10 == 0 or not outcome.succeeded:
            status = "Exported" if outcome.succeeded else f"Failed ({outcome.failed_stage.value})"
            self.logger.info(
                f"Processed {self.pages_processed}/{self.total_pages} pages - "
                f"Last: {outcome.page_id} {status}"
            )


def log_section(title: str) -> None:
    """Log a decorative section header."""
    logger = logging.getLogger(LOGGER_NAME)

    separator = "=" * 60
    logger.info(separator)
    logger.info(f"  {title.upper()}")
    logger.info(separator)


def log_config(config: Dict[str, Any]) -> None:
    """
    Log sanitized configuration for debugging.

    Args:
        config: Configuration dictionary to log
    """
    logger = logging.getLogger(LOGGER_NAME)

    sanitized_config = _sanitize_config(config)

    log_section("Configuration")

    confluence = sanitized_config.get('confluence', {})
    logger.info(f"Confluence API URL: {confluence.get('api_url', 'Not Set')}")
    logger.info(f"Email: {confluence.get('email', 'Not Set')}")
    logger.info("API Token: ***REDACTED***" if confluence.get('api_token') else "API Token: Not Set")
    logger.info(f"Verify SSL: {confluence.get('verify_ssl', True)}")

    export_settings = sanitized_config.get('export', {})
    page_ids = export_settings.get('page_ids') or []
    logger.info(f"Backup Directory: {export_settings.get('backup_dir', './backup')}")
    logger.info(f"Page IDs ({len(page_ids)}): {', '.join(str(page_id) for page_id in page_ids)}")

    advanced = sanitized_config.get('advanced', {})
    logger.info(f"Request Timeout: {advanced.get('request_timeout', 30)}s")


def _sanitize_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create a sanitized copy of configuration with sensitive fields masked.

    Args:
        config: Configuration dictionary

    Returns:
        Sanitized configuration copy
    """
    sanitized = copy.deepcopy(config)

    sensitive_fields = {'password', 'secret', 'api_token', 'access_token', 'auth_header'}

    def mask_sensitive(data: Any) -> Any:
        """Recursively mask sensitive fields."""
        if isinstance(data, dict):
            masked = {}
            for key, value in data.items():
                is_sensitive = any(sensitive in str(key).lower() for sensitive in sensitive_fields)
                if is_sensitive and isinstance(value, str):
                    masked[key] = "***REDACTED***"
                else:
                    masked[key] = mask_sensitive(value)
            return masked
        elif isinstance(data, list):
            return [mask_sensitive(item) for item in data]
        return data

    return mask_sensitive(sanitized)


__all__ = [
    'LOGGER_NAME',
    'setup_logging',
    'ProgressTracker',
    'log_section',
    'log_config'
]
