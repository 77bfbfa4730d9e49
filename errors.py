"""Exception taxonomy for the page backup pipeline."""

from typing import Optional


class ExportError(Exception):
    """Base exception for all backup pipeline errors."""
    pass


class ConfigError(ExportError):
    """Required configuration is missing or invalid. Fatal before any page is processed."""
    pass


class NetworkError(ExportError):
    """Transport-level failure (DNS, connection refused, timeout)."""
    pass


class APIError(ExportError):
    """The remote API answered with a non-success status code."""

    def __init__(self, message: str, status_code: Optional[int] = None, page_id: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.page_id = page_id


class ParseError(ExportError):
    """The API response could not be decoded into the expected page shape."""
    pass


class ConversionError(ExportError):
    """Storage-format HTML could not be converted to Markdown."""
    pass


class FileSystemError(ExportError):
    """A directory or file could not be created or written."""
    pass


class ImageDownloadError(ExportError):
    """A single image could not be downloaded or saved. Never fatal to the page."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


__all__ = [
    'ExportError',
    'ConfigError',
    'NetworkError',
    'APIError',
    'ParseError',
    'ConversionError',
    'FileSystemError',
    'ImageDownloadError'
]
