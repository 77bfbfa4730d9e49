"""Filesystem-safe naming for exported pages and images."""

import posixpath
import re
from pathlib import Path
from typing import Union
from urllib.parse import unquote, urlparse

from models import ExportTarget, Page

# Path separators and characters reserved on common filesystems
INVALID_FILENAME_CHARS = re.compile(r'[/\\:*?"<>|]')


def sanitize_filename(name: str) -> str:
    """
    Replace every reserved filesystem character with an underscore.

    All other characters, Unicode included, are left untouched so the result
    stays recognisable next to the page title it came from.
    """
    return INVALID_FILENAME_CHARS.sub('_', name)


def export_target_for(backup_dir: Union[str, Path], page: Page) -> ExportTarget:
    """
    Build the export location for a page.

    The directory is named ``{sanitized title}({page id})`` so that two pages
    sharing a title never land in the same directory.
    """
    sanitized_title = sanitize_filename(page.title)
    directory = Path(backup_dir) / f"{sanitized_title}({page.page_id})"
    return ExportTarget(directory=directory, sanitized_title=sanitized_title)


def image_filename(url: str) -> str:
    """Derive a local file name from the last path segment of an image URL."""
    path = unquote(urlparse(url).path)
    return sanitize_filename(posixpath.basename(path))


__all__ = ['sanitize_filename', 'export_target_for', 'image_filename', 'INVALID_FILENAME_CHARS']
