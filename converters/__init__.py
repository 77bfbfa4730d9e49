"""Converters package for Confluence storage-format HTML.

- markdown_converter: GitHub-flavoured Markdown rendering built on markdownify
- image_scanner: shallow textual scan for ``<img src="...">`` references
"""

from .image_scanner import find_image_urls
from .markdown_converter import MarkdownConverter, convert_html

__all__ = [
    'MarkdownConverter',
    'convert_html',
    'find_image_urls'
]
