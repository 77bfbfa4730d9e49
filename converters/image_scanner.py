"""Shallow textual scan for embedded image references in storage-format HTML."""

import re
from typing import List

# Literal `<img src="...">` only; other attribute orders or quoting are not matched.
IMG_SRC_PATTERN = re.compile(r'<img src="([^"]*)"')


def find_image_urls(html_content: str) -> List[str]:
    """
    Return every ``<img src="...">`` URL in document order.

    This is a textual scan, not a markup parse: duplicates are kept, URLs are
    not validated, and an unterminated ``src="`` ends the scan.
    """
    if not html_content:
        return []
    return IMG_SRC_PATTERN.findall(html_content)


__all__ = ['find_image_urls', 'IMG_SRC_PATTERN']
