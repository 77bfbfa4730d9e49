"""Export package writing page images and names to the local backup tree.

Package Structure:
- file_naming: filesystem-safe names for page directories, markdown files and images
- asset_downloader: streams embedded images into a page's export directory
"""

from .asset_downloader import AssetDownloader, DEFAULT_CHUNK_SIZE
from .file_naming import export_target_for, image_filename, sanitize_filename

__all__ = [
    'AssetDownloader',
    'DEFAULT_CHUNK_SIZE',
    'export_target_for',
    'image_filename',
    'sanitize_filename'
]
