"""Asset downloader for streaming embedded page images to disk."""

import logging
from pathlib import Path
from typing import Iterable, List, Optional

import requests

from confluence_client import ConfluenceClient
from errors import ExportError, FileSystemError, ImageDownloadError, NetworkError
from models import ImageOutcome
from .file_naming import image_filename

DEFAULT_CHUNK_SIZE = 8192


class AssetDownloader:
    """
    Downloads images referenced by a page into the page's export directory.

    Each image is streamed straight to its destination file. A failed image
    is reported through its ImageOutcome and never interrupts the page.
    """

    def __init__(
        self,
        client: ConfluenceClient,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the asset downloader.

        Args:
            client: Shared ConfluenceClient (carries session and credentials)
            chunk_size: Bytes per chunk when streaming to disk
            logger: Logger instance
        """
        self.client = client
        self.chunk_size = chunk_size
        self.logger = logger or logging.getLogger('confluence_page_backup.exporters.asset_downloader')

        self.stats = {
            'downloaded': 0,
            'failed': 0,
            'total_size_bytes': 0
        }

    def download(self, url: str) -> requests.Response:
        """
        Open an authenticated streaming request for an image.

        Raises:
            NetworkError: Transport failure
            APIError: Non-200 response
        """
        return self.client.open_stream(url)

    def save(self, response: requests.Response, destination: Path) -> int:
        """
        Stream a response body to a file.

        The response is always closed. A partially written file is removed on
        failure.

        Returns:
            Number of bytes written

        Raises:
            FileSystemError: If the file cannot be written
            NetworkError: If the connection drops mid-stream
        """
        written = 0
        try:
            with open(destination, 'wb') as f:
                for chunk in response.iter_content(chunk_size=self.chunk_size):
                    if chunk:
                        f.write(chunk)
                        written += len(chunk)
        except requests.exceptions.RequestException as e:
            # RequestException subclasses OSError, so it is matched first
            self._remove_partial(destination)
            raise NetworkError(f"connection lost while downloading to {destination}: {e}") from e
        except (OSError, ValueError) as e:
            # open() raises ValueError for paths with embedded NUL bytes
            self._remove_partial(destination)
            raise FileSystemError(f"failed to write {destination}: {e}") from e
        finally:
            response.close()

        return written

    def download_image(self, url: str, directory: Path) -> ImageOutcome:
        """
        Download one image into a directory.

        Args:
            url: Image URL as found in the page body
            directory: Page export directory

        Returns:
            ImageOutcome with the saved path, or with an ImageDownloadError
        """
        filename = image_filename(url)
        if filename in ('', '.', '..') or '\x00' in filename:
            return self._failed(url, ImageDownloadError(
                f"cannot derive a file name from image URL {url!r}", url=url
            ))

        destination = Path(directory) / filename
        try:
            response = self.download(url)
            size = self.save(response, destination)
        except ExportError as e:
            return self._failed(url, ImageDownloadError(f"failed to download image {url}: {e}", url=url), cause=e)

        self.stats['downloaded'] += 1
        self.stats['total_size_bytes'] += size
        self.logger.debug(f"Saved image '{url}' -> {destination} ({size} bytes)")
        return ImageOutcome(url=url, path=destination, size_bytes=size)

    def download_images(self, urls: Iterable[str], directory: Path) -> List[ImageOutcome]:
        """Download every image sequentially, one outcome per URL."""
        return [self.download_image(url, directory) for url in urls]

    def _failed(self, url: str, error: ImageDownloadError, cause: Optional[Exception] = None) -> ImageOutcome:
        if cause is not None:
            error.__cause__ = cause
        self.stats['failed'] += 1
        # The orchestrator reports failed images with their page ID
        self.logger.debug(str(error))
        return ImageOutcome(url=url, error=error)

    def _remove_partial(self, destination: Path) -> None:
        try:
            Path(destination).unlink(missing_ok=True)
        except (OSError, ValueError) as e:
            self.logger.warning(f"Could not remove partial file {destination}: {e}")


__all__ = ['AssetDownloader', 'DEFAULT_CHUNK_SIZE']
