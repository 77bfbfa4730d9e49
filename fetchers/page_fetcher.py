"""Page fetcher that retrieves a page title and storage-format body from the REST API."""

import logging
from typing import Any, Dict, Optional

from confluence_client import ConfluenceClient
from errors import ParseError
from models import Page

logger = logging.getLogger('confluence_page_backup.fetchers.page_fetcher')

STORAGE_EXPAND = ['body.storage']


class PageFetcher:
    """Fetch single Confluence pages by ID through a shared client."""

    def __init__(self, client: ConfluenceClient, logger: Optional[logging.Logger] = None):
        self.client = client
        self.logger = logger or logging.getLogger('confluence_page_backup.fetchers.page_fetcher')

    def fetch(self, page_id: str) -> Page:
        """
        Fetch page title and storage-format body.

        Args:
            page_id: Confluence page ID

        Returns:
            Page with title and HTML body

        Raises:
            NetworkError: Transport failure
            APIError: Non-200 response
            ParseError: Response does not have the {title, body.storage.value} shape
        """
        self.logger.debug(f"Fetching page content for {page_id}")
        api_response = self.client.get_page(page_id, expand=STORAGE_EXPAND)
        return self._convert_api_page_to_model(page_id, api_response)

    def _convert_api_page_to_model(self, page_id: str, api_response: Any) -> Page:
        """Validate the decoded JSON and build a Page model."""
        if not isinstance(api_response, dict):
            raise ParseError(
                f"failed to parse response for page {page_id}: expected a JSON object, "
                f"got {type(api_response).__name__}"
            )

        title = api_response.get('title')
        if not isinstance(title, str):
            raise ParseError(f"failed to parse response for page {page_id}: missing 'title'")

        body = self._storage_value(api_response)
        if body is None:
            raise ParseError(f"failed to parse response for page {page_id}: missing 'body.storage.value'")

        self.logger.debug(f"Fetched page {page_id} '{title}' ({len(body)} chars)")
        return Page(page_id=page_id, title=title, body=body)

    @staticmethod
    def _storage_value(api_response: Dict[str, Any]) -> Optional[str]:
        body = api_response.get('body')
        if not isinstance(body, dict):
            return None
        storage = body.get('storage')
        if not isinstance(storage, dict):
            return None
        value = storage.get('value')
        return value if isinstance(value, str) else None


__all__ = ['PageFetcher', 'STORAGE_EXPAND']
