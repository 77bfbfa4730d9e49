"""Confluence REST API client shared by the page fetcher and the asset downloader."""

import json
import logging
import time
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin, urlparse

import requests
import urllib3

from errors import APIError, NetworkError, ParseError
from models import Credential

logger = logging.getLogger('confluence_page_backup.client')


class ConfluenceClient:
    """Confluence REST API client with Basic authentication and error translation.

    One instance owns one ``requests.Session``. It is built by the export
    orchestrator and handed to every component that talks to Confluence.
    Requests are never retried.
    """

    def __init__(
        self,
        api_url: str,
        credential: Credential,
        verify_ssl: bool = True,
        timeout: float = 30
    ):
        """
        Initialize Confluence client.

        Args:
            api_url: Base URL of the REST API (e.g., "https://example.atlassian.net/wiki/rest/api")
            credential: Email/username and API token for Basic auth
            verify_ssl: Whether to verify SSL certificates
            timeout: HTTP request timeout in seconds
        """
        self.api_url = api_url.rstrip('/')
        self.timeout = timeout

        self.session = requests.Session()
        self.session.auth = credential.as_auth()

        self.session.verify = verify_ssl
        if not verify_ssl:
            logger.warning("SSL verification disabled - this is insecure!")
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

        logger.info(f"Initialized Confluence client with Basic auth for {self.api_url}")
        logger.debug(f"Client configured with timeout={timeout}s, verify_ssl={verify_ssl}")

    def _make_request(
        self,
        method: str,
        url: str,
        expected_status: int = 200,
        page_id: Optional[str] = None,
        **kwargs
    ) -> requests.Response:
        """
        Make HTTP request and translate failures into pipeline errors.

        Args:
            method: HTTP method
            url: Absolute URL
            expected_status: Status code treated as success
            page_id: Page ID attached to APIError for reporting
            **kwargs: Additional arguments for requests

        Returns:
            Response object (body not yet consumed when stream=True)

        Raises:
            NetworkError: For DNS, connection, TLS and timeout failures
            APIError: For any status other than expected_status
        """
        start_time = time.time()
        logger.debug(f"API Request: {method} {url}")

        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.Timeout as e:
            logger.error(f"Request timeout after {self.timeout}s: {method} {url}")
            raise NetworkError(f"request to {url} timed out after {self.timeout}s") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error: {method} {url} - {str(e)}")
            raise NetworkError(f"request to {url} failed: {e}") from e

        elapsed = time.time() - start_time
        logger.debug(f"API Response: {response.status_code} {url} ({elapsed:.3f}s)")

        if response.status_code != expected_status:
            status = f"{response.status_code} {response.reason or ''}".strip()
            try:
                if not kwargs.get('stream'):
                    error_data = response.json()
                    logger.debug(f"Error details: {json.dumps(error_data, indent=2)}")
            except ValueError:
                logger.debug(f"Error response: {response.text[:500]}")
            finally:
                response.close()

            if page_id is not None:
                message = f"failed to fetch page {page_id}: {status}"
            else:
                message = f"failed to fetch {url}: {status}"
            logger.error(f"HTTP Error {status}: {method} {url}")
            raise APIError(message, status_code=response.status_code, page_id=page_id)

        return response

    def get_page(self, page_id: str, expand: Optional[List[str]] = None) -> Dict[str, Any]:
        """
        Fetch single page with specified expansions.

        Args:
            page_id: Confluence page ID
            expand: List of expansions (e.g., ['body.storage'])

        Returns:
            Decoded JSON page dictionary

        Raises:
            NetworkError, APIError: From the request
            ParseError: If the body is not valid JSON
        """
        params = {}
        if expand:
            params['expand'] = ','.join(expand)

        response = self._make_request(
            'GET',
            f"{self.api_url}/content/{page_id}",
            page_id=page_id,
            params=params,
            headers={'Content-Type': 'application/json'}
        )

        try:
            return response.json()
        except ValueError as e:
            raise ParseError(f"failed to parse response for page {page_id}: {e}") from e
        finally:
            response.close()

    def open_stream(self, url: str) -> requests.Response:
        """
        Open a streaming GET for a binary resource.

        The caller must close the returned response.
        """
        return self._make_request('GET', self.resolve_url(url), stream=True)

    def resolve_url(self, url: str) -> str:
        """Resolve a relative resource URL against the host of the API URL."""
        if urlparse(url).scheme:
            return url
        parsed = urlparse(self.api_url)
        return urljoin(f"{parsed.scheme}://{parsed.netloc}/", url)

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()

    def __enter__(self) -> 'ConfluenceClient':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'ConfluenceClient':
        """
        Initialize Confluence client from configuration dictionary.

        Args:
            config: Configuration dictionary with confluence and advanced settings

        Returns:
            ConfluenceClient instance
        """
        confluence_config = config.get('confluence', {})
        advanced_config = config.get('advanced', {})

        credential = Credential(
            identity=confluence_config.get('email'),
            secret=confluence_config.get('api_token')
        )
        return cls(
            api_url=confluence_config.get('api_url'),
            credential=credential,
            verify_ssl=confluence_config.get('verify_ssl', True),
            timeout=advanced_config.get('request_timeout', 30)
        )


__all__ = ['ConfluenceClient']
