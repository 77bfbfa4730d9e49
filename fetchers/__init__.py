"""Fetchers package for retrieving Confluence page content via the REST API."""

from .page_fetcher import PageFetcher, STORAGE_EXPAND

__all__ = [
    'PageFetcher',
    'STORAGE_EXPAND'
]
