"""
Test configuration and shared fixtures for the page backup tests
"""
import io
import json
import logging

import pytest
import requests

from confluence_client import ConfluenceClient
from logger import LOGGER_NAME
from models import Credential

API_URL = "https://wiki.example.com/rest/api"


def page_url(page_id):
    return f"{API_URL}/content/{page_id}"


def make_response(status_code=200, content=b'', reason=None, url=''):
    """Build a real requests.Response backed by an in-memory body."""
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason or ('OK' if status_code == 200 else 'Error')
    response.url = url
    response.raw = io.BytesIO(content)
    return response


class FakeConfluence:
    """Stand-in for Session.request that routes URLs to canned responses."""

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add_page(self, page_id, title, body, status_code=200):
        payload = {'id': page_id, 'title': title, 'body': {'storage': {'value': body, 'representation': 'storage'}}}
        self.add_json(page_url(page_id), payload, status_code=status_code)

    def add_json(self, url, payload, status_code=200, reason=None):
        content = json.dumps(payload).encode('utf-8')
        self.routes[url] = lambda: make_response(status_code, content, reason=reason, url=url)

    def add_bytes(self, url, content, status_code=200, reason=None):
        self.routes[url] = lambda: make_response(status_code, content, reason=reason, url=url)

    def add_error(self, url, exception):
        def raise_error():
            raise exception
        self.routes[url] = raise_error

    def requested_urls(self):
        return [url for _, url, _ in self.calls]

    def __call__(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if url not in self.routes:
            return make_response(404, b'{"message": "No content found"}', reason='Not Found', url=url)
        return self.routes[url]()


@pytest.fixture
def fake_confluence():
    return FakeConfluence()


@pytest.fixture
def credential():
    return Credential(identity='user@example.com', secret='s3cret-token')


@pytest.fixture
def client(fake_confluence, credential):
    """ConfluenceClient whose session answers from fake_confluence."""
    confluence_client = ConfluenceClient(API_URL, credential, timeout=5)
    confluence_client.session.request = fake_confluence
    yield confluence_client
    confluence_client.close()


@pytest.fixture
def sample_config(tmp_path):
    """Complete, valid configuration for tests"""
    return {
        'confluence': {
            'api_url': API_URL,
            'email': 'user@example.com',
            'api_token': 's3cret-token',
            'verify_ssl': True,
        },
        'export': {
            'backup_dir': str(tmp_path / 'backup'),
            'page_ids': ['123'],
            'show_progress': False,
            'chunk_size': 8192,
        },
        'advanced': {
            'request_timeout': 5,
        },
        'logging': {},
        'report': {},
    }


@pytest.fixture
def reset_package_logger():
    """Undo handler/level changes made by setup_logging."""
    yield
    package_logger = logging.getLogger(LOGGER_NAME)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.setLevel(logging.NOTSET)
