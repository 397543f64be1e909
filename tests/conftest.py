"""Shared test fixtures and configuration."""

import os
from pathlib import Path
import sys

import pytest


SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))


# Complete test environment that overrides ALL possible config values
TEST_ENV = {
    "SOLR_URL": "http://solr.test:8983",
    "COUCHDB_URL": "http://couch.test:5984",
    "COUCHDB_DATABASE": "chef",
    "HTTP_TIMEOUT": "5",
    "SEARCH_DEFAULT_ROWS": "20",
    "BASE_URL": "http://chef.test:4000",
    "LOG_LEVEL": "info",
    "LOG_JSON": "false",
    # Proxy settings - ensure they're cleared for tests
    "http_proxy": "",
    "https_proxy": "",
    "all_proxy": "",
    "no_proxy": "",
}


# Set environment variables immediately when conftest.py is loaded
for key, value in TEST_ENV.items():
    os.environ[key] = value

from search_bridge.adapters.document_store import FakeDocumentStore
from search_bridge.adapters.index_transport import FakeIndexTransport
from search_bridge.config import get_settings


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Reset environment variables and the cached settings before each test."""
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def store() -> FakeDocumentStore:
    return FakeDocumentStore(database="chef")


@pytest.fixture
def index() -> FakeIndexTransport:
    return FakeIndexTransport()
