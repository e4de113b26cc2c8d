"""Pytest configuration and fixtures."""

import pytest
from httpx import AsyncClient, ASGITransport

from config import Config
from goto_links.store import Store
from goto_links.common.logging_config import setup_logging
from web_app import create_app


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def store(logger):
    """Create an in-memory store."""
    return Store(logger=logger)


@pytest.fixture
def log_path(tmp_path):
    """Path of a persistence log that does not exist yet."""
    return tmp_path / "goto.yml"


@pytest.fixture
def persistent_store(log_path, logger):
    """Create a store persisting to a fresh log file."""
    store = Store.from_path(str(log_path), logger=logger)
    yield store
    store.close()


@pytest.fixture
def config():
    """Create test configuration."""
    return Config(db_path=None, max_payload_bytes=256)


@pytest.fixture
def app(store, config):
    """Create test FastAPI app around the in-memory store."""
    return create_app(store=store, config=config)


@pytest.fixture
async def client(app):
    """Create test client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://google.com",
        "https://github.com/tsauvajon",
        "https://linkedin.com/in/tsauvajon",
    ]
