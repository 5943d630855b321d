"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import pytest
import structlog

from paperless_ngx_client.api import PaperlessClient
from paperless_ngx_client.observability import clear_context


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Generator


BASE_URL = "http://paperless.test:8000"
API_TOKEN = "test-token-12345"


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Undo any logging configuration a test applied."""
    yield
    clear_context()
    structlog.reset_defaults()
    # configure_logging() installs a root handler bound to the test's stderr
    for handler in logging.root.handlers[:]:
        if type(handler) is logging.StreamHandler:
            logging.root.removeHandler(handler)


@pytest.fixture
def base_url() -> str:
    """Base URL for test clients."""
    return BASE_URL


@pytest.fixture
def api_token() -> str:
    """API token for test clients."""
    return API_TOKEN


@pytest.fixture
async def client(base_url: str, api_token: str) -> AsyncGenerator[PaperlessClient, None]:
    """A client that sends every request."""
    async with PaperlessClient(base_url, api_token) as c:
        yield c


@pytest.fixture
async def dry_run_client(
    base_url: str,
    api_token: str,
) -> AsyncGenerator[PaperlessClient, None]:
    """A client with dry-run enabled."""
    async with PaperlessClient(base_url, api_token, dry_run=True) as c:
        yield c


def _page_json(
    results: list[dict[str, Any]],
    *,
    count: int | None = None,
    next_url: str | None = None,
    previous_url: str | None = None,
) -> dict[str, Any]:
    """Build the JSON body of one page of a list endpoint."""
    return {
        "count": len(results) if count is None else count,
        "next": next_url,
        "previous": previous_url,
        "results": results,
    }


def _correspondent_json(correspondent_id: int, name: str, **extra: Any) -> dict[str, Any]:
    """Build a correspondent as returned by the API."""
    return {
        "id": correspondent_id,
        "slug": name.lower().replace(" ", "-"),
        "name": name,
        "match": "",
        "matching_algorithm": 1,
        "is_insensitive": True,
        "document_count": 3,
        "owner": 1,
        "user_can_change": True,
        **extra,
    }


def _document_json(document_id: int, title: str, **extra: Any) -> dict[str, Any]:
    """Build a document as returned by the API."""
    return {
        "id": document_id,
        "title": title,
        "content": "",
        "correspondent": None,
        "document_type": None,
        "tags": [1, 2],
        "created": "2024-01-15T10:30:00Z",
        "added": "2024-01-15T10:30:00Z",
        "original_file_name": f"{title}.pdf",
        **extra,
    }


@pytest.fixture
def make_page() -> Any:
    """Factory for list endpoint page bodies."""
    return _page_json


@pytest.fixture
def make_correspondent() -> Any:
    """Factory for correspondent JSON."""
    return _correspondent_json


@pytest.fixture
def make_document() -> Any:
    """Factory for document JSON."""
    return _document_json
