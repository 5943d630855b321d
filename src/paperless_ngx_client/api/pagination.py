"""Cursor-following pagination over Paperless-ngx list endpoints.

Paperless-ngx list endpoints return one :class:`Page` at a time, with a
``next`` URL pointing at the following page. :class:`Paginator` walks those
URLs until the server stops supplying one and gathers every page's results
in server order.

Example:
    ```python
    paginator = Paginator(fetch_page, next_url_policy=force_scheme("https"))
    correspondents = await paginator.collect("/api/correspondents/")
    ```
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable  # noqa: TC003

import httpx
import structlog

from paperless_ngx_client.api.exceptions import (
    PaginationLimitError,
    PaperlessTransportError,
)
from paperless_ngx_client.api.models import Page  # noqa: TC001


__all__ = [
    "DEFAULT_MAX_PAGES",
    "NextUrlPolicy",
    "Paginator",
    "force_scheme",
    "identity",
]


DEFAULT_MAX_PAGES = 1000

type NextUrlPolicy = Callable[[str], str]


def identity(url: str) -> str:
    """Return ``url`` unchanged (the default next-URL policy)."""
    return url


def force_scheme(scheme: str) -> NextUrlPolicy:
    """Build a policy that rewrites next-page URLs to use ``scheme``.

    Useful when Paperless-ngx sits behind a TLS-terminating proxy and
    generates ``http://`` cursors for an ``https://`` deployment.

    Args:
        scheme: The scheme to force, e.g. ``"https"``.

    Returns:
        A callable suitable for ``Paginator(next_url_policy=...)``.
    """
    scheme = scheme.lower()

    def rewrite(url: str) -> str:
        return str(httpx.URL(url).copy_with(scheme=scheme))

    return rewrite


class Paginator[T]:
    """Walk a paginated endpoint into a complete list.

    Attributes:
        next_url_policy: Rewrite applied to each server-supplied ``next`` URL.
        max_pages: Maximum number of pages fetched per walk, or None for no cap.
    """

    def __init__(
        self,
        fetch_page: Callable[[str], Awaitable[Page[T]]],
        *,
        next_url_policy: NextUrlPolicy = identity,
        max_pages: int | None = DEFAULT_MAX_PAGES,
    ) -> None:
        """Initialize the paginator.

        Args:
            fetch_page: Coroutine function that fetches and decodes one page
                given its URL (relative to the API base, or absolute).
            next_url_policy: Rewrite applied to ``next`` URLs before fetching.
            max_pages: Page cap; exceeding it raises PaginationLimitError.
        """
        if max_pages is not None and max_pages < 1:
            msg = f"max_pages must be at least 1, got {max_pages}"
            raise ValueError(msg)
        self._fetch_page = fetch_page
        self.next_url_policy = next_url_policy
        self.max_pages = max_pages
        self._logger = structlog.get_logger(__name__)

    async def pages(self, start_url: str) -> AsyncIterator[Page[T]]:
        """Yield each page in turn, starting at ``start_url``.

        Args:
            start_url: URL of the first page.

        Yields:
            Decoded pages, in order.

        Raises:
            PaginationLimitError: If more than ``max_pages`` pages are needed.
            PaperlessTransportError: If a ``next`` URL cannot be parsed.
        """
        url: str | None = start_url
        fetched = 0

        while url is not None:
            if self.max_pages is not None and fetched >= self.max_pages:
                raise PaginationLimitError(self.max_pages, url)

            page = await self._fetch_page(url)
            fetched += 1
            self._logger.debug(
                "page_fetched",
                url=url,
                page=fetched,
                results=len(page.results),
                count=page.count,
            )
            yield page

            # An empty page may still be followed by more results
            url = self._next_url(page.next) if page.next else None

    def _next_url(self, next_url: str) -> str:
        try:
            return self.next_url_policy(next_url)
        except httpx.InvalidURL as exc:
            msg = f"Invalid next page URL: {exc}"
            raise PaperlessTransportError(msg, url=next_url) from exc

    async def collect(self, start_url: str) -> list[T]:
        """Return every item from every page, in server order.

        Args:
            start_url: URL of the first page.

        Returns:
            All results concatenated in page order.
        """
        items: list[T] = []
        async for page in self.pages(start_url):
            items.extend(page.results)
        return items
