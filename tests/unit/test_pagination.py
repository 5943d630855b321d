"""Unit tests for the pagination engine."""

from __future__ import annotations

import itertools
from typing import Any

import httpx
import pytest
import respx  # noqa: TC002

from paperless_ngx_client.api import (
    Correspondent,
    Page,
    PaginationLimitError,
    Paginator,
    PaperlessClient,
    PaperlessDecodeError,
    PaperlessTransportError,
    force_scheme,
    identity,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class FakeServer:
    """Serves pre-built integer pages keyed by URL and records requests."""

    def __init__(self, page_sizes: list[int]) -> None:
        counter = itertools.count()
        total = sum(page_sizes)
        self.requested: list[str] = []
        self.pages: dict[str, Page[int]] = {}
        for number, size in enumerate(page_sizes, start=1):
            has_next = number < len(page_sizes)
            self.pages[self.url(number)] = Page[int](
                count=total,
                next=self.url(number + 1) if has_next else None,
                results=[next(counter) for _ in range(size)],
            )

    @staticmethod
    def url(number: int) -> str:
        return f"http://paperless.test/api/items/?page={number}"

    async def fetch(self, url: str) -> Page[int]:
        self.requested.append(url)
        return self.pages[url]


# ---------------------------------------------------------------------------
# Paginator
# ---------------------------------------------------------------------------


class TestPaginatorCollect:
    """Tests for Paginator.collect."""

    @pytest.mark.parametrize(
        "page_sizes",
        [
            [0],
            [5],
            [3, 3, 3],
            [1, 4, 2],
            [0, 0, 4],
            [2, 0, 0, 3],
            [4, 0],
            [25] * 8,
        ],
    )
    async def test_returns_every_item_in_page_order(self, page_sizes: list[int]) -> None:
        """All M items from N pages come back in order, whatever the split."""
        server = FakeServer(page_sizes)
        paginator = Paginator(server.fetch)

        items = await paginator.collect(server.url(1))

        assert items == list(range(sum(page_sizes)))
        assert len(server.requested) == len(page_sizes)

    async def test_empty_page_with_next_does_not_stop(self) -> None:
        """An empty intermediate page is followed to the next one."""
        server = FakeServer([2, 0, 1])
        paginator = Paginator(server.fetch)

        items = await paginator.collect(server.url(1))

        assert items == [0, 1, 2]
        assert server.requested == [server.url(1), server.url(2), server.url(3)]

    async def test_preserves_server_order(self) -> None:
        """Results are not re-sorted."""
        pages = {
            "/a": Page[int](count=4, next="/b", results=[9, 3]),
            "/b": Page[int](count=4, next=None, results=[7, 1]),
        }

        async def fetch(url: str) -> Page[int]:
            return pages[url]

        assert await Paginator(fetch).collect("/a") == [9, 3, 7, 1]

    async def test_next_url_policy_applied_to_cursors_only(self) -> None:
        """The policy rewrites next URLs but not the start URL."""
        seen: list[str] = []
        pages = {
            "start": Page[int](count=2, next="cursor-2", results=[1]),
            "rewritten:cursor-2": Page[int](count=2, next=None, results=[2]),
        }

        async def fetch(url: str) -> Page[int]:
            seen.append(url)
            return pages[url]

        paginator = Paginator(fetch, next_url_policy=lambda url: f"rewritten:{url}")

        assert await paginator.collect("start") == [1, 2]
        assert seen == ["start", "rewritten:cursor-2"]

    async def test_pages_yields_each_page(self) -> None:
        """pages() exposes the decoded pages themselves."""
        server = FakeServer([2, 1])
        paginator = Paginator(server.fetch)

        pages = [page async for page in paginator.pages(server.url(1))]

        assert [page.results for page in pages] == [[0, 1], [2]]


class TestPaginatorLimit:
    """Tests for the max_pages safety cap."""

    async def test_exceeding_cap_raises(self) -> None:
        """Needing more pages than the cap raises PaginationLimitError."""
        server = FakeServer([1, 1, 1])
        paginator = Paginator(server.fetch, max_pages=2)

        with pytest.raises(PaginationLimitError) as exc_info:
            await paginator.collect(server.url(1))

        assert exc_info.value.max_pages == 2
        assert exc_info.value.url == server.url(3)
        assert len(server.requested) == 2

    async def test_cap_equal_to_page_count_succeeds(self) -> None:
        """Exactly max_pages pages is allowed."""
        server = FakeServer([1, 1, 1])
        paginator = Paginator(server.fetch, max_pages=3)

        assert await paginator.collect(server.url(1)) == [0, 1, 2]

    async def test_cap_stops_self_referencing_cursor(self) -> None:
        """A server that returns the same next URL forever is cut off."""
        looping = Page[int](count=1, next="/same", results=[])

        async def fetch(url: str) -> Page[int]:
            del url
            return looping

        with pytest.raises(PaginationLimitError):
            await Paginator(fetch, max_pages=50).collect("/same")

    async def test_no_cap(self) -> None:
        """max_pages=None disables the cap."""
        server = FakeServer([1] * 1500)
        paginator = Paginator(server.fetch, max_pages=None)

        assert len(await paginator.collect(server.url(1))) == 1500

    def test_invalid_cap(self) -> None:
        """A cap below one is rejected."""
        with pytest.raises(ValueError, match="max_pages"):
            Paginator(FakeServer([1]).fetch, max_pages=0)


# ---------------------------------------------------------------------------
# Next URL policies
# ---------------------------------------------------------------------------


class TestNextUrlPolicies:
    """Tests for the built-in next URL policies."""

    def test_identity(self) -> None:
        """identity leaves the URL untouched."""
        url = "http://paperless.test/api/documents/?page=2"
        assert identity(url) == url

    def test_force_scheme_upgrades(self) -> None:
        """force_scheme replaces only the scheme."""
        policy = force_scheme("https")
        assert (
            policy("http://paperless.test:8000/api/documents/?page=2&page_size=25")
            == "https://paperless.test:8000/api/documents/?page=2&page_size=25"
        )

    def test_force_scheme_keeps_matching_scheme(self) -> None:
        """A URL already using the scheme is unchanged."""
        policy = force_scheme("HTTPS")
        assert policy("https://paperless.test/api/tags/?page=3") == (
            "https://paperless.test/api/tags/?page=3"
        )

    async def test_unparseable_next_url(self) -> None:
        """A next URL the policy cannot parse raises PaperlessTransportError."""
        bad_next = "http://paperless.test/api/items/?page=\x00"
        first = Page[int](count=2, next=bad_next, results=[1])

        async def fetch(url: str) -> Page[int]:
            del url
            return first

        paginator = Paginator(fetch, next_url_policy=force_scheme("https"))

        with pytest.raises(PaperlessTransportError, match="Invalid next page URL") as exc_info:
            await paginator.collect("/api/items/")

        assert exc_info.value.url == bad_next


# ---------------------------------------------------------------------------
# Client pagination over HTTP
# ---------------------------------------------------------------------------


class TestClientPaginate:
    """Tests for PaperlessClient.paginate against a mocked server."""

    @pytest.mark.respx(base_url="http://paperless.test:8000")
    async def test_follows_next_urls(
        self,
        client: PaperlessClient,
        respx_mock: respx.MockRouter,
        make_page: Any,
        make_correspondent: Any,
    ) -> None:
        """Every page is requested and results are concatenated."""
        pages = {
            None: make_page(
                [make_correspondent(1, "Alpha"), make_correspondent(2, "Beta")],
                count=3,
                next_url="http://paperless.test:8000/api/correspondents/?page=2",
            ),
            "2": make_page([], count=3, next_url=(
                "http://paperless.test:8000/api/correspondents/?page=3"
            )),
            "3": make_page([make_correspondent(3, "Gamma")], count=3),
        }

        def respond(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=pages[request.url.params.get("page")])

        route = respx_mock.get("/api/correspondents/").mock(side_effect=respond)

        result = await client.paginate("/api/correspondents/", Correspondent)

        assert [c.name for c in result] == ["Alpha", "Beta", "Gamma"]
        assert route.call_count == 3

    @pytest.mark.respx(base_url="http://paperless.test:8000")
    async def test_query_params_on_first_request(
        self,
        client: PaperlessClient,
        respx_mock: respx.MockRouter,
        make_page: Any,
    ) -> None:
        """Query parameters are sent with the first page request."""
        route = respx_mock.get("/api/correspondents/").mock(
            return_value=httpx.Response(200, json=make_page([]))
        )

        await client.paginate(
            "/api/correspondents/",
            Correspondent,
            params={"name__icontains": "acme"},
        )

        assert route.calls.last.request.url.params["name__icontains"] == "acme"

    @pytest.mark.respx(base_url="https://paperless.test")
    async def test_scheme_policy_rewrites_cursor(
        self,
        respx_mock: respx.MockRouter,
        make_page: Any,
        make_correspondent: Any,
    ) -> None:
        """http:// cursors are fetched over https when the policy says so."""

        def respond(request: httpx.Request) -> httpx.Response:
            if request.url.params.get("page") == "2":
                return httpx.Response(200, json=make_page(
                    [make_correspondent(2, "Beta")], count=2
                ))
            return httpx.Response(200, json=make_page(
                [make_correspondent(1, "Alpha")],
                count=2,
                next_url="http://paperless.test/api/correspondents/?page=2",
            ))

        route = respx_mock.get("/api/correspondents/").mock(side_effect=respond)

        async with PaperlessClient(
            "https://paperless.test",
            "token",
            next_url_policy=force_scheme("https"),
        ) as client:
            result = await client.correspondents()

        assert [c.id for c in result] == [1, 2]
        assert all(call.request.url.scheme == "https" for call in route.calls)

    @pytest.mark.respx(base_url="http://paperless.test:8000")
    async def test_client_page_cap(
        self,
        base_url: str,
        api_token: str,
        respx_mock: respx.MockRouter,
        make_page: Any,
    ) -> None:
        """The client's max_pages reaches the paginator."""
        respx_mock.get("/api/documents/").mock(
            return_value=httpx.Response(
                200,
                json=make_page(
                    [], count=0, next_url=f"{base_url}/api/documents/?page=2"
                ),
            )
        )

        async with PaperlessClient(base_url, api_token, max_pages=5) as client:
            with pytest.raises(PaginationLimitError):
                await client.documents()

        assert respx_mock.calls.call_count == 5

    @pytest.mark.respx(base_url="http://paperless.test:8000")
    async def test_invalid_page_is_decode_error(
        self,
        client: PaperlessClient,
        respx_mock: respx.MockRouter,
    ) -> None:
        """A body that is not a page raises PaperlessDecodeError."""
        respx_mock.get("/api/correspondents/").mock(
            return_value=httpx.Response(200, json={"detail": "nope"})
        )

        with pytest.raises(PaperlessDecodeError):
            await client.correspondents()
