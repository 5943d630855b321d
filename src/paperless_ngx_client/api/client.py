"""Async HTTP client for the Paperless-ngx API."""

from __future__ import annotations

import asyncio
import contextlib
import functools
from pathlib import Path
from typing import TYPE_CHECKING, Any, Self

import httpx
import structlog
from pydantic import BaseModel, TypeAdapter, ValidationError

from paperless_ngx_client.api.exceptions import (
    DocumentFileError,
    IncompleteConfigError,
    PaperlessAuthenticationError,
    PaperlessConnectionError,
    PaperlessDecodeError,
    PaperlessNotFoundError,
    PaperlessServerError,
    PaperlessTransportError,
    PaperlessValidationError,
    UnknownCorrespondentError,
)
from paperless_ngx_client.api.models import (
    BulkEdit,
    BulkEditMethod,
    Correspondent,
    Document,
    Page,
)
from paperless_ngx_client.api.pagination import (
    DEFAULT_MAX_PAGES,
    NextUrlPolicy,
    Paginator,
    force_scheme,
    identity,
)
from paperless_ngx_client.api.tasks import DRY_RUN_TASK_ID, Task


if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from paperless_ngx_client.config import PaperlessConfig


__all__ = ["PaperlessClient", "PaperlessClientBuilder"]


@functools.lru_cache(maxsize=64)
def _type_adapter(type_: Any) -> TypeAdapter[Any]:  # noqa: ANN401
    """Return a cached TypeAdapter for ``type_``."""
    return TypeAdapter(type_)


class PaperlessClient:
    """Async client for the Paperless-ngx REST API.

    Every request carries ``Authorization: Token <token>``. Mutating
    requests (uploads, bulk edits, deletes) honour the dry-run flag: the
    request is fully built, so bad input still fails, but it is never sent.

    Example:
        ```python
        async with PaperlessClient(
            base_url="http://paperless:8000",
            token="your-api-token",
        ) as client:
            task = await client.upload(Path("scan.pdf"))
            status = await task.status()
        ```

    Attributes:
        base_url: The base URL of the Paperless-ngx instance.
        dry_run: Whether mutating requests are suppressed.
        timeout: Default timeout for requests.
        next_url_policy: Rewrite applied to pagination cursors.
        max_pages: Page cap for paginated listings, or None for no cap.
    """

    DEFAULT_TIMEOUT = httpx.Timeout(30.0, connect=10.0)
    UPLOAD_TIMEOUT = httpx.Timeout(300.0, connect=10.0)
    API_VERSION = "9"

    def __init__(  # noqa: PLR0913
        self,
        base_url: str | None,
        token: str | None,
        *,
        dry_run: bool = False,
        timeout: httpx.Timeout | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        next_url_policy: NextUrlPolicy | None = None,
        max_pages: int | None = DEFAULT_MAX_PAGES,
    ) -> None:
        """Initialize the Paperless-ngx client.

        Args:
            base_url: Base URL of the Paperless-ngx instance
                (e.g., "http://localhost:8000").
            token: API authentication token.
            dry_run: If True, mutating requests are built but not sent.
            timeout: Optional custom timeout configuration.
            transport: Optional custom transport for testing or advanced config.
            next_url_policy: Rewrite applied to ``next`` page URLs
                (default: unchanged).
            max_pages: Maximum pages fetched per listing (default: 1000).

        Raises:
            IncompleteConfigError: If ``base_url`` or ``token`` is missing.
        """
        if not base_url or not token:
            missing = [name for name, value in (("url", base_url), ("token", token)) if not value]
            raise IncompleteConfigError(missing)

        self.base_url = base_url.rstrip("/")
        self.dry_run = dry_run
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self.next_url_policy = next_url_policy or identity
        self.max_pages = max_pages
        self._token = token
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._logger = structlog.get_logger(__name__)

    @classmethod
    def from_settings(
        cls,
        config: PaperlessConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> Self:
        """Create a client from the ``paperless`` configuration section.

        Args:
            config: Connection settings.
            transport: Optional custom transport.

        Returns:
            A configured client.

        Raises:
            IncompleteConfigError: If the URL or token is not configured.
        """
        policy = force_scheme(config.next_url_scheme) if config.next_url_scheme else None
        return cls(
            config.url,
            config.token,
            dry_run=config.dry_run,
            timeout=httpx.Timeout(config.timeout, connect=min(config.timeout, 10.0)),
            transport=transport,
            next_url_policy=policy,
            max_pages=config.max_pages,
        )

    @property
    def _headers(self) -> dict[str, str]:
        """Default headers for API requests."""
        return {
            "Authorization": f"Token {self._token}",
            "Accept": f"application/json; version={self.API_VERSION}",
        }

    def __repr__(self) -> str:
        return f"PaperlessClient(base_url={self.base_url!r}, dry_run={self.dry_run})"

    async def __aenter__(self) -> Self:
        """Enter async context and create HTTP client."""
        await self._ensure_client()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Exit async context and close HTTP client."""
        await self.close()

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure the HTTP client is initialized."""
        if self._client is None or self._client.is_closed:
            transport = self._transport or httpx.AsyncHTTPTransport(retries=1)
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._headers,
                timeout=self.timeout,
                transport=transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    # -------------------------------------------------------------------------
    # Request Primitives
    # -------------------------------------------------------------------------

    async def get(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
    ) -> httpx.Response:
        """Send a GET request. Never affected by dry-run.

        Args:
            path: Path relative to the base URL, or an absolute URL.
            params: Query parameters.

        Returns:
            The successful (2xx) response.
        """
        request = await self._build_request(
            "GET",
            path,
            params=dict(params) if params else None,
        )
        return await self._send(request)

    async def delete(self, path: str) -> httpx.Response | None:
        """Send a DELETE request, or return None under dry-run.

        Args:
            path: Path relative to the base URL.

        Returns:
            The successful response, or None if suppressed by dry-run.
        """
        request = await self._build_request("DELETE", path)
        return await self._dispatch(request)

    async def post_json(
        self,
        path: str,
        body: BaseModel | Mapping[str, Any] | list[Any],
    ) -> httpx.Response | None:
        """Send a POST request with a JSON body, or return None under dry-run.

        Args:
            path: Path relative to the base URL.
            body: A pydantic model or JSON-serializable mapping/list.

        Returns:
            The successful response, or None if suppressed by dry-run.
        """
        payload = body.model_dump(mode="json") if isinstance(body, BaseModel) else body
        request = await self._build_request("POST", path, json=payload)
        return await self._dispatch(request)

    async def post_multipart(
        self,
        path: str,
        file_path: Path,
        *,
        field: str = "document",
        data: Mapping[str, Any] | None = None,
    ) -> httpx.Response | None:
        """Upload a file as multipart form data, or return None under dry-run.

        The file is read before the dry-run check, so a missing or
        unreadable file fails in either mode.

        Args:
            path: Path relative to the base URL.
            file_path: Local file to send.
            field: Form field name for the file.
            data: Extra form fields.

        Returns:
            The successful response, or None if suppressed by dry-run.

        Raises:
            DocumentFileError: If the file cannot be read.
        """
        try:
            content = await asyncio.to_thread(file_path.read_bytes)
        except OSError as exc:
            raise DocumentFileError(file_path, cause=exc) from exc

        request = await self._build_request(
            "POST",
            path,
            data=dict(data) if data else None,
            files={field: (file_path.name, content)},
            timeout=self.UPLOAD_TIMEOUT,
        )
        return await self._dispatch(request)

    async def _build_request(self, method: str, path: str, **kwargs: Any) -> httpx.Request:  # noqa: ANN401
        """Build a request against the base URL.

        Raises:
            PaperlessTransportError: If ``path`` does not form a valid URL.
        """
        client = await self._ensure_client()
        try:
            return client.build_request(method, path, **kwargs)
        except httpx.InvalidURL as exc:
            self._logger.warning("invalid_url", method=method, path=path, error=str(exc))
            msg = f"Invalid request URL: {exc}"
            raise PaperlessTransportError(msg, url=path) from exc

    async def _dispatch(self, request: httpx.Request) -> httpx.Response | None:
        """Send a mutating request unless dry-run is enabled."""
        if self.dry_run:
            self._logger.info(
                "dry_run_request_suppressed",
                method=request.method,
                url=str(request.url),
            )
            return None
        return await self._send(request)

    async def _send(self, request: httpx.Request) -> httpx.Response:
        """Send a built request and validate the response status.

        Raises:
            PaperlessConnectionError: For connection failures and timeouts.
            PaperlessTransportError: For other HTTP failures and non-2xx responses.
        """
        client = await self._ensure_client()
        url = str(request.url)
        log = self._logger.bind(method=request.method, url=url)
        log.debug("api_request")

        try:
            response = await client.send(request)
        except httpx.TimeoutException as exc:
            log.warning("timeout_error", error=str(exc))
            raise PaperlessConnectionError(
                message="Request timed out",
                url=url,
                cause=exc,
            ) from exc
        except httpx.ConnectError as exc:
            log.warning("connection_error", error=str(exc))
            raise PaperlessConnectionError(url=url, cause=exc) from exc
        except httpx.HTTPError as exc:
            log.warning("transport_error", error=str(exc))
            msg = f"HTTP transport error: {exc}"
            raise PaperlessTransportError(msg, url=url) from exc

        log.debug(
            "api_response",
            status_code=response.status_code,
            elapsed_ms=response.elapsed.total_seconds() * 1000,
        )
        self._raise_for_status(response)
        return response

    def _raise_for_status(self, response: httpx.Response) -> None:
        """Raise appropriate exception for error status codes."""
        if response.is_success:
            return

        status = response.status_code

        if status in {401, 403}:
            raise PaperlessAuthenticationError(  # noqa: TRY003
                "Authentication failed",  # noqa: EM101
                response=response,
            )

        if status == 404:  # noqa: PLR2004
            raise PaperlessNotFoundError(
                "Resource",  # noqa: EM101
                "unknown",
                response=response,
            )

        if status == 400:  # noqa: PLR2004
            errors = None
            with contextlib.suppress(ValueError):
                errors = response.json()
            raise PaperlessValidationError(  # noqa: TRY003
                "Validation error",  # noqa: EM101
                errors=errors if isinstance(errors, dict) else None,
                response=response,
            )

        if status >= 500:  # noqa: PLR2004
            raise PaperlessServerError(  # noqa: TRY003
                f"Server error: {status}",  # noqa: EM102
                response=response,
            )

        raise PaperlessTransportError(  # noqa: TRY003
            f"Unexpected status: {status}",  # noqa: EM102
            response=response,
        )

    def decode[T](self, response: httpx.Response, type_: type[T]) -> T:
        """Decode a JSON response body into ``type_``.

        Args:
            response: A successful response.
            type_: Any type pydantic can validate (models, ``list[...]``,
                ``Page[...]``).

        Returns:
            The validated value.

        Raises:
            PaperlessDecodeError: If the body does not match ``type_``.
        """
        try:
            value: T = _type_adapter(type_).validate_json(response.content)
        except ValidationError as exc:
            msg = f"Unexpected response body: {exc.error_count()} validation error(s)"
            raise PaperlessDecodeError(msg, response=response) from exc
        return value

    async def paginate[T](
        self,
        path: str,
        item_type: type[T],
        *,
        params: Mapping[str, Any] | None = None,
    ) -> list[T]:
        """Fetch every page of a list endpoint.

        Args:
            path: List endpoint path (e.g. "/api/documents/").
            item_type: Model of the items in ``results``.
            params: Query parameters for the first page. Later pages use the
                server's ``next`` URLs, which carry the query along.

        Returns:
            All items across all pages, in server order.

        Raises:
            PaginationLimitError: If the listing exceeds ``max_pages``.
        """
        page_type = Page[item_type]  # type: ignore[valid-type]

        async def fetch_page(url: str) -> Page[T]:
            response = await self.get(url)
            return self.decode(response, page_type)

        paginator = Paginator(
            fetch_page,
            next_url_policy=self.next_url_policy,
            max_pages=self.max_pages,
        )
        start_url = str(httpx.URL(path, params=dict(params) if params else None))
        return await paginator.collect(start_url)

    # -------------------------------------------------------------------------
    # Upload and Tasks
    # -------------------------------------------------------------------------

    async def upload(self, file_path: Path | str) -> Task:
        """Upload a new document for asynchronous ingestion.

        Args:
            file_path: Path to the document file.

        Returns:
            A Task for polling the ingestion status. Under dry-run, a task
            with the sentinel ID ``DRY_RUN_TASK_ID``.

        Raises:
            DocumentFileError: If the file cannot be read.
        """
        file_path = Path(file_path)
        self._logger.info("uploading_document", path=str(file_path))

        response = await self.post_multipart("/api/documents/post_document/", file_path)
        if response is None:
            return Task(DRY_RUN_TASK_ID, self)

        # The body is a JSON string: the task ID wrapped in quotes
        task_id = response.text.strip().strip('"')
        if not task_id:
            msg = "Upload response did not contain a task ID"
            raise PaperlessDecodeError(msg, response=response)

        self._logger.info("document_uploaded", path=str(file_path), task_id=task_id)
        return Task(task_id, self)

    def task(self, task_id: str) -> Task:
        """Return a Task handle for an existing task ID."""
        return Task.from_id(self, task_id)

    # -------------------------------------------------------------------------
    # Document Operations
    # -------------------------------------------------------------------------

    async def documents(self, *, correspondent: int | None = None) -> list[Document]:
        """List all documents, optionally only those of one correspondent.

        Args:
            correspondent: Filter by correspondent ID.

        Returns:
            Every matching document, across all pages.
        """
        params: dict[str, Any] = {}
        if correspondent is not None:
            params["correspondent__id__in"] = correspondent
        return await self.paginate("/api/documents/", Document, params=params)

    async def document(self, document_id: int) -> Document:
        """Get a single document by ID.

        Raises:
            PaperlessNotFoundError: If document not found.
        """
        try:
            response = await self.get(f"/api/documents/{document_id}/")
        except PaperlessNotFoundError as exc:
            raise PaperlessNotFoundError(
                "Document",  # noqa: EM101
                document_id,
                url=exc.url,
                response=exc.response,
            ) from exc
        return self.decode(response, Document)

    async def bulk_edit(self, edit: BulkEdit) -> None:
        """Apply one operation to many documents at once.

        Suppressed under dry-run. The response body is ignored.

        Args:
            edit: The bulk edit request.
        """
        self._logger.info(
            "bulk_edit",
            method=str(edit.method),
            document_count=len(edit.documents),
        )
        await self.post_json("/api/documents/bulk_edit/", edit)

    async def documents_bulk_set_correspondent(
        self,
        document_ids: Iterable[int],
        correspondent: Correspondent | int,
    ) -> None:
        """Set the correspondent of several documents.

        Args:
            document_ids: IDs of the documents to update.
            correspondent: The correspondent, or its ID.
        """
        correspondent_id = (
            correspondent.id if isinstance(correspondent, Correspondent) else correspondent
        )
        await self.bulk_edit(
            BulkEdit(
                documents=list(document_ids),
                method=BulkEditMethod.SET_CORRESPONDENT,
                parameters={"correspondent": str(correspondent_id)},
            )
        )

    # -------------------------------------------------------------------------
    # Correspondent Operations
    # -------------------------------------------------------------------------

    async def correspondents(
        self,
        *,
        name_contains: str | None = None,
    ) -> list[Correspondent]:
        """List all correspondents.

        Args:
            name_contains: Only correspondents whose name contains this text
                (case-insensitive, server-side).

        Returns:
            Every matching correspondent, across all pages.
        """
        params: dict[str, Any] = {}
        if name_contains:
            params["name__icontains"] = name_contains
        return await self.paginate("/api/correspondents/", Correspondent, params=params)

    async def correspondent(self, correspondent_id: int) -> Correspondent:
        """Get a single correspondent by ID.

        Raises:
            PaperlessNotFoundError: If correspondent not found.
        """
        try:
            response = await self.get(f"/api/correspondents/{correspondent_id}/")
        except PaperlessNotFoundError as exc:
            raise PaperlessNotFoundError(
                "Correspondent",  # noqa: EM101
                correspondent_id,
                url=exc.url,
                response=exc.response,
            ) from exc
        return self.decode(response, Correspondent)

    async def correspondent_for_name(self, name: str) -> Correspondent:
        """Find the correspondent whose name equals ``name``, ignoring case.

        Args:
            name: The exact name to look for.

        Returns:
            The first correspondent with a matching name.

        Raises:
            UnknownCorrespondentError: If no correspondent has that name.
        """
        # Unfiltered: name__icontains does not fold non-ASCII case
        # The server folds case only for ASCII, so list everything and compare here
        candidates = await self.correspondents()
        for candidate in candidates:
            if candidate.matches_name(name):
                return candidate
        raise UnknownCorrespondentError(name)

    async def delete_correspondent(self, correspondent_id: int) -> None:
        """Delete a correspondent. Suppressed under dry-run."""
        self._logger.info("deleting_correspondent", correspondent_id=correspondent_id)
        await self.delete(f"/api/correspondents/{correspondent_id}/")


class PaperlessClientBuilder:
    """Step-by-step construction of a :class:`PaperlessClient`.

    Example:
        ```python
        client = (
            PaperlessClientBuilder()
            .set_url("https://paperless.example.com")
            .set_auth_token(token)
            .set_dry_run(True)
            .build()
        )
        ```
    """

    def __init__(self) -> None:
        self._url: str | None = None
        self._token: str | None = None
        self._dry_run = False
        self._timeout: httpx.Timeout | None = None
        self._transport: httpx.AsyncBaseTransport | None = None
        self._next_url_policy: NextUrlPolicy | None = None
        self._max_pages: int | None = DEFAULT_MAX_PAGES

    def set_url(self, url: str) -> Self:
        self._url = url
        return self

    def set_auth_token(self, token: str) -> Self:
        self._token = token
        return self

    def set_dry_run(self, dry_run: bool) -> Self:  # noqa: FBT001
        self._dry_run = dry_run
        return self

    def set_timeout(self, timeout: httpx.Timeout) -> Self:
        self._timeout = timeout
        return self

    def set_transport(self, transport: httpx.AsyncBaseTransport) -> Self:
        self._transport = transport
        return self

    def set_next_url_policy(self, policy: NextUrlPolicy) -> Self:
        self._next_url_policy = policy
        return self

    def set_max_pages(self, max_pages: int | None) -> Self:
        self._max_pages = max_pages
        return self

    def build(self) -> PaperlessClient:
        """Build the client.

        Raises:
            IncompleteConfigError: If the URL or auth token was not set.
        """
        return PaperlessClient(
            self._url,
            self._token,
            dry_run=self._dry_run,
            timeout=self._timeout,
            transport=self._transport,
            next_url_policy=self._next_url_policy,
            max_pages=self._max_pages,
        )
