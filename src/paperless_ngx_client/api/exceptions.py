"""Custom exceptions for the Paperless-ngx API client."""

from __future__ import annotations

import contextlib
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    import httpx


__all__ = [
    "AmbiguousTaskError",
    "DocumentFileError",
    "IncompleteConfigError",
    "NoOpRejectedError",
    "PaginationLimitError",
    "PaperlessAuthenticationError",
    "PaperlessConnectionError",
    "PaperlessDecodeError",
    "PaperlessError",
    "PaperlessNotFoundError",
    "PaperlessServerError",
    "PaperlessTransportError",
    "PaperlessValidationError",
    "UnknownCorrespondentError",
]


class PaperlessError(Exception):
    """Base exception for all Paperless-ngx client errors.

    Attributes:
        message: Human-readable error description.
        response: The HTTP response that caused this error, if available.
    """

    def __init__(
        self,
        message: str,
        *,
        response: httpx.Response | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            response: The HTTP response that caused this error.
        """
        super().__init__(message)
        self.message = message
        self.response = response

    def __str__(self) -> str:
        """Return string representation with status code if available."""
        if self.response is not None:
            return f"{self.message} (status={self.response.status_code})"
        return self.message


class IncompleteConfigError(PaperlessError):
    """Raised when a client is built without a base URL or API token.

    Raised before any network activity; no client is constructed.

    Attributes:
        missing: Names of the missing settings.
    """

    def __init__(self, missing: Sequence[str]) -> None:
        """Initialize the error.

        Args:
            missing: Names of the missing settings (e.g. ``"url"``).
        """
        self.missing = tuple(missing)
        super().__init__(
            f"The configuration was incomplete: missing {', '.join(self.missing)}"
        )


class NoOpRejectedError(PaperlessError):
    """Raised when an operation depends on a request suppressed by dry-run.

    Polling the status of a task created by a dry-run upload is the typical
    case: the server never saw the upload, so there is nothing to ask about.
    """


class AmbiguousTaskError(PaperlessError):
    """Raised when a task status lookup does not yield exactly one record.

    Attributes:
        task_id: The task that was looked up.
        match_count: How many status records the server returned.
    """

    def __init__(self, task_id: str, match_count: int) -> None:
        """Initialize the error.

        Args:
            task_id: The task ID that was queried.
            match_count: Number of status records returned.
        """
        self.task_id = task_id
        self.match_count = match_count
        super().__init__(
            f"Expected one status record for task {task_id}, got {match_count}"
        )


class UnknownCorrespondentError(PaperlessError):
    """Raised when a name lookup matches no existing correspondent.

    Attributes:
        name: The name that was searched for.
    """

    def __init__(self, name: str) -> None:
        """Initialize the error.

        Args:
            name: The correspondent name that was not found.
        """
        self.name = name
        super().__init__(f"The correspondent is unknown: {name!r}")


class PaginationLimitError(PaperlessError):
    """Raised when a paginated listing needs more pages than allowed.

    Attributes:
        max_pages: The configured page cap.
        url: The next page URL that would have exceeded the cap.
    """

    def __init__(self, max_pages: int, url: str) -> None:
        """Initialize the error.

        Args:
            max_pages: The page cap that was hit.
            url: The URL of the page that was not fetched.
        """
        self.max_pages = max_pages
        self.url = url
        super().__init__(f"Pagination exceeded {max_pages} pages (next: {url})")


class DocumentFileError(PaperlessError):
    """Raised when a local file cannot be read for upload.

    The underlying ``OSError`` is chained as ``__cause__``.

    Attributes:
        path: The file that could not be read.
    """

    def __init__(self, path: Path, *, cause: OSError | None = None) -> None:
        """Initialize the error.

        Args:
            path: The file path that failed.
            cause: The underlying OS error.
        """
        self.path = path
        reason = cause.strerror if cause is not None and cause.strerror else "I/O error"
        super().__init__(f"Cannot read {path}: {reason}")
        self.__cause__ = cause


# ---------------------------------------------------------------------------
# Transport errors
# ---------------------------------------------------------------------------


class PaperlessTransportError(PaperlessError):
    """Raised for any failure of the HTTP exchange itself.

    Covers connection failures, non-2xx responses, and bodies that cannot
    be decoded into the expected type.

    Attributes:
        url: The request URL, if known.
        status_code: The response status code, or None if no response.
    """

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        response: httpx.Response | None = None,
    ) -> None:
        """Initialize the transport error.

        Args:
            message: Human-readable error description.
            url: The request URL. Taken from the response when omitted.
            response: The HTTP response that caused this error.
        """
        super().__init__(message, response=response)
        if url is None and response is not None:
            # Responses built outside a client have no request attached
            with contextlib.suppress(RuntimeError):
                url = str(response.request.url)
        self.url = url
        self.status_code = response.status_code if response is not None else None

    def __str__(self) -> str:
        """Return string representation with URL and status if available."""
        text = super().__str__()
        if self.url is not None:
            return f"{text} [{self.url}]"
        return text


class PaperlessConnectionError(PaperlessTransportError):
    """Raised when connection to Paperless-ngx fails.

    This includes network errors, DNS failures, and timeouts.
    """

    def __init__(
        self,
        message: str = "Failed to connect to Paperless-ngx",
        *,
        url: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize the connection error.

        Args:
            message: Human-readable error description.
            url: The request URL.
            cause: The underlying exception that caused this error.
        """
        super().__init__(message, url=url)
        self.__cause__ = cause


class PaperlessAuthenticationError(PaperlessTransportError):
    """Raised for authentication failures (401/403).

    This indicates an invalid or expired API token, or insufficient permissions.
    """


class PaperlessNotFoundError(PaperlessTransportError):
    """Raised when a resource is not found (404).

    Attributes:
        resource_type: The type of resource that was not found (e.g., "Document").
        resource_id: The ID of the resource that was not found.
    """

    def __init__(
        self,
        resource_type: str,
        resource_id: int | str,
        *,
        url: str | None = None,
        response: httpx.Response | None = None,
    ) -> None:
        """Initialize the not found error.

        Args:
            resource_type: The type of resource (e.g., "Document", "Correspondent").
            resource_id: The ID that was not found.
            url: The request URL.
            response: The HTTP response that caused this error.
        """
        message = f"{resource_type} with id={resource_id} not found"
        super().__init__(message, url=url, response=response)
        self.resource_type = resource_type
        self.resource_id = resource_id


class PaperlessServerError(PaperlessTransportError):
    """Raised for server errors (5xx)."""


class PaperlessValidationError(PaperlessTransportError):
    """Raised for validation errors (400).

    Attributes:
        errors: Dictionary mapping field names to lists of error messages.
    """

    def __init__(
        self,
        message: str,
        *,
        errors: dict[str, list[str]] | None = None,
        response: httpx.Response | None = None,
    ) -> None:
        """Initialize the validation error.

        Args:
            message: Human-readable error description.
            errors: Field-level validation errors.
            response: The HTTP response that caused this error.
        """
        super().__init__(message, response=response)
        self.errors = errors or {}


class PaperlessDecodeError(PaperlessTransportError):
    """Raised when a response body does not match the expected shape."""
