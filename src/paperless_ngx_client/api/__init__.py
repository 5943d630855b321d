"""Paperless-ngx API client module.

This module provides an async HTTP client for the Paperless-ngx REST API:
document upload with task tracking, paginated listings of documents and
correspondents, bulk edits, and a dry-run mode that builds mutating
requests without sending them.

Example:
    ```python
    from paperless_ngx_client.api import PaperlessClientBuilder

    client = (
        PaperlessClientBuilder()
        .set_url("http://paperless:8000")
        .set_auth_token("your-api-token")
        .build()
    )
    async with client:
        task = await client.upload(Path("invoice.pdf"))
        status = await task.status()

        acme = await client.correspondent_for_name("Acme")
        docs = await client.documents(correspondent=acme.id)
        await client.documents_bulk_set_correspondent([d.id for d in docs], acme)
    ```
"""

from __future__ import annotations

from paperless_ngx_client.api.client import PaperlessClient, PaperlessClientBuilder
from paperless_ngx_client.api.exceptions import (
    AmbiguousTaskError,
    DocumentFileError,
    IncompleteConfigError,
    NoOpRejectedError,
    PaginationLimitError,
    PaperlessAuthenticationError,
    PaperlessConnectionError,
    PaperlessDecodeError,
    PaperlessError,
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
    TaskState,
    TaskStatus,
)
from paperless_ngx_client.api.pagination import (
    DEFAULT_MAX_PAGES,
    NextUrlPolicy,
    Paginator,
    force_scheme,
    identity,
)
from paperless_ngx_client.api.tasks import DRY_RUN_TASK_ID, Task


__all__ = [
    "DEFAULT_MAX_PAGES",
    "DRY_RUN_TASK_ID",
    "AmbiguousTaskError",
    "BulkEdit",
    "BulkEditMethod",
    "Correspondent",
    "Document",
    "DocumentFileError",
    "IncompleteConfigError",
    "NextUrlPolicy",
    "NoOpRejectedError",
    "Page",
    "PaginationLimitError",
    "Paginator",
    "PaperlessAuthenticationError",
    "PaperlessClient",
    "PaperlessClientBuilder",
    "PaperlessConnectionError",
    "PaperlessDecodeError",
    "PaperlessError",
    "PaperlessNotFoundError",
    "PaperlessServerError",
    "PaperlessTransportError",
    "PaperlessValidationError",
    "Task",
    "TaskState",
    "TaskStatus",
    "UnknownCorrespondentError",
    "force_scheme",
    "identity",
]
