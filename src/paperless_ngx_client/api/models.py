"""Pydantic models for Paperless-ngx API requests and responses."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from enum import StrEnum
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator


__all__ = [
    "BulkEdit",
    "BulkEditMethod",
    "Correspondent",
    "Document",
    "Page",
    "TaskState",
    "TaskStatus",
]


class TaskState(StrEnum):
    """Celery task states used by Paperless-ngx."""

    PENDING = "PENDING"
    STARTED = "STARTED"
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    RETRY = "RETRY"
    REVOKED = "REVOKED"


class BulkEditMethod(StrEnum):
    """Operations accepted by the bulk edit endpoint."""

    SET_CORRESPONDENT = "set_correspondent"
    SET_DOCUMENT_TYPE = "set_document_type"
    SET_STORAGE_PATH = "set_storage_path"
    ADD_TAG = "add_tag"
    REMOVE_TAG = "remove_tag"
    DELETE = "delete"


class PaperlessBaseModel(BaseModel):
    """Base model with common configuration for all Paperless-ngx models."""

    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
        extra="ignore",  # Ignore unknown fields from API
    )


class Page[T](PaperlessBaseModel):
    """One page of a paginated list endpoint.

    Follow ``next`` to reach the following page; the client's paginator
    does this until ``next`` is None.

    Attributes:
        count: Total number of items matching the query.
        next: URL for the next page, or None if this is the last page.
        previous: URL for the previous page, or None if this is the first page.
        results: Items on this page, in server order.
        all: All matching IDs, when the server includes them.
    """

    count: int
    next: str | None = None
    previous: str | None = None
    results: list[T]
    all: list[int] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_results_within_count(self) -> Self:
        """Reject pages that carry more results than the reported total."""
        if len(self.results) > self.count:
            msg = f"page has {len(self.results)} results but count is {self.count}"
            raise ValueError(msg)
        return self


class Document(PaperlessBaseModel):
    """A document stored in Paperless-ngx.

    Only ``id``, ``title`` and ``tags`` are required; the remaining fields
    are read when the server sends them.
    """

    id: int
    title: str
    tags: set[int] = Field(default_factory=set)
    correspondent: int | None = None
    document_type: int | None = None
    content: str = ""
    created: datetime | None = None
    added: datetime | None = None
    original_file_name: str | None = None


class Correspondent(PaperlessBaseModel):
    """A correspondent (sender/recipient) snapshot from Paperless-ngx."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    slug: str
    document_count: int = 0
    owner: int | None = None

    def matches_name(self, name: str) -> bool:
        """Return True if ``name`` equals this correspondent's name, ignoring case."""
        return self.name.casefold() == name.strip().casefold()


class TaskStatus(PaperlessBaseModel):
    """Status of an asynchronous task in Paperless-ngx.

    Uploading a document returns a task ID; the tasks endpoint reports
    one of these records per matching task.
    """

    # Task fields are reported back exactly as the server sent them
    model_config = ConfigDict(str_strip_whitespace=False)

    task_id: str | None = None
    file_name: str | None = Field(default=None, alias="task_file_name")
    status: TaskState = TaskState.PENDING
    related_document: str | None = None
    result: str | None = None
    type: str | None = None
    date_created: datetime | None = None
    date_done: datetime | None = None
    acknowledged: bool = False

    @property
    def is_finished(self) -> bool:
        """Whether the task has reached a terminal state."""
        return self.status in {TaskState.SUCCESS, TaskState.FAILURE, TaskState.REVOKED}


class BulkEdit(PaperlessBaseModel):
    """Request body for the bulk edit endpoint.

    Attributes:
        documents: IDs of the documents to edit.
        method: The operation to apply.
        parameters: Operation arguments, all as strings.
    """

    documents: list[int]
    method: BulkEditMethod
    parameters: dict[str, str] = Field(default_factory=dict)
