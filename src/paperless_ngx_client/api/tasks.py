"""Handles for asynchronous Paperless-ngx tasks."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from paperless_ngx_client.api.exceptions import AmbiguousTaskError, NoOpRejectedError
from paperless_ngx_client.api.models import TaskStatus


if TYPE_CHECKING:
    from paperless_ngx_client.api.client import PaperlessClient


__all__ = ["DRY_RUN_TASK_ID", "Task"]


DRY_RUN_TASK_ID = "dry-run"

logger = structlog.get_logger(__name__)


class Task:
    """A server-side ingestion job, identified by its task ID.

    A Task is only a capability to ask the server about the job. It shares
    the client that created it and performs one status request per call to
    :meth:`status`; polling loops belong to the caller.

    Example:
        ```python
        task = await client.upload(Path("scan.pdf"))
        while not (status := await task.status()).is_finished:
            await asyncio.sleep(2)
        ```
    """

    __slots__ = ("_client", "_id")

    def __init__(self, task_id: str, client: PaperlessClient) -> None:
        """Initialize the task handle.

        Args:
            task_id: The server-assigned task ID.
            client: The client used to query status.
        """
        self._id = task_id
        self._client = client

    @classmethod
    def from_id(cls, client: PaperlessClient, task_id: str) -> Task:
        """Wrap a task ID obtained elsewhere (e.g. from a previous run)."""
        return cls(task_id, client)

    @property
    def id(self) -> str:
        """The server-assigned task ID."""
        return self._id

    @property
    def client(self) -> PaperlessClient:
        """The client this task queries through."""
        return self._client

    @property
    def is_dry_run(self) -> bool:
        """Whether this task came from an upload suppressed by dry-run."""
        return self._id == DRY_RUN_TASK_ID

    def __repr__(self) -> str:
        return f"Task(id={self._id!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Task):
            return NotImplemented
        return self._id == other._id and self._client is other._client

    def __hash__(self) -> int:
        return hash(self._id)

    async def status(self) -> TaskStatus:
        """Fetch the current status of this task.

        If the server reports more than one record for the ID, a warning is
        logged and the first record is returned.

        Returns:
            A freshly decoded task status.

        Raises:
            NoOpRejectedError: If this is a dry-run task that was never sent.
            AmbiguousTaskError: If the server has no record for the task.
            PaperlessTransportError: If the request or decoding fails.
        """
        if self.is_dry_run:
            msg = "Task was created in dry-run mode and never submitted"
            raise NoOpRejectedError(msg)

        response = await self._client.get("/api/tasks/", params={"task_id": self._id})
        statuses = self._client.decode(response, list[TaskStatus])

        if not statuses:
            raise AmbiguousTaskError(self._id, 0)
        if len(statuses) > 1:
            logger.warning(
                "ambiguous_task_status",
                task_id=self._id,
                match_count=len(statuses),
            )
        return statuses[0]
