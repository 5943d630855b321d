"""Unit tests for dry-run behavior."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
import pytest
import respx  # noqa: TC002
from structlog.testing import capture_logs

from paperless_ngx_client.api import (
    DRY_RUN_TASK_ID,
    BulkEdit,
    BulkEditMethod,
    DocumentFileError,
    NoOpRejectedError,
    PaperlessClient,
)


if TYPE_CHECKING:
    from pathlib import Path


class TestDryRunSuppression:
    """Mutating requests are built but never sent."""

    @pytest.mark.respx(base_url="http://paperless.test:8000", assert_all_called=False)
    async def test_post_json_not_sent(
        self,
        dry_run_client: PaperlessClient,
        respx_mock: respx.MockRouter,
    ) -> None:
        """Test that post_json returns None and sends nothing."""
        route = respx_mock.post("/api/documents/bulk_edit/")

        result = await dry_run_client.post_json("/api/documents/bulk_edit/", {"a": 1})

        assert result is None
        assert not route.called

    @pytest.mark.respx(base_url="http://paperless.test:8000", assert_all_called=False)
    async def test_delete_not_sent(
        self,
        dry_run_client: PaperlessClient,
        respx_mock: respx.MockRouter,
    ) -> None:
        """Test that delete returns None and sends nothing."""
        route = respx_mock.delete("/api/correspondents/4/")

        assert await dry_run_client.delete("/api/correspondents/4/") is None
        assert not route.called

    @pytest.mark.respx(base_url="http://paperless.test:8000", assert_all_called=False)
    async def test_resource_mutations_not_sent(
        self,
        dry_run_client: PaperlessClient,
        respx_mock: respx.MockRouter,
    ) -> None:
        """Test that bulk edits and deletes through resource operations are suppressed."""
        bulk = respx_mock.post("/api/documents/bulk_edit/")
        delete = respx_mock.delete("/api/correspondents/4/")

        await dry_run_client.documents_bulk_set_correspondent([1, 2], 4)
        await dry_run_client.bulk_edit(
            BulkEdit(documents=[3], method=BulkEditMethod.ADD_TAG, parameters={"tag": "1"})
        )
        await dry_run_client.delete_correspondent(4)

        assert not bulk.called
        assert not delete.called

    @pytest.mark.respx(base_url="http://paperless.test:8000")
    async def test_get_still_sent(
        self,
        dry_run_client: PaperlessClient,
        respx_mock: respx.MockRouter,
        make_page: Any,
    ) -> None:
        """Test that reads are unaffected by dry-run."""
        route = respx_mock.get("/api/correspondents/").mock(
            return_value=httpx.Response(200, json=make_page([]))
        )

        assert await dry_run_client.correspondents() == []
        assert route.called

    async def test_suppression_is_logged(self, dry_run_client: PaperlessClient) -> None:
        """Test that each suppressed request is logged with method and URL."""
        with capture_logs() as logs:
            await dry_run_client.delete("/api/correspondents/9/")

        suppressed = [e for e in logs if e["event"] == "dry_run_request_suppressed"]
        assert len(suppressed) == 1
        assert suppressed[0]["method"] == "DELETE"
        assert suppressed[0]["url"].endswith("/api/correspondents/9/")


class TestDryRunUpload:
    """Uploads under dry-run."""

    @pytest.mark.respx(base_url="http://paperless.test:8000", assert_all_called=False)
    async def test_upload_returns_sentinel_task(
        self,
        dry_run_client: PaperlessClient,
        respx_mock: respx.MockRouter,
        tmp_path: Path,
    ) -> None:
        """Test that upload yields a sentinel task without sending."""
        file_path = tmp_path / "scan.pdf"
        file_path.write_bytes(b"0123456789")
        route = respx_mock.post("/api/documents/post_document/")

        task = await dry_run_client.upload(file_path)

        assert task.id == DRY_RUN_TASK_ID
        assert task.is_dry_run
        assert not route.called

    async def test_sentinel_status_rejected(
        self,
        dry_run_client: PaperlessClient,
        tmp_path: Path,
    ) -> None:
        """Test that polling a dry-run task raises NoOpRejectedError."""
        file_path = tmp_path / "scan.pdf"
        file_path.write_bytes(b"0123456789")
        task = await dry_run_client.upload(file_path)

        with pytest.raises(NoOpRejectedError):
            await task.status()

    @pytest.mark.parametrize("dry_run", [True, False])
    async def test_missing_file_fails_in_both_modes(
        self,
        base_url: str,
        api_token: str,
        tmp_path: Path,
        dry_run: bool,  # noqa: FBT001
    ) -> None:
        """Test that an unreadable file raises before the dry-run check."""
        missing = tmp_path / "missing.pdf"

        async with PaperlessClient(base_url, api_token, dry_run=dry_run) as client:
            with pytest.raises(DocumentFileError) as exc_info:
                await client.upload(missing)

        assert exc_info.value.path == missing
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)
