# tests/unit/vcs/test_unit_github_adapter.py — v1
"""Tests for vcs/adapters/github_adapter.py using httpx.MockTransport."""

from __future__ import annotations

import json

import httpx
import pytest

from ai_pull_review.core.models import FileStatus
from ai_pull_review.vcs.adapters.github_adapter import GitHubAdapter
from ai_pull_review.vcs.base_vcs_client import VCSError

API = "https://api.github.test"


def _adapter(handler) -> GitHubAdapter:
    client = httpx.AsyncClient(base_url=API, transport=httpx.MockTransport(handler))
    return GitHubAdapter(token="ghp-test", api_url=API, client=client)


def _file_entry(i: int, status: str = "modified") -> dict:
    return {"filename": f"src/f{i}.py", "changes": i, "status": status, "size": 10}


class TestGitHubAdapter:
    @pytest.mark.asyncio
    async def test_head_sha(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/repos/octo/widgets/pulls/7"
            assert request.headers["Authorization"] == "Bearer ghp-test"
            return httpx.Response(200, json={"head": {"sha": "deadbeef"}})

        adapter = _adapter(handler)
        assert await adapter.get_head_sha("octo", "widgets", 7) == "deadbeef"
        await adapter.aclose()

    @pytest.mark.asyncio
    async def test_list_changed_files_paginates(self):
        pages = {
            "1": [_file_entry(i) for i in range(100)],
            "2": [_file_entry(100, "removed"), _file_entry(101, "renamed")],
        }
        seen_pages: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            page = request.url.params["page"]
            seen_pages.append(page)
            assert request.url.params["per_page"] == "100"
            return httpx.Response(200, json=pages[page])

        adapter = _adapter(handler)
        files = await adapter.list_changed_files("octo", "widgets", 7)
        assert seen_pages == ["1", "2"]
        assert len(files) == 102
        assert files[100].status == FileStatus.REMOVED
        assert files[101].status == FileStatus.RENAMED
        assert files[5].changes == 5

    @pytest.mark.asyncio
    async def test_unknown_status_maps_to_modified(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[_file_entry(1, "mystery")])

        files = await _adapter(handler).list_changed_files("o", "r", 1)
        assert files[0].status == FileStatus.MODIFIED

    @pytest.mark.asyncio
    async def test_file_content_at_ref(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/repos/octo/widgets/contents/src/app.py"
            assert request.url.params["ref"] == "abc123"
            assert request.headers["Accept"] == "application/vnd.github.raw"
            return httpx.Response(200, content=b"print('hi')\n")

        content = await _adapter(handler).get_file_content("octo", "widgets", "src/app.py", "abc123")
        assert content == b"print('hi')\n"

    @pytest.mark.asyncio
    async def test_missing_file_raises_with_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"message": "Not Found"})

        with pytest.raises(VCSError) as exc_info:
            await _adapter(handler).get_file_content("o", "r", "gone.py", "sha")
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_create_comment(self):
        posted: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "POST"
            assert request.url.path == "/repos/octo/widgets/issues/7/comments"
            posted.append(json.loads(request.content))
            return httpx.Response(201, json={"id": 1})

        await _adapter(handler).create_comment("octo", "widgets", 7, "## Review")
        assert posted == [{"body": "## Review"}]

    @pytest.mark.asyncio
    async def test_transport_error_wrapped(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(VCSError, match="failed"):
            await _adapter(handler).get_head_sha("o", "r", 1)
