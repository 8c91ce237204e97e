# src/vcs/adapters/github_adapter.py — v1
"""GitHub REST adapter implementing BaseVCSClient.

Uses an httpx.AsyncClient with token auth. Changed files are paginated,
file contents are requested raw at the PR head sha.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from ai_pull_review.core.models import ChangedFile, FileStatus
from ai_pull_review.vcs.base_vcs_client import BaseVCSClient, VCSError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
_PER_PAGE = 100
_TIMEOUT_S = 30.0


class GitHubAdapter(BaseVCSClient):
    """Adapter for the GitHub REST API v3."""

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(
            base_url=api_url,
            timeout=httpx.Timeout(_TIMEOUT_S),
        )
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    async def get_head_sha(self, owner: str, repo: str, pr_number: int) -> str:
        data = await self._get_json(f"/repos/{owner}/{repo}/pulls/{pr_number}")
        return data["head"]["sha"]

    async def list_changed_files(self, owner: str, repo: str, pr_number: int) -> list[ChangedFile]:
        files: list[ChangedFile] = []
        page = 1
        while True:
            batch = await self._get_json(
                f"/repos/{owner}/{repo}/pulls/{pr_number}/files",
                params={"per_page": _PER_PAGE, "page": page},
            )
            files.extend(self._to_changed_file(entry) for entry in batch)
            if len(batch) < _PER_PAGE:
                break
            page += 1

        logger.info("PR #%d in %s/%s has %d changed files", pr_number, owner, repo, len(files))
        return files

    async def get_file_content(self, owner: str, repo: str, path: str, ref: str) -> bytes:
        response = await self._request(
            "GET",
            f"/repos/{owner}/{repo}/contents/{quote(path)}",
            params={"ref": ref},
            accept="application/vnd.github.raw",
        )
        return response.content

    async def create_comment(self, owner: str, repo: str, issue_number: int, body: str) -> None:
        await self._request(
            "POST",
            f"/repos/{owner}/{repo}/issues/{issue_number}/comments",
            json={"body": body},
        )
        logger.debug("Posted comment on %s/%s#%d (%d chars)", owner, repo, issue_number, len(body))

    async def aclose(self) -> None:
        await self._client.aclose()

    # --- Internal helpers ---

    async def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        response = await self._request("GET", url, params=params)
        return response.json()

    async def _request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        accept: str | None = None,
    ) -> httpx.Response:
        headers = dict(self._headers)
        if accept:
            headers["Accept"] = accept
        try:
            response = await self._client.request(
                method, url, params=params, json=json, headers=headers,
            )
        except httpx.HTTPError as e:
            raise VCSError(f"GitHub request {method} {url} failed: {e}") from e

        if response.is_error:
            raise VCSError(
                f"GitHub {method} {url} returned {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _to_changed_file(entry: dict[str, Any]) -> ChangedFile:
        try:
            status = FileStatus(entry.get("status", "modified"))
        except ValueError:
            status = FileStatus.MODIFIED
        return ChangedFile(
            path=entry["filename"],
            changes=int(entry.get("changes", 0)),
            status=status,
            size_bytes=int(entry.get("size", 0) or 0),
        )
