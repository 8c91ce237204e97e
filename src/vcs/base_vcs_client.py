# src/vcs/base_vcs_client.py — v1
"""Abstract source-control platform interface.

File content is always addressed by commit ref, never by branch tip.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ai_pull_review.core.models import ChangedFile


class VCSError(Exception):
    """Raised when the platform API rejects or fails a request."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class BaseVCSClient(ABC):
    """Unified interface for pull-request hosting platforms."""

    @abstractmethod
    async def get_head_sha(self, owner: str, repo: str, pr_number: int) -> str:
        """Return the head commit sha of a pull request."""

    @abstractmethod
    async def list_changed_files(self, owner: str, repo: str, pr_number: int) -> list[ChangedFile]:
        """List every changed file of a pull request."""

    @abstractmethod
    async def get_file_content(self, owner: str, repo: str, path: str, ref: str) -> bytes:
        """Fetch raw file content at a commit ref."""

    @abstractmethod
    async def create_comment(self, owner: str, repo: str, issue_number: int, body: str) -> None:
        """Post a comment on a pull request (issue) thread."""

    async def aclose(self) -> None:
        """Release network resources. No-op by default."""
