# tests/conftest.py — v3
"""Shared test fixtures for unit tests.

Provides in-memory fakes for the VCS and batch provider collaborators,
sample changed files and settings. No network I/O, and no configuration
leaks in from the developer environment or a local .env file.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest

from ai_pull_review.config.settings import Settings
from ai_pull_review.core.models import BatchStatus, ChangedFile, FileStatus
from ai_pull_review.llm.base_batch_provider import BaseBatchProvider, ProviderJobNotFound
from ai_pull_review.llm.models import BatchRequest, BatchResultEntry, Message
from ai_pull_review.pipeline.context import ReviewContext
from ai_pull_review.storage.local_writer import LocalWriter
from ai_pull_review.vcs.base_vcs_client import BaseVCSClient, VCSError


# === FAKES ===


class FakeVCS(BaseVCSClient):
    """In-memory pull request with recorded comments."""

    def __init__(
        self,
        files: list[ChangedFile] | None = None,
        contents: dict[str, bytes] | None = None,
        head_sha: str = "abc123",
    ) -> None:
        self.files = files or []
        self.contents = contents or {}
        self.head_sha = head_sha
        self.comments: list[str] = []
        self.content_requests: list[tuple[str, str]] = []
        self.fail_comments = False
        self.closed = False

    async def get_head_sha(self, owner: str, repo: str, pr_number: int) -> str:
        return self.head_sha

    async def list_changed_files(self, owner: str, repo: str, pr_number: int) -> list[ChangedFile]:
        return list(self.files)

    async def get_file_content(self, owner: str, repo: str, path: str, ref: str) -> bytes:
        self.content_requests.append((path, ref))
        if path not in self.contents:
            raise VCSError(f"{path} not found", status_code=404)
        return self.contents[path]

    async def create_comment(self, owner: str, repo: str, issue_number: int, body: str) -> None:
        if self.fail_comments:
            raise VCSError("comment rejected", status_code=403)
        self.comments.append(body)

    async def aclose(self) -> None:
        self.closed = True


class FakeProvider(BaseBatchProvider):
    """Batch provider that answers every request with a canned review.

    Status sequence is consumed one entry per poll; the last entry repeats.
    """

    def __init__(
        self,
        statuses: list[BatchStatus] | None = None,
        extra_results: list[BatchResultEntry] | None = None,
        tokens_per_char: float = 1.0,
    ) -> None:
        self.statuses = statuses or [BatchStatus.ENDED]
        self.extra_results = extra_results or []
        self.tokens_per_char = tokens_per_char
        self.batches: dict[str, list[BatchRequest]] = {}
        self.status_calls = 0
        self.count_calls: list[list[Message]] = []
        self.fail_create = False
        self.closed = False

    async def create_batch(self, requests: list[BatchRequest]) -> str:
        if self.fail_create:
            raise RuntimeError("invalid request")
        job_id = f"msgbatch_{len(self.batches) + 1:03d}"
        self.batches[job_id] = list(requests)
        return job_id

    async def get_batch_status(self, job_id: str) -> BatchStatus:
        if job_id not in self.batches:
            raise ProviderJobNotFound(job_id)
        index = min(self.status_calls, len(self.statuses) - 1)
        self.status_calls += 1
        return self.statuses[index]

    async def get_batch_results(self, job_id: str) -> AsyncIterator[BatchResultEntry]:
        if job_id not in self.batches:
            raise ProviderJobNotFound(job_id)
        for request in reversed(self.batches[job_id]):
            yield BatchResultEntry(
                correlation_id=request.correlation_id,
                text=f"Review of request {request.correlation_id[:8]}",
            )
        for entry in self.extra_results:
            yield entry

    async def count_tokens(self, messages: list[Message], model: str) -> int:
        self.count_calls.append(messages)
        return int(sum(len(m.content) for m in messages) * self.tokens_per_char)

    async def aclose(self) -> None:
        self.closed = True

    @property
    def provider_name(self) -> str:
        return "fake"


async def no_sleep(seconds: float) -> None:
    return None


# === FIXTURES ===

# Every environment variable Settings reads.
SETTINGS_ENV_VARS = (
    "ANTHROPIC_API_KEY", "GITHUB_TOKEN", "GITHUB_API_URL", "PR_NUMBER", "REPOSITORY",
    "ANALYSIS_LEVEL", "REVIEW_MODEL", "REVIEW_LANGUAGE", "MAX_TOKENS", "COMMENT_THRESHOLD",
    "FILE_PATTERNS", "EXCLUDE_PATTERNS", "MAX_FILES", "MAX_SIZE_KB", "WRITE_PULL_REQUEST",
    "OUTPUT_PATH", "POLL_INITIAL_WAIT_MS", "POLL_MIN_WAIT_MS", "POLL_DECAY", "POLL_MAX_RETRIES",
    "LOG_LEVEL", "LOG_FORMAT", "LOG_FILE", "LOG_ROTATION", "LOG_RETENTION",
)


@pytest.fixture(autouse=True)
def _isolated_settings_env(monkeypatch, tmp_path):
    """Run every test without settings env vars, from a directory with no .env."""
    monkeypatch.chdir(tmp_path)
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def changed_files() -> list[ChangedFile]:
    """Three modified files plus files the selector must drop."""
    return [
        ChangedFile(path="src/app.py", changes=50, status=FileStatus.MODIFIED),
        ChangedFile(path="src/core/engine.py", changes=900, status=FileStatus.MODIFIED),
        ChangedFile(path="src/huge.py", changes=1100, status=FileStatus.MODIFIED),
        ChangedFile(path="src/old.py", changes=30, status=FileStatus.REMOVED),
        ChangedFile(path="src/moved.py", changes=0, status=FileStatus.RENAMED),
        ChangedFile(path="README.md", changes=5, status=FileStatus.ADDED),
    ]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        anthropic_api_key="sk-test",
        github_token="ghp-test",
        pr_number=42,
        repository="octo/widgets",
        review_model="claude-3-5-haiku-20241022",
        max_files=10,
        max_size_kb=100,
    )


@pytest.fixture
def fake_vcs(changed_files: list[ChangedFile]) -> FakeVCS:
    contents = {f.path: f"print('{f.path}')\n".encode() for f in changed_files}
    return FakeVCS(files=changed_files, contents=contents)


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def review_context(settings: Settings, fake_vcs: FakeVCS, fake_provider: FakeProvider) -> ReviewContext:
    return ReviewContext(
        settings=settings,
        vcs=fake_vcs,
        provider=fake_provider,
        writer=None,
        sleep=no_sleep,
    )


@pytest.fixture
def local_writer(tmp_path: Path) -> LocalWriter:
    return LocalWriter(tmp_path / "out")
