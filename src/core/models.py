# src/core/models.py — v1
"""Shared Pydantic domain models used across modules.

No module redefines these types; all imports come from core.models.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# === ENUMS ===


class FileStatus(str, Enum):
    """Change status of a file within a pull request."""

    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"
    RENAMED = "renamed"
    COPIED = "copied"
    CHANGED = "changed"
    UNCHANGED = "unchanged"


class AnalysisLevel(str, Enum):
    """Depth of the requested review, each level a superset of the previous."""

    BASIC = "basic"
    STANDARD = "standard"
    DEEP = "deep"

    @classmethod
    def parse(cls, value: str | AnalysisLevel | None) -> AnalysisLevel:
        """Resolve a level name, falling back to STANDARD when unrecognized."""
        if isinstance(value, AnalysisLevel):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.STANDARD


class BatchStatus(str, Enum):
    """Lifecycle of a provider batch job: not_submitted → in_progress → ended | errored."""

    NOT_SUBMITTED = "not_submitted"
    IN_PROGRESS = "in_progress"
    ENDED = "ended"
    ERRORED = "errored"

    @property
    def is_terminal(self) -> bool:
        return self in (BatchStatus.ENDED, BatchStatus.ERRORED)


# === PULL REQUEST INPUT ===


class ChangedFile(BaseModel):
    """One changed file of a pull request snapshot (as listed by the VCS)."""

    model_config = ConfigDict(frozen=True)

    path: str
    changes: int = 0
    status: FileStatus = FileStatus.MODIFIED
    size_bytes: int = 0


class FilterConfig(BaseModel):
    """File selection policy supplied once per run."""

    model_config = ConfigDict(frozen=True)

    include_patterns: tuple[str, ...] = ()
    exclude_patterns: tuple[str, ...] = ()
    max_files: int = Field(default=10, ge=1)
    max_size_kb: float = Field(default=100.0, gt=0)


# === BATCH STATE ===


class BatchItem(BaseModel):
    """One prompt enqueued in a batch, matched back to its response by correlation_id."""

    correlation_id: str
    file_name: str
    size_label: str
    prompt_text: str
    response_text: str = ""


class BatchJob(BaseModel):
    """Provider batch job and the items it owns."""

    job_id: str | None = None
    status: BatchStatus = BatchStatus.NOT_SUBMITTED
    items: list[BatchItem] = Field(default_factory=list)

    def find_item(self, correlation_id: str) -> BatchItem | None:
        """Return the item with the given correlation_id, if any."""
        for item in self.items:
            if item.correlation_id == correlation_id:
                return item
        return None


# === OUTPUT ===


class AnalysisResult(BaseModel):
    """Review of a single file, produced once its batch item is reconciled."""

    correlation_id: str
    file_name: str
    size_label: str
    analysis: str
    content: str = ""  # rendered Markdown comment body, filled during reconciliation
