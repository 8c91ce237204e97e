# src/pipeline/state.py — v3
"""Review run state: pipeline stages and the accumulated run report."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field

from ai_pull_review.core.models import AnalysisResult
from ai_pull_review.tracking.models import CostReport


class PipelineStage(str, Enum):
    """Orchestrator stages. FAILED is reachable from any stage."""

    IDLE = "idle"
    LISTING = "listing"
    SELECTING = "selecting"
    ENQUEUING = "enqueuing"
    SUBMITTED = "submitted"
    POLLING = "polling"
    RECONCILING = "reconciling"
    PUBLISHING = "publishing"
    DONE = "done"
    FAILED = "failed"


class ReviewReport(BaseModel):
    """Outcome of one review run, accumulated as stages complete."""

    # === IDENTITY ===
    run_id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    repository: str = ""
    pr_number: int | None = None
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # === PROGRESS ===
    stage: PipelineStage = PipelineStage.IDLE
    head_sha: str = ""
    job_id: str | None = None
    changed_file_count: int = 0
    selected_files: list[str] = Field(default_factory=list)
    enqueued_files: list[str] = Field(default_factory=list)
    skipped_files: dict[str, str] = Field(default_factory=dict)  # path -> reason
    max_files_reached: bool = False

    # === OUTPUT ===
    results: list[AnalysisResult] = Field(default_factory=list)
    comments_posted: int = 0
    written_files: list[str] = Field(default_factory=list)
    publish_errors: list[str] = Field(default_factory=list)
    total_cost_usd: float = 0.0
    cost_report: CostReport | None = None

    def skip(self, path: str, reason: str) -> None:
        self.skipped_files[path] = reason
