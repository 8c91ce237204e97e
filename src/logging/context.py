# src/logging/context.py — v2
"""Contextual logging support — attach repository, PR, run_id, stage to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per review run.
_repository: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "repository", default=None
)
_pr_number: contextvars.ContextVar[int | None] = contextvars.ContextVar(
    "pr_number", default=None
)
_run_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "run_id", default=None
)
_stage: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "stage", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    repository: str | None = None
    pr_number: int | None = None
    run_id: str | None = None
    stage: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        repository=_repository.get(),
        pr_number=_pr_number.get(),
        run_id=_run_id.get(),
        stage=_stage.get(),
    )


def set_run_context(repository: str, pr_number: int, run_id: str) -> None:
    """Set run-level context (called once per review run)."""
    _repository.set(repository)
    _pr_number.set(pr_number)
    _run_id.set(run_id)


def set_stage_context(stage: str | None) -> None:
    """Set the current pipeline stage."""
    _stage.set(stage)


def clear_context() -> None:
    """Reset all context variables."""
    _repository.set(None)
    _pr_number.set(None)
    _run_id.set(None)
    _stage.set(None)
