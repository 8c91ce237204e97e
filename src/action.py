# src/action.py — v2
"""GitHub Actions entry point.

Reads action inputs from INPUT_* environment variables, the repository from
GITHUB_REPOSITORY and the pull request number from the event payload, then
runs the same review pipeline as the CLI with PR comments enabled.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_FILE_PATTERNS = "**/*.{js,jsx,ts,tsx,py,java,rb,go,rs}"
DEFAULT_EXCLUDE_PATTERNS = "**/node_modules/**,**/dist/**,**/build/**"


class ActionError(Exception):
    """Raised when the workflow context cannot be used for a review."""


class ActionInputs(BaseSettings):
    """Raw action inputs. GitHub passes unset inputs as empty strings."""

    model_config = SettingsConfigDict(env_prefix="INPUT_", extra="ignore")

    anthropic_api_key: str = ""
    github_token: str = ""
    analysis_level: str = ""
    model: str = ""
    language: str = ""
    file_patterns: str = ""
    exclude_patterns: str = ""
    max_files: str = ""
    max_size_kb: str = ""
    comment_threshold: str = ""
    output_path: str = ""


def read_pr_number(event_path: str | None) -> int:
    """Extract the pull request number from the workflow event payload.

    Raises:
        ActionError: If there is no payload or it is not a pull request event.
    """
    if not event_path or not Path(event_path).is_file():
        raise ActionError("GITHUB_EVENT_PATH is not set or missing")
    payload = json.loads(Path(event_path).read_text(encoding="utf-8"))
    pull_request = payload.get("pull_request")
    if not pull_request:
        raise ActionError("This action can only be run on pull request events")
    return int(pull_request["number"])


def _number(value: str, cast: type) -> Any:
    """Parse a numeric input, None when empty or invalid."""
    try:
        return cast(value) if value.strip() else None
    except ValueError:
        logger.warning("Ignoring invalid numeric input %r", value)
        return None


def build_overrides(inputs: ActionInputs, environ: dict[str, str]) -> dict[str, Any]:
    """Map action inputs and workflow variables onto Settings fields."""
    overrides: dict[str, Any] = {
        "repository": environ.get("GITHUB_REPOSITORY", ""),
        "pr_number": read_pr_number(environ.get("GITHUB_EVENT_PATH")),
        "write_pull_request": True,
        "log_format": environ.get("LOG_FORMAT") or "github",
        "file_patterns": inputs.file_patterns or DEFAULT_FILE_PATTERNS,
        "exclude_patterns": inputs.exclude_patterns or DEFAULT_EXCLUDE_PATTERNS,
    }
    text_inputs = {
        "anthropic_api_key": inputs.anthropic_api_key,
        "github_token": inputs.github_token,
        "analysis_level": inputs.analysis_level,
        "review_model": inputs.model,
        "review_language": inputs.language,
        "output_path": inputs.output_path,
    }
    overrides.update({k: v for k, v in text_inputs.items() if v})

    numeric_inputs = {
        "max_files": _number(inputs.max_files, int),
        "max_size_kb": _number(inputs.max_size_kb, float),
        "comment_threshold": _number(inputs.comment_threshold, float),
    }
    overrides.update({k: v for k, v in numeric_inputs.items() if v is not None})
    return overrides


def run() -> int:
    """Action entry point. Returns the process exit code."""
    from ai_pull_review.config.settings import load_settings
    from ai_pull_review.logging.logger import setup_logging
    from ai_pull_review.main import run_review

    try:
        overrides = build_overrides(ActionInputs(), dict(os.environ))
        settings = load_settings(**overrides)
    except Exception as exc:
        # Logging is not configured yet: emit the workflow annotation directly
        print(f"::error::{exc}")
        return 1

    setup_logging(level=settings.log_level, log_format=settings.log_format)
    try:
        asyncio.run(run_review(settings))
    except Exception:
        # Already reported by the orchestrator as an error annotation
        logger.debug("Action failed", exc_info=True)
        return 1

    logger.info("Analysis complete")
    return 0


if __name__ == "__main__":
    sys.exit(run())
