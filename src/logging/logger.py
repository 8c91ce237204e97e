# src/logging/logger.py — v4
"""Logging setup with JSON, text and GitHub Actions formatters.

Formats:
    text    one line per record with PR number and pipeline stage
    json    one JSON object per line, run context under "context"
    github  text lines, warnings and errors as workflow annotations
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from ai_pull_review.logging.context import get_context

_ROOT = "ai_pull_review"
_NOISY_LOGGERS = ("httpx", "httpcore", "anthropic")

# Attributes callers may pass via `extra=` that end up in structured output.
_EXTRA_FIELDS = ("file_name", "job_id", "correlation_id")

_ANNOTATIONS = {
    logging.DEBUG: "::debug::",
    logging.WARNING: "::warning::",
    logging.ERROR: "::error::",
    logging.CRITICAL: "::error::",
}


def _extras(record: logging.LogRecord) -> dict[str, Any]:
    return {k: getattr(record, k) for k in _EXTRA_FIELDS if getattr(record, k, None) is not None}


class JsonFormatter(logging.Formatter):
    """Structured JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context_dict = get_context().as_dict()
        if context_dict:
            log_entry["context"] = context_dict
        log_entry.update(_extras(record))

        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable text formatter for terminals."""

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_context()
        stamp = datetime.fromtimestamp(record.created, timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        prefix = f"{stamp} [{record.levelname:8s}] {record.name}"
        if ctx.pr_number is not None:
            prefix += f" [#{ctx.pr_number}]"
        if ctx.stage:
            prefix += f" ({ctx.stage})"

        line = f"{prefix} — {record.getMessage()}"
        if record.exc_info and record.exc_info[1] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


class GitHubActionsFormatter(logging.Formatter):
    """Workflow-command formatter for GitHub Actions runners.

    Warnings and errors become annotations on the run summary; the stage,
    when set, is prefixed so annotations stay readable out of context.
    """

    def format(self, record: logging.LogRecord) -> str:
        stage = get_context().stage
        message = record.getMessage()
        if stage:
            message = f"[{stage}] {message}"
        # Annotations are single-line; GitHub decodes %0A back to newlines.
        command = _ANNOTATIONS.get(record.levelno, "")
        if command:
            message = message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
        return command + message


_FORMATTERS: dict[str, type[logging.Formatter]] = {
    "json": JsonFormatter,
    "text": TextFormatter,
    "github": GitHubActionsFormatter,
}


def setup_logging(
    level: str = "INFO",
    log_format: str = "text",
    log_file: str | None = None,
    rotation: str = "10MB",
    retention: int = 5,
) -> None:
    """Configure the package root logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        log_format: "text", "json" or "github". Unknown values fall back to text.
        log_file: Optional log file, always written as JSON lines.
        rotation: Max file size before rotation (e.g. "10MB").
        retention: Number of rotated files to keep.
    """
    root_logger = logging.getLogger(_ROOT)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Re-init replaces handlers
    root_logger.handlers.clear()

    # Workflow commands are only parsed from stdout
    stream = sys.stdout if log_format == "github" else sys.stderr
    console_handler = logging.StreamHandler(stream)
    console_handler.setFormatter(_FORMATTERS.get(log_format, TextFormatter)())
    root_logger.addHandler(console_handler)

    if log_file:
        from ai_pull_review.logging.handlers import create_rotating_handler

        file_handler = create_rotating_handler(log_file, rotation=rotation, retention=retention)
        file_handler.setFormatter(JsonFormatter())
        root_logger.addHandler(file_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
