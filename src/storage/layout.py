# src/storage/layout.py — v3
"""Output file naming for review artifacts.

One Markdown document per analyzed file, either flat under the output
directory or as a section of one combined file. Directory artifacts are
named after the repository path with separators replaced.
"""

from __future__ import annotations

from datetime import datetime

RESULT_SUFFIX = ".md"


def safe_file_name(path: str) -> str:
    """Turn a repository path into a flat, filesystem-safe file name."""
    return path.replace("\\", "-").replace("/", "-")


def result_file_name(path: str) -> str:
    """Return the artifact file name for a reviewed file."""
    return safe_file_name(path) + RESULT_SUFFIX


def render_result_document(
    file_name: str,
    repository: str,
    pr_number: int,
    body: str,
    timestamp: datetime,
) -> str:
    """Render the persisted artifact for one reviewed file."""
    return (
        f"# {repository}#{pr_number}: {file_name}\n\n"
        f"- Generated: {timestamp.isoformat()}\n"
        f"- Pull request: {repository}#{pr_number}\n"
        f"- File: `{file_name}`\n\n"
        f"{body}\n"
    )
