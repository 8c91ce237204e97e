# src/selection/file_selector.py — v1
"""File selection policy for pull-request review.

Pure functions: pattern filtering (include/exclude globs), change-significance
heuristics, priority ordering by churn and truncation to the file budget.
No I/O besides diagnostic logging.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from wcmatch import glob as wcglob

from ai_pull_review.core.models import ChangedFile, FileStatus, FilterConfig

logger = logging.getLogger(__name__)

# Hard safety ceiling on changed lines per file; not configurable.
MAX_CHANGES = 1000

# `*` within a segment, `**` across segments, `{a,b}` alternation.
_GLOB_FLAGS = wcglob.GLOBSTAR | wcglob.BRACE


def _glob_match(path: str, pattern: str) -> bool:
    return wcglob.globmatch(path, pattern, flags=_GLOB_FLAGS)


def matches_patterns(
    path: str,
    include_patterns: Sequence[str],
    exclude_patterns: Sequence[str],
) -> bool:
    """Check a path against include/exclude globs.

    An empty include list includes everything. Any exclude match rejects the
    path regardless of inclusion.
    """
    included = not include_patterns or any(_glob_match(path, p) for p in include_patterns)
    excluded = any(_glob_match(path, p) for p in exclude_patterns)
    logger.debug("File %s: included=%s, excluded=%s", path, included, excluded)
    return included and not excluded


def has_significant_changes(file: ChangedFile) -> bool:
    """Reject deletions, pure renames and oversized diffs."""
    if file.status == FileStatus.REMOVED:
        return False
    if file.changes > MAX_CHANGES:
        logger.warning(
            "File %s has too many changes (%d > %d), skipping",
            file.path, file.changes, MAX_CHANGES,
        )
        return False
    if file.status == FileStatus.RENAMED and file.changes == 0:
        return False
    return True


def select_files(files: Sequence[ChangedFile], config: FilterConfig) -> list[ChangedFile]:
    """Select the files worth reviewing, highest churn first.

    Args:
        files: Changed files of the pull request, in listing order.
        config: Include/exclude patterns and file budget.

    Returns:
        At most ``config.max_files`` files sorted by descending change count.
        Ties keep their input order.
    """
    logger.debug(
        "Filtering %d files (include=%s, exclude=%s)",
        len(files), list(config.include_patterns), list(config.exclude_patterns),
    )

    eligible: list[ChangedFile] = []
    for file in files:
        if matches_patterns(file.path, config.include_patterns, config.exclude_patterns) \
                and has_significant_changes(file):
            eligible.append(file)
        else:
            logger.debug("Skipping %s", file.path)

    # sorted() is stable, reverse=True included
    selected = sorted(eligible, key=lambda f: f.changes, reverse=True)[: config.max_files]

    logger.info("Selected %d of %d files for analysis", len(selected), len(files))
    for file in selected:
        logger.debug("Will analyze: %s (%d changes)", file.path, file.changes)
    return selected
