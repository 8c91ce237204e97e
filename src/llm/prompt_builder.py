# src/llm/prompt_builder.py — v1
"""Review prompt templates and comment rendering.

One fixed checklist per analysis level. Each level's checklist extends the
previous one, so deep ⊇ standard ⊇ basic. File content is embedded verbatim.
"""

from __future__ import annotations

import logging

from ai_pull_review.core.models import AnalysisLevel

logger = logging.getLogger(__name__)

ATTRIBUTION_FOOTER = "*Generated using Claude AI - Review and validate all suggestions*"

_BASIC_CHECKLIST: tuple[str, ...] = (
    "Potential issues or bugs",
    "Style improvements",
)

_STANDARD_CHECKLIST: tuple[str, ...] = _BASIC_CHECKLIST + (
    "Performance considerations",
    "Security concerns",
    "Documentation needs",
)

_DEEP_CHECKLIST: tuple[str, ...] = _STANDARD_CHECKLIST + (
    "Testing coverage and suggestions",
    "Error handling and edge cases",
    "Dependencies and potential issues",
    "Architecture and design patterns",
    "Integration points and API considerations",
)

CHECKLISTS: dict[AnalysisLevel, tuple[str, ...]] = {
    AnalysisLevel.BASIC: _BASIC_CHECKLIST,
    AnalysisLevel.STANDARD: _STANDARD_CHECKLIST,
    AnalysisLevel.DEEP: _DEEP_CHECKLIST,
}

_INTRO: dict[AnalysisLevel, str] = {
    AnalysisLevel.BASIC: "Please analyze this code change and provide basic feedback in {language}:",
    AnalysisLevel.STANDARD: "Please analyze this code change and provide feedback in {language}:",
    AnalysisLevel.DEEP: "Please perform a comprehensive analysis of this code change in {language}:",
}

_REQUEST: dict[AnalysisLevel, str] = {
    AnalysisLevel.BASIC: "Please provide:",
    AnalysisLevel.STANDARD: "Please provide:",
    AnalysisLevel.DEEP: "Please provide detailed feedback on:",
}


def build_prompt(
    file_name: str,
    file_content: str,
    level: AnalysisLevel | str = AnalysisLevel.STANDARD,
    language: str = "English",
) -> str:
    """Render the review request for one file.

    Args:
        file_name: Path of the file in the repository.
        file_content: Full file content, embedded unmodified.
        level: basic, standard or deep. Unknown values fall back to standard.
        language: Natural language the review should be written in.

    Returns:
        Prompt text for a single batch item.
    """
    resolved = AnalysisLevel.parse(level)
    if not isinstance(level, AnalysisLevel) and resolved.value != str(level).strip().lower():
        logger.warning("Unknown analysis level %r, using %s", level, resolved.value)

    checklist = "\n".join(
        f"{i}. {entry}" for i, entry in enumerate(CHECKLISTS[resolved], start=1)
    )
    return (
        f"{_INTRO[resolved].format(language=language)}\n\n"
        f"File: {file_name}\n"
        f"Changes:\n"
        f"{file_content}\n\n"
        f"{_REQUEST[resolved]}\n"
        f"{checklist}"
    )


def format_analysis_comment(file_name: str, analysis: str) -> str:
    """Render the PR comment body for one reviewed file."""
    return f"## AI Analysis for {file_name}\n\n{analysis}\n\n---\n{ATTRIBUTION_FOOTER}"


def format_size_warning(file_name: str, size_kb: float, max_size_kb: float) -> str:
    return (
        f"## AI Analysis skipped for {file_name}\n\n"
        f"File size ({size_kb:.1f} KB) exceeds the configured limit of "
        f"{max_size_kb:.1f} KB.\n\n---\n{ATTRIBUTION_FOOTER}"
    )


def format_max_files_notice(max_files: int) -> str:
    return (
        f"## AI Analysis limit reached\n\n"
        f"Only the first {max_files} files were analyzed. "
        f"Remaining files were skipped.\n\n---\n{ATTRIBUTION_FOOTER}"
    )


def format_cost_summary(file_count: int, total_cost: float, model: str) -> str:
    """Render the final summary comment with the estimated batch cost."""
    return (
        f"## AI Analysis summary\n\n"
        f"- Files analyzed: {file_count}\n"
        f"- Model: `{model}`\n"
        f"- Estimated cost: ${total_cost:.4f}\n\n---\n{ATTRIBUTION_FOOTER}"
    )
