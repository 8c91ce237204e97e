# src/main.py — v3
"""CLI entry point — review one pull request through a provider batch.

Usage:
    ai-pull-review --pr <number> [--repo owner/repo] [options]

Flags override values loaded from the environment / .env.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from ai_pull_review.version import __version__

if TYPE_CHECKING:
    from ai_pull_review.config.settings import Settings
    from ai_pull_review.pipeline.state import ReviewReport

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = Path("results.md")


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    from ai_pull_review.config.settings import ConfigurationError, detect_repository, load_settings
    from ai_pull_review.logging.logger import setup_logging

    parser = _build_parser()
    args = parser.parse_args(argv)

    overrides = _collect_overrides(args)
    try:
        settings = load_settings(**overrides)
        if not settings.repository:
            detected = detect_repository()
            if detected:
                settings = load_settings(**{**overrides, "repository": detected})
        if settings.output_path is None:
            settings = settings.model_copy(update={"output_path": DEFAULT_OUTPUT})
    except (ConfigurationError, ValidationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    setup_logging(
        level="DEBUG" if args.verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )

    try:
        return asyncio.run(run_review(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="ai-pull-review",
        description=f"ai-pull-review v{__version__} — batch AI review of pull requests",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging and tracebacks",
    )
    parser.add_argument(
        "-p", "--pr", dest="pr_number", type=int, required=True,
        help="Pull request number",
    )
    parser.add_argument(
        "-r", "--repo", dest="repository", default=None,
        help="Repository as owner/repo (default: from git remote)",
    )
    parser.add_argument(
        "-t", "--token", dest="github_token", default=None,
        help="GitHub token (default: GITHUB_TOKEN)",
    )
    parser.add_argument(
        "-k", "--key", dest="anthropic_api_key", default=None,
        help="Anthropic API key (default: ANTHROPIC_API_KEY)",
    )
    parser.add_argument(
        "-l", "--level", dest="analysis_level", default=None,
        help="Analysis level: basic, standard, deep (default: standard)",
    )
    parser.add_argument(
        "-m", "--model", dest="review_model", default=None,
        help="Claude model to use (default: claude-3-5-haiku-20241022)",
    )
    parser.add_argument(
        "--language", dest="review_language", default=None,
        help="Language of the review (default: English)",
    )
    parser.add_argument(
        "--file-patterns", dest="file_patterns", default=None,
        help="Glob patterns to include (comma-separated)",
    )
    parser.add_argument(
        "--exclude-patterns", dest="exclude_patterns", default=None,
        help="Glob patterns to exclude (comma-separated)",
    )
    parser.add_argument(
        "--max-files", dest="max_files", type=int, default=None,
        help="Maximum files to analyze (default: 10)",
    )
    parser.add_argument(
        "--max-size", dest="max_size_kb", type=float, default=None,
        help="Maximum file size in KB (default: 100)",
    )
    parser.add_argument(
        "--threshold", dest="comment_threshold", type=float, default=None,
        help="Comment confidence threshold (legacy, unused)",
    )
    parser.add_argument(
        "--write-pr", dest="write_pull_request", action="store_true", default=None,
        help="Post results as pull request comments",
    )
    parser.add_argument(
        "-o", "--output", dest="output_path", type=Path, default=None,
        help=(
            "Markdown file collecting all results, or a directory for one file "
            f"per analyzed file (default: OUTPUT_PATH or {DEFAULT_OUTPUT})"
        ),
    )
    return parser


def _collect_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Keep only the flags given on the command line."""
    fields = (
        "pr_number", "repository", "github_token", "anthropic_api_key",
        "analysis_level", "review_model", "review_language", "file_patterns",
        "exclude_patterns", "max_files", "max_size_kb", "comment_threshold",
        "write_pull_request", "output_path",
    )
    return {f: getattr(args, f) for f in fields if getattr(args, f) is not None}


async def run_review(settings: Settings) -> int:
    """Run the review pipeline for the configured pull request."""
    from ai_pull_review.pipeline.context import build_context
    from ai_pull_review.pipeline.orchestrator import ReviewOrchestrator

    context = build_context(settings)
    try:
        report = await ReviewOrchestrator(context).run()
    finally:
        await context.aclose()

    _print_report_summary(report)
    return 0


def _print_report_summary(report: ReviewReport) -> None:
    """Print a human-readable summary of a ReviewReport."""
    print(f"\nReview complete for {report.repository}#{report.pr_number}:")
    print(f"  Changed files:  {report.changed_file_count}")
    print(f"  Analyzed:       {len(report.results)}")
    print(f"  Skipped:        {len(report.skipped_files)}")
    print(f"  Comments:       {report.comments_posted}")
    print(f"  Files written:  {len(report.written_files)}")
    print(f"  Estimated cost: ${report.total_cost_usd:.4f}")

    costs = report.cost_report
    if costs is None or not costs.items:
        return
    print(f"  Tokens ({costs.model}): {costs.total_input_tokens} in / {costs.total_output_tokens} out")
    for item in costs.items:
        print(
            f"    {item.file_name} ({item.size_label}): "
            f"{item.input_tokens} in / {item.output_tokens} out, ${item.total_cost_usd:.6f}"
        )


if __name__ == "__main__":
    sys.exit(main())
