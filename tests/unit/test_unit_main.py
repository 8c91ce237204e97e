# tests/unit/test_unit_main.py — v3
"""Tests for main.py — CLI parsing, override precedence, exit codes."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from ai_pull_review.batch.batch_client import BatchSubmitError
from ai_pull_review.main import DEFAULT_OUTPUT, _build_parser, _collect_overrides, main
from ai_pull_review.main import run_review as review_pipeline


@pytest.fixture(autouse=True)
def _credentials(monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "ghp-env")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-env")


@pytest.fixture
def run_review():
    with patch("ai_pull_review.main.run_review", new_callable=AsyncMock, return_value=0) as mock:
        with patch("ai_pull_review.logging.logger.setup_logging"):
            yield mock


class TestParser:
    def test_pr_required(self):
        with pytest.raises(SystemExit):
            _build_parser().parse_args([])

    def test_only_given_flags_are_overrides(self):
        args = _build_parser().parse_args(["--pr", "5", "--max-files", "3"])
        assert _collect_overrides(args) == {"pr_number": 5, "max_files": 3}

    def test_write_pr_flag(self):
        args = _build_parser().parse_args(["-p", "5", "--write-pr", "-o", "out"])
        overrides = _collect_overrides(args)
        assert overrides["write_pull_request"] is True
        assert str(overrides["output_path"]) == "out"


class TestMain:
    def test_runs_review_with_flags(self, run_review):
        code = main(["--pr", "12", "--repo", "octo/widgets", "--level", "deep", "--model",
                     "claude-3-opus-20240229", "--language", "French"])
        assert code == 0
        settings = run_review.call_args.args[0]
        assert settings.pr_number == 12
        assert settings.repository == "octo/widgets"
        assert settings.analysis_level == "deep"
        assert settings.review_model == "claude-3-opus-20240229"
        assert settings.review_language == "French"
        assert settings.github_token == "ghp-env"

    def test_flag_beats_environment(self, run_review, monkeypatch):
        monkeypatch.setenv("MAX_FILES", "20")
        main(["--pr", "1", "--repo", "octo/widgets", "--max-files", "2"])
        assert run_review.call_args.args[0].max_files == 2

    def test_repository_detected_from_git(self, run_review):
        with patch("ai_pull_review.config.settings.detect_repository", return_value="octo/detected"):
            assert main(["--pr", "1"]) == 0
        assert run_review.call_args.args[0].repository == "octo/detected"

    def test_invalid_repository(self, run_review, capsys):
        assert main(["--pr", "1", "--repo", "not-a-repo"]) == 1
        assert "Error:" in capsys.readouterr().err
        run_review.assert_not_called()

    def test_invalid_range(self, run_review, capsys):
        assert main(["--pr", "1", "--repo", "octo/widgets", "--max-files", "0"]) == 1
        assert "MAX_FILES" in capsys.readouterr().err

    def test_pipeline_failure_exit_code(self, run_review):
        run_review.side_effect = RuntimeError("batch exploded")
        assert main(["--pr", "1", "--repo", "octo/widgets"]) == 1

    def test_default_output_is_results_file(self, run_review):
        main(["--pr", "1", "--repo", "octo/widgets"])
        assert run_review.call_args.args[0].output_path == DEFAULT_OUTPUT == Path("results.md")

    def test_output_path_from_environment(self, run_review, monkeypatch):
        monkeypatch.setenv("OUTPUT_PATH", "reviews")
        main(["--pr", "1", "--repo", "octo/widgets"])
        assert run_review.call_args.args[0].output_path == Path("reviews")

    def test_output_flag(self, run_review):
        main(["--pr", "1", "--repo", "octo/widgets", "-o", "pr-1.md"])
        assert run_review.call_args.args[0].output_path == Path("pr-1.md")


class TestRunReview:
    @pytest.mark.asyncio
    async def test_closes_clients_and_prints_costs(self, review_context, fake_vcs, fake_provider, capsys):
        with patch("ai_pull_review.pipeline.context.build_context", return_value=review_context):
            assert await review_pipeline(review_context.settings) == 0

        assert fake_vcs.closed is True
        assert fake_provider.closed is True
        out = capsys.readouterr().out
        assert "Review complete for octo/widgets#42" in out
        assert "Tokens (claude-3-5-haiku-20241022):" in out
        assert "    src/core/engine.py (" in out

    @pytest.mark.asyncio
    async def test_closes_clients_on_failure(self, review_context, fake_vcs, fake_provider):
        fake_provider.fail_create = True
        with patch("ai_pull_review.pipeline.context.build_context", return_value=review_context):
            with pytest.raises(BatchSubmitError, match="invalid request"):
                await review_pipeline(review_context.settings)
        assert fake_vcs.closed is True
        assert fake_provider.closed is True
