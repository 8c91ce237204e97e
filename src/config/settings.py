# src/config/settings.py — v2
"""Typed configuration loaded from environment / .env via pydantic-settings.

Single source of truth for run settings. CLI flags and GitHub Action inputs
are applied on top as overrides.
"""

from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ai_pull_review.core.models import FilterConfig

logger = logging.getLogger(__name__)

_REPO_RE = re.compile(r"^[\w.-]+/[\w.-]+$")
_GITHUB_REMOTE_RE = re.compile(r"github\.com[:/]([^/]+/[^/]+?)(?:\.git)?$")


class ConfigurationError(Exception):
    """Raised when configuration is missing or internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from environment and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Credentials ===
    anthropic_api_key: str = ""
    github_token: str = ""
    github_api_url: str = "https://api.github.com"

    # === Target ===
    pr_number: int | None = None
    repository: str = ""  # "owner/repo"

    # === Analysis ===
    analysis_level: str = "standard"
    review_model: str = "claude-3-5-haiku-20241022"
    review_language: str = "English"
    max_tokens: int = 1024
    comment_threshold: float = 0.6  # legacy, not read by the batch path

    # === File selection ===
    file_patterns: str = ""
    exclude_patterns: str = ""
    max_files: int = 10
    max_size_kb: float = 100.0

    # === Publishing ===
    write_pull_request: bool = False
    output_path: Path | None = None

    # === Polling ===
    poll_initial_wait_ms: int = 60_000
    poll_min_wait_ms: int = 10_000
    poll_decay: float = 0.666
    poll_max_retries: int = 30

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text", "github"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # --- Validators ---

    @field_validator("repository")
    @classmethod
    def validate_repository(cls, v: str) -> str:  # noqa: N805
        v = v.strip()
        if v and not _REPO_RE.match(v):
            raise ValueError(f"repository must be 'owner/repo', got {v!r}")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate numeric ranges across fields."""
        errors: list[str] = []

        if self.max_files < 1:
            errors.append("MAX_FILES must be >= 1")
        if self.max_size_kb <= 0:
            errors.append("MAX_SIZE_KB must be > 0")
        if not 0.0 <= self.comment_threshold <= 1.0:
            errors.append("COMMENT_THRESHOLD must be within [0, 1]")
        if not 0.0 < self.poll_decay <= 1.0:
            errors.append("POLL_DECAY must be within (0, 1]")
        if self.poll_max_retries < 1:
            errors.append("POLL_MAX_RETRIES must be >= 1")
        if self.poll_initial_wait_ms <= 0:
            errors.append("POLL_INITIAL_WAIT_MS must be > 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    def require_run_fields(self) -> None:
        """Fail fast when a field needed to review a PR is missing.

        Raises:
            ConfigurationError: Listing every missing field.
        """
        missing: list[str] = []
        if not self.github_token:
            missing.append("GitHub token (GITHUB_TOKEN or --token)")
        if not self.anthropic_api_key:
            missing.append("Anthropic API key (ANTHROPIC_API_KEY or --key)")
        if self.pr_number is None:
            missing.append("pull request number (--pr)")
        if not self.repository:
            missing.append("repository (--repo owner/repo)")
        if missing:
            raise ConfigurationError("Missing required configuration: " + ", ".join(missing))

    # --- Helpers ---

    @property
    def file_patterns_list(self) -> list[str]:
        """Parse comma-separated include patterns."""
        return _split_csv(self.file_patterns)

    @property
    def exclude_patterns_list(self) -> list[str]:
        """Parse comma-separated exclude patterns."""
        return _split_csv(self.exclude_patterns)

    @property
    def owner(self) -> str:
        return self.repository.split("/", 1)[0]

    @property
    def repo_name(self) -> str:
        return self.repository.split("/", 1)[1]

    def filter_config(self) -> FilterConfig:
        return FilterConfig(
            include_patterns=tuple(self.file_patterns_list),
            exclude_patterns=tuple(self.exclude_patterns_list),
            max_files=self.max_files,
            max_size_kb=self.max_size_kb,
        )


def _split_csv(value: str) -> list[str]:
    return [p.strip() for p in value.split(",") if p.strip()]


def load_settings(**overrides: object) -> Settings:
    """Load settings from environment / .env with optional overrides.

    Args:
        **overrides: Field-level overrides (CLI flags, tests).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]


def detect_repository(cwd: Path | None = None) -> str | None:
    """Derive 'owner/repo' from the git origin remote, if it is on GitHub."""
    try:
        remote = subprocess.run(
            ["git", "config", "--get", "remote.origin.url"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=True,
        ).stdout.strip()
    except (OSError, subprocess.CalledProcessError):
        logger.debug("Could not read git remote in %s", cwd or Path.cwd())
        return None

    match = _GITHUB_REMOTE_RE.search(remote)
    return match.group(1) if match else None
