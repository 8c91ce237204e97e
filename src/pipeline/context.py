# src/pipeline/context.py — v2
"""Explicit run context holding the collaborator clients.

Passed to the orchestrator at construction; there are no module-level
client singletons.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from ai_pull_review.config.settings import Settings
from ai_pull_review.llm.base_batch_provider import BaseBatchProvider
from ai_pull_review.storage.base_output_writer import BaseOutputWriter
from ai_pull_review.vcs.base_vcs_client import BaseVCSClient

logger = logging.getLogger(__name__)


@dataclass
class ReviewContext:
    """Collaborators of one review run."""

    settings: Settings
    vcs: BaseVCSClient
    provider: BaseBatchProvider
    writer: BaseOutputWriter | None = None
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    async def aclose(self) -> None:
        """Release the network clients. The provider is closed even if the VCS close fails."""
        try:
            await self.vcs.aclose()
        finally:
            await self.provider.aclose()


def build_context(settings: Settings) -> ReviewContext:
    """Create the production collaborators from settings."""
    from ai_pull_review.llm.adapters.anthropic_adapter import AnthropicBatchAdapter
    from ai_pull_review.storage.writer_factory import create_writer
    from ai_pull_review.vcs.adapters.github_adapter import GitHubAdapter

    writer = create_writer(settings.output_path)
    logger.debug(
        "Creating review context: api=%s, model=%s, output=%s",
        settings.github_api_url, settings.review_model, writer.target if writer else None,
    )
    return ReviewContext(
        settings=settings,
        vcs=GitHubAdapter(token=settings.github_token, api_url=settings.github_api_url),
        provider=AnthropicBatchAdapter(api_key=settings.anthropic_api_key),
        writer=writer,
    )
