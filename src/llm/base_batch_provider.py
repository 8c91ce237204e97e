# src/llm/base_batch_provider.py — v2
"""Abstract batch-capable LLM provider interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from ai_pull_review.core.models import BatchStatus
from ai_pull_review.llm.models import BatchRequest, BatchResultEntry, Message


class ProviderJobNotFound(Exception):
    """Raised by providers when a batch job id is unknown to them."""


class BaseBatchProvider(ABC):
    """Unified interface for asynchronous batch providers."""

    @abstractmethod
    async def create_batch(self, requests: list[BatchRequest]) -> str:
        """Create a provider-side batch job. Returns the job id."""

    @abstractmethod
    async def get_batch_status(self, job_id: str) -> BatchStatus:
        """Return the current job status.

        Raises:
            ProviderJobNotFound: If the provider does not know job_id.
        """

    @abstractmethod
    def get_batch_results(self, job_id: str) -> AsyncIterator[BatchResultEntry]:
        """Stream results of an ended job.

        The stream is finite, single-pass and not restartable.
        """

    @abstractmethod
    async def count_tokens(self, messages: list[Message], model: str) -> int:
        """Count input tokens of a message list for the given model."""

    async def aclose(self) -> None:
        """Release network resources. No-op by default."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (anthropic, ...)."""
