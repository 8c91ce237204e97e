# src/llm/adapters/anthropic_adapter.py — v4
"""Anthropic Message Batches adapter implementing BaseBatchProvider.

Uses the official anthropic SDK: messages.batches for job lifecycle and
messages.count_tokens for cost estimation.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Any

import anthropic

from ai_pull_review.core.models import BatchStatus
from ai_pull_review.llm.base_batch_provider import BaseBatchProvider, ProviderJobNotFound
from ai_pull_review.llm.models import BatchRequest, BatchResultEntry, Message

logger = logging.getLogger(__name__)

# Anthropic processing_status → BatchStatus. Anything unlisted is an error.
_STATUS_MAP: dict[str, BatchStatus] = {
    "in_progress": BatchStatus.IN_PROGRESS,
    "canceling": BatchStatus.IN_PROGRESS,
    "ended": BatchStatus.ENDED,
}


class AnthropicBatchAdapter(BaseBatchProvider):
    """Adapter for the Anthropic Message Batches API."""

    def __init__(
        self,
        api_key: str | None = None,
        client: Any = None,
    ) -> None:
        self._api_key = api_key
        self.__client = client

    @property
    def _client(self):
        """Lazy-init Anthropic client (only on first API call)."""
        if self.__client is None:
            self.__client = anthropic.AsyncAnthropic(api_key=self._api_key or "")
        return self.__client

    async def create_batch(self, requests: list[BatchRequest]) -> str:
        payload = [
            {
                "custom_id": r.correlation_id,
                "params": {
                    "model": r.model,
                    "max_tokens": r.max_tokens,
                    "messages": [{"role": "user", "content": r.prompt}],
                },
            }
            for r in requests
        ]
        batch = await self._client.messages.batches.create(requests=payload)
        logger.debug("Created Anthropic batch %s with %d requests", batch.id, len(payload))
        return batch.id

    async def get_batch_status(self, job_id: str) -> BatchStatus:
        try:
            batch = await self._client.messages.batches.retrieve(job_id)
        except anthropic.NotFoundError as e:
            raise ProviderJobNotFound(job_id) from e

        status = _STATUS_MAP.get(batch.processing_status, BatchStatus.ERRORED)
        logger.debug("Batch %s processing_status=%s", job_id, batch.processing_status)
        return status

    async def get_batch_results(self, job_id: str) -> AsyncIterator[BatchResultEntry]:
        try:
            stream = await self._client.messages.batches.results(job_id)
        except anthropic.NotFoundError as e:
            raise ProviderJobNotFound(job_id) from e

        async for entry in stream:
            result = entry.result
            if result.type != "succeeded":
                logger.warning(
                    "Batch item %s did not succeed (%s), no result", entry.custom_id, result.type,
                )
                continue
            yield BatchResultEntry(
                correlation_id=entry.custom_id,
                text=self._extract_text(result.message),
            )

    async def count_tokens(self, messages: list[Message], model: str) -> int:
        response = await self._client.messages.count_tokens(
            model=model,
            messages=[{"role": m.role, "content": m.content} for m in messages],
        )
        return response.input_tokens

    async def aclose(self) -> None:
        if self.__client is not None:
            await self.__client.close()
            self.__client = None

    @property
    def provider_name(self) -> str:
        return "anthropic"

    @staticmethod
    def _extract_text(message: Any) -> str:
        """Extract the first text block from a message."""
        for block in message.content:
            if getattr(block, "type", None) == "text":
                return block.text
        return ""
