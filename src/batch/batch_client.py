# src/batch/batch_client.py — v1
"""Batch client — lifecycle of one provider batch job.

Holds the in-memory request/response state of a single BatchJob:
    1. enqueue() prompts while the job is not submitted
    2. submit() them as one provider batch
    3. poll_status() until the job is terminal (wait() between polls)
    4. fetch_results() to reconcile responses by correlation id
    5. estimate_cost() from token counts of prompts and responses

One instance serves one batch. Nothing is persisted beyond the process.
"""

from __future__ import annotations

import logging
import uuid

from ai_pull_review.batch.backoff import DecayingBackoff
from ai_pull_review.core.models import AnalysisResult, BatchItem, BatchJob, BatchStatus
from ai_pull_review.llm.base_batch_provider import BaseBatchProvider, ProviderJobNotFound
from ai_pull_review.llm.models import BatchRequest, Message
from ai_pull_review.tracking.cost_calculator import compute_item_cost, get_model_pricing
from ai_pull_review.tracking.models import CostReport, ModelPricing

logger = logging.getLogger(__name__)


class BatchError(Exception):
    """Base class for batch lifecycle failures (fatal to a run)."""


class InvalidBatchState(BatchError):
    """Operation not allowed in the current job status."""


class EmptyBatchError(BatchError):
    """Submission attempted with no enqueued items."""


class UnknownJobError(BatchError):
    """Job id missing or not known to the provider."""


class BatchSubmitError(BatchError):
    """Provider rejected the batch creation request."""


class BatchClient:
    """Owns one BatchJob from enqueue to cost estimation.

    Args:
        provider: Batch-capable LLM provider.
        model: Model id used for every request of the batch.
        max_tokens: Max output tokens per request.
        backoff: Wait primitive used between status polls.
        pricing: Optional pricing table override.
    """

    def __init__(
        self,
        provider: BaseBatchProvider,
        model: str,
        max_tokens: int = 1024,
        backoff: DecayingBackoff | None = None,
        pricing: dict[str, ModelPricing] | None = None,
    ) -> None:
        self._provider = provider
        self._model = model
        self._max_tokens = max_tokens
        self._backoff = backoff or DecayingBackoff()
        self._pricing = pricing
        self._job = BatchJob()
        self.cost_report: CostReport | None = None

    @property
    def job(self) -> BatchJob:
        return self._job

    @property
    def items(self) -> list[BatchItem]:
        return self._job.items

    @property
    def item_count(self) -> int:
        return len(self._job.items)

    @property
    def backoff(self) -> DecayingBackoff:
        return self._backoff

    # ------------------------------------------------------------------
    # Building the batch
    # ------------------------------------------------------------------

    def enqueue(self, prompt_text: str, file_name: str, size_kb: float) -> str:
        """Add a prompt to the batch and return its correlation id.

        Raises:
            InvalidBatchState: If the batch was already submitted.
        """
        if self._job.status != BatchStatus.NOT_SUBMITTED:
            raise InvalidBatchState(
                f"Cannot enqueue {file_name}: batch already {self._job.status.value}"
            )
        correlation_id = str(uuid.uuid4())
        self._job.items.append(
            BatchItem(
                correlation_id=correlation_id,
                file_name=file_name,
                size_label=f"{round(size_kb, 2):g} KB",
                prompt_text=prompt_text,
            )
        )
        logger.debug("Enqueued %s as %s", file_name, correlation_id)
        return correlation_id

    def clear(self) -> None:
        """Drop every enqueued item. Only allowed before submission."""
        if self._job.status != BatchStatus.NOT_SUBMITTED:
            raise InvalidBatchState("Cannot clear a submitted batch")
        self._job.items.clear()

    async def submit(self) -> str:
        """Send all enqueued items as one provider batch.

        Not idempotent: a second call creates a second provider job.

        Raises:
            EmptyBatchError: If nothing was enqueued.
            BatchSubmitError: If the provider rejects the request.
        """
        if not self._job.items:
            raise EmptyBatchError("No messages to send in batch")
        if self._job.job_id is not None:
            logger.warning("Batch already submitted as %s, creating another job", self._job.job_id)

        requests = [
            BatchRequest(
                correlation_id=item.correlation_id,
                prompt=item.prompt_text,
                model=self._model,
                max_tokens=self._max_tokens,
            )
            for item in self._job.items
        ]
        try:
            job_id = await self._provider.create_batch(requests)
        except Exception as e:
            raise BatchSubmitError(f"Failed to send batch: {e}") from e

        self._job.job_id = job_id
        self._job.status = BatchStatus.IN_PROGRESS
        logger.info(
            "Submitted batch %s with %d items", job_id, len(requests), extra={"job_id": job_id},
        )
        return job_id

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    async def poll_status(self, job_id: str | None) -> BatchStatus:
        """Query the provider for the job status.

        Raises:
            UnknownJobError: If job_id is empty or unknown to the provider.
            BatchError: If the provider call fails for another reason.
        """
        if not job_id:
            raise UnknownJobError("No batch ID available")
        try:
            status = await self._provider.get_batch_status(job_id)
        except ProviderJobNotFound as e:
            raise UnknownJobError(f"Unknown batch ID: {job_id}") from e
        except Exception as e:
            raise BatchError(f"Failed to get batch status: {e}") from e

        if job_id == self._job.job_id:
            self._job.status = status
        logger.debug("Batch %s status: %s", job_id, status.value)
        return status

    async def wait(self, initial_ms: int) -> int:
        """Backoff between polls. See DecayingBackoff.wait."""
        return await self._backoff.wait(initial_ms)

    def reset_wait(self) -> None:
        self._backoff.reset()

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    async def fetch_results(self, job_id: str | None) -> list[AnalysisResult]:
        """Match provider results back to enqueued items.

        Unknown correlation ids are logged and dropped. Results keep the
        provider's return order.

        Raises:
            UnknownJobError: If job_id is empty or unknown to the provider.
            BatchError: If reading the result stream fails.
        """
        if not job_id:
            raise UnknownJobError("No batch ID available")

        results: list[AnalysisResult] = []
        try:
            async for entry in self._provider.get_batch_results(job_id):
                item = self._job.find_item(entry.correlation_id)
                if item is None:
                    logger.warning(
                        "No enqueued item for correlation id %s, dropping result",
                        entry.correlation_id,
                    )
                    continue
                item.response_text = entry.text
                results.append(
                    AnalysisResult(
                        correlation_id=item.correlation_id,
                        file_name=item.file_name,
                        size_label=item.size_label,
                        analysis=item.response_text,
                    )
                )
        except ProviderJobNotFound as e:
            raise UnknownJobError(f"Unknown batch ID: {job_id}") from e
        except Exception as e:
            raise BatchError(f"Failed to get batch results: {e}") from e

        logger.info(
            "Reconciled %d of %d batch items", len(results), len(self._job.items),
        )
        return results

    # ------------------------------------------------------------------
    # Cost
    # ------------------------------------------------------------------

    async def estimate_cost(self, model: str | None = None) -> float:
        """Estimate the batch cost in USD from counted tokens.

        Prompt and response are counted separately for every item with a
        response. Items without a response cost nothing.

        Raises:
            UnknownModelError: If the model has no pricing entry.
        """
        model = model or self._model
        pricing = get_model_pricing(model, self._pricing)
        report = CostReport(model=model)

        for item in self._job.items:
            if not item.response_text:
                continue
            input_tokens = await self._provider.count_tokens(
                [Message(role="user", content=item.prompt_text)], model,
            )
            output_tokens = await self._provider.count_tokens(
                [Message(role="user", content=item.response_text)], model,
            )
            cost = compute_item_cost(
                item.file_name, item.size_label, input_tokens, output_tokens, pricing,
            )
            logger.debug("Token cost for file %s (%s):", item.file_name, item.size_label)
            logger.debug("Input: %d tokens, $%.6f", input_tokens, cost.input_cost_usd)
            logger.debug("Output: %d tokens, $%.6f", output_tokens, cost.output_cost_usd)
            report.items.append(cost)

        self.cost_report = report
        logger.info("Total cost of the batch: $%.6f", report.total_cost_usd)
        return report.total_cost_usd
