# src/pipeline/orchestrator.py — v3
"""Pipeline orchestrator — one pull request reviewed through one provider batch.

Drives the review as a linear state machine:
  Listing → Selecting → Enqueuing → Submitted → Polling → Reconciling
  → Publishing → Done, with Failed reachable from any stage.

Per-file problems while enqueuing (fetch errors, oversized content) are
logged and the file skipped. Anything failing from submission onwards is
fatal: partial batch state cannot be resumed.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone

from ai_pull_review.batch.backoff import DecayingBackoff
from ai_pull_review.batch.batch_client import BatchClient
from ai_pull_review.core.models import AnalysisResult, BatchStatus, ChangedFile
from ai_pull_review.llm.prompt_builder import (
    build_prompt,
    format_analysis_comment,
    format_cost_summary,
    format_max_files_notice,
    format_size_warning,
)
from ai_pull_review.logging.context import set_run_context, set_stage_context
from ai_pull_review.pipeline.context import ReviewContext
from ai_pull_review.pipeline.state import PipelineStage, ReviewReport
from ai_pull_review.selection.file_selector import select_files
from ai_pull_review.storage.layout import render_result_document, result_file_name
from ai_pull_review.tracking.cost_calculator import get_model_pricing

logger = logging.getLogger(__name__)


class BatchFailedError(Exception):
    """The provider reported the batch job as errored."""

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Batch {job_id} ended with an error status")


class ReviewOrchestrator:
    """Review one pull request end-to-end.

    Args:
        context: Settings and collaborator clients for this run.
    """

    def __init__(self, context: ReviewContext) -> None:
        self._ctx = context
        self._settings = context.settings
        self._stage = PipelineStage.IDLE

    @property
    def stage(self) -> PipelineStage:
        return self._stage

    def _new_batch_client(self) -> BatchClient:
        s = self._settings
        backoff = DecayingBackoff(
            decay=s.poll_decay,
            min_wait_ms=s.poll_min_wait_ms,
            max_retries=s.poll_max_retries,
            sleep=self._ctx.sleep,
        )
        return BatchClient(
            provider=self._ctx.provider,
            model=s.review_model,
            max_tokens=s.max_tokens,
            backoff=backoff,
        )

    async def run(self) -> ReviewReport:
        """Execute the full review.

        Returns:
            ReviewReport with results, skipped files and cost.

        Raises:
            ConfigurationError, UnknownModelError: Before anything is listed.
            BatchError, RetryBudgetExhausted, BatchFailedError:
                On any failure from batch submission onwards.
        """
        s = self._settings
        report = ReviewReport(repository=s.repository, pr_number=s.pr_number)
        start_time = time.monotonic()

        try:
            s.require_run_fields()
            # Pricing must be known before anything is submitted
            get_model_pricing(s.review_model)
            set_run_context(s.repository, s.pr_number, report.run_id)

            # --- Listing ---
            self._transition(PipelineStage.LISTING, report)
            report.head_sha = await self._ctx.vcs.get_head_sha(s.owner, s.repo_name, s.pr_number)
            files = await self._ctx.vcs.list_changed_files(s.owner, s.repo_name, s.pr_number)
            report.changed_file_count = len(files)

            # --- Selecting ---
            self._transition(PipelineStage.SELECTING, report)
            selected = select_files(files, s.filter_config())
            report.selected_files = [f.path for f in selected]

            # --- Enqueuing ---
            self._transition(PipelineStage.ENQUEUING, report)
            client = self._new_batch_client()
            await self._enqueue_files(client, selected, report)

            if client.item_count == 0:
                logger.info("No files to analyze, nothing submitted")
                self._transition(PipelineStage.DONE, report)
                return report

            # --- Submitted / Polling ---
            self._transition(PipelineStage.SUBMITTED, report)
            report.job_id = await client.submit()

            self._transition(PipelineStage.POLLING, report)
            await self.wait_for_batch(client, report.job_id)

            # --- Reconciling ---
            self._transition(PipelineStage.RECONCILING, report)
            results = await client.fetch_results(report.job_id)
            report.results = [self._render(r) for r in results]

            # --- Publishing ---
            self._transition(PipelineStage.PUBLISHING, report)
            for result in report.results:
                await self._publish(result, report)

            report.total_cost_usd = await client.estimate_cost(s.review_model)
            report.cost_report = client.cost_report
            if s.write_pull_request:
                await self._post_comment(
                    format_cost_summary(len(report.results), report.total_cost_usd, s.review_model),
                    report,
                )

            self._transition(PipelineStage.DONE, report)
        except Exception as e:
            failed_in = self._stage
            self._transition(PipelineStage.FAILED, report)
            logger.error("Review failed during %s: %s", failed_in.value, e)
            raise
        finally:
            set_stage_context(None)

        logger.info(
            "Review complete: %d results, %d skipped, $%.4f in %.1fs",
            len(report.results), len(report.skipped_files),
            report.total_cost_usd, time.monotonic() - start_time,
        )
        return report

    async def wait_for_batch(self, client: BatchClient, job_id: str) -> BatchStatus:
        """Poll until the job is terminal, backing off between polls.

        Raises:
            RetryBudgetExhausted: If the provider never finished.
            BatchFailedError: If the provider reports the job errored.
        """
        while True:
            status = await client.poll_status(job_id)
            if status.is_terminal:
                break
            await client.wait(self._settings.poll_initial_wait_ms)

        if status == BatchStatus.ERRORED:
            raise BatchFailedError(job_id)
        logger.info("Batch %s ended", job_id)
        return status

    # ------------------------------------------------------------------
    # Enqueuing
    # ------------------------------------------------------------------

    async def _enqueue_files(
        self,
        client: BatchClient,
        files: list[ChangedFile],
        report: ReviewReport,
    ) -> None:
        s = self._settings
        for file in files:
            if client.item_count >= s.max_files:
                logger.warning("Max files (%d) reached, remaining files skipped", s.max_files)
                report.max_files_reached = True
                if s.write_pull_request:
                    await self._post_comment(format_max_files_notice(s.max_files), report)
                break

            try:
                raw = await self._ctx.vcs.get_file_content(
                    s.owner, s.repo_name, file.path, report.head_sha,
                )
            except Exception as e:
                logger.warning(
                    "Error fetching %s, skipping: %s", file.path, e, extra={"file_name": file.path},
                )
                report.skip(file.path, f"fetch failed: {e}")
                continue

            size_kb = len(raw) / 1024
            if size_kb > s.max_size_kb:
                logger.warning(
                    "File %s is too large (%.1f KB > %.1f KB), skipping",
                    file.path, size_kb, s.max_size_kb,
                )
                report.skip(file.path, "too large")
                if s.write_pull_request:
                    await self._post_comment(
                        format_size_warning(file.path, size_kb, s.max_size_kb), report,
                    )
                continue

            prompt = build_prompt(
                file.path,
                raw.decode("utf-8", errors="replace"),
                s.analysis_level,
                s.review_language,
            )
            client.enqueue(prompt, file.path, size_kb)
            report.enqueued_files.append(file.path)

        logger.info("Enqueued %d files", client.item_count)

    # ------------------------------------------------------------------
    # Reconciling / Publishing
    # ------------------------------------------------------------------

    @staticmethod
    def _render(result: AnalysisResult) -> AnalysisResult:
        body = format_analysis_comment(result.file_name, result.analysis)
        return result.model_copy(update={"content": body})

    async def _publish(self, result: AnalysisResult, report: ReviewReport) -> None:
        s = self._settings
        if s.write_pull_request:
            await self._post_comment(result.content, report)

        if self._ctx.writer is not None:
            name = result_file_name(result.file_name)
            document = render_result_document(
                result.file_name,
                s.repository,
                s.pr_number,
                result.content,
                datetime.now(timezone.utc),
            )
            try:
                await self._ctx.writer.write(name, document)
            except OSError as e:
                logger.error("Could not write %s to %s: %s", name, self._ctx.writer.target, e)
                report.publish_errors.append(f"{name}: {e}")
            else:
                report.written_files.append(name)
                logger.debug("Wrote %s", name)

    async def _post_comment(self, body: str, report: ReviewReport) -> None:
        """Post a PR comment. Failures are logged, not raised."""
        s = self._settings
        try:
            await self._ctx.vcs.create_comment(s.owner, s.repo_name, s.pr_number, body)
        except Exception as e:
            logger.error("Could not post comment on #%d: %s", s.pr_number, e)
            report.publish_errors.append(str(e))
        else:
            report.comments_posted += 1

    def _transition(self, stage: PipelineStage, report: ReviewReport) -> None:
        logger.debug("Stage %s → %s", self._stage.value, stage.value)
        self._stage = stage
        report.stage = stage
        set_stage_context(stage.value)
