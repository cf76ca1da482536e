"""Batch orchestration: collect -> extract -> cross-check -> submit -> moderate.

Also hosts the fact-check and retention jobs so every timer-triggered job goes
through the same run gate.

Usage:
    from trust_system.pipeline import VerificationPipeline

    pipeline = VerificationPipeline(DocumentStore())
    summary = await pipeline.run()
    fact_check = await pipeline.run_fact_check()
    retention = await pipeline.run_retention()
"""

from typing import Any, List, Optional

from trust_system.agents.crawlers.news_collector import NewsCollector
from trust_system.agents.sifters.claim_extraction_agent import ClaimExtractionAgent
from trust_system.agents.sifters.cross_checker import CrossChecker
from trust_system.data_management.audit_log import AuditLog
from trust_system.data_management.document_store import AUDIT_LOGS, SYSTEM_LOGS, DocumentStore
from trust_system.data_management.event_store import EventStore
from trust_system.data_management.pending_store import PendingStore
from trust_system.data_management.schemas import Candidate
from trust_system.moderation.fact_check import FactChecker
from trust_system.moderation.gate import ModerationGate, ModerationStats
from trust_system.pipeline.run_gate import RunGate, run_gate
from trust_system.retention.manager import RetentionManager
from trust_system.utils.logging import get_structured_logger, run_context

SCRAPER_AUTHOR = "scraper@system"
PIPELINE_JOB = "verification_pipeline"
FACT_CHECK_JOB = "fact_check"
RETENTION_JOB = "retention"


class VerificationPipeline:
    """Wires the pipeline components around one document store.

    Components are lazy-initialized unless injected, so tests can replace
    any stage.
    """

    def __init__(
        self,
        store: Optional[DocumentStore] = None,
        collector: Optional[NewsCollector] = None,
        extractor: Optional[ClaimExtractionAgent] = None,
        cross_checker: Optional[CrossChecker] = None,
        gate: Optional[ModerationGate] = None,
        fact_checker: Optional[FactChecker] = None,
        retention: Optional[RetentionManager] = None,
        gate_keeper: Optional[RunGate] = None,
        author: str = SCRAPER_AUTHOR,
    ) -> None:
        self.store = store or DocumentStore()
        self.pending = PendingStore(self.store)
        self.events = EventStore(self.store)
        self._collector = collector
        self._extractor = extractor
        self.cross_checker = cross_checker or CrossChecker()
        self._gate = gate
        self._fact_checker = fact_checker
        self._retention = retention
        self.run_gate = gate_keeper or run_gate
        self.author = author
        self._logger = get_structured_logger("VerificationPipeline")

    def _get_collector(self) -> NewsCollector:
        if self._collector is None:
            self._collector = NewsCollector()
        return self._collector

    def _get_extractor(self) -> ClaimExtractionAgent:
        if self._extractor is None:
            self._extractor = ClaimExtractionAgent()
        return self._extractor

    def _get_gate(self) -> ModerationGate:
        if self._gate is None:
            self._gate = ModerationGate(
                self.pending,
                self.events,
                AuditLog(self.store, AUDIT_LOGS),
            )
        return self._gate

    def _get_fact_checker(self) -> FactChecker:
        if self._fact_checker is None:
            self._fact_checker = FactChecker(self.events)
        return self._fact_checker

    def _get_retention(self) -> RetentionManager:
        if self._retention is None:
            self._retention = RetentionManager(self.events, AuditLog(self.store, SYSTEM_LOGS))
        return self._retention

    async def run(
        self, sources: Optional[List[str]] = None, force: bool = False
    ) -> dict[str, Any]:
        """
        One full collection run.

        Args:
            sources: Source keys to collect (default: all configured)
            force: Bypass the run gate

        Returns:
            Summary with per-stage stats, or ``skipped`` when gated
        """
        if not force and not self.run_gate.try_acquire(PIPELINE_JOB):
            self._logger.info("pipeline_skipped", reason="min interval not elapsed")
            return {"success": False, "skipped": "min interval not elapsed"}

        with run_context(PIPELINE_JOB) as correlation_id:
            self._logger.info("pipeline_started", sources=sources)

            collector = self._get_collector()
            try:
                candidates = await collector.collect(sources)
            finally:
                await collector.close()

            summary = await self.process_candidates(candidates)
            summary["collection"] = collector.last_stats.to_dict()
            summary["correlation_id"] = correlation_id

            self._logger.info("pipeline_complete", **summary["moderation"])
        return summary

    async def process_candidates(self, candidates: List[Candidate]) -> dict[str, Any]:
        """Extract, cross-check and submit already-collected candidates."""
        extractor = self._get_extractor()
        claims = await extractor.extract_batch(candidates)
        annotated = self.cross_checker.cross_check(claims)

        gate = self._get_gate()
        moderation = ModerationStats()
        duplicates = 0
        for claim in annotated:
            outcome = await gate.submit(claim, self.author)
            if outcome is None:
                duplicates += 1
                continue
            moderation.record(outcome)

        return {
            "success": True,
            "extraction": extractor.last_stats.to_dict(),
            "cross_check": self.cross_checker.last_stats.to_dict(),
            "moderation": moderation.to_dict(),
            "duplicates": duplicates,
        }

    async def run_fact_check(self, force: bool = False) -> dict[str, Any]:
        """Fact-check every event without a verdict, gated like the other jobs."""
        if not force and not self.run_gate.try_acquire(FACT_CHECK_JOB):
            self._logger.info("fact_check_skipped", reason="min interval not elapsed")
            return {"success": False, "skipped": "min interval not elapsed"}

        with run_context(FACT_CHECK_JOB) as correlation_id:
            checker = self._get_fact_checker()
            try:
                stats = await checker.check_unverified()
            finally:
                await checker.client.aclose()
        return {"success": True, "results": stats.to_dict(), "correlation_id": correlation_id}

    async def run_retention(self, force: bool = False) -> dict[str, Any]:
        """One retention scan, gated like the collection run."""
        if not force and not self.run_gate.try_acquire(RETENTION_JOB):
            self._logger.info("retention_skipped", reason="min interval not elapsed")
            return {"success": False, "skipped": "min interval not elapsed"}

        with run_context(RETENTION_JOB) as correlation_id:
            stats = await self._get_retention().run()
        return {"success": True, "results": stats.to_dict(), "correlation_id": correlation_id}
