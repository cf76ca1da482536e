"""Claim extraction agent: Candidate -> Claim.

When the extraction service is configured, its JSON response is trusted as
the claim, with defaults for the optional fields:
- sources -> [candidate link] when absent or not a list; an explicit [] is kept
- disputedClaims -> []
- date -> today (UTC, YYYY-MM-DD)

When it is not configured, the fallback policy decides: the permissive
default maps the candidate directly (today, title, first 2000 chars of body,
[link]); strict produces nothing.

Claims missing date, title or description are discarded. A service failure
skips that candidate only.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from dateutil import parser as dateutil_parser
from pydantic import ValidationError

from trust_system.agents.sifters.base_sifter import BaseSifter
from trust_system.config.prompts import CLAIM_EXTRACTION_INSTRUCTION
from trust_system.config.settings import FallbackPolicy, settings
from trust_system.data_management.schemas import Candidate, Claim
from trust_system.llm.classification_client import ClassificationServiceClient


def today_utc() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


def normalize_date(value: Any) -> str:
    """YYYY-MM-DD for any date string dateutil understands, else the input unchanged."""
    text = str(value).strip()
    try:
        return dateutil_parser.parse(text).strftime("%Y-%m-%d")
    except (ValueError, TypeError, OverflowError):
        return text


@dataclass
class ExtractionStats:
    """Counters for one extraction batch."""

    candidates: int = 0
    extracted: int = 0
    fallback_used: int = 0
    discarded: int = 0
    failed: int = 0
    skipped_unconfigured: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "candidates": self.candidates,
            "extracted": self.extracted,
            "fallback_used": self.fallback_used,
            "discarded": self.discarded,
            "failed": self.failed,
            "skipped_unconfigured": self.skipped_unconfigured,
        }


class ClaimExtractionAgent(BaseSifter):
    """
    Converts candidates into structured claims.

    Usage:
        agent = ClaimExtractionAgent()
        claims = await agent.extract_batch(candidates)

    Attributes:
        client: Extraction service client
        fallback_policy: Behaviour when the client is not configured
        instruction: Instruction text sent with every request
        last_stats: ExtractionStats of the most recent batch
    """

    FALLBACK_DESCRIPTION_LENGTH = 2000

    def __init__(
        self,
        client: Optional[ClassificationServiceClient] = None,
        fallback_policy: Optional[FallbackPolicy] = None,
        instruction: str = CLAIM_EXTRACTION_INSTRUCTION,
    ):
        super().__init__(
            name="ClaimExtractionAgent",
            description="Converts scraped articles into structured claims",
        )
        self.client = client or ClassificationServiceClient.for_extraction()
        self.fallback_policy = fallback_policy or settings.fallback_policy
        self.instruction = instruction
        self.last_stats = ExtractionStats()

        self.logger.info(
            "ClaimExtractionAgent initialized",
            service_configured=self.client.configured,
            fallback_policy=self.fallback_policy.value,
        )

    async def extract(self, candidate: Candidate) -> Optional[Claim]:
        """Extract one claim. Returns None when discarded or on failure."""
        return await self._extract_one(candidate, ExtractionStats())

    async def extract_batch(self, candidates: List[Candidate]) -> List[Claim]:
        """Extract claims from a batch, skipping candidates that fail."""
        stats = ExtractionStats(candidates=len(candidates))
        claims: List[Claim] = []
        for candidate in candidates:
            claim = await self._extract_one(candidate, stats)
            if claim is not None:
                claims.append(claim)

        self.last_stats = stats
        self.logger.info("Extraction batch complete", **stats.to_dict())
        return claims

    async def _extract_one(
        self, candidate: Candidate, stats: ExtractionStats
    ) -> Optional[Claim]:
        if self.client.configured:
            try:
                data = await self.client.extract(
                    self.instruction,
                    title=candidate.title,
                    url=candidate.link,
                    text=candidate.raw_text,
                )
            except Exception as e:
                stats.failed += 1
                self.logger.warning("Extraction service failed", link=candidate.link, error=str(e))
                return None
            claim = self._claim_from_response(data, candidate)
        elif self.fallback_policy == FallbackPolicy.STRICT:
            stats.skipped_unconfigured += 1
            return None
        else:
            stats.fallback_used += 1
            claim = self._fallback_claim(candidate)

        if claim is None:
            stats.discarded += 1
            self.logger.debug("Claim discarded: missing required fields", link=candidate.link)
            return None

        stats.extracted += 1
        return claim

    def _claim_from_response(
        self, data: Dict[str, Any], candidate: Candidate
    ) -> Optional[Claim]:
        """Apply defaults to a service response and validate it."""
        payload = dict(data)
        payload.pop("status", None)
        if not isinstance(payload.get("sources"), list):
            payload["sources"] = [candidate.link]
        if payload.get("disputedClaims") is None:
            payload["disputedClaims"] = []
        if not payload.get("date"):
            payload["date"] = today_utc()
        else:
            payload["date"] = normalize_date(payload["date"])
        return self._validate(payload)

    def _fallback_claim(self, candidate: Candidate) -> Optional[Claim]:
        return self._validate(
            {
                "date": today_utc(),
                "title": candidate.title,
                "description": candidate.raw_text[: self.FALLBACK_DESCRIPTION_LENGTH],
                "sources": [candidate.link],
                "disputedClaims": [],
            }
        )

    @staticmethod
    def _validate(payload: Dict[str, Any]) -> Optional[Claim]:
        try:
            claim = Claim.model_validate(payload)
        except ValidationError:
            return None
        if not claim.title.strip() or not claim.description.strip():
            return None
        return claim

    async def sift(self, content: dict) -> list[dict]:
        """
        Args:
            content: Dict with 'candidates' (list of Candidate dicts)

        Returns:
            List of Claim dicts (camelCase keys)
        """
        candidates = [Candidate.model_validate(c) for c in content.get("candidates", [])]
        claims = await self.extract_batch(candidates)
        return [c.model_dump(by_alias=True, exclude_none=True) for c in claims]

    def get_capabilities(self) -> list[str]:
        return super().get_capabilities() + ["claim_extraction"]
