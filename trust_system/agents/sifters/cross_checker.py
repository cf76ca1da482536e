"""Cross-checker: groups claims by normalized title and labels each group.

Group key: lowercase, whitespace collapsed, trimmed, truncated to 140 chars.

Group status:
- disputed if any member carries a non-empty disputedClaims list
- verified if the group's unique sources number two or more, or the group
  has two or more members
- pending otherwise

The status is written onto every member. Members are never merged, so each
one is later persisted as its own pending record carrying the shared label.
Labelling depends only on titles, sources and disputed claims, never on a
previous status, so re-running over annotated claims reproduces the labels.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from trust_system.agents.sifters.base_sifter import BaseSifter
from trust_system.data_management.schemas import Claim, ClaimStatus, unique_sources

KEY_LENGTH = 140


def normalize_title(title: str) -> str:
    return " ".join(title.lower().split())[:KEY_LENGTH]


@dataclass
class ClaimGroup:
    """Claims sharing one normalized title."""

    key: str
    members: List[Claim] = field(default_factory=list)

    @property
    def unique_sources(self) -> List[str]:
        return unique_sources([s for claim in self.members for s in claim.sources])

    @property
    def has_dispute(self) -> bool:
        return any(claim.is_disputed for claim in self.members)

    def resolve_status(self) -> ClaimStatus:
        if self.has_dispute:
            return ClaimStatus.DISPUTED
        if len(self.unique_sources) >= 2 or len(self.members) >= 2:
            return ClaimStatus.VERIFIED
        return ClaimStatus.PENDING


def group_claims(claims: List[Claim]) -> List[ClaimGroup]:
    """Group claims by normalized title, preserving first-seen group order."""
    groups: Dict[str, ClaimGroup] = {}
    for claim in claims:
        key = normalize_title(claim.title)
        groups.setdefault(key, ClaimGroup(key=key)).members.append(claim)
    return list(groups.values())


@dataclass
class CrossCheckStats:
    """Label counts for one cross-check pass (per claim, not per group)."""

    groups: int = 0
    verified: int = 0
    disputed: int = 0
    pending: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "groups": self.groups,
            "verified": self.verified,
            "disputed": self.disputed,
            "pending": self.pending,
        }


class CrossChecker(BaseSifter):
    """
    Assigns a verification status to every claim.

    Usage:
        checker = CrossChecker()
        annotated = checker.cross_check(claims)
    """

    def __init__(self):
        super().__init__(
            name="CrossChecker",
            description="Groups claims by title and assigns verification status",
        )
        self.last_stats = CrossCheckStats()

    def cross_check(self, claims: List[Claim]) -> List[Claim]:
        """
        Label every claim with its group's status.

        Returns:
            New Claim objects in input order; inputs are not mutated.
        """
        stats = CrossCheckStats()
        status_by_key: Dict[str, ClaimStatus] = {}
        for group in group_claims(claims):
            status_by_key[group.key] = group.resolve_status()
            stats.groups += 1

        annotated: List[Claim] = []
        for claim in claims:
            status = status_by_key[normalize_title(claim.title)]
            annotated.append(claim.model_copy(update={"status": status}))
            if status == ClaimStatus.VERIFIED:
                stats.verified += 1
            elif status == ClaimStatus.DISPUTED:
                stats.disputed += 1
            else:
                stats.pending += 1

        self.last_stats = stats
        self.logger.info("Cross-check complete", **stats.to_dict())
        return annotated

    async def sift(self, content: dict) -> list[dict]:
        """
        Args:
            content: Dict with 'claims' (list of Claim dicts)

        Returns:
            Annotated Claim dicts (camelCase keys)
        """
        claims = [Claim.model_validate(c) for c in content.get("claims", [])]
        return [
            c.model_dump(mode="json", by_alias=True)
            for c in self.cross_check(claims)
        ]

    def get_capabilities(self) -> list[str]:
        return super().get_capabilities() + ["cross_checking"]
