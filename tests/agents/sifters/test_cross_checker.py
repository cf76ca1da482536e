"""Tests for CrossChecker grouping and labelling."""

import pytest

from trust_system.agents.sifters import CrossChecker, group_claims, normalize_title
from trust_system.data_management.schemas import Claim, ClaimStatus, DisputedClaim


def make_claim(title, sources, disputed=None):
    return Claim(
        date="2026-10-18",
        title=title,
        description="Description",
        sources=sources,
        disputed_claims=disputed or [],
    )


class TestNormalizeTitle:
    """Tests for the group key."""

    def test_case_and_whitespace(self):
        assert normalize_title("  Bridge   COLLAPSES\tin city ") == "bridge collapses in city"

    def test_truncated(self):
        assert len(normalize_title("x" * 500)) == 140


class TestCrossCheck:
    """Tests for status assignment."""

    @pytest.fixture
    def checker(self):
        return CrossChecker()

    def test_same_story_three_outlets_verified(self, checker):
        claims = [
            make_claim("Bridge collapses in city", ["https://a.example/1"]),
            make_claim("bridge collapses in  city", ["https://b.example/2"]),
            make_claim("BRIDGE COLLAPSES IN CITY", ["https://c.example/3"]),
        ]

        annotated = checker.cross_check(claims)

        assert [c.status for c in annotated] == [ClaimStatus.VERIFIED] * 3
        assert checker.last_stats.groups == 1
        assert checker.last_stats.verified == 3

    def test_any_dispute_marks_whole_group(self, checker):
        claims = [
            make_claim("Minister resigns", ["https://a.example/1"]),
            make_claim(
                "Minister resigns",
                ["https://b.example/2"],
                disputed=[DisputedClaim(claim_text="Minister denies resigning")],
            ),
        ]

        annotated = checker.cross_check(claims)

        assert all(c.status == ClaimStatus.DISPUTED for c in annotated)

    def test_single_source_single_claim_pending(self, checker):
        annotated = checker.cross_check([make_claim("Lone report", ["https://a.example/1"])])
        assert annotated[0].status == ClaimStatus.PENDING

    def test_single_claim_two_sources_verified(self, checker):
        annotated = checker.cross_check(
            [make_claim("Two sources", ["https://a.example/1", "https://b.example/2"])]
        )
        assert annotated[0].status == ClaimStatus.VERIFIED

    def test_two_extractions_same_source_verified(self, checker):
        claims = [
            make_claim("Repeated story", ["https://a.example/1"]),
            make_claim("Repeated story", ["https://a.example/1"]),
        ]
        annotated = checker.cross_check(claims)
        assert all(c.status == ClaimStatus.VERIFIED for c in annotated)

    def test_members_not_merged_and_inputs_untouched(self, checker):
        claims = [
            make_claim("Story", ["https://a.example/1"]),
            make_claim("Story", ["https://b.example/2"]),
        ]

        annotated = checker.cross_check(claims)

        assert len(annotated) == 2
        assert annotated[0].sources == ["https://a.example/1"]
        assert claims[0].status is None

    def test_idempotent(self, checker):
        claims = [
            make_claim("Story A", ["https://a.example/1"]),
            make_claim("Story A", ["https://b.example/2"]),
            make_claim("Story B", ["https://c.example/3"]),
        ]

        once = checker.cross_check(claims)
        twice = checker.cross_check(once)

        assert [c.status for c in once] == [c.status for c in twice]

    @pytest.mark.asyncio
    async def test_sift_interface(self, checker):
        claims = [make_claim("Story", ["https://a.example/1"]).model_dump(by_alias=True)]

        result = await checker.process({"content": {"claims": claims}})

        assert result["success"] is True
        assert result["results"][0]["status"] == "pending"


class TestGroupClaims:
    """Tests for grouping order."""

    def test_first_seen_order(self):
        claims = [
            make_claim("B story", ["x"]),
            make_claim("A story", ["y"]),
            make_claim("b story", ["z"]),
        ]

        groups = group_claims(claims)

        assert [g.key for g in groups] == ["b story", "a story"]
        assert groups[0].unique_sources == ["x", "z"]


class TestDescribe:
    """Tests for the stage description."""

    def test_describe(self):
        checker = CrossChecker()
        info = checker.describe()

        assert info["name"] == "CrossChecker"
        assert "cross_checking" in info["capabilities"]
        assert "claim_sifting" in info["capabilities"]
