"""
Tests for Claim Extraction and Matching.
========================================

Tests for:
- Claims: Parsing judge output, triplet filtering, extraction
- Matching: Entailment flags and the empty-set ratio policy
"""

import asyncio

import pytest


# ─────────────────────────────────────────────────────────────────────────────
# Claim Parsing Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestParseClaim:
    """Tests for parse_claim."""

    def test_string(self):
        from claimbench.evaluation.claims import parse_claim

        claim = parse_claim("  Paris is the capital of France ")

        assert claim.text == "Paris is the capital of France"
        assert claim.is_triplet is False

    def test_text_object(self):
        from claimbench.evaluation.claims import parse_claim

        assert parse_claim({"text": "A fact"}).text == "A fact"
        assert parse_claim({"claim": "Another fact"}).text == "Another fact"

    def test_triplets(self):
        """Test list and subject/predicate/object triplets."""
        from claimbench.evaluation.claims import parse_claim

        from_list = parse_claim(["Paris", "is capital of", "France"])
        from_dict = parse_claim({"subject": "Paris", "predicate": "is in", "object": "France"})

        assert from_list.is_triplet is True
        assert from_list.text == "Paris is capital of France"
        assert from_dict.is_triplet is True
        assert from_dict.text == "Paris is in France"

    @pytest.mark.parametrize("item", ["", "   ", 42, None, ["only", "two"], {"value": "x"}])
    def test_invalid(self, item):
        from claimbench.evaluation.claims import parse_claim
        from claimbench.shared.exceptions import ExtractionParseError

        with pytest.raises(ExtractionParseError):
            parse_claim(item)

    def test_filter_triplets(self):
        """Test triplets are dropped and order is preserved."""
        from claimbench.evaluation.claims import filter_triplets, parse_claims

        parsed = parse_claims(["first", ["s", "p", "o"], {"text": "second"}])

        assert [c.text for c in filter_triplets(parsed)] == ["first", "second"]


# ─────────────────────────────────────────────────────────────────────────────
# Extraction Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestExtractClaims:
    """Tests for extract_claims."""

    @pytest.mark.asyncio
    async def test_extract(self, fake_judge):
        from claimbench.evaluation.claims import extract_claims

        claims = await extract_claims(fake_judge, "Paris is in France. It is large.")

        assert [c.text for c in claims] == ["Paris is in France", "It is large"]

    @pytest.mark.asyncio
    async def test_empty_text_skips_judge(self, fake_judge):
        """Test empty text yields no claims and no judge call."""
        from claimbench.evaluation.claims import extract_claims

        assert await extract_claims(fake_judge, "") == []
        assert await extract_claims(fake_judge, "   \n") == []
        assert fake_judge.extraction_calls == []

    @pytest.mark.asyncio
    async def test_non_list_output(self):
        from claimbench.evaluation.claims import extract_claims
        from claimbench.shared.exceptions import ExtractionParseError

        class DictJudge:
            async def extract_claims(self, text):
                return {"claims": "not a list"}

        with pytest.raises(ExtractionParseError):
            await extract_claims(DictJudge(), "Some text.")

    @pytest.mark.asyncio
    async def test_claim_extractor(self, fake_judge):
        from claimbench.evaluation.claims import ClaimExtractor

        claims = await ClaimExtractor().extract_claims(fake_judge, "One. Two.")

        assert len(claims) == 2


# ─────────────────────────────────────────────────────────────────────────────
# Matching Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestClaimRatio:
    """Tests for the empty-set ratio policy."""

    def test_ratio(self):
        from claimbench.evaluation.matching import claim_ratio

        assert claim_ratio(1, ["a", "b"], ["x"]) == 0.5

    def test_both_empty(self):
        from claimbench.evaluation.matching import claim_ratio

        assert claim_ratio(0, [], []) == 1.0

    def test_empty_denominator_only(self):
        from claimbench.evaluation.matching import claim_ratio

        assert claim_ratio(0, [], ["x"]) == 0.0


class TestEntailmentFlags:
    """Tests for entailment_flags."""

    @pytest.mark.asyncio
    async def test_flags_in_order(self, fake_judge, claims):
        from claimbench.evaluation.matching import entailment_flags

        flags = await entailment_flags(
            fake_judge,
            claims("a", "b", "c"),
            claims("c", "a"),
        )

        assert flags == [True, False, True]
        assert fake_judge.entailment_calls == 3

    @pytest.mark.asyncio
    async def test_empty_reference(self, fake_judge, claims):
        """Test an empty reference set entails nothing, without judge calls."""
        from claimbench.evaluation.matching import entailment_flags

        assert await entailment_flags(fake_judge, claims("a", "b"), []) == [False, False]
        assert await entailment_flags(fake_judge, [], claims("a")) == []
        assert fake_judge.entailment_calls == 0

    @pytest.mark.asyncio
    async def test_failure_cancels_siblings(self, claims):
        """Test a failing judge call cancels the other in-flight calls."""
        from claimbench.evaluation.matching import entailment_flags
        from claimbench.shared.exceptions import JudgeUnavailable

        cancelled = []

        class FailingJudge:
            async def judge_entailment(self, claim, reference):
                if claim.text == "bad":
                    raise JudgeUnavailable("down")
                try:
                    await asyncio.sleep(10)
                except asyncio.CancelledError:
                    cancelled.append(claim.text)
                    raise
                return True

        with pytest.raises(JudgeUnavailable):
            await entailment_flags(FailingJudge(), claims("slow1", "bad", "slow2"), claims("x"))

        assert sorted(cancelled) == ["slow1", "slow2"]
