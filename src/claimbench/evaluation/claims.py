"""
Claims Module - Claim extraction from free text.
================================================

Turns a passage into atomic claims via the judge and parses the judge's
structured output. Accepted item shapes:

- "plain claim text"
- ["subject", "predicate", "object"]                    (triplet)
- {"text": "...", "is_triplet": false}   (also "claim" instead of "text")
- {"subject": "...", "predicate": "...", "object": "..."}  (triplet)
"""

from typing import Any, Iterable

from claimbench.judge.judge import Judge
from claimbench.shared.exceptions import ExtractionParseError
from claimbench.shared.logging import get_logger
from claimbench.shared.schemas import Claim, ClaimSet

logger = get_logger(__name__)

_TRIPLET_KEYS = ("subject", "predicate", "object")


def parse_claim(item: Any) -> Claim:
    """
    Parse one item of a judge claim list.

    Raises:
        ExtractionParseError: If the item has none of the accepted shapes
    """
    if isinstance(item, str):
        text = item.strip()
        if text:
            return Claim(text=text)

    elif isinstance(item, (list, tuple)):
        if len(item) == 3 and all(isinstance(part, str) for part in item):
            return Claim(text=" ".join(part.strip() for part in item), is_triplet=True)

    elif isinstance(item, dict):
        if all(isinstance(item.get(key), str) for key in _TRIPLET_KEYS):
            text = " ".join(item[key].strip() for key in _TRIPLET_KEYS)
            return Claim(text=text, is_triplet=True)

        text = item.get("text", item.get("claim"))
        if isinstance(text, str) and text.strip():
            return Claim(text=text.strip(), is_triplet=bool(item.get("is_triplet", False)))

    raise ExtractionParseError(f"Unrecognised claim item: {item!r}")


def parse_claims(items: Iterable[Any]) -> ClaimSet:
    """Parse a judge claim list into Claims, preserving order."""
    return [parse_claim(item) for item in items]


def filter_triplets(claims: Iterable[Claim]) -> ClaimSet:
    """Drop triplet claims; only sentence claims take part in matching."""
    return [claim for claim in claims if not claim.is_triplet]


async def extract_claims(judge: Judge, text: str) -> ClaimSet:
    """
    Extract atomic claims from a passage.

    Args:
        judge: Judge capability
        text: Source passage

    Returns:
        Claims in extractor order (triplets included; see filter_triplets)

    Raises:
        ExtractionParseError: If the judge output is not a claim list
    """
    if not text or not text.strip():
        return []

    items = await judge.extract_claims(text)
    if not isinstance(items, list):
        raise ExtractionParseError(f"Expected a claim list, got {type(items).__name__}")

    claims = parse_claims(items)
    logger.debug(f"Extracted {len(claims)} claims from {len(text)} chars")
    return claims


class ClaimExtractor:
    """Injectable wrapper around extract_claims for the orchestrator."""

    async def extract_claims(self, judge: Judge, text: str) -> ClaimSet:
        return await extract_claims(judge, text)
