"""
Matching Module - Entailment counting shared by the claim evaluators.
=====================================================================

Every claim metric is a ratio "claims of A entailed by set B / |A|".
Empty sets never raise: when A is empty the ratio is 1.0 if the reference
set is empty too (nothing to support, nothing missing) and 0.0 otherwise.
"""

from typing import Sequence

from claimbench.judge.judge import Judge
from claimbench.shared.schemas import Claim
from claimbench.shared.utils import gather_or_cancel


def claim_ratio(hits: int, denominator: Sequence, reference: Sequence) -> float:
    """
    Ratio of hits over the size of a claim set, with the empty-set policy.

    Args:
        hits: Number of claims in ``denominator`` that satisfied the metric
        denominator: Claims the ratio is taken over
        reference: Claims ``denominator`` was judged against

    Returns:
        Ratio in [0, 1]
    """
    if not denominator:
        return 1.0 if not reference else 0.0
    return hits / len(denominator)


async def entailment_flags(
    judge: Judge,
    claims: Sequence[Claim],
    reference: Sequence[Claim],
) -> list[bool]:
    """
    Judge each claim against a reference set, concurrently.

    Results are in the order of ``claims``. Nothing is entailed by an empty
    reference set, so no judge calls are made in that case.
    """
    if not claims:
        return []
    if not reference:
        return [False] * len(claims)

    return await gather_or_cancel(
        *(judge.judge_entailment(claim, reference) for claim in claims)
    )
