"""
Overall Claim Evaluator - Precision, recall and F1 over answer claims.
======================================================================

precision = generated claims entailed by the ground truth / |generated|
recall    = ground-truth claims entailed by the answer    / |ground truth|
f1        = 2 * precision * recall / (precision + recall), 0 when both are 0
"""

from typing import Sequence

from claimbench.evaluation.matching import claim_ratio, entailment_flags
from claimbench.judge.judge import Judge
from claimbench.shared.logging import get_logger
from claimbench.shared.schemas import Claim, OverallClaimReport
from claimbench.shared.utils import gather_or_cancel

logger = get_logger(__name__)


def f1_score(precision: float, recall: float) -> float:
    """Harmonic mean of precision and recall (0.0 when both are 0)."""
    if precision + recall == 0:
        return 0.0
    return 2 * precision * recall / (precision + recall)


class OverallClaimEvaluator:
    """Compares generated-answer claims with ground-truth claims."""

    async def evaluate(
        self,
        judge: Judge,
        generated_claims: Sequence[Claim],
        ground_truth_claims: Sequence[Claim],
    ) -> OverallClaimReport:
        supported_generated, supported_truth = await gather_or_cancel(
            entailment_flags(judge, generated_claims, ground_truth_claims),
            entailment_flags(judge, ground_truth_claims, generated_claims),
        )

        precision = claim_ratio(sum(supported_generated), generated_claims, ground_truth_claims)
        recall = claim_ratio(sum(supported_truth), ground_truth_claims, generated_claims)

        report = OverallClaimReport(
            precision=precision,
            recall=recall,
            f1_score=f1_score(precision, recall),
        )
        logger.debug(f"Overall claims: {report}")
        return report
