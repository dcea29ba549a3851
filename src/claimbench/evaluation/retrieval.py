"""
Retrieval Claim Evaluator - How well the retrieved context covers the truth.
============================================================================

claim_recall      = ground-truth claims entailed by the context / |ground truth|
context_precision = context claims entailed by the ground truth  / |context|
"""

from typing import Sequence

from claimbench.evaluation.matching import claim_ratio, entailment_flags
from claimbench.judge.judge import Judge
from claimbench.shared.logging import get_logger
from claimbench.shared.schemas import Claim, RetrievalClaimReport
from claimbench.shared.utils import gather_or_cancel

logger = get_logger(__name__)


class RetrievalClaimEvaluator:
    """Compares ground-truth claims with claims pooled from all context chunks."""

    async def evaluate(
        self,
        judge: Judge,
        ground_truth_claims: Sequence[Claim],
        context_claims: Sequence[Claim],
    ) -> RetrievalClaimReport:
        truth_in_context, context_in_truth = await gather_or_cancel(
            entailment_flags(judge, ground_truth_claims, context_claims),
            entailment_flags(judge, context_claims, ground_truth_claims),
        )

        report = RetrievalClaimReport(
            claim_recall=claim_ratio(sum(truth_in_context), ground_truth_claims, context_claims),
            context_precision=claim_ratio(
                sum(context_in_truth), context_claims, ground_truth_claims
            ),
        )
        logger.debug(f"Retrieval claims: {report}")
        return report
