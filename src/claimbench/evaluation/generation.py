"""
Generation Claim Evaluator - How the generator used (or ignored) its context.
=============================================================================

For each generated claim g:
- in_context: g is entailed by the pooled context claims
- correct:    g is entailed by the ground-truth claims

A context chunk is relevant when its claims entail at least one ground-truth
claim. A generated claim is traced to a chunk when that chunk's claims alone
entail it. Noise sensitivity is measured per chunk rather than over the pool.

Metrics (ratios over |generated| unless noted):
- faithfulness:                 in_context
- hallucination:                not in_context and not correct
- self_knowledge_score:         correct and not in_context
- relevant_noise_sensitivity:   not correct, traced to a relevant chunk
- irrelevant_noise_sensitivity: not correct, traced to an irrelevant chunk
- context_utilization:          context claims entailed by the answer / |context|
"""

from dataclasses import dataclass
from typing import Sequence

from claimbench.evaluation.matching import claim_ratio, entailment_flags
from claimbench.judge.judge import Judge
from claimbench.shared.logging import get_logger
from claimbench.shared.schemas import Claim, GenerationClaimReport
from claimbench.shared.utils import gather_or_cancel

logger = get_logger(__name__)


@dataclass
class ChunkJudgement:
    """Entailment results between one context chunk and the answer/truth."""

    relevant: bool
    traced: list[bool]


async def _judge_chunk(
    judge: Judge,
    chunk_claims: Sequence[Claim],
    generated_claims: Sequence[Claim],
    ground_truth_claims: Sequence[Claim],
) -> ChunkJudgement:
    truth_flags, traced = await gather_or_cancel(
        entailment_flags(judge, ground_truth_claims, chunk_claims),
        entailment_flags(judge, generated_claims, chunk_claims),
    )
    return ChunkJudgement(relevant=any(truth_flags), traced=traced)


class GenerationClaimEvaluator:
    """Computes generator metrics from pooled and per-chunk context claims."""

    async def evaluate_generator_metrics(
        self,
        judge: Judge,
        context_claims: Sequence[Claim],
        chunk_claim_sets: Sequence[Sequence[Claim]],
        generated_claims: Sequence[Claim],
        ground_truth_claims: Sequence[Claim],
    ) -> GenerationClaimReport:
        """
        Evaluate the generator.

        Args:
            judge: Judge capability
            context_claims: Claims pooled over all context chunks
            chunk_claim_sets: Claims of each context chunk, in chunk order
            generated_claims: Claims of the generated answer
            ground_truth_claims: Claims of the ground-truth answer

        Returns:
            GenerationClaimReport
        """
        in_context, correct, utilized, *chunks = await gather_or_cancel(
            entailment_flags(judge, generated_claims, context_claims),
            entailment_flags(judge, generated_claims, ground_truth_claims),
            entailment_flags(judge, context_claims, generated_claims),
            *(
                _judge_chunk(judge, chunk_claims, generated_claims, ground_truth_claims)
                for chunk_claims in chunk_claim_sets
            ),
        )

        hallucinated = 0
        self_known = 0
        relevant_noise = 0
        irrelevant_noise = 0

        for i in range(len(generated_claims)):
            if not in_context[i] and not correct[i]:
                hallucinated += 1
            if correct[i] and not in_context[i]:
                self_known += 1
            if correct[i]:
                continue
            if any(chunk.relevant and chunk.traced[i] for chunk in chunks):
                relevant_noise += 1
            if any(not chunk.relevant and chunk.traced[i] for chunk in chunks):
                irrelevant_noise += 1

        supported_anywhere = list(context_claims) + list(ground_truth_claims)

        report = GenerationClaimReport(
            faithfulness=claim_ratio(sum(in_context), generated_claims, context_claims),
            relevant_noise_sensitivity=claim_ratio(
                relevant_noise, generated_claims, context_claims
            ),
            irrelevant_noise_sensitivity=claim_ratio(
                irrelevant_noise, generated_claims, context_claims
            ),
            hallucination=claim_ratio(hallucinated, generated_claims, supported_anywhere),
            self_knowledge_score=claim_ratio(self_known, generated_claims, ground_truth_claims),
            context_utilization=claim_ratio(sum(utilized), context_claims, generated_claims),
        )
        logger.debug(f"Generation claims: {report}")
        return report
