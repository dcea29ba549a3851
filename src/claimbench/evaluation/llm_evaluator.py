"""
LLM Evaluator Module - Holistic judge scores without claim extraction.
======================================================================
"""

from claimbench.judge.judge import Judge
from claimbench.shared.logging import get_logger
from claimbench.shared.schemas import LLMEvaluationReport

logger = get_logger(__name__)


class LLMEvaluator:
    """Scores an answer directly with a single judge call."""

    async def evaluate(
        self,
        judge: Judge,
        question: str,
        joined_context: str,
        generated_answer: str,
        ground_truth_answer: str,
    ) -> LLMEvaluationReport:
        """
        Score groundedness, relevance, coherence, fluency, retrieval and similarity.

        Args:
            judge: Judge capability
            question: Question asked to the pipeline
            joined_context: All context chunks, newline-separated, in pipeline order
            generated_answer: Pipeline answer
            ground_truth_answer: Reference answer

        Returns:
            LLMEvaluationReport on the judge's scale
        """
        scores = await judge.score(
            question,
            joined_context,
            generated_answer,
            ground_truth_answer,
        )
        report = LLMEvaluationReport(**scores)
        logger.debug(f"LLM scores: {report}")
        return report
