"""
Runner Module - Evaluation orchestrator.
========================================

Runs the full evaluation for every ground-truth question, one at a time:
1. Ask the pipeline under test for an answer and its context chunks
2. Extract claims from every chunk, the ground truth and the answer (concurrently)
3. Run the LLM evaluator and the three claim evaluators (concurrently)
4. Build the question report

Then averages all question reports into an EvaluationReport.

A failure anywhere aborts the run unless failure isolation is enabled, in
which case the failing question is recorded and skipped. Cancellation always
aborts the run.
"""

import asyncio
import time
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from claimbench.evaluation.aggregation import summarize
from claimbench.evaluation.claims import ClaimExtractor, filter_triplets
from claimbench.evaluation.generation import GenerationClaimEvaluator
from claimbench.evaluation.ground_truth import load_ground_truth
from claimbench.evaluation.llm_evaluator import LLMEvaluator
from claimbench.evaluation.overall import OverallClaimEvaluator
from claimbench.evaluation.pipeline import RagPipeline
from claimbench.evaluation.retrieval import RetrievalClaimEvaluator
from claimbench.judge.judge import Judge
from claimbench.shared.exceptions import PipelineFailure
from claimbench.shared.logging import get_logger
from claimbench.shared.schemas import (
    ContextChunk,
    EvaluationReport,
    QuestionFailure,
    QuestionReport,
)
from claimbench.shared.utils import gather_or_cancel

logger = get_logger(__name__)

GroundTruthSource = str | Path | Iterable[tuple[str, str]]


class EvaluationState(str, Enum):
    """Lifecycle of one evaluation run."""

    IDLE = "idle"
    LOADING_GROUND_TRUTH = "loading_ground_truth"
    PER_QUESTION = "per_question"
    AGGREGATING = "aggregating"
    DONE = "done"


# ─────────────────────────────────────────────────────────────────────────────
# Evaluator
# ─────────────────────────────────────────────────────────────────────────────


class Evaluator:
    """
    Evaluates RAG pipeline responses against a ground-truth dataset.

    Example:
        >>> evaluator = Evaluator()
        >>> report = await evaluator.evaluate(pipeline, "data/ground_truth.json")
        >>> print(report.summary())
    """

    def __init__(
        self,
        judge: Optional[Judge] = None,
        claim_extractor: Optional[ClaimExtractor] = None,
        llm_evaluator: Optional[LLMEvaluator] = None,
        overall_claim_evaluator: Optional[OverallClaimEvaluator] = None,
        retrieval_claim_evaluator: Optional[RetrievalClaimEvaluator] = None,
        generation_claim_evaluator: Optional[GenerationClaimEvaluator] = None,
        isolate_failures: Optional[bool] = None,
        settings=None,
    ):
        """
        Initialize the evaluator.

        Args:
            judge: Judge capability (lazy-built from settings if None)
            claim_extractor: Claim extractor
            llm_evaluator: Direct LLM evaluator
            overall_claim_evaluator: Overall claim evaluator
            retrieval_claim_evaluator: Retrieval claim evaluator
            generation_claim_evaluator: Generation claim evaluator
            isolate_failures: Skip failing questions instead of aborting
                (default from ``evaluation.isolate_failures``)
            settings: Settings used for defaults (default: global settings)
        """
        self._judge = judge
        self._settings = settings
        self.claim_extractor = claim_extractor or ClaimExtractor()
        self.llm_evaluator = llm_evaluator or LLMEvaluator()
        self.overall_claim_evaluator = overall_claim_evaluator or OverallClaimEvaluator()
        self.retrieval_claim_evaluator = retrieval_claim_evaluator or RetrievalClaimEvaluator()
        self.generation_claim_evaluator = generation_claim_evaluator or GenerationClaimEvaluator()

        if isolate_failures is None:
            isolate_failures = self.settings.evaluation.isolate_failures
        self.isolate_failures = isolate_failures

        self.state = EvaluationState.IDLE

    @property
    def settings(self):
        """Lazy-load settings."""
        if self._settings is None:
            from claimbench.shared.config import get_settings

            self._settings = get_settings()
        return self._settings

    @property
    def judge(self) -> Judge:
        """Lazy-build the judge from settings."""
        if self._judge is None:
            from claimbench.judge.judge import create_judge

            self._judge = create_judge(self.settings)
        return self._judge

    def _transition(self, state: EvaluationState) -> None:
        logger.debug(f"Evaluation state: {self.state.value} -> {state.value}")
        self.state = state

    async def evaluate(
        self,
        pipeline: RagPipeline,
        ground_truth: GroundTruthSource,
        progress_callback=None,
    ) -> EvaluationReport:
        """
        Evaluate a pipeline on every ground-truth question.

        Args:
            pipeline: Pipeline under test
            ground_truth: Path to a dataset file, or (question, answer) pairs
            progress_callback: Optional callback(current, question)

        Returns:
            EvaluationReport

        Raises:
            EmptyReportSet: If no question produced a report
            PipelineFailure, JudgeUnavailable, JudgeResponseError: First fatal error
        """
        self._transition(EvaluationState.LOADING_GROUND_TRUTH)
        if isinstance(ground_truth, (str, Path)):
            ground_truth = load_ground_truth(ground_truth)

        self._transition(EvaluationState.PER_QUESTION)
        start_time = time.time()
        question_reports: list[QuestionReport] = []
        failed_questions: list[QuestionFailure] = []

        for i, (question, ground_truth_answer) in enumerate(ground_truth, 1):
            if progress_callback:
                progress_callback(i, question)

            logger.info(f"Evaluating question {i}: {question}")
            try:
                report = await self.evaluate_question(pipeline, question, ground_truth_answer)
            except Exception as e:
                if not self.isolate_failures:
                    raise
                logger.error(f"Error evaluating question {question!r}: {e}")
                failed_questions.append(QuestionFailure(question=question, error=str(e)))
                continue

            question_reports.append(report)

        self._transition(EvaluationState.AGGREGATING)
        evaluation_report = summarize(question_reports, failed_questions)

        self._transition(EvaluationState.DONE)
        logger.info(
            f"Evaluation complete in {time.time() - start_time:.1f}s: "
            f"{evaluation_report.num_questions} questions, {len(failed_questions)} failed"
        )
        logger.debug(f"EvaluationReport: {evaluation_report.model_dump_json(indent=2)}")
        return evaluation_report

    async def evaluate_question(
        self,
        pipeline: RagPipeline,
        question: str,
        ground_truth_answer: str,
    ) -> QuestionReport:
        """Evaluate a single question."""
        judge = self.judge

        try:
            generated_answer, raw_contexts = await pipeline.generate(question)
        except Exception as e:
            raise PipelineFailure(question, e) from e

        contexts = [
            c if isinstance(c, ContextChunk) else ContextChunk(context=c) for c in raw_contexts
        ]
        logger.info(f"Generated answer: {generated_answer}")

        logger.info(f"Extracting claims for {len(contexts)} chunks and both answers")
        extracted = await gather_or_cancel(
            *(self.claim_extractor.extract_claims(judge, c.context) for c in contexts),
            self.claim_extractor.extract_claims(judge, ground_truth_answer),
            self.claim_extractor.extract_claims(judge, generated_answer),
        )
        chunk_claim_sets = [filter_triplets(claims) for claims in extracted[: len(contexts)]]
        ground_truth_claims = filter_triplets(extracted[-2])
        generated_claims = filter_triplets(extracted[-1])
        context_claims = [claim for claims in chunk_claim_sets for claim in claims]

        logger.info(f"Generating reports for question: {question}")
        llm_report, overall_report, retrieval_report, generation_report = await gather_or_cancel(
            self.llm_evaluator.evaluate(
                judge,
                question,
                "\n".join(c.context for c in contexts),
                generated_answer,
                ground_truth_answer,
            ),
            self.overall_claim_evaluator.evaluate(judge, generated_claims, ground_truth_claims),
            self.retrieval_claim_evaluator.evaluate(judge, ground_truth_claims, context_claims),
            self.generation_claim_evaluator.evaluate_generator_metrics(
                judge,
                context_claims,
                chunk_claim_sets,
                generated_claims,
                ground_truth_claims,
            ),
        )

        return QuestionReport(
            question=question,
            llm_report=llm_report,
            overall_claim_report=overall_report,
            retrieval_claim_report=retrieval_report,
            generation_claim_report=generation_report,
        )

    def evaluate_sync(
        self,
        pipeline: RagPipeline,
        ground_truth: GroundTruthSource,
        progress_callback=None,
    ) -> EvaluationReport:
        """Run evaluate() in a fresh event loop, closing the judge backend afterwards."""

        async def run() -> EvaluationReport:
            try:
                return await self.evaluate(pipeline, ground_truth, progress_callback)
            finally:
                await self.aclose()

        return asyncio.run(run())

    async def aclose(self) -> None:
        """Close the judge backend, if one was built and it holds resources."""
        close = getattr(self._judge, "aclose", None)
        if close is not None:
            await close()


# ─────────────────────────────────────────────────────────────────────────────
# Convenience Functions
# ─────────────────────────────────────────────────────────────────────────────


def run_evaluation(
    pipeline: RagPipeline,
    ground_truth: GroundTruthSource,
    output_path: Optional[str | Path] = None,
    judge: Optional[Judge] = None,
) -> EvaluationReport:
    """
    Run an evaluation from synchronous code.

    Args:
        pipeline: Pipeline under test
        ground_truth: Path to a dataset file, or (question, answer) pairs
        output_path: Optional path to save the report as JSON
        judge: Judge capability (default: built from settings)

    Returns:
        EvaluationReport
    """
    evaluator = Evaluator(judge=judge)
    report = evaluator.evaluate_sync(pipeline, ground_truth)

    if output_path:
        report.save(output_path)
        logger.info(f"Saved evaluation report to {output_path}")

    return report
