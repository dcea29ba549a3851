"""
Evaluation Module - Claim-based RAG evaluation.
===============================================

Components:
- claims: Claim extraction and triplet filtering
- matching: Entailment counting and the empty-set ratio policy
- llm_evaluator: Holistic judge scores
- overall: Precision / recall / F1 over answer claims
- retrieval: Claim recall and context precision
- generation: Faithfulness, noise sensitivity, hallucination, self-knowledge,
  context utilization
- aggregation: Averaging question reports
- ground_truth: Question/answer datasets
- pipeline: Contract for the pipeline under test
- runner: Evaluation orchestrator

Example:
    >>> from claimbench.evaluation import Evaluator
    >>> evaluator = Evaluator()
    >>> report = evaluator.evaluate_sync(pipeline, "data/ground_truth.json")
    >>> print(report.summary())
"""

from claimbench.evaluation.claims import (
    ClaimExtractor,
    extract_claims,
    filter_triplets,
    parse_claims,
)
from claimbench.evaluation.matching import claim_ratio, entailment_flags
from claimbench.evaluation.llm_evaluator import LLMEvaluator
from claimbench.evaluation.overall import OverallClaimEvaluator, f1_score
from claimbench.evaluation.retrieval import RetrievalClaimEvaluator
from claimbench.evaluation.generation import GenerationClaimEvaluator
from claimbench.evaluation.aggregation import average_reports, summarize
from claimbench.evaluation.ground_truth import GroundTruthDataset, load_ground_truth
from claimbench.evaluation.pipeline import RagPipeline, load_pipeline
from claimbench.evaluation.runner import (
    EvaluationState,
    Evaluator,
    run_evaluation,
)

__all__ = [
    # Claims
    "ClaimExtractor",
    "extract_claims",
    "filter_triplets",
    "parse_claims",
    # Matching
    "claim_ratio",
    "entailment_flags",
    # Evaluators
    "LLMEvaluator",
    "OverallClaimEvaluator",
    "f1_score",
    "RetrievalClaimEvaluator",
    "GenerationClaimEvaluator",
    # Aggregation
    "average_reports",
    "summarize",
    # Inputs
    "GroundTruthDataset",
    "load_ground_truth",
    "RagPipeline",
    "load_pipeline",
    # Runner
    "EvaluationState",
    "Evaluator",
    "run_evaluation",
]
