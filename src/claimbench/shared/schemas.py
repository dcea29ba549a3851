"""
Schemas Module - Pydantic data models for the application.
==========================================================

Defines all data contracts used across the application:
- Claims and context chunks
- The four per-question report types
- Per-question and whole-run evaluation reports

All models are immutable once constructed.
"""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


# ─────────────────────────────────────────────────────────────────────────────
# Claim Data Models
# ─────────────────────────────────────────────────────────────────────────────


class Claim(BaseModel):
    """
    An atomic factual statement extracted from a passage of text.

    Triplet claims (subject, predicate, object) are produced by some judge
    outputs but are never used by the matching algorithms.
    """

    text: str = Field(..., description="Claim text")
    is_triplet: bool = Field(default=False, description="Whether the claim is a (s, p, o) triplet")

    model_config = {"frozen": True}


class ContextChunk(BaseModel):
    """One retrieved passage returned by the pipeline under test."""

    context: str = Field(..., description="Passage text")

    model_config = {"frozen": True}


# Claims extracted from one source text, in extractor order
ClaimSet = list[Claim]


# ─────────────────────────────────────────────────────────────────────────────
# Report Models
# ─────────────────────────────────────────────────────────────────────────────


def _ratio(description: str) -> Any:
    return Field(..., ge=0.0, le=1.0, description=description)


class LLMEvaluationReport(BaseModel):
    """Holistic judge scores for one answer (judge scale, 1-5)."""

    groundedness: float = Field(..., description="Answer is grounded in the context")
    relevance: float = Field(..., description="Answer addresses the question")
    coherence: float = Field(..., description="Answer reads as a coherent whole")
    fluency: float = Field(..., description="Answer is well-formed language")
    retrieval_score: float = Field(..., description="Context is useful for the question")
    similarity: float = Field(..., description="Answer matches the ground truth")

    model_config = {"frozen": True}


class OverallClaimReport(BaseModel):
    """Claim-level agreement between generated and ground-truth answers."""

    precision: float = _ratio("Generated claims entailed by ground truth")
    recall: float = _ratio("Ground-truth claims entailed by the generated answer")
    f1_score: float = _ratio("Harmonic mean of precision and recall")

    model_config = {"frozen": True}


class RetrievalClaimReport(BaseModel):
    """Claim-level quality of the retrieved context."""

    claim_recall: float = _ratio("Ground-truth claims entailed by the context")
    context_precision: float = _ratio("Context claims entailed by the ground truth")

    model_config = {"frozen": True}


class GenerationClaimReport(BaseModel):
    """Claim-level quality of the generator given its context."""

    faithfulness: float = _ratio("Generated claims entailed by the context")
    relevant_noise_sensitivity: float = _ratio("Incorrect claims traced to relevant chunks")
    irrelevant_noise_sensitivity: float = _ratio("Incorrect claims traced to irrelevant chunks")
    hallucination: float = _ratio("Generated claims supported by neither context nor truth")
    self_knowledge_score: float = _ratio("Correct claims not found in the context")
    context_utilization: float = _ratio("Context claims reflected in the answer")

    model_config = {"frozen": True}


class QuestionReport(BaseModel):
    """All four reports for one evaluated question."""

    question: str
    llm_report: LLMEvaluationReport
    overall_claim_report: OverallClaimReport
    retrieval_claim_report: RetrievalClaimReport
    generation_claim_report: GenerationClaimReport

    model_config = {"frozen": True}


class QuestionFailure(BaseModel):
    """A question skipped because its evaluation failed (isolation mode only)."""

    question: str
    error: str

    model_config = {"frozen": True}


class EvaluationReport(BaseModel):
    """
    Terminal artifact of one evaluation run.

    Holds every per-question report in evaluation order plus the
    field-by-field average of each report type.
    """

    question_reports: list[QuestionReport]
    average_llm_report: LLMEvaluationReport
    average_overall_claim_report: OverallClaimReport
    average_retrieval_claim_report: RetrievalClaimReport
    average_generation_claim_report: GenerationClaimReport
    failed_questions: list[QuestionFailure] = Field(default_factory=list)

    model_config = {"frozen": True}

    @property
    def num_questions(self) -> int:
        """Number of questions that produced a report."""
        return len(self.question_reports)

    def averages(self) -> dict[str, BaseModel]:
        """Averaged reports keyed by report family."""
        return {
            "llm": self.average_llm_report,
            "overall_claim": self.average_overall_claim_report,
            "retrieval_claim": self.average_retrieval_claim_report,
            "generation_claim": self.average_generation_claim_report,
        }

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return self.model_dump(mode="json")

    def save(self, path: str | Path) -> None:
        """Save the report to a JSON file."""
        from claimbench.shared.utils import save_json

        save_json(path, self.to_dict())

    def summary(self) -> str:
        """Generate a plain-text summary of the averaged metrics."""
        lines = [
            "=" * 50,
            "EVALUATION REPORT",
            "=" * 50,
            f"Questions: {self.num_questions}",
        ]
        if self.failed_questions:
            lines.append(f"Failed: {len(self.failed_questions)}")

        for family, report in self.averages().items():
            lines.append("")
            lines.append(f"{family}:")
            for name, value in report.model_dump().items():
                lines.append(f"  {name}: {value:.3f}")

        lines.append("=" * 50)
        return "\n".join(lines)
