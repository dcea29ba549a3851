"""
claimbench - Claim-based evaluation for RAG pipelines
=====================================================

Evaluates a retrieval-augmented generation pipeline's answers against a
ground-truth question/answer set using an LLM judge:

- Direct LLM scores (groundedness, relevance, coherence, fluency, ...)
- Overall claim metrics (precision, recall, F1)
- Retrieval claim metrics (claim recall, context precision)
- Generation claim metrics (faithfulness, noise sensitivity, hallucination,
  self-knowledge, context utilization)

Workflow: ask the pipeline → extract claims from answers and contexts →
judge entailment between claim sets → aggregate per-question reports.
"""

__version__ = "0.1.0"
__author__ = "claimbench Team"
__license__ = "MIT"

# Public API - lazy imports to avoid circular dependencies and speed up startup
__all__ = [
    # Version info
    "__version__",
    "__author__",
    "__license__",
    # Main modules (imported on demand)
    "shared",
    "judge",
    "evaluation",
    "cli",
]
