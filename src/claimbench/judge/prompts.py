"""
Prompts Module - Prompt templates for the LLM judge.
====================================================

Prompt text is configuration data: the defaults below can be replaced by a
YAML file (``judge.prompts_file`` in settings) with the same keys.

Templates use ``str.format`` placeholders; literal braces are doubled.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from claimbench.shared.logging import get_logger
from claimbench.shared.utils import load_yaml

logger = get_logger(__name__)


CLAIM_EXTRACTION_PROMPT = """You decompose text into atomic factual claims.

An atomic claim is a short, self-contained statement that asserts exactly one
fact and can be judged true or false on its own. Resolve pronouns so every
claim stands alone. Do not add facts that are not in the text.

If a fact is best expressed as a knowledge triplet, you may return it as
{{"subject": "...", "predicate": "...", "object": "..."}}.

TEXT:
{text}

Respond with ONLY a JSON object of the form:
{{"claims": [{{"text": "<claim>"}}, {{"text": "<claim>"}}]}}"""


ENTAILMENT_PROMPT = """You check whether a claim is supported by a set of reference claims.

The claim is ENTAILED if its truth follows from the reference claims taken
together. It is NOT entailed if the references contradict it or say nothing
about it.

REFERENCE CLAIMS:
{references}

CLAIM:
{claim}

Respond with ONLY a JSON object: {{"entailed": true}} or {{"entailed": false}}"""


SCORING_PROMPT = """You evaluate an answer produced by a retrieval-augmented generation system.

QUESTION:
{question}

RETRIEVED CONTEXT:
{context}

GENERATED ANSWER:
{generated}

GROUND TRUTH ANSWER:
{ground_truth}

Rate each aspect on an integer scale from 1 (worst) to 5 (best):
- groundedness: the generated answer is supported by the retrieved context
- relevance: the generated answer addresses the question
- coherence: the generated answer is logically organised and consistent
- fluency: the generated answer is grammatical, natural language
- retrieval_score: the retrieved context contains what is needed to answer
- similarity: the generated answer conveys the same meaning as the ground truth

Respond with ONLY a JSON object:
{{"groundedness": <1-5>, "relevance": <1-5>, "coherence": <1-5>, "fluency": <1-5>, "retrieval_score": <1-5>, "similarity": <1-5>}}"""


class PromptTemplates(BaseModel):
    """Prompt templates used by the LLM judge."""

    claim_extraction: str = CLAIM_EXTRACTION_PROMPT
    entailment: str = ENTAILMENT_PROMPT
    scoring: str = SCORING_PROMPT

    model_config = {"frozen": True}

    def build_extraction(self, text: str) -> str:
        return self.claim_extraction.format(text=text)

    def build_entailment(self, claim: str, references: list[str]) -> str:
        numbered = "\n".join(f"{i}. {ref}" for i, ref in enumerate(references, 1))
        return self.entailment.format(claim=claim, references=numbered)

    def build_scoring(
        self,
        question: str,
        context: str,
        generated: str,
        ground_truth: str,
    ) -> str:
        return self.scoring.format(
            question=question,
            context=context,
            generated=generated,
            ground_truth=ground_truth,
        )


def load_prompts(path: Optional[str | Path] = None) -> PromptTemplates:
    """
    Load prompt templates, overriding defaults with a YAML file if given.

    Args:
        path: YAML file with any of ``claim_extraction``, ``entailment``, ``scoring``

    Returns:
        PromptTemplates
    """
    if not path:
        return PromptTemplates()

    data = load_yaml(path) or {}
    logger.info(f"Loaded judge prompts from {path}")
    return PromptTemplates(**data)
