"""
Pytest Configuration and Fixtures.
===================================

Shared fixtures for all test modules:
- Deterministic in-memory judge
- Scripted judge transport and recording sleep
- Fake RAG pipelines
- Temporary directories
"""

import tempfile
from pathlib import Path
from typing import Generator

import pytest


def _normalize(text: str) -> str:
    return " ".join(text.lower().strip().rstrip(".").split())


# ─────────────────────────────────────────────────────────────────────────────
# Fakes
# ─────────────────────────────────────────────────────────────────────────────


class FakeJudge:
    """
    Judge that needs no model.

    Claims are the sentences of a text; a claim is entailed when a reference
    claim has the same normalized text.
    """

    def __init__(self, scores: dict | None = None):
        self.scores = scores or {
            "groundedness": 4.0,
            "relevance": 5.0,
            "coherence": 4.0,
            "fluency": 5.0,
            "retrieval_score": 3.0,
            "similarity": 4.0,
        }
        self.extraction_calls: list[str] = []
        self.entailment_calls = 0
        self.score_calls = 0

    async def extract_claims(self, text: str) -> list:
        self.extraction_calls.append(text)
        return [s.strip() for s in text.split(".") if s.strip()]

    async def judge_entailment(self, claim, claims) -> bool:
        self.entailment_calls += 1
        return _normalize(claim.text) in {_normalize(c.text) for c in claims}

    async def score(self, question, context, generated, ground_truth) -> dict:
        self.score_calls += 1
        return dict(self.scores)


class ScriptedTransport:
    """Judge transport that plays back one outcome per attempt."""

    def __init__(self, outcomes: list):
        self.outcomes = list(outcomes)
        self.prompts: list[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        if callable(outcome):
            return await outcome()
        return outcome


class RecordingSleep:
    """Async sleep replacement that records the requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class StaticPipeline:
    """RAG pipeline returning a canned answer and context per question."""

    def __init__(self, answers: dict[str, tuple[str, list[str]]]):
        self.answers = answers
        self.questions: list[str] = []

    async def generate(self, question: str):
        from claimbench.shared.schemas import ContextChunk

        self.questions.append(question)
        answer, contexts = self.answers[question]
        if isinstance(answer, BaseException):
            raise answer
        return answer, [ContextChunk(context=c) for c in contexts]


# ─────────────────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def fake_judge() -> FakeJudge:
    """Deterministic judge."""
    return FakeJudge()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    """Sleep that returns immediately and records delays."""
    return RecordingSleep()


@pytest.fixture
def scripted_transport():
    """Factory for transports with a fixed sequence of outcomes."""
    return ScriptedTransport


@pytest.fixture
def static_pipeline():
    """Factory for canned pipelines."""
    return StaticPipeline


@pytest.fixture
def claims():
    """Factory turning strings into Claims."""
    from claimbench.shared.schemas import Claim

    def _make(*texts: str):
        return [Claim(text=t) for t in texts]

    return _make


@pytest.fixture
def sample_ground_truth() -> list[dict]:
    """Small question/answer dataset."""
    return [
        {
            "question": "What is the capital of France?",
            "answer": "Paris is the capital of France.",
        },
        {
            "question": "Where is the Eiffel Tower?",
            "answer": "The Eiffel Tower is in Paris. It was completed in 1889.",
        },
    ]
