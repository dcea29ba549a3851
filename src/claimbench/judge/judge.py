"""
Judge Module - LLM-as-judge capability used by every evaluator.
===============================================================

The Judge protocol has three operations:

- extract_claims(text): structured claim list
- judge_entailment(claim, claims): whether the claim set supports the claim
- score(question, context, generated, ground_truth): six holistic scores

LLMJudge implements it with prompt templates sent through a
ResilientJudgeClient. create_judge() wires the hosted or local backend
selected in settings.
"""

import asyncio
import json
from typing import Any, Optional, Protocol, Sequence

from claimbench.judge.client import ResilientJudgeClient, RetryPolicy
from claimbench.judge.prompts import PromptTemplates, load_prompts
from claimbench.shared.exceptions import ExtractionParseError, JudgeResponseError
from claimbench.shared.logging import get_logger
from claimbench.shared.schemas import Claim

logger = get_logger(__name__)

SCORE_FIELDS = (
    "groundedness",
    "relevance",
    "coherence",
    "fluency",
    "retrieval_score",
    "similarity",
)


class Judge(Protocol):
    """Capability interface the evaluators depend on."""

    async def extract_claims(self, text: str) -> list[Any]:
        ...

    async def judge_entailment(self, claim: Claim, claims: Sequence[Claim]) -> bool:
        ...

    async def score(
        self,
        question: str,
        context: str,
        generated: str,
        ground_truth: str,
    ) -> dict[str, float]:
        ...


# ─────────────────────────────────────────────────────────────────────────────
# Response Parsing
# ─────────────────────────────────────────────────────────────────────────────


def parse_json_response(text: str) -> Any:
    """
    Parse JSON from a judge response.

    Handles markdown code fences and surrounding prose by taking the
    outermost JSON object or array.

    Raises:
        ValueError: If no JSON value can be decoded
    """
    text = text.strip()

    if "```json" in text:
        text = text.split("```json")[1].split("```")[0].strip()
    elif "```" in text:
        text = text.split("```")[1].split("```")[0].strip()

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    # Fall back to the outermost object or array
    for open_char, close_char in (("{", "}"), ("[", "]")):
        start = text.find(open_char)
        end = text.rfind(close_char) + 1
        if start >= 0 and end > start:
            try:
                return json.loads(text[start:end])
            except json.JSONDecodeError:
                continue

    raise ValueError(f"No JSON found in judge response: {text[:200]!r}")


def _parse_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "yes", "entailed", "supported"):
            return True
        if lowered in ("false", "no", "not entailed", "unsupported"):
            return False
    return None


# ─────────────────────────────────────────────────────────────────────────────
# LLM Judge
# ─────────────────────────────────────────────────────────────────────────────


class LLMJudge:
    """
    Judge backed by an LLM behind a ResilientJudgeClient.

    Example:
        >>> judge = LLMJudge(ResilientJudgeClient(transport))
        >>> await judge.judge_entailment(claim, reference_claims)
        True
    """

    def __init__(
        self,
        client: ResilientJudgeClient,
        prompts: Optional[PromptTemplates] = None,
        max_concurrent_calls: int = 8,
    ):
        """
        Initialize the judge.

        Args:
            client: Resilient client wrapping the judge backend
            prompts: Prompt templates (default: built-in prompts)
            max_concurrent_calls: Upper bound on in-flight judge calls
        """
        self.client = client
        self.prompts = prompts or PromptTemplates()
        self.max_concurrent_calls = max_concurrent_calls
        self._semaphore: Optional[asyncio.Semaphore] = None
        self._semaphore_loop: Optional[asyncio.AbstractEventLoop] = None

    def _get_semaphore(self) -> asyncio.Semaphore:
        # asyncio primitives are bound to a single event loop
        loop = asyncio.get_running_loop()
        if self._semaphore is None or self._semaphore_loop is not loop:
            self._semaphore = asyncio.Semaphore(self.max_concurrent_calls)
            self._semaphore_loop = loop
        return self._semaphore

    async def _invoke(self, prompt: str) -> str:
        async with self._get_semaphore():
            return await self.client.invoke(prompt)

    async def aclose(self) -> None:
        """Close the underlying judge backend."""
        await self.client.aclose()

    async def extract_claims(self, text: str) -> list[Any]:
        raw = await self._invoke(self.prompts.build_extraction(text))

        try:
            payload = parse_json_response(raw)
        except ValueError as e:
            raise ExtractionParseError(str(e), raw_response=raw) from e

        if isinstance(payload, dict):
            payload = payload.get("claims")
        if not isinstance(payload, list):
            raise ExtractionParseError(
                "Claim extraction response has no claim list", raw_response=raw
            )
        return payload

    async def judge_entailment(self, claim: Claim, claims: Sequence[Claim]) -> bool:
        if not claims:
            return False

        prompt = self.prompts.build_entailment(claim.text, [c.text for c in claims])
        raw = await self._invoke(prompt)

        try:
            payload = parse_json_response(raw)
        except ValueError as e:
            raise JudgeResponseError(str(e), raw_response=raw) from e

        value = payload.get("entailed") if isinstance(payload, dict) else payload
        verdict = _parse_bool(value)
        if verdict is None:
            raise JudgeResponseError(
                f"Entailment response has no boolean verdict: {raw[:200]!r}", raw_response=raw
            )
        return verdict

    async def score(
        self,
        question: str,
        context: str,
        generated: str,
        ground_truth: str,
    ) -> dict[str, float]:
        prompt = self.prompts.build_scoring(question, context, generated, ground_truth)
        raw = await self._invoke(prompt)

        try:
            payload = parse_json_response(raw)
        except ValueError as e:
            raise JudgeResponseError(str(e), raw_response=raw) from e

        if not isinstance(payload, dict):
            raise JudgeResponseError("Scoring response is not a JSON object", raw_response=raw)

        missing = [name for name in SCORE_FIELDS if name not in payload]
        if missing:
            raise JudgeResponseError(
                f"Scoring response is missing {', '.join(missing)}", raw_response=raw
            )

        try:
            return {name: float(payload[name]) for name in SCORE_FIELDS}
        except (TypeError, ValueError) as e:
            raise JudgeResponseError(f"Non-numeric score: {e}", raw_response=raw) from e


# ─────────────────────────────────────────────────────────────────────────────
# Factory
# ─────────────────────────────────────────────────────────────────────────────


def create_transport(settings=None):
    """Create the judge transport selected by ``judge.backend``."""
    from claimbench.judge.transports import GeminiTransport, OllamaTransport

    if settings is None:
        from claimbench.shared.config import get_settings

        settings = get_settings()

    judge_config = settings.judge
    backend = settings.get_effective_backend()

    if backend == "gemini":
        return GeminiTransport(
            model_name=settings.get_effective_model(),
            temperature=judge_config.temperature,
            max_output_tokens=judge_config.max_output_tokens,
            api_key=settings.gemini_api_key or None,
        )
    if backend == "ollama":
        return OllamaTransport(
            model_name=settings.get_effective_model(),
            base_url=judge_config.ollama_base_url,
            temperature=judge_config.temperature,
            max_output_tokens=judge_config.max_output_tokens,
        )
    raise ValueError(f"Unknown judge backend: {backend}")


def create_judge(settings=None, transport=None) -> LLMJudge:
    """
    Build an LLMJudge from settings.

    Args:
        settings: Settings instance (default: global settings)
        transport: Optional transport overriding the configured backend

    Returns:
        LLMJudge
    """
    if settings is None:
        from claimbench.shared.config import get_settings

        settings = get_settings()

    transport = transport or create_transport(settings)
    prompts_file = settings.judge.prompts_file
    prompts = load_prompts(settings.resolve_path(prompts_file) if prompts_file else None)

    logger.info(
        f"Judge initialized: backend={settings.get_effective_backend()}, "
        f"model={settings.get_effective_model()}"
    )

    return LLMJudge(
        client=ResilientJudgeClient(transport, RetryPolicy.from_settings(settings)),
        prompts=prompts,
        max_concurrent_calls=settings.judge.max_concurrent_calls,
    )
