"""
Judge Module - Access to the external LLM judge.
================================================

Components:
- client: RetryPolicy and ResilientJudgeClient (timeout + retry)
- transports: Hosted (Gemini) and local (Ollama) backends
- prompts: Prompt templates as configuration data
- judge: LLMJudge implementing the judge capability, create_judge factory
"""

from claimbench.judge.client import (
    JudgeTransport,
    ResilientJudgeClient,
    RetryPolicy,
)
from claimbench.judge.prompts import PromptTemplates, load_prompts
from claimbench.judge.judge import (
    Judge,
    LLMJudge,
    SCORE_FIELDS,
    create_judge,
    create_transport,
    parse_json_response,
)

__all__ = [
    # Client
    "JudgeTransport",
    "ResilientJudgeClient",
    "RetryPolicy",
    # Prompts
    "PromptTemplates",
    "load_prompts",
    # Judge
    "Judge",
    "LLMJudge",
    "SCORE_FIELDS",
    "create_judge",
    "create_transport",
    "parse_json_response",
]
