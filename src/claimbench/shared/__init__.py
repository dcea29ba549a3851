"""
Shared Module - Common utilities, configuration, schemas, and logging.
======================================================================

This module provides foundational components used across all other modules:

- config: Configuration loading and management
- logging: Structured logging setup
- exceptions: Error taxonomy
- schemas: Pydantic data models (claims and reports)
- utils: File I/O and concurrency helpers
"""

from claimbench.shared.config import get_settings, Settings
from claimbench.shared.logging import get_logger, setup_logging
from claimbench.shared.exceptions import (
    ClaimBenchError,
    JudgeTransportError,
    JudgeUnavailable,
    JudgeResponseError,
    ExtractionParseError,
    EmptyReportSet,
    PipelineFailure,
)
from claimbench.shared.schemas import (
    Claim,
    ClaimSet,
    ContextChunk,
    LLMEvaluationReport,
    OverallClaimReport,
    RetrievalClaimReport,
    GenerationClaimReport,
    QuestionReport,
    QuestionFailure,
    EvaluationReport,
)
from claimbench.shared.utils import (
    ensure_directory,
    gather_or_cancel,
    load_json,
    save_json,
    load_jsonl,
    load_yaml,
)

__all__ = [
    # Config
    "get_settings",
    "Settings",
    # Logging
    "get_logger",
    "setup_logging",
    # Exceptions
    "ClaimBenchError",
    "JudgeTransportError",
    "JudgeUnavailable",
    "JudgeResponseError",
    "ExtractionParseError",
    "EmptyReportSet",
    "PipelineFailure",
    # Schemas
    "Claim",
    "ClaimSet",
    "ContextChunk",
    "LLMEvaluationReport",
    "OverallClaimReport",
    "RetrievalClaimReport",
    "GenerationClaimReport",
    "QuestionReport",
    "QuestionFailure",
    "EvaluationReport",
    # Utils
    "ensure_directory",
    "gather_or_cancel",
    "load_json",
    "save_json",
    "load_jsonl",
    "load_yaml",
]
