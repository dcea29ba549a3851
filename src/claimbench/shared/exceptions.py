"""
Exceptions Module - Error taxonomy for evaluation runs.
=======================================================

- JudgeTransportError: a backend call failed (HTTP status or connection)
- JudgeUnavailable: retries exhausted or non-retryable transport failure
- JudgeResponseError: judge output could not be parsed
- ExtractionParseError: claim extraction output could not be parsed
- EmptyReportSet: aggregation over zero question reports
- PipelineFailure: the pipeline under test failed to answer
"""

from typing import Optional


class ClaimBenchError(Exception):
    """Base class for all claimbench errors."""


class JudgeTransportError(ClaimBenchError):
    """A judge backend request failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is None:
            return super().__str__()
        return f"HTTP {self.status_code}: {super().__str__()}"


class JudgeUnavailable(ClaimBenchError):
    """The judge could not be reached after applying the retry policy."""

    def __init__(self, message: str, attempts: int = 1):
        super().__init__(message)
        self.attempts = attempts


class JudgeResponseError(ClaimBenchError):
    """The judge answered, but not in the structure that was asked for."""

    def __init__(self, message: str, raw_response: str = ""):
        super().__init__(message)
        self.raw_response = raw_response


class ExtractionParseError(JudgeResponseError):
    """The judge's claim extraction output is not a list of claims."""


class EmptyReportSet(ClaimBenchError):
    """Aggregation was requested over zero question reports."""


class PipelineFailure(ClaimBenchError):
    """The RAG pipeline under test raised while answering a question."""

    def __init__(self, question: str, cause: BaseException):
        super().__init__(f"Pipeline failed for question {question!r}: {cause}")
        self.question = question
