"""
Client Module - Resilient judge client with timeout and retry policy.
=====================================================================

Every call to the external judge goes through ResilientJudgeClient, so all
evaluators share the same behaviour:

- Per-call timeout (2 minutes by default), covering every attempt and delay
- Up to 2 retries on HTTP 401, HTTP 429 or a backend timeout
- Fixed 40 second delay between attempts (no jitter)
- Anything else propagates immediately
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, Protocol

from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_fixed,
)

from claimbench.shared.exceptions import JudgeTransportError, JudgeUnavailable
from claimbench.shared.logging import get_logger

logger = get_logger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


class JudgeTransport(Protocol):
    """A backend able to complete a prompt with the judge model."""

    async def complete(self, prompt: str) -> str:
        ...


# ─────────────────────────────────────────────────────────────────────────────
# Retry Policy
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class RetryPolicy:
    """
    Immutable retry/timeout policy for judge calls.

    Attributes:
        max_retries: Additional attempts after the first one
        delay_seconds: Fixed delay between attempts
        timeout_seconds: Deadline for the whole call, retries and delays included
        retry_status_codes: HTTP statuses considered transient
    """

    max_retries: int = 2
    delay_seconds: float = 40.0
    timeout_seconds: float = 120.0
    retry_status_codes: frozenset[int] = field(default_factory=lambda: frozenset({401, 429}))

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def should_retry(self, exc: BaseException) -> bool:
        """Whether a failed attempt is transient and worth retrying."""
        if isinstance(exc, JudgeTransportError):
            return exc.status_code in self.retry_status_codes
        return isinstance(exc, (TimeoutError, asyncio.TimeoutError))

    @classmethod
    def from_settings(cls, settings=None) -> "RetryPolicy":
        """Build the policy from the ``retry`` settings section."""
        if settings is None:
            from claimbench.shared.config import get_settings

            settings = get_settings()

        retry_config = settings.retry
        return cls(
            max_retries=retry_config.max_retries,
            delay_seconds=retry_config.delay_seconds,
            timeout_seconds=retry_config.timeout_seconds,
            retry_status_codes=frozenset(retry_config.retry_status_codes),
        )


# ─────────────────────────────────────────────────────────────────────────────
# Resilient Client
# ─────────────────────────────────────────────────────────────────────────────


class ResilientJudgeClient:
    """
    Applies a RetryPolicy around a JudgeTransport.

    The client holds no mutable state, so one instance is shared by all
    concurrent calls of an evaluation run.

    Example:
        >>> client = ResilientJudgeClient(OllamaTransport(model="llama3.1"))
        >>> text = await client.invoke("Extract the claims from ...")
    """

    def __init__(
        self,
        transport: JudgeTransport,
        policy: Optional[RetryPolicy] = None,
        sleep: Optional[SleepFunc] = None,
    ):
        """
        Initialize the client.

        Args:
            transport: Backend that talks to the judge model
            policy: Retry policy (default: RetryPolicy())
            sleep: Coroutine used to wait between attempts (default: asyncio.sleep)
        """
        self.transport = transport
        self.policy = policy or RetryPolicy()
        self._sleep = sleep or asyncio.sleep

    async def invoke(self, prompt: str) -> str:
        """
        Send a prompt to the judge and return its raw text response.

        The whole call, including retries and the delays between them, must
        finish within ``policy.timeout_seconds``.

        Raises:
            JudgeUnavailable: Retries exhausted, deadline exceeded, or a
                non-retryable transport failure
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.policy.max_attempts),
            wait=wait_fixed(self.policy.delay_seconds),
            retry=retry_if_exception(self.policy.should_retry),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            sleep=self._sleep,
        )

        try:
            return await asyncio.wait_for(
                self._invoke_with_retries(retrying, prompt),
                timeout=self.policy.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            attempts = retrying.statistics.get("attempt_number", 1)
            logger.error(
                f"Judge call exceeded {self.policy.timeout_seconds}s after {attempts} attempt(s)"
            )
            raise JudgeUnavailable(
                f"Judge call timed out after {self.policy.timeout_seconds}s",
                attempts=attempts,
            ) from e

    async def _invoke_with_retries(self, retrying: AsyncRetrying, prompt: str) -> str:
        try:
            async for attempt in retrying:
                with attempt:
                    return await self.transport.complete(prompt)
        except RetryError as e:
            last_error = e.last_attempt.exception()
            logger.error(
                f"Judge unavailable after {self.policy.max_attempts} attempts: {last_error!r}"
            )
            raise JudgeUnavailable(
                f"Judge call failed after {self.policy.max_attempts} attempts: {last_error!r}",
                attempts=self.policy.max_attempts,
            ) from last_error
        except JudgeTransportError as e:
            logger.error(f"Judge transport failed: {e}")
            raise JudgeUnavailable(f"Judge call failed: {e}") from e

        # AsyncRetrying always returns or raises above
        raise AssertionError("unreachable")

    async def aclose(self) -> None:
        """Release the transport's resources, if it holds any."""
        close = getattr(self.transport, "aclose", None)
        if close is not None:
            await close()
