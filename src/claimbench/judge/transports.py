"""
Transports Module - Judge model backends.
=========================================

Two interchangeable backends behind the JudgeTransport protocol:

- GeminiTransport: hosted Gemini API (google-generativeai)
- OllamaTransport: locally hosted model served by Ollama (httpx)

Transports translate backend errors into JudgeTransportError (carrying the
HTTP status) or TimeoutError, which is what the retry policy inspects.
"""

import os
from typing import Optional

import httpx

from claimbench.shared.exceptions import JudgeTransportError
from claimbench.shared.logging import get_logger

logger = get_logger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Hosted Backend
# ─────────────────────────────────────────────────────────────────────────────


class GeminiTransport:
    """
    Hosted judge backend using the Gemini API.

    Example:
        >>> transport = GeminiTransport(model_name="gemini-1.5-pro")
        >>> text = await transport.complete("Say hello")
    """

    def __init__(
        self,
        model_name: str = "gemini-1.5-pro",
        temperature: float = 0.0,
        max_output_tokens: int = 2048,
        api_key: Optional[str] = None,
    ):
        self.model_name = model_name
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.api_key = api_key or os.getenv("GEMINI_API_KEY")

        self._model = None

    @property
    def model(self):
        """Lazy-load the Gemini model."""
        if self._model is None:
            if not self.api_key:
                raise ValueError(
                    "Gemini API key not found. Set GEMINI_API_KEY environment variable."
                )
            import google.generativeai as genai

            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(
                model_name=self.model_name,
                generation_config={
                    "temperature": self.temperature,
                    "max_output_tokens": self.max_output_tokens,
                    "response_mime_type": "application/json",
                },
            )
            logger.debug(f"Gemini judge model loaded: {self.model_name}")
        return self._model

    async def complete(self, prompt: str) -> str:
        from google.api_core import exceptions as google_exceptions

        try:
            response = await self.model.generate_content_async(prompt)
        except google_exceptions.GoogleAPICallError as e:
            raise JudgeTransportError(str(e.message or e), status_code=e.code) from e

        return response.text


# ─────────────────────────────────────────────────────────────────────────────
# Local Backend
# ─────────────────────────────────────────────────────────────────────────────


class OllamaTransport:
    """
    Locally hosted judge backend using the Ollama chat API.

    Example:
        >>> transport = OllamaTransport(model_name="llama3.1:8b")
        >>> text = await transport.complete("Say hello")
    """

    def __init__(
        self,
        model_name: str = "llama3.1:8b",
        base_url: str = "http://localhost:11434",
        temperature: float = 0.0,
        max_output_tokens: int = 2048,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the transport.

        Args:
            model_name: Ollama model tag
            base_url: Ollama server URL
            temperature: Sampling temperature
            max_output_tokens: Maximum tokens to generate
            client: Optional pre-built AsyncClient, closed by aclose()
        """
        self.model_name = model_name
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-create the HTTP client (timeouts are enforced by the resilient client)."""
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=None)
        return self._client

    async def complete(self, prompt: str) -> str:
        payload = {
            "model": self.model_name,
            "messages": [{"role": "user", "content": prompt}],
            "stream": False,
            "format": "json",
            "options": {
                "temperature": self.temperature,
                "num_predict": self.max_output_tokens,
            },
        }

        try:
            response = await self.client.post("/api/chat", json=payload)
        except httpx.TimeoutException as e:
            raise TimeoutError(f"Ollama request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise JudgeTransportError(f"Ollama request failed: {e}") from e

        if response.status_code != 200:
            raise JudgeTransportError(
                f"Ollama API error: {response.text}", status_code=response.status_code
            )

        try:
            return response.json()["message"]["content"]
        except (ValueError, KeyError, TypeError) as e:
            raise JudgeTransportError(f"Unexpected Ollama response: {response.text[:200]}") from e

    async def aclose(self) -> None:
        """Close the HTTP client; an owned client is re-created on next use."""
        if self._client is None:
            return
        await self._client.aclose()
        if self._owns_client:
            self._client = None
