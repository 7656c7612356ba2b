"""
Gateway to the Gemini generation backend.

The gateway never raises for backend trouble. Every call ends in one of
three explicit outcomes and the caller decides what each one means:

- OK: reply text extracted from the first candidate
- PARSE_FAILURE: the backend answered but without usable text; the fixed
  apology reply is returned in its place
- TRANSPORT_FAILURE: the call itself failed (network, non-2xx, timeout,
  open circuit)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from google import genai
from google.genai import types

from src.circuit_breaker import CircuitBreaker
from src.config import settings
from src.observability import trace_span

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "Sorry, I couldn't find that information."


class GenerationStatus(Enum):
    OK = "ok"
    PARSE_FAILURE = "parse_failure"
    TRANSPORT_FAILURE = "transport_failure"


@dataclass(frozen=True)
class GenerationResult:
    status: GenerationStatus
    text: str = ""
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.status == GenerationStatus.TRANSPORT_FAILURE


class GenerationTransportError(RuntimeError):
    """Raised by the request handler when generation could not be reached."""


def extract_reply(response: Any) -> str | None:
    """First candidate's first text part, or None if the shape is off."""
    try:
        text = response.candidates[0].content.parts[0].text
    except (AttributeError, IndexError, KeyError, TypeError):
        return None
    return text or None


class GenerationGateway:
    """
    Sends a composed prompt to Gemini and extracts the reply.

    The google-genai client is created on first use so the service can
    start (and serve structured intents) without an API key.
    """

    def __init__(
        self,
        client: genai.Client | None = None,
        model: str | None = None,
        circuit_breaker: CircuitBreaker | None = None,
    ):
        self._client = client
        self.model = model or settings.gemini_model
        self.circuit_breaker = circuit_breaker or CircuitBreaker(
            failure_threshold=settings.circuit_breaker_failure_threshold,
            timeout=settings.circuit_breaker_timeout,
            name="GenerationCircuitBreaker",
        )

    def _get_client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(
                api_key=settings.gemini_api_key,
                http_options=types.HttpOptions(timeout=settings.generation_timeout_ms),
            )
        return self._client

    async def _generate_content(self, prompt: str):
        client = self._get_client()
        return await client.aio.models.generate_content(
            model=self.model,
            contents=[types.Content(role="user", parts=[types.Part(text=prompt)])],
        )

    async def generate(self, prompt: str) -> GenerationResult:
        """
        Run one generation call.

        Args:
            prompt: Fully composed prompt text

        Returns:
            GenerationResult with status OK, PARSE_FAILURE or TRANSPORT_FAILURE
        """
        try:
            with trace_span("generation", model=self.model, prompt_chars=len(prompt)):
                response = await self.circuit_breaker.call(self._generate_content, prompt)
        except Exception as e:
            logger.error(f"Generation call failed: {str(e)}", exc_info=True)
            return GenerationResult(GenerationStatus.TRANSPORT_FAILURE, error=str(e))

        text = extract_reply(response)
        if text is None:
            logger.warning("Generation response had no candidate text; using fallback reply")
            return GenerationResult(GenerationStatus.PARSE_FAILURE, text=FALLBACK_REPLY)

        return GenerationResult(GenerationStatus.OK, text=text)

    def get_circuit_breaker_state(self) -> dict:
        """Get circuit breaker state for monitoring."""
        return self.circuit_breaker.get_state()
