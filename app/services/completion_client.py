"""
Gemini text-completion client.

Wraps the ``models/{model}:generateContent`` REST endpoint with httpx. A call
either returns the first candidate's text or raises one of the classified
``CompletionError`` subclasses below. Nothing is retried: a failure is
terminal for the request that triggered it.

Public API
----------
GeminiClient.generate(prompt, max_output_tokens) -> str
GeminiClient.check_health()                      -> bool
"""
from __future__ import annotations

import dataclasses
import logging
from typing import Any, Dict, Optional

import httpx
from fastapi import status

from app.config import settings
from app.utils.helpers import preview

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class CompletionError(Exception):
    """Base class for every failed completion call."""

    kind: str = "completion_error"
    status_code: int = status.HTTP_502_BAD_GATEWAY

    def __init__(self, user_message: str, service_message: str = "") -> None:
        super().__init__(user_message)
        self.user_message = user_message
        self.service_message = service_message


class QuotaExceededError(CompletionError):
    kind = "quota_exceeded"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, service_message: str = "") -> None:
        super().__init__(
            "The document analysis service is currently unavailable due to high "
            "demand. Please try again in a few minutes or contact support if the "
            "issue persists.",
            service_message,
        )


class RateLimitedError(CompletionError):
    kind = "rate_limited"
    status_code = status.HTTP_429_TOO_MANY_REQUESTS

    def __init__(self, service_message: str = "") -> None:
        super().__init__(
            "Too many requests. Please wait a moment and try again.",
            service_message,
        )


class InvalidServiceResponseError(CompletionError):
    kind = "invalid_response"

    def __init__(self, service_message: str = "") -> None:
        super().__init__("Invalid response format from API", service_message)


class TransportFailureError(CompletionError):
    """Any other unsuccessful call; carries the service's own message when present."""

    kind = "transport_failure"

    def __init__(self, service_message: str = "") -> None:
        super().__init__(
            service_message or "Failed to analyze document",
            service_message,
        )


def classify_service_error(message: str) -> CompletionError:
    """
    Map a service error message onto the error hierarchy.

    Matching is case-sensitive. "quota" is checked before "rate limit", so a
    message mentioning both is a quota failure.
    """
    if "quota" in message:
        return QuotaExceededError(message)
    if "rate limit" in message:
        return RateLimitedError(message)
    return TransportFailureError(message)


# ---------------------------------------------------------------------------
# Generation config
# ---------------------------------------------------------------------------

@dataclasses.dataclass(frozen=True)
class GenerationConfig:
    """Sampling parameters sent with every request."""

    temperature: float = 0.7
    top_k: int = 40
    top_p: float = 0.95
    max_output_tokens: int = 800

    @classmethod
    def from_settings(cls, max_output_tokens: int) -> "GenerationConfig":
        return cls(
            temperature=settings.GENERATION_TEMPERATURE,
            top_k=settings.GENERATION_TOP_K,
            top_p=settings.GENERATION_TOP_P,
            max_output_tokens=max_output_tokens,
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "temperature": self.temperature,
            "topK": self.top_k,
            "topP": self.top_p,
            "maxOutputTokens": self.max_output_tokens,
        }


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class GeminiClient:
    """
    Stateless client for the Gemini REST API.

    Each call opens its own ``httpx.AsyncClient``; the coroutine can be
    cancelled like any other asyncio task, and ``GEMINI_TIMEOUT`` bounds a
    single call. *transport* lets tests plug in ``httpx.MockTransport``.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = settings.GEMINI_API_KEY if api_key is None else api_key
        self.base_url = (base_url or settings.GEMINI_BASE_URL).rstrip("/")
        self.model = model or settings.GEMINI_MODEL
        self.timeout = httpx.Timeout(
            float(timeout or settings.GEMINI_TIMEOUT), connect=10.0
        )
        self._transport = transport

    @property
    def generate_url(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    def _headers(self) -> Dict[str, str]:
        # Kept out of the URL so request logs never contain the key
        return {"x-goog-api-key": self.api_key}

    async def generate(
        self,
        prompt: str,
        max_output_tokens: int = 800,
        config: Optional[GenerationConfig] = None,
    ) -> str:
        """
        Send *prompt* and return the first candidate's first text part.

        Raises:
            QuotaExceededError:          service reported a quota problem.
            RateLimitedError:            service reported rate limiting.
            InvalidServiceResponseError: 2xx body without candidate text.
            TransportFailureError:       any other failure (HTTP or network).
        """
        config = config or GenerationConfig.from_settings(max_output_tokens)
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": config.to_payload(),
        }

        try:
            async with self._http_client() as client:
                resp = await client.post(
                    self.generate_url,
                    headers=self._headers(),
                    json=body,
                )
        except httpx.TimeoutException as exc:
            logger.error("generate: request timed out after %.0f s", self.timeout.read)
            raise TransportFailureError(
                "The analysis service did not respond in time."
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("generate: transport error — %s", exc)
            raise TransportFailureError(
                "Could not reach the analysis service."
            ) from exc

        if not resp.is_success:
            message = _error_message(resp)
            logger.error(
                "generate: Gemini returned HTTP %d: %s",
                resp.status_code,
                preview(message, 300),
            )
            raise classify_service_error(message)

        text = _first_candidate_text(resp)
        if text is None:
            logger.error(
                "generate: response without candidate text: %s",
                preview(resp.text, 300),
            )
            raise InvalidServiceResponseError(preview(resp.text, 300))

        logger.info(
            "generate: %d chars in, %d chars out", len(prompt), len(text)
        )
        return text

    async def check_health(self) -> bool:
        """Return True if the configured model can be described by the service."""
        try:
            async with self._http_client() as client:
                resp = await client.get(
                    f"{self.base_url}/models/{self.model}",
                    headers=self._headers(),
                )
            return resp.status_code == 200
        except httpx.HTTPError as exc:
            logger.error("check_health: Gemini unreachable — %s", exc)
            return False


# ---------------------------------------------------------------------------
# Response helpers
# ---------------------------------------------------------------------------

def _error_message(resp: httpx.Response) -> str:
    """Pull ``error.message`` out of an error envelope, falling back to raw text."""
    try:
        payload = resp.json()
    except ValueError:
        return resp.text.strip()
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
    return ""


def _first_candidate_text(resp: httpx.Response) -> Optional[str]:
    """Return ``candidates[0].content.parts[0].text`` or None if any step is missing."""
    try:
        payload = resp.json()
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (ValueError, KeyError, IndexError, TypeError):
        return None
    if not isinstance(text, str) or not text:
        return None
    return text
