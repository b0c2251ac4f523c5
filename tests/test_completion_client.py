"""Tests for the Gemini completion client and its error classification."""
import logging

import httpx
import pytest

from app.services.completion_client import (
    CompletionError,
    GeminiClient,
    GenerationConfig,
    InvalidServiceResponseError,
    QuotaExceededError,
    RateLimitedError,
    TransportFailureError,
    classify_service_error,
)
from tests.conftest import LEASE_COMPLETION


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def test_quota_wins_over_rate_limit():
    exc = classify_service_error("rate limit reached; quota exhausted")
    assert isinstance(exc, QuotaExceededError)
    assert exc.status_code == 503


def test_quota_matched_anywhere():
    assert isinstance(
        classify_service_error("Resource exhausted: check quota for generate_content"),
        QuotaExceededError,
    )


@pytest.mark.parametrize(
    "message",
    ["Quota exceeded for metric generate_content", "Rate limit exceeded", "RATE LIMIT"],
)
def test_matching_is_case_sensitive(message):
    exc = classify_service_error(message)
    assert type(exc) is TransportFailureError
    assert exc.user_message == message


def test_rate_limit():
    exc = classify_service_error("You hit the rate limit for this model")
    assert isinstance(exc, RateLimitedError)
    assert exc.user_message == "Too many requests. Please wait a moment and try again."
    assert exc.status_code == 429


def test_other_errors_keep_service_message():
    exc = classify_service_error("API key not valid. Please pass a valid API key.")
    assert isinstance(exc, TransportFailureError)
    assert exc.user_message == "API key not valid. Please pass a valid API key."


def test_other_errors_without_message():
    exc = classify_service_error("")
    assert isinstance(exc, TransportFailureError)
    assert exc.user_message == "Failed to analyze document"


# ---------------------------------------------------------------------------
# generate()
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_generate_returns_first_candidate(gemini, gemini_client: GeminiClient):
    text = await gemini_client.generate("analyse this", max_output_tokens=800)
    assert text == LEASE_COMPLETION


@pytest.mark.asyncio
async def test_generate_request_shape(gemini, gemini_client: GeminiClient):
    await gemini_client.generate("the prompt", max_output_tokens=500)

    request = gemini.requests[-1]
    assert request.method == "POST"
    assert request.url.path == "/v1/models/gemini-pro:generateContent"
    assert request.headers["x-goog-api-key"] == "test-key"
    assert "key" not in request.url.params
    assert gemini.last_json == {
        "contents": [{"parts": [{"text": "the prompt"}]}],
        "generationConfig": {
            "temperature": 0.7,
            "topK": 40,
            "topP": 0.95,
            "maxOutputTokens": 500,
        },
    }


@pytest.mark.asyncio
async def test_generate_custom_config(gemini, gemini_client: GeminiClient):
    config = GenerationConfig(temperature=0.1, top_k=1, top_p=0.5, max_output_tokens=64)
    await gemini_client.generate("p", config=config)
    assert gemini.last_json["generationConfig"]["maxOutputTokens"] == 64


@pytest.mark.asyncio
async def test_quota_error(gemini, gemini_client: GeminiClient):
    gemini.fail("Resource has been exhausted (e.g. check quota).", status_code=429)
    with pytest.raises(QuotaExceededError):
        await gemini_client.generate("p")


@pytest.mark.asyncio
async def test_rate_limit_error(gemini, gemini_client: GeminiClient):
    gemini.fail("rate limit exceeded", status_code=429)
    with pytest.raises(RateLimitedError):
        await gemini_client.generate("p")


@pytest.mark.asyncio
async def test_http_error_surfaces_service_message(gemini, gemini_client: GeminiClient):
    gemini.fail("Model gemini-pro is not found", status_code=404)
    with pytest.raises(TransportFailureError) as info:
        await gemini_client.generate("p")
    assert info.value.user_message == "Model gemini-pro is not found"


@pytest.mark.asyncio
async def test_non_json_error_body(gemini, gemini_client: GeminiClient):
    gemini.status_code = 500
    gemini.raw = b"upstream exploded"
    with pytest.raises(TransportFailureError) as info:
        await gemini_client.generate("p")
    assert info.value.user_message == "upstream exploded"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {},
        {"candidates": []},
        {"candidates": [{"content": {}}]},
        {"candidates": [{"content": {"parts": []}}]},
        {"candidates": [{"content": {"parts": [{"text": ""}]}}]},
        {"candidates": [{"finishReason": "SAFETY"}]},
    ],
)
async def test_missing_candidate_text_is_invalid(gemini, gemini_client, body):
    gemini.body = body
    with pytest.raises(InvalidServiceResponseError) as info:
        await gemini_client.generate("p")
    assert info.value.user_message == "Invalid response format from API"


@pytest.mark.asyncio
async def test_success_with_non_json_body_is_invalid(gemini, gemini_client):
    gemini.raw = b"<html>not json</html>"
    with pytest.raises(InvalidServiceResponseError):
        await gemini_client.generate("p")


@pytest.mark.asyncio
async def test_network_failure(gemini, gemini_client: GeminiClient):
    gemini.exc = httpx.ConnectError("connection refused")
    with pytest.raises(TransportFailureError):
        await gemini_client.generate("p")


@pytest.mark.asyncio
async def test_timeout(gemini, gemini_client: GeminiClient):
    gemini.exc = httpx.ReadTimeout("slow")
    with pytest.raises(TransportFailureError) as info:
        await gemini_client.generate("p")
    assert "did not respond in time" in info.value.user_message


@pytest.mark.asyncio
async def test_no_retry_on_failure(gemini, gemini_client: GeminiClient):
    gemini.fail("rate limit", status_code=429)
    with pytest.raises(CompletionError):
        await gemini_client.generate("p")
    assert len(gemini.requests) == 1


# ---------------------------------------------------------------------------
# check_health()
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_check_health_ok(gemini, gemini_client: GeminiClient):
    assert await gemini_client.check_health() is True
    assert gemini.requests[-1].url.path == "/v1/models/gemini-pro"


@pytest.mark.asyncio
async def test_check_health_unreachable(gemini, gemini_client: GeminiClient):
    gemini.exc = httpx.ConnectError("down")
    assert await gemini_client.check_health() is False


@pytest.mark.asyncio
async def test_check_health_sends_key_header(gemini, gemini_client: GeminiClient):
    await gemini_client.check_health()
    request = gemini.requests[-1]
    assert request.headers["x-goog-api-key"] == "test-key"
    assert "key" not in request.url.params


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_api_key_never_logged(caplog, gemini, gemini_client: GeminiClient):
    caplog.set_level(logging.DEBUG)

    await gemini_client.generate("p")
    gemini.fail("rate limit exceeded", status_code=429)
    with pytest.raises(RateLimitedError):
        await gemini_client.generate("p")
    await gemini_client.check_health()

    messages = [record.getMessage() for record in caplog.records]
    assert any("generateContent" in message for message in messages)
    assert not any("test-key" in message for message in messages)
