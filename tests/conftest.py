"""
Shared fixtures for LawWise backend tests.

The Gemini API is never contacted: every test gets a ``GeminiStub`` whose
responses are served through ``httpx.MockTransport``, and the FastAPI
completion-client dependency is overridden to use it.
"""
from __future__ import annotations

import json
import os
from typing import AsyncGenerator, List, Optional

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Pin settings *before* any app module is imported
os.environ["GEMINI_API_KEY"] = "test-key"
os.environ["GEMINI_BASE_URL"] = "https://gemini.test/v1"

from app.dependencies.services import get_completion_client  # noqa: E402
from app.main import app  # noqa: E402
from app.services.completion_client import GeminiClient  # noqa: E402


# ---------------------------------------------------------------------------
# Sample completions
# ---------------------------------------------------------------------------

LEASE_COMPLETION = (
    "SUMMARY: Doc is a lease.\n"
    "KEY POINTS:\n"
    "1. Term is 12 months\n"
    "2. Rent is fixed\n"
    "LEGAL ACTS AND CLAUSES:\n"
    "LEGAL IMPLICATIONS:\n"
    "1. Binding\n"
    "RECOMMENDATIONS:\n"
    "1. Review clause"
)

FULL_COMPLETION = """\
SUMMARY:
**This is a residential rental agreement** between a landlord and a tenant.

KEY POINTS:
1. **Monthly rent** of 15,000 payable by the 5th
2. Security deposit equal to two months' rent
3. Eleven-month term with renewal option

LEGAL ACTS AND CLAUSES:
1. **Indian Contract Act, 1872**:
   Definition: Governs the formation and enforcement of contracts.
   Application: Makes the agreement enforceable between the parties.
2. Registration Act:
   Definition: Requires registration of certain leases.

LEGAL IMPLICATIONS:
1. Tenant is liable for damage beyond normal wear
2. Late payment attracts a penalty

RECOMMENDATIONS:
1. Register the agreement
2. Record the meter readings at handover
"""


def gemini_success(text: str) -> dict:
    """Build a generateContent success body carrying *text*."""
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


def gemini_error(message: str, code: int = 400) -> dict:
    return {"error": {"code": code, "message": message, "status": "FAILED"}}


# ---------------------------------------------------------------------------
# Gemini stub
# ---------------------------------------------------------------------------

class GeminiStub:
    """Serves queued responses and records every request it receives."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.status_code = 200
        self.body: object = gemini_success(LEASE_COMPLETION)
        self.raw: Optional[bytes] = None
        self.exc: Optional[Exception] = None

    def reply(self, text: str) -> None:
        self.status_code = 200
        self.body = gemini_success(text)
        self.raw = None

    def fail(self, message: str, status_code: int = 429) -> None:
        self.status_code = status_code
        self.body = gemini_error(message, status_code)
        self.raw = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        if request.method == "GET":
            return httpx.Response(200, json={"name": "models/gemini-pro"})
        if self.raw is not None:
            return httpx.Response(self.status_code, content=self.raw)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)

    def client(self) -> GeminiClient:
        return GeminiClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def gemini() -> GeminiStub:
    return GeminiStub()


@pytest.fixture
def gemini_client(gemini: GeminiStub) -> GeminiClient:
    return gemini.client()


# ---------------------------------------------------------------------------
# App client
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def client(gemini: GeminiStub) -> AsyncGenerator[AsyncClient, None]:
    """
    httpx AsyncClient wired to the FastAPI app with the completion client
    dependency overridden to use the stub.
    """
    app.dependency_overrides[get_completion_client] = gemini.client

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
