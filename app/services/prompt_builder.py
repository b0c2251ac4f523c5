"""
Prompt templates for the Gemini completion service.

All prompts are module-level constants so they can be tuned without touching
logic code. Builders are pure functions: same input, same prompt.

Public API
----------
truncate_document(text, limit)       -> (text, truncated)
build_analysis_prompt(document_text) -> str
format_analysis_prompt(content)      -> str
build_chat_prompt(message)           -> str
"""
from __future__ import annotations

from typing import Optional, Tuple

from app.config import settings

# Appended to a document cut at MAX_DOCUMENT_CHARS
TRUNCATION_MARKER = "... (content truncated for length)"

# Section headers in the order the model is asked to emit them
SECTION_HEADERS: Tuple[str, ...] = (
    "SUMMARY",
    "KEY POINTS",
    "LEGAL ACTS AND CLAUSES",
    "LEGAL IMPLICATIONS",
    "RECOMMENDATIONS",
)


# ---------------------------------------------------------------------------
# Prompt templates: edit these to tune model output without touching logic
# ---------------------------------------------------------------------------

_ANALYSIS_PROMPT = """\
Analyze this document and provide a structured analysis with all sections marked clearly:

SUMMARY:
Brief overview of the document (2-3 sentences)

KEY POINTS:
1.
2.
3.

LEGAL ACTS AND CLAUSES:
1. [Act/Clause Name]:
   Definition: [Brief definition]
   Application: [How it applies to this document]
2. [Act/Clause Name]:
   Definition: [Brief definition]
   Application: [How it applies to this document]

LEGAL IMPLICATIONS:
1.
2.
3.

RECOMMENDATIONS:
1.
2.
3.

Content: {content}"""

_CHAT_PROMPT = """\
You are Saarthi, a helpful legal assistant chatbot for the LawWise website. \
You should always identify yourself as Saarthi in your responses. The website \
offers document analysis and legal assistance services. Answer the following \
question in a helpful and professional manner. If the question is about legal \
matters, provide accurate information and cite relevant laws or regulations \
when possible. If the question is about the website's functionality, explain \
the features clearly. Do not use asterisks or markdown formatting in your response.

User question: {message}

Please provide a clear and concise response without any special formatting characters."""


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def truncate_document(text: str, limit: Optional[int] = None) -> Tuple[str, bool]:
    """
    Cut *text* to at most *limit* characters, appending TRUNCATION_MARKER.

    Returns ``(text, truncated)``. Text at or under the limit is returned
    unchanged.
    """
    limit = settings.MAX_DOCUMENT_CHARS if limit is None else limit
    if len(text) <= limit:
        return text, False
    return text[:limit] + TRUNCATION_MARKER, True


def format_analysis_prompt(content: str) -> str:
    """Embed already-truncated *content* as the last part of the analysis prompt."""
    return _ANALYSIS_PROMPT.format(content=content)


def build_analysis_prompt(document_text: str, limit: Optional[int] = None) -> str:
    """Return the five-section analysis prompt with the document appended last."""
    content, _truncated = truncate_document(document_text, limit)
    return format_analysis_prompt(content)


def build_chat_prompt(message: str) -> str:
    """Return the assistant prompt for a single user question."""
    return _CHAT_PROMPT.format(message=message)
