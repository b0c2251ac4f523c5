"""
Section extraction for free-text document analyses.

The model is asked for five headed sections (see prompt_builder). This module
slices its answer into spans using literal header anchors and turns each span
into typed items. Sections are extracted independently: a missing or mangled
section never affects the others, and no input makes extraction raise.

Spans are located with plain substring search over an ordered table of
``(header, terminator)`` pairs. The search is not anchored to line starts, so
a header phrase used inside prose can move a boundary (known limitation).

Public API
----------
extract_sections(completion)     -> ExtractedSections
extract_summary(completion)      -> str
extract_list_section(completion, section) -> SectionResult[str]
extract_legal_acts(completion)   -> SectionResult[LegalActEntry]
"""
from __future__ import annotations

import dataclasses
import enum
import logging
import re
from typing import Generic, List, Optional, Tuple, TypeVar, Union

from app.utils.helpers import (
    is_numbered_item,
    strip_emphasis,
    strip_number_prefix,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_SUMMARY = "No summary available"

# Splits the legal-acts span on every ASCII "N." marker, wherever it appears
_ITEM_BOUNDARY = re.compile(r"[0-9]+\.")

_DEFINITION_LABEL = "Definition:"
_APPLICATION_LABEL = "Application:"


# ---------------------------------------------------------------------------
# Sections and their anchors
# ---------------------------------------------------------------------------

class Section(str, enum.Enum):
    SUMMARY = "summary"
    KEY_POINTS = "key_points"
    LEGAL_ACTS = "legal_acts"
    LEGAL_IMPLICATIONS = "legal_implications"
    RECOMMENDATIONS = "recommendations"


@dataclasses.dataclass(frozen=True)
class Anchor:
    """Where a section's span starts and stops inside the completion."""

    header: str
    terminator: Optional[str]  # None: the span runs to the end of the text


# Some terminators carry the trailing colon and some do not.
ANCHORS = {
    Section.SUMMARY: Anchor("SUMMARY:", "KEY POINTS:"),
    Section.KEY_POINTS: Anchor("KEY POINTS:", "LEGAL ACTS AND CLAUSES"),
    Section.LEGAL_ACTS: Anchor("LEGAL ACTS AND CLAUSES:", "LEGAL IMPLICATIONS:"),
    Section.LEGAL_IMPLICATIONS: Anchor("LEGAL IMPLICATIONS:", "RECOMMENDATIONS"),
    Section.RECOMMENDATIONS: Anchor("RECOMMENDATIONS:", None),
}


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclasses.dataclass(frozen=True)
class LegalActEntry:
    """One act or clause named by the model."""

    name: str
    definition: str = ""
    application: str = ""


@dataclasses.dataclass(frozen=True)
class Parsed(Generic[T]):
    """A section that produced at least one item."""

    items: Tuple[T, ...]


@dataclasses.dataclass(frozen=True)
class Empty:
    """A section that was missing or had no usable items."""

    section: Section


SectionResult = Union[Parsed[T], Empty]


@dataclasses.dataclass(frozen=True)
class ExtractedSections:
    """Intermediate output handed to the result assembler."""

    summary: str
    key_points: SectionResult[str]
    legal_acts: SectionResult[LegalActEntry]
    legal_implications: SectionResult[str]
    recommendations: SectionResult[str]


# ---------------------------------------------------------------------------
# Span location
# ---------------------------------------------------------------------------

def find_span(completion: str, anchor: Anchor) -> Optional[str]:
    """
    Return the text between *anchor.header* and the first *anchor.terminator*
    after it, or to the end of *completion* when there is no terminator.

    Returns None when the header does not occur at all. Only the first
    occurrence of the header is used.
    """
    start = completion.find(anchor.header)
    if start == -1:
        return None
    start += len(anchor.header)

    end = len(completion)
    if anchor.terminator is not None:
        stop = completion.find(anchor.terminator, start)
        if stop != -1:
            end = stop
    return completion[start:end]


# ---------------------------------------------------------------------------
# Per-section extraction
# ---------------------------------------------------------------------------

def extract_summary(completion: str) -> str:
    """Return the summary paragraph, or DEFAULT_SUMMARY when there is none."""
    span = find_span(completion, ANCHORS[Section.SUMMARY])
    if span is None:
        return DEFAULT_SUMMARY
    summary = strip_emphasis(span).strip()
    return summary or DEFAULT_SUMMARY


def _numbered_items(span: str) -> List[str]:
    # Unnumbered lines are dropped, never merged into the previous item
    items: List[str] = []
    for raw_line in span.strip().split("\n"):
        line = raw_line.strip()
        if not line or not is_numbered_item(line):
            continue
        item = strip_emphasis(strip_number_prefix(line)).strip()
        items.append(item)
    return items


def extract_list_section(completion: str, section: Section) -> SectionResult[str]:
    """
    Extract the numbered items of a plain list section.

    Only lines starting with ``N.`` count as items; the number and any
    asterisks are removed.
    """
    span = find_span(completion, ANCHORS[section])
    if span is None:
        logger.debug("extract_list_section: %s header not found", section.value)
        return Empty(section)

    items = _numbered_items(span)
    if not items:
        return Empty(section)
    return Parsed(tuple(items))


def _labelled_value(lines: List[str], label: str) -> str:
    """Value after *label* on the first line that starts with it, else ""."""
    for line in lines:
        if line.startswith(label):
            return strip_emphasis(line.replace(label, "", 1)).strip()
    return ""


def _parse_legal_act(chunk: str) -> Optional[LegalActEntry]:
    lines = [line.strip() for line in chunk.strip().split("\n")]
    name = strip_emphasis(lines[0].replace(":", "", 1)).strip()
    definition = _labelled_value(lines, _DEFINITION_LABEL)
    application = _labelled_value(lines, _APPLICATION_LABEL)

    if not name or not (definition or application):
        return None
    return LegalActEntry(name=name, definition=definition, application=application)


def extract_legal_acts(completion: str) -> SectionResult[LegalActEntry]:
    """
    Extract the acts/clauses section.

    Each item spans several lines (name, ``Definition:``, ``Application:``),
    so the span is split on ``N.`` markers rather than newlines. Text before
    the first marker is ignored. An entry needs a name plus at least one of
    definition or application.
    """
    span = find_span(completion, ANCHORS[Section.LEGAL_ACTS])
    if span is None:
        return Empty(Section.LEGAL_ACTS)

    chunks = _ITEM_BOUNDARY.split(span.strip())[1:]
    entries: List[LegalActEntry] = []
    for chunk in chunks:
        entry = _parse_legal_act(chunk)
        if entry is not None:
            entries.append(entry)

    if not entries:
        return Empty(Section.LEGAL_ACTS)
    return Parsed(tuple(entries))


def extract_sections(completion: str) -> ExtractedSections:
    """Run every section extractor over one completion."""
    sections = ExtractedSections(
        summary=extract_summary(completion),
        key_points=extract_list_section(completion, Section.KEY_POINTS),
        legal_acts=extract_legal_acts(completion),
        legal_implications=extract_list_section(
            completion, Section.LEGAL_IMPLICATIONS
        ),
        recommendations=extract_list_section(completion, Section.RECOMMENDATIONS),
    )
    logger.info(
        "extract_sections: key_points=%d legal_acts=%d implications=%d "
        "recommendations=%d",
        _count(sections.key_points),
        _count(sections.legal_acts),
        _count(sections.legal_implications),
        _count(sections.recommendations),
    )
    return sections


def _count(result: SectionResult) -> int:
    return len(result.items) if isinstance(result, Parsed) else 0
