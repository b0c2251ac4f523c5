"""
Turns extracted sections into the final, immutable analysis result.

Empty string-list sections are replaced by a single placeholder so callers
never see an empty key-points, implications or recommendations list.
"""
from __future__ import annotations

import dataclasses
from typing import Any, Dict, Tuple

from app.services.section_extractor import (
    Empty,
    ExtractedSections,
    LegalActEntry,
    Parsed,
    Section,
    SectionResult,
)

PLACEHOLDERS = {
    Section.KEY_POINTS: "No key points available",
    Section.LEGAL_IMPLICATIONS: "No legal implications available",
    Section.RECOMMENDATIONS: "No recommendations available",
}


@dataclasses.dataclass(frozen=True)
class AnalysisResult:
    """Structured analysis of one document."""

    summary: str
    key_points: Tuple[str, ...]
    legal_acts: Tuple[LegalActEntry, ...]
    legal_implications: Tuple[str, ...]
    recommendations: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


def items_or_placeholder(result: SectionResult[str], section: Section) -> Tuple[str, ...]:
    """Return parsed items, or a one-element tuple holding the section's placeholder."""
    if isinstance(result, Parsed):
        return result.items
    return (PLACEHOLDERS[section],)


def assemble(sections: ExtractedSections) -> AnalysisResult:
    """Apply placeholder substitution and build the AnalysisResult."""
    legal_acts = sections.legal_acts
    return AnalysisResult(
        summary=sections.summary,
        key_points=items_or_placeholder(sections.key_points, Section.KEY_POINTS),
        # Acts are structured entries; an empty section stays empty
        legal_acts=() if isinstance(legal_acts, Empty) else legal_acts.items,
        legal_implications=items_or_placeholder(
            sections.legal_implications, Section.LEGAL_IMPLICATIONS
        ),
        recommendations=items_or_placeholder(
            sections.recommendations, Section.RECOMMENDATIONS
        ),
    )
