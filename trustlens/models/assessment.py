"""Fused assessment, label and unified response models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class AnalysisLabel(Enum):
    RED = "RED"
    ORANGE = "ORANGE"
    YELLOW = "YELLOW"
    GREEN = "GREEN"

    @property
    def rank(self) -> int:
        """Ordinal position, 0 for the most severe label."""
        return _LABEL_RANK[self]


_LABEL_RANK = {
    AnalysisLabel.RED: 0,
    AnalysisLabel.ORANGE: 1,
    AnalysisLabel.YELLOW: 2,
    AnalysisLabel.GREEN: 3,
}


@dataclass(frozen=True)
class EvidenceSource:
    """A source URL backing the verdict."""

    url: str
    title: str
    credibility_score: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "title": self.title,
            "credibilityScore": self.credibility_score,
        }


@dataclass(frozen=True)
class FusedAssessment:
    source_integrity_score: int
    content_authenticity_score: int
    trust_explainability_score: int
    evidence: tuple[EvidenceSource, ...] = ()
    information_gaps: tuple[str, ...] = ()
    attempted: int = 0
    succeeded: int = 0
    degraded: bool = False


@dataclass(frozen=True)
class Presentation:
    """Natural-language phrasing returned by the presentation collaborator."""

    one_line_description: str
    summary: str
    educational_insight: str
    sources: tuple[dict[str, Any], ...] = field(default=(), compare=False)


@dataclass(frozen=True)
class UnifiedResponse:
    analysis_label: AnalysisLabel
    one_line_description: str
    summary: str
    educational_insight: str
    sources: tuple[EvidenceSource, ...]
    source_integrity_score: int
    content_authenticity_score: int
    trust_explainability_score: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "analysisLabel": self.analysis_label.value,
            "oneLineDescription": self.one_line_description,
            "summary": self.summary,
            "educationalInsight": self.educational_insight,
            "sources": [source.to_dict() for source in self.sources],
            "sourceIntegrityScore": self.source_integrity_score,
            "contentAuthenticityScore": self.content_authenticity_score,
            "trustExplainabilityScore": self.trust_explainability_score,
        }
