"""Label classifier — maps fused scores to one of four ordinal labels."""

from __future__ import annotations

from trustlens.models.assessment import AnalysisLabel, FusedAssessment

RED_AUTHENTICITY = 30
ORANGE_AUTHENTICITY = 55
ORANGE_INTEGRITY = 35
YELLOW_AUTHENTICITY = 80
YELLOW_INTEGRITY = 65


def classify(
    source_integrity: float,
    content_authenticity: float,
    trust_explainability: float | None = None,
) -> AnalysisLabel:
    """First matching rule wins; lower scores never yield a safer label.

    ``trust_explainability`` is accepted for symmetry with the response but
    never shifts the label.
    """
    if content_authenticity < RED_AUTHENTICITY:
        return AnalysisLabel.RED
    if content_authenticity < ORANGE_AUTHENTICITY or source_integrity < ORANGE_INTEGRITY:
        return AnalysisLabel.ORANGE
    if content_authenticity < YELLOW_AUTHENTICITY or source_integrity < YELLOW_INTEGRITY:
        return AnalysisLabel.YELLOW
    return AnalysisLabel.GREEN


def classify_assessment(assessment: FusedAssessment) -> AnalysisLabel:
    """Label a fused assessment; a degraded one is always YELLOW (insufficient evidence)."""
    if assessment.degraded:
        return AnalysisLabel.YELLOW
    return classify(
        assessment.source_integrity_score,
        assessment.content_authenticity_score,
        assessment.trust_explainability_score,
    )
