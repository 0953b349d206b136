"""Presentation assembler — phrases the verdict and builds the final response."""

from __future__ import annotations

import asyncio
import logging
from typing import Mapping

from trustlens.collaborators.base import PresentationFormatter
from trustlens.errors import PresentationFailure
from trustlens.models.assessment import (
    AnalysisLabel,
    FusedAssessment,
    Presentation,
    UnifiedResponse,
)
from trustlens.models.request import ContentType
from trustlens.models.signals import SignalPayload, SignalSource

logger = logging.getLogger(__name__)

MAX_ONE_LINE_CHARS = 160

LABEL_VERDICTS = {
    AnalysisLabel.RED: "high-risk content, likely false or harmful",
    AnalysisLabel.ORANGE: "significant concerns that need verification",
    AnalysisLabel.YELLOW: "mixed or partially verified information",
    AnalysisLabel.GREEN: "no significant risk indicators found",
}

BASE_INSIGHT = (
    "Verify claims through multiple independent sources, check publication dates, "
    "examine author credentials, and cross-reference with established fact-checking "
    "organizations."
)

LABEL_INSIGHTS = {
    AnalysisLabel.RED: " This content shows high-risk indicators: do not share it before checking.",
    AnalysisLabel.ORANGE: " Treat this content with caution until the flagged concerns are resolved.",
    AnalysisLabel.YELLOW: " Parts of this content could not be confirmed; read laterally before relying on it.",
    AnalysisLabel.GREEN: " Even well-supported content deserves a quick source check before sharing.",
}


class Presenter:
    """Turns a fused assessment and its label into a ``UnifiedResponse``.

    Phrasing is delegated to the formatter collaborator. Scores and sources
    always come straight from the assessment; when the formatter is missing
    or fails, deterministic templated text is used.
    """

    def __init__(self, formatter: PresentationFormatter | None, timeout: float = 15.0) -> None:
        self.formatter = formatter
        self.timeout = timeout

    async def present(
        self,
        assessment: FusedAssessment,
        label: AnalysisLabel,
        content_type: ContentType,
        signals: Mapping[SignalSource, SignalPayload],
        language: str | None = None,
    ) -> UnifiedResponse:
        if assessment.degraded:
            presentation = degraded_presentation(content_type)
        else:
            try:
                presentation = await self._phrase(assessment, label, content_type, signals, language)
            except Exception as exc:
                logger.error("Presentation phrasing failed, using template: %s", exc)
                presentation = templated_presentation(assessment, label, content_type)

        return UnifiedResponse(
            analysis_label=label,
            one_line_description=to_one_line(presentation.one_line_description),
            summary=presentation.summary,
            educational_insight=presentation.educational_insight,
            sources=assessment.evidence,
            source_integrity_score=assessment.source_integrity_score,
            content_authenticity_score=assessment.content_authenticity_score,
            trust_explainability_score=assessment.trust_explainability_score,
        )

    async def _phrase(
        self,
        assessment: FusedAssessment,
        label: AnalysisLabel,
        content_type: ContentType,
        signals: Mapping[SignalSource, SignalPayload],
        language: str | None,
    ) -> Presentation:
        if self.formatter is None:
            raise PresentationFailure("No presentation formatter configured")
        try:
            presentation = await asyncio.wait_for(
                self.formatter.format(
                    content_type, label, signals, list(assessment.evidence), language
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as exc:
            raise PresentationFailure(f"Formatter timed out after {self.timeout:g}s") from exc

        texts = (
            presentation.one_line_description,
            presentation.summary,
            presentation.educational_insight,
        )
        if not all((text or "").strip() for text in texts):
            raise PresentationFailure("Formatter returned blank text")
        return presentation


def to_one_line(text: str) -> str:
    line = " ".join(text.split())
    if len(line) > MAX_ONE_LINE_CHARS:
        return line[: MAX_ONE_LINE_CHARS - 1] + "…"
    return line


def templated_presentation(
    assessment: FusedAssessment, label: AnalysisLabel, content_type: ContentType
) -> Presentation:
    """Deterministic text built from the label, the gaps and the top evidence item."""
    kind = content_type.value.capitalize()
    verdict = LABEL_VERDICTS[label]
    one_line = f"{kind} analysis completed: {label.value}, {verdict}."

    parts = [
        f"Analysis of {content_type.value} content combined "
        f"{assessment.succeeded} of {assessment.attempted} signals.",
        f"Source integrity {assessment.source_integrity_score}/100, "
        f"content authenticity {assessment.content_authenticity_score}/100.",
    ]
    if assessment.evidence:
        top = assessment.evidence[0]
        parts.append(
            f'The most credible corroborating source is "{top.title}" ({top.url}).'
        )
    else:
        parts.append("No corroborating sources were found.")
    if assessment.information_gaps:
        parts.append("Gaps: " + "; ".join(assessment.information_gaps) + ".")

    return Presentation(
        one_line_description=one_line,
        summary=" ".join(parts),
        educational_insight="Key protection strategies: " + BASE_INSIGHT + LABEL_INSIGHTS[label],
    )


def degraded_presentation(content_type: ContentType) -> Presentation:
    kind = content_type.value
    return Presentation(
        one_line_description=f"{kind.capitalize()} could not be assessed: no analysis signal was available.",
        summary=(
            f"None of the analysis services could assess this {kind} content, so it is "
            "neither confirmed safe nor unsafe. Scores are zero because no signal was "
            "available, not because the content was judged untrustworthy."
        ),
        educational_insight=(
            "When automated checks are unavailable, verify the content manually. "
            + BASE_INSIGHT
        ),
    )
