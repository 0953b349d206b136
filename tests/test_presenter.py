import pytest

from conftest import PHRASED, SAFE, Fake
from trustlens.errors import PresentationFailure
from trustlens.models.assessment import (
    AnalysisLabel,
    EvidenceSource,
    FusedAssessment,
    Presentation,
)
from trustlens.models.request import ContentType
from trustlens.models.signals import SignalSource
from trustlens.orchestrator.presenter import MAX_ONE_LINE_CHARS, Presenter, to_one_line

EVIDENCE = (EvidenceSource(url="https://reuters.com/a", title="Reuters", credibility_score=85),)
ASSESSMENT = FusedAssessment(
    source_integrity_score=72,
    content_authenticity_score=64,
    trust_explainability_score=58,
    evidence=EVIDENCE,
    information_gaps=("fact-check signal unavailable (timed out)",),
    attempted=4,
    succeeded=3,
)
SIGNALS = {SignalSource.SAFETY: SAFE}


@pytest.mark.asyncio
async def test_formatter_phrasing_is_used_and_scores_are_verbatim():
    formatter = Fake(PHRASED)
    response = await Presenter(formatter).present(
        ASSESSMENT, AnalysisLabel.YELLOW, ContentType.TEXT, SIGNALS, language="fr"
    )
    assert response.one_line_description == PHRASED.one_line_description
    assert response.summary == PHRASED.summary
    assert response.analysis_label is AnalysisLabel.YELLOW
    assert response.sources == EVIDENCE
    assert (
        response.source_integrity_score,
        response.content_authenticity_score,
        response.trust_explainability_score,
    ) == (72, 64, 58)
    content_type, label, signals, candidates, language = formatter.calls[0]
    assert signals == SIGNALS
    assert candidates == list(EVIDENCE)
    assert language == "fr"


@pytest.mark.asyncio
async def test_formatter_sources_are_ignored():
    phrased = Presentation(
        one_line_description="x",
        summary="y",
        educational_insight="z",
        sources=({"url": "https://invented.example", "title": "Invented"},),
    )
    response = await Presenter(Fake(phrased)).present(
        ASSESSMENT, AnalysisLabel.YELLOW, ContentType.TEXT, SIGNALS
    )
    assert response.sources == EVIDENCE


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "formatter",
    [
        None,
        Fake(error=PresentationFailure("bad json")),
        Fake(error=RuntimeError("503")),
        Fake(Presentation(one_line_description="", summary="s", educational_insight="e")),
    ],
)
async def test_formatter_problems_fall_back_to_template(formatter):
    response = await Presenter(formatter).present(
        ASSESSMENT, AnalysisLabel.ORANGE, ContentType.URL, SIGNALS
    )
    assert response.analysis_label is AnalysisLabel.ORANGE
    assert response.one_line_description.startswith("Url analysis completed: ORANGE")
    assert "3 of 4 signals" in response.summary
    assert "Reuters" in response.summary
    assert "fact-check signal unavailable (timed out)" in response.summary
    assert response.educational_insight
    assert response.source_integrity_score == 72


@pytest.mark.asyncio
async def test_slow_formatter_falls_back_to_template():
    response = await Presenter(Fake(PHRASED, delay=5.0), timeout=0.05).present(
        ASSESSMENT, AnalysisLabel.GREEN, ContentType.TEXT, SIGNALS
    )
    assert response.one_line_description.startswith("Text analysis completed: GREEN")


@pytest.mark.asyncio
async def test_degraded_assessment_skips_formatter():
    formatter = Fake(PHRASED)
    degraded = FusedAssessment(0, 0, 0, degraded=True, attempted=4)
    response = await Presenter(formatter).present(
        degraded, AnalysisLabel.YELLOW, ContentType.IMAGE, {}
    )
    assert formatter.calls == []
    assert "could not be assessed" in response.one_line_description
    assert response.sources == ()


def test_one_line_is_collapsed_and_capped():
    assert to_one_line("two\nlines  here") == "two lines here"
    capped = to_one_line("word " * 100)
    assert len(capped) == MAX_ONE_LINE_CHARS
    assert capped.endswith("…")
