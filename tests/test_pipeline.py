import pytest

from conftest import FACT_FALSE, HARMFUL, MALWARE, Fake, make_bundle
from trustlens.errors import InvalidInput
from trustlens.models.assessment import AnalysisLabel
from trustlens.models.request import ContentType, ImageRequest, TextRequest, UrlRequest
from trustlens.orchestrator.pipeline import UnifiedAnalyzer


@pytest.mark.asyncio
async def test_false_harmful_claim_is_red():
    analyzer = UnifiedAnalyzer(
        make_bundle(
            safety=Fake(HARMFUL),
            fact_checker=Fake(FACT_FALSE),
            web_analyzer=Fake(error=RuntimeError("search down")),
            credibility=Fake(error=RuntimeError("quota")),
        )
    )
    response = await analyzer.analyze_unified(TextRequest(text="Vaccines cause autism"))
    assert response.content_authenticity_score < 30
    assert response.analysis_label is AnalysisLabel.RED


@pytest.mark.asyncio
async def test_flagged_url_is_at_least_orange():
    failing = Fake(error=RuntimeError("unavailable"))
    analyzer = UnifiedAnalyzer(
        make_bundle(
            url_reputation=Fake(MALWARE),
            safety=failing,
            fact_checker=failing,
            web_analyzer=failing,
            credibility=failing,
            formatter=None,
        )
    )
    response = await analyzer.analyze_unified(UrlRequest(url="http://malware.example/x"))
    assert response.source_integrity_score < 35
    assert response.analysis_label.rank <= AnalysisLabel.ORANGE.rank
    assert "safety-classification signal unavailable (failed)" in response.summary


@pytest.mark.asyncio
async def test_benign_well_supported_text_is_green(bundle):
    response = await UnifiedAnalyzer(bundle).analyze_unified(
        TextRequest(text="Water boils at 100 degrees Celsius at sea level")
    )
    assert response.analysis_label is AnalysisLabel.GREEN
    assert response.trust_explainability_score > 80
    assert [s.credibility_score for s in response.sources] == [85, 85, 80, 80]


@pytest.mark.asyncio
async def test_all_sources_failing_gives_degraded_yellow(png_base64):
    failing = Fake(error=RuntimeError("down"))
    analyzer = UnifiedAnalyzer(
        make_bundle(safety=failing, synthetic_detector=failing, credibility=failing)
    )
    response = await analyzer.analyze_unified(ImageRequest(data=png_base64))
    assert response.analysis_label is AnalysisLabel.YELLOW
    assert (
        response.source_integrity_score,
        response.content_authenticity_score,
        response.trust_explainability_score,
    ) == (0, 0, 0)
    assert response.sources == ()


@pytest.mark.asyncio
async def test_invalid_input_skips_dispatch(bundle):
    with pytest.raises(InvalidInput):
        await UnifiedAnalyzer(bundle).analyze_unified(UrlRequest(url="not a url"))
    assert bundle.safety.calls == []
    assert bundle.url_reputation.calls == []


@pytest.mark.asyncio
async def test_identical_requests_give_identical_responses(bundle):
    analyzer = UnifiedAnalyzer(bundle)
    request = TextRequest(text="The moon landing happened in 1969")
    assert await analyzer.analyze_unified(request) == await analyzer.analyze_unified(request)


@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["http://[::1", "https://[bad/path"])
async def test_malformed_ipv6_host_is_invalid_input(bundle, url):
    with pytest.raises(InvalidInput):
        await UnifiedAnalyzer(bundle).analyze_unified(UrlRequest(url=url))
    assert bundle.safety.calls == []


@pytest.mark.asyncio
async def test_fetched_url_is_scored_for_credibility_by_its_address():
    clients = make_bundle(page_reader=Fake("Page body text about things"))
    await UnifiedAnalyzer(clients).analyze_unified(UrlRequest(url="https://example.com/a"))
    assert clients.credibility.calls == [("https://example.com/a", ContentType.URL)]
