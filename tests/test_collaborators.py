import json

import httpx
import pytest

from conftest import SAFE
from trustlens.collaborators.base import signals_to_json
from trustlens.collaborators.bundle import build_client_bundle
from trustlens.collaborators.fact_check import GeminiClaimExtractor, GeminiFactChecker
from trustlens.collaborators.gemini import GeminiClient, as_percent, parse_json_object
from trustlens.collaborators.page_fetcher import PageFetcher, html_to_text
from trustlens.collaborators.safety import GeminiSafetyAssessor
from trustlens.collaborators.speech import SpeechTranscriber
from trustlens.collaborators.translate import CloudTranslator
from trustlens.collaborators.web_analysis import sanitize_information
from trustlens.collaborators.web_risk import WebRiskClient
from trustlens.config import Settings
from trustlens.errors import CollaboratorResponseError
from trustlens.models.request import ContentType, MediaPayload
from trustlens.models.signals import FactCheckVerdict, SafetyRating, SignalSource


@pytest.fixture
def mock_http(monkeypatch):
    """Route every ``httpx.AsyncClient`` through a handler; returns the captured requests."""
    captured = []
    real_client = httpx.AsyncClient

    def install(handler):
        def recording(request):
            captured.append(request)
            return handler(request)

        def factory(**kwargs):
            return real_client(transport=httpx.MockTransport(recording), **kwargs)

        monkeypatch.setattr(httpx, "AsyncClient", factory)
        return captured

    return install


def gemini_reply(payload) -> dict:
    text = payload if isinstance(payload, str) else json.dumps(payload)
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def test_parse_json_object_handles_fences_and_trailing_commas():
    raw = '```json\n{"verdict": "False", "evidence": [1, 2,],}\n```'
    assert parse_json_object(raw) == {"verdict": "False", "evidence": [1, 2]}


def test_parse_json_object_finds_object_inside_prose():
    assert parse_json_object('Here you go: {"a": 1} hope it helps') == {"a": 1}


@pytest.mark.parametrize("raw", ["", "no json here", "[1, 2, 3]", "{broken"])
def test_parse_json_object_rejects_garbage(raw):
    with pytest.raises(CollaboratorResponseError):
        parse_json_object(raw)


def test_as_percent():
    assert as_percent(0.9, fractional=True) == pytest.approx(90.0)
    assert as_percent(85) == 85.0
    assert as_percent(150) == 100.0
    with pytest.raises(CollaboratorResponseError):
        as_percent("high")


@pytest.mark.asyncio
async def test_safety_assessor_reads_gemini_json(mock_http):
    requests = mock_http(
        lambda request: httpx.Response(
            200,
            json=gemini_reply({"safetyRating": "harmful", "confidenceScore": 0.8, "topics": ["health"]}),
        )
    )
    assessor = GeminiSafetyAssessor(GeminiClient(api_key="k", model="m", vision_model="v"))
    result = await assessor.assess("Vaccines cause autism", ContentType.TEXT)

    assert result.safety_rating is SafetyRating.HARMFUL
    assert result.confidence_score == pytest.approx(80.0)
    assert result.topics == ("health",)
    assert requests[0].url.path.endswith("/m:generateContent")
    assert requests[0].headers["x-goog-api-key"] == "k"


@pytest.mark.asyncio
async def test_media_goes_to_vision_model_inline(mock_http, png_base64):
    requests = mock_http(
        lambda request: httpx.Response(
            200, json=gemini_reply({"safetyRating": "SAFE", "confidenceScore": 0.9})
        )
    )
    media = MediaPayload(data=png_base64, mime_type="image/png", kind=ContentType.IMAGE)
    assessor = GeminiSafetyAssessor(GeminiClient(api_key="k", model="m", vision_model="v"))
    await assessor.assess(media, ContentType.IMAGE)

    body = json.loads(requests[0].content)
    assert requests[0].url.path.endswith("/v:generateContent")
    assert body["contents"][0]["parts"][0]["inline_data"] == {
        "mime_type": "image/png",
        "data": png_base64,
    }


@pytest.mark.asyncio
async def test_fact_checker_uses_search_grounding(mock_http):
    requests = mock_http(
        lambda request: httpx.Response(
            200,
            json=gemini_reply(
                {
                    "verdict": "misleading",
                    "evidence": [
                        {"source": "https://who.int/x", "title": "WHO"},
                        {"source": "", "title": "dropped"},
                    ],
                }
            ),
        )
    )
    checker = GeminiFactChecker(GeminiClient(api_key="k", model="m", vision_model="v"))
    result = await checker.check("Claim")

    assert result.verdict is FactCheckVerdict.MISLEADING
    assert [e.source for e in result.evidence] == ["https://who.int/x"]
    body = json.loads(requests[0].content)
    assert body["tools"] == [{"google_search": {}}]
    assert "responseMimeType" not in body["generationConfig"]


@pytest.mark.asyncio
async def test_gemini_without_candidates_is_an_error(mock_http):
    mock_http(lambda request: httpx.Response(200, json={"candidates": []}))
    checker = GeminiFactChecker(GeminiClient(api_key="k", model="m", vision_model="v"))
    with pytest.raises(CollaboratorResponseError):
        await checker.check("Claim")


@pytest.mark.asyncio
async def test_gemini_http_error_propagates(mock_http):
    mock_http(lambda request: httpx.Response(503, json={"error": "overloaded"}))
    checker = GeminiFactChecker(GeminiClient(api_key="k", model="m", vision_model="v"))
    with pytest.raises(httpx.HTTPStatusError):
        await checker.check("Claim")


@pytest.mark.asyncio
async def test_claim_extractor_returns_trimmed_claims(mock_http):
    requests = mock_http(
        lambda request: httpx.Response(
            200, json=gemini_reply({"claims": ["  The moon is cheese ", "", "Water is wet"]})
        )
    )
    extractor = GeminiClaimExtractor(GeminiClient(api_key="k", model="m", vision_model="v"))
    claims = await extractor.extract("The moon is cheese and water is wet")

    assert claims == ["The moon is cheese", "Water is wet"]
    assert "The moon is cheese and water is wet" in requests[0].content.decode()


@pytest.mark.asyncio
async def test_claim_extractor_without_claims_field_is_an_error(mock_http):
    mock_http(lambda request: httpx.Response(200, json=gemini_reply({"statements": []})))
    extractor = GeminiClaimExtractor(GeminiClient(api_key="k", model="m", vision_model="v"))
    with pytest.raises(CollaboratorResponseError):
        await extractor.extract("text")


@pytest.mark.asyncio
async def test_web_risk_flags_threats(mock_http):
    requests = mock_http(
        lambda request: httpx.Response(
            200, json={"threat": {"threatTypes": ["MALWARE"], "expireTime": "2030-01-01T00:00:00Z"}}
        )
    )
    reputation = await WebRiskClient(api_key="k").lookup("http://bad.example")

    assert not reputation.is_safe
    assert reputation.threat_types == ("MALWARE",)
    assert requests[0].url.params.get_list("threatTypes") == [
        "MALWARE",
        "SOCIAL_ENGINEERING",
        "UNWANTED_SOFTWARE",
    ]


@pytest.mark.asyncio
async def test_web_risk_empty_response_is_safe(mock_http):
    mock_http(lambda request: httpx.Response(200, json={}))
    reputation = await WebRiskClient(api_key="k").lookup("https://good.example")
    assert reputation.is_safe
    assert reputation.threat_types == ()


@pytest.mark.asyncio
async def test_speech_transcriber_joins_results(mock_http):
    requests = mock_http(
        lambda request: httpx.Response(
            200,
            json={
                "results": [
                    {"alternatives": [{"transcript": "hello", "confidence": 0.9}], "languageCode": "en-us"},
                    {"alternatives": [{"transcript": "world"}]},
                ]
            },
        )
    )
    audio = MediaPayload(data="AAAA", mime_type="audio/webm", kind=ContentType.AUDIO)
    result = await SpeechTranscriber(api_key="k").transcribe(audio)

    assert result.transcription == "hello\nworld"
    assert result.confidence == pytest.approx(90.0)
    assert result.language == "en-us"
    assert json.loads(requests[0].content)["config"]["encoding"] == "WEBM_OPUS"


@pytest.mark.asyncio
async def test_speech_without_transcript_is_an_error(mock_http):
    mock_http(lambda request: httpx.Response(200, json={}))
    audio = MediaPayload(data="AAAA", mime_type="audio/mpeg", kind=ContentType.AUDIO)
    with pytest.raises(CollaboratorResponseError):
        await SpeechTranscriber(api_key="k").transcribe(audio)


@pytest.mark.asyncio
async def test_translator_detects_and_translates(mock_http):
    def handler(request):
        if request.url.path.endswith("/detect"):
            return httpx.Response(
                200, json={"data": {"detections": [[{"language": "es", "confidence": 0.98}]]}}
            )
        return httpx.Response(200, json={"data": {"translations": [{"translatedText": "Hello"}]}})

    mock_http(handler)
    translator = CloudTranslator(api_key="k")
    detected = await translator.detect_language("Hola")
    assert detected.language == "es"
    assert await translator.translate("Hola", "en") == "Hello"


@pytest.mark.asyncio
async def test_page_fetcher_returns_visible_text(mock_http):
    mock_http(
        lambda request: httpx.Response(
            200,
            headers={"content-type": "text/html; charset=utf-8"},
            text="<html><script>var x;</script><body><h1>Title</h1><p>Body &amp; more</p></body></html>",
        )
    )
    assert await PageFetcher(user_agent="test", timeout=1).fetch_text("https://a.example") == (
        "Title Body & more"
    )


def test_html_to_text_truncates():
    assert len(html_to_text("<p>" + "a" * 5000 + "</p>")) == 2000


def test_sanitize_information_fills_titles_and_relevance():
    items = sanitize_information(
        [
            {"url": "https://news.example/a", "relevance": 140},
            {"title": "  Named ", "url": "https://b.example"},
            "not a dict",
            {"snippet": "only a snippet"},
        ]
    )
    assert [(i.title, i.relevance) for i in items] == [
        ("news.example", 100.0),
        ("Named", 90.0),
        ("only a snippet", 80.0),
    ]


def test_sanitize_information_ignores_non_lists():
    assert sanitize_information({"url": "x"}) == ()


def test_signals_to_json_unwraps_enums():
    rendered = signals_to_json({SignalSource.SAFETY: SAFE})
    assert rendered["safety"]["safety_rating"] == "SAFE"
    assert rendered["safety"]["topics"] == []


def test_bundle_only_builds_configured_collaborators():
    bare = build_client_bundle(Settings(_env_file=None))
    assert bare.safety is None
    assert bare.claim_extractor is None
    assert bare.url_reputation is None
    assert isinstance(bare.page_reader, PageFetcher)

    full = build_client_bundle(
        Settings(_env_file=None, gemini_api_key="g", web_risk_api_key="w", translate_api_key="t")
    )
    assert isinstance(full.safety, GeminiSafetyAssessor)
    assert isinstance(full.claim_extractor, GeminiClaimExtractor)
    assert isinstance(full.url_reputation, WebRiskClient)
    assert isinstance(full.translator, CloudTranslator)
    assert full.transcriber is None
