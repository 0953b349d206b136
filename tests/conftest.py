import asyncio

import pytest

from trustlens.collaborators.base import DetectedLanguage, Transcription
from trustlens.collaborators.bundle import ClientBundle
from trustlens.models.assessment import Presentation
from trustlens.models.signals import (
    CredibilityAssessment,
    FactCheckEvidence,
    FactCheckResult,
    FactCheckVerdict,
    SafetyAssessment,
    SafetyRating,
    SyntheticDetection,
    UrlReputation,
    WebAnalysis,
    WebInformation,
)


class Fake:
    """Stub collaborator: returns a fixed value, raises, or hangs."""

    name = "Fake"

    def __init__(self, result=None, error=None, delay=0.0):
        self.result = result
        self.error = error
        self.delay = delay
        self.calls = []

    async def _respond(self, *args):
        self.calls.append(args)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result

    async def assess(self, content, content_type):
        return await self._respond(content, content_type)

    async def check(self, claim):
        return await self._respond(claim)

    async def extract(self, text):
        return await self._respond(text)

    async def score(self, content, content_type):
        return await self._respond(content, content_type)

    async def analyze(self, query, content_type, search_engine_id=None):
        return await self._respond(query, content_type, search_engine_id)

    async def detect(self, media):
        return await self._respond(media)

    async def lookup(self, url):
        return await self._respond(url)

    async def transcribe(self, audio):
        return await self._respond(audio)

    async def fetch_text(self, url):
        return await self._respond(url)

    async def format(self, content_type, analysis_label, raw_signals, candidate_sources, language=None):
        return await self._respond(content_type, analysis_label, raw_signals, candidate_sources, language)


class FakeTranslator:
    name = "Fake Translator"

    def __init__(self, language="en", translation=None, error=None):
        self.language = language
        self.translation = translation
        self.error = error
        self.translated = []

    async def detect_language(self, text):
        if self.error is not None:
            raise self.error
        return DetectedLanguage(language=self.language, confidence=0.9)

    async def translate(self, text, target_language):
        self.translated.append((text, target_language))
        return self.translation if self.translation is not None else text


SAFE = SafetyAssessment(safety_rating=SafetyRating.SAFE, confidence_score=95.0)
HARMFUL = SafetyAssessment(safety_rating=SafetyRating.HARMFUL, confidence_score=90.0)

FACT_TRUE = FactCheckResult(
    verdict=FactCheckVerdict.TRUE,
    evidence=(
        FactCheckEvidence(source="https://who.int/report", title="WHO report"),
        FactCheckEvidence(source="https://cdc.gov/facts", title="CDC facts"),
    ),
)
FACT_FALSE = FactCheckResult(verdict=FactCheckVerdict.FALSE)

CREDIBLE = CredibilityAssessment(credibility_score=90.0, source="User Text")

WEB_GOOD = WebAnalysis(
    real_time_fact_check=True,
    current_information=(
        WebInformation(title="Reuters", url="https://reuters.com/a", relevance=85.0),
        WebInformation(title="AP", url="https://apnews.com/b", relevance=85.0),
    ),
)

NOT_SYNTHETIC = SyntheticDetection(is_synthetic=False, confidence_score=10.0)
MALWARE = UrlReputation(is_safe=False, threat_types=("MALWARE",))

PHRASED = Presentation(
    one_line_description="Looks reliable.",
    summary="Multiple signals agree the content is reliable.",
    educational_insight="Check sources before sharing.",
)


def make_bundle(**overrides) -> ClientBundle:
    """Bundle of well-behaved fakes, with any collaborator replaced by keyword."""
    clients = dict(
        safety=Fake(SAFE),
        fact_checker=Fake(FACT_TRUE),
        credibility=Fake(CREDIBLE),
        web_analyzer=Fake(WEB_GOOD),
        synthetic_detector=Fake(NOT_SYNTHETIC),
        url_reputation=Fake(UrlReputation(is_safe=True)),
        transcriber=Fake(Transcription(transcription="spoken words", confidence=90.0, language="en-US")),
        translator=None,
        page_reader=None,
        formatter=Fake(PHRASED),
    )
    clients.update(overrides)
    return ClientBundle(**clients)


@pytest.fixture
def bundle():
    return make_bundle()


@pytest.fixture
def png_base64():
    # 1x1 transparent PNG
    return (
        "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
    )
