"""Protocols for every external collaborator the orchestrator talks to."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Mapping, Protocol, Sequence, runtime_checkable

from trustlens.models.assessment import AnalysisLabel, EvidenceSource, Presentation
from trustlens.models.request import ContentType, MediaPayload
from trustlens.models.signals import (
    CredibilityAssessment,
    FactCheckResult,
    SafetyAssessment,
    SignalPayload,
    SignalSource,
    SyntheticDetection,
    UrlReputation,
    WebAnalysis,
)

# Safety and credibility accept text, a URL, or a media payload.
Content = str | MediaPayload


@dataclass(frozen=True)
class Transcription:
    transcription: str
    confidence: float
    language: str


@dataclass(frozen=True)
class DetectedLanguage:
    language: str
    confidence: float


@runtime_checkable
class SafetyAssessor(Protocol):
    name: str

    async def assess(self, content: Content, content_type: ContentType) -> SafetyAssessment:
        ...


@runtime_checkable
class FactChecker(Protocol):
    name: str

    async def check(self, claim: str) -> FactCheckResult:
        ...


@runtime_checkable
class ClaimExtractor(Protocol):
    name: str

    async def extract(self, text: str) -> list[str]:
        ...


@runtime_checkable
class CredibilityScorer(Protocol):
    name: str

    async def score(self, content: Content, content_type: ContentType) -> CredibilityAssessment:
        ...


@runtime_checkable
class WebAnalyzer(Protocol):
    name: str

    async def analyze(
        self, query: str, content_type: ContentType, search_engine_id: str | None = None
    ) -> WebAnalysis:
        ...


@runtime_checkable
class SyntheticDetector(Protocol):
    name: str

    async def detect(self, media: MediaPayload) -> SyntheticDetection:
        ...


@runtime_checkable
class UrlReputationChecker(Protocol):
    name: str

    async def lookup(self, url: str) -> UrlReputation:
        ...


@runtime_checkable
class Transcriber(Protocol):
    name: str

    async def transcribe(self, audio: MediaPayload) -> Transcription:
        ...


@runtime_checkable
class Translator(Protocol):
    name: str

    async def translate(self, text: str, target_language: str) -> str:
        ...

    async def detect_language(self, text: str) -> DetectedLanguage:
        ...


@runtime_checkable
class PageReader(Protocol):
    name: str

    async def fetch_text(self, url: str) -> str:
        ...


@runtime_checkable
class PresentationFormatter(Protocol):
    name: str

    async def format(
        self,
        content_type: ContentType,
        analysis_label: AnalysisLabel,
        raw_signals: Mapping[SignalSource, SignalPayload],
        candidate_sources: Sequence[EvidenceSource],
        language: str | None = None,
    ) -> Presentation:
        ...


def signals_to_json(raw_signals: Mapping[SignalSource, SignalPayload]) -> dict[str, Any]:
    """Render typed signal payloads as plain JSON-ready dicts keyed by source."""

    def _plain(value: Any) -> Any:
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, dict):
            return {k: _plain(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [_plain(v) for v in value]
        return value

    return {source.value: _plain(asdict(payload)) for source, payload in raw_signals.items()}
