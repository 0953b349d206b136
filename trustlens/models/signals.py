"""Signal sources, typed signal payloads and per-source results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union


class SignalSource(Enum):
    SAFETY = "safety"
    FACT_CHECK = "factCheck"
    WEB_ANALYSIS = "webAnalysis"
    SYNTHETIC_DETECTION = "syntheticDetection"
    URL_REPUTATION = "urlReputation"
    CREDIBILITY = "credibility"


TEXT_SOURCES = frozenset(
    {
        SignalSource.SAFETY,
        SignalSource.FACT_CHECK,
        SignalSource.WEB_ANALYSIS,
        SignalSource.CREDIBILITY,
    }
)
MEDIA_SOURCES = frozenset(
    {
        SignalSource.SYNTHETIC_DETECTION,
        SignalSource.SAFETY,
        SignalSource.CREDIBILITY,
    }
)


class SignalStatus(Enum):
    OK = "ok"
    FAILED = "failed"
    TIMED_OUT = "timedOut"


class SafetyRating(Enum):
    SAFE = "SAFE"
    HARMFUL = "HARMFUL"
    MISLEADING = "MISLEADING"
    UNKNOWN = "UNKNOWN"


class FactCheckVerdict(Enum):
    TRUE = "True"
    FALSE = "False"
    MISLEADING = "Misleading"
    UNCERTAIN = "Uncertain"


@dataclass(frozen=True)
class SafetyAssessment:
    safety_rating: SafetyRating
    confidence_score: float
    explanation: str = ""
    topics: tuple[str, ...] = ()
    content_analysis: str = ""


@dataclass(frozen=True)
class FactCheckEvidence:
    source: str
    title: str
    snippet: str = ""


@dataclass(frozen=True)
class ClaimCheck:
    """Verdict for one claim extracted from a longer text."""

    claim: str
    verdict: FactCheckVerdict
    explanation: str = ""


@dataclass(frozen=True)
class FactCheckResult:
    verdict: FactCheckVerdict
    evidence: tuple[FactCheckEvidence, ...] = ()
    explanation: str = ""
    claims: tuple[ClaimCheck, ...] = ()


@dataclass(frozen=True)
class CredibilityAssessment:
    credibility_score: float
    assessment_summary: str = ""
    misleading_indicators: tuple[str, ...] = ()
    source: str = ""


@dataclass(frozen=True)
class WebInformation:
    title: str
    url: str
    snippet: str = ""
    date: str = ""
    relevance: float = 0.0


@dataclass(frozen=True)
class WebAnalysis:
    real_time_fact_check: bool
    current_information: tuple[WebInformation, ...] = ()
    information_gaps: tuple[str, ...] = ()
    analysis_summary: str = ""


@dataclass(frozen=True)
class SyntheticDetection:
    is_synthetic: bool
    confidence_score: float
    analysis: str = ""
    markers_detected: tuple[str, ...] = ()


@dataclass(frozen=True)
class UrlReputation:
    is_safe: bool
    threat_types: tuple[str, ...] = ()
    details: str = ""


SignalPayload = Union[
    SafetyAssessment,
    FactCheckResult,
    CredibilityAssessment,
    WebAnalysis,
    SyntheticDetection,
    UrlReputation,
]

PAYLOAD_TYPES: dict[SignalSource, type] = {
    SignalSource.SAFETY: SafetyAssessment,
    SignalSource.FACT_CHECK: FactCheckResult,
    SignalSource.WEB_ANALYSIS: WebAnalysis,
    SignalSource.SYNTHETIC_DETECTION: SyntheticDetection,
    SignalSource.URL_REPUTATION: UrlReputation,
    SignalSource.CREDIBILITY: CredibilityAssessment,
}


@dataclass(frozen=True)
class SignalResult:
    """Terminal outcome of one collaborator call."""

    source: SignalSource
    status: SignalStatus
    payload: SignalPayload | None = None
    latency_ms: int = 0
    error: str | None = field(default=None, compare=False)

    @property
    def ok(self) -> bool:
        return self.status is SignalStatus.OK
