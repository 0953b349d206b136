"""Immutable bundle of collaborator clients, built once per process."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from trustlens.collaborators.base import (
    ClaimExtractor,
    CredibilityScorer,
    FactChecker,
    PageReader,
    PresentationFormatter,
    SafetyAssessor,
    SyntheticDetector,
    Transcriber,
    Translator,
    UrlReputationChecker,
    WebAnalyzer,
)
from trustlens.collaborators.credibility import GeminiCredibilityScorer
from trustlens.collaborators.fact_check import GeminiClaimExtractor, GeminiFactChecker
from trustlens.collaborators.gemini import GeminiClient
from trustlens.collaborators.page_fetcher import PageFetcher
from trustlens.collaborators.presentation import GeminiPresentationFormatter
from trustlens.collaborators.safety import GeminiSafetyAssessor
from trustlens.collaborators.speech import SpeechTranscriber
from trustlens.collaborators.synthetic import GeminiSyntheticDetector
from trustlens.collaborators.translate import CloudTranslator
from trustlens.collaborators.web_analysis import GeminiWebAnalyzer
from trustlens.collaborators.web_risk import WebRiskClient
from trustlens.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientBundle:
    """Every collaborator the orchestrator may call.

    A ``None`` slot means the collaborator is not configured; signals that
    depend on it are recorded as failed for every request. Without a claim
    extractor, fact checking treats the whole text as one claim.
    """

    safety: SafetyAssessor | None = None
    fact_checker: FactChecker | None = None
    claim_extractor: ClaimExtractor | None = None
    credibility: CredibilityScorer | None = None
    web_analyzer: WebAnalyzer | None = None
    synthetic_detector: SyntheticDetector | None = None
    url_reputation: UrlReputationChecker | None = None
    transcriber: Transcriber | None = None
    translator: Translator | None = None
    page_reader: PageReader | None = None
    formatter: PresentationFormatter | None = None


def build_client_bundle(settings: Settings) -> ClientBundle:
    """Build collaborators for every service that has credentials configured."""
    gemini = None
    if settings.gemini_api_key:
        gemini = GeminiClient(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            vision_model=settings.gemini_vision_model,
        )

    bundle = ClientBundle(
        safety=GeminiSafetyAssessor(gemini) if gemini else None,
        fact_checker=GeminiFactChecker(gemini) if gemini else None,
        claim_extractor=GeminiClaimExtractor(gemini) if gemini else None,
        credibility=GeminiCredibilityScorer(gemini) if gemini else None,
        web_analyzer=(
            GeminiWebAnalyzer(
                gemini,
                search_api_key=settings.custom_search_api_key,
                default_search_engine_id=settings.search_engine_id,
            )
            if gemini
            else None
        ),
        synthetic_detector=GeminiSyntheticDetector(gemini) if gemini else None,
        url_reputation=(
            WebRiskClient(api_key=settings.web_risk_api_key) if settings.web_risk_api_key else None
        ),
        transcriber=(
            SpeechTranscriber(
                api_key=settings.speech_api_key,
                language_code=settings.speech_language_code,
                model=settings.speech_model,
            )
            if settings.speech_api_key
            else None
        ),
        translator=(
            CloudTranslator(api_key=settings.translate_api_key)
            if settings.translate_api_key
            else None
        ),
        page_reader=PageFetcher(
            user_agent=settings.user_agent,
            timeout=settings.page_fetch_timeout_ms / 1000,
        ),
        formatter=GeminiPresentationFormatter(gemini) if gemini else None,
    )

    configured = [name for name, client in vars(bundle).items() if client is not None]
    logger.info("Collaborators configured: %s", ", ".join(configured) or "none")
    return bundle
