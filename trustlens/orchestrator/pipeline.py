"""Unified analysis pipeline — one request in, one fused verdict out."""

from __future__ import annotations

import logging

from trustlens.collaborators.bundle import ClientBundle
from trustlens.config import Settings
from trustlens.models.assessment import UnifiedResponse
from trustlens.models.request import AnalysisOptions, AnalysisRequest
from trustlens.orchestrator.aggregator import aggregate
from trustlens.orchestrator.classifier import classify_assessment
from trustlens.orchestrator.dispatcher import DEFAULT_SIGNAL_TIMEOUT, Dispatcher
from trustlens.orchestrator.normalizer import InputNormalizer
from trustlens.orchestrator.presenter import Presenter
from trustlens.orchestrator.synthesizer import ScoreSynthesizer

logger = logging.getLogger(__name__)


class UnifiedAnalyzer:
    """Normalize → dispatch → aggregate → synthesize → classify → present.

    Holds no per-request state, so one instance is shared by all requests.
    Only ``InvalidInput`` escapes ``analyze_unified``.
    """

    def __init__(
        self,
        clients: ClientBundle,
        signal_timeout: float = DEFAULT_SIGNAL_TIMEOUT,
        presentation_timeout: float = 15.0,
        working_language: str = "en",
    ) -> None:
        self.normalizer = InputNormalizer(
            clients, working_language=working_language, collaborator_timeout=signal_timeout
        )
        self.dispatcher = Dispatcher(clients, timeout=signal_timeout)
        self.synthesizer = ScoreSynthesizer()
        self.presenter = Presenter(clients.formatter, timeout=presentation_timeout)

    @classmethod
    def from_settings(cls, clients: ClientBundle, settings: Settings) -> UnifiedAnalyzer:
        return cls(
            clients,
            signal_timeout=settings.signal_timeout_ms / 1000,
            presentation_timeout=settings.presentation_timeout_ms / 1000,
            working_language=settings.working_language,
        )

    async def analyze_unified(
        self, request: AnalysisRequest, options: AnalysisOptions | None = None
    ) -> UnifiedResponse:
        canonical = await self.normalizer.normalize(request)
        logger.info(
            "Analyzing %s content with %d applicable sources",
            canonical.content_type.value,
            len(canonical.applicable_sources),
        )

        results = await self.dispatcher.dispatch(canonical, options)
        aggregated = aggregate(results)
        assessment = self.synthesizer.synthesize(aggregated, notes=canonical.notes)
        label = classify_assessment(assessment)
        if assessment.degraded:
            logger.warning("Degraded result for %s content", canonical.content_type.value)

        response = await self.presenter.present(
            assessment,
            label,
            canonical.content_type,
            aggregated.payloads,
            language=canonical.source_language,
        )
        logger.info(
            "Verdict %s (%d/%d signals)",
            label.value,
            assessment.succeeded,
            assessment.attempted,
        )
        return response
