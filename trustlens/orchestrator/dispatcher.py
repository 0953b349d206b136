"""Signal dispatcher — fans a canonical request out to every applicable collaborator."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable

from trustlens.collaborators.bundle import ClientBundle
from trustlens.errors import SourceFailure
from trustlens.models.request import AnalysisOptions, CanonicalRequest, ContentType
from trustlens.models.signals import SignalPayload, SignalResult, SignalSource, SignalStatus
from trustlens.orchestrator.claims import check_claims

logger = logging.getLogger(__name__)

DEFAULT_SIGNAL_TIMEOUT = 8.0


class Dispatcher:
    """Calls every applicable signal collaborator concurrently.

    Each call is independently time-boxed. Errors become ``failed`` results,
    overruns become ``timedOut`` results; nothing is retried.
    """

    def __init__(self, clients: ClientBundle, timeout: float = DEFAULT_SIGNAL_TIMEOUT) -> None:
        self.clients = clients
        self.timeout = timeout

    async def dispatch(
        self, canonical: CanonicalRequest, options: AnalysisOptions | None = None
    ) -> list[SignalResult]:
        """Fan out to all applicable sources.

        Returns one ``SignalResult`` per applicable source, in ``SignalSource``
        declaration order, once every call has reached a terminal state.
        """
        options = options or AnalysisOptions()
        sources = [s for s in SignalSource if s in canonical.applicable_sources]
        if not sources:
            return []

        logger.info("Dispatching to %d sources: %s", len(sources), [s.value for s in sources])
        tasks = [self._run_source(source, canonical, options) for source in sources]
        return list(await asyncio.gather(*tasks))

    async def _run_source(
        self, source: SignalSource, canonical: CanonicalRequest, options: AnalysisOptions
    ) -> SignalResult:
        """Run a single source and record its terminal state."""
        started = time.perf_counter()
        try:
            payload = await asyncio.wait_for(
                self._call(source, canonical, options), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            latency = _elapsed_ms(started)
            logger.warning("Source %s timed out after %d ms", source.value, latency)
            return SignalResult(
                source=source,
                status=SignalStatus.TIMED_OUT,
                latency_ms=latency,
                error=f"timed out after {self.timeout:g}s",
            )
        except Exception as exc:
            latency = _elapsed_ms(started)
            logger.error("Source %s failed: %s", source.value, exc)
            return SignalResult(
                source=source,
                status=SignalStatus.FAILED,
                latency_ms=latency,
                error=str(exc) or type(exc).__name__,
            )

        latency = _elapsed_ms(started)
        logger.info("Source %s returned in %d ms", source.value, latency)
        return SignalResult(
            source=source, status=SignalStatus.OK, payload=payload, latency_ms=latency
        )

    def _call(
        self, source: SignalSource, canonical: CanonicalRequest, options: AnalysisOptions
    ) -> Awaitable[SignalPayload]:
        """Build the collaborator call for one source."""
        clients = self.clients

        if source is SignalSource.SAFETY:
            client = _require(clients.safety, source)
            return client.assess(*_content_for(canonical))

        if source is SignalSource.CREDIBILITY:
            client = _require(clients.credibility, source)
            if canonical.content_type is ContentType.URL and canonical.url:
                return client.score(canonical.url, ContentType.URL)
            return client.score(*_content_for(canonical))

        if source is SignalSource.FACT_CHECK:
            client = _require(clients.fact_checker, source)
            if canonical.text:
                return check_claims(client, clients.claim_extractor, canonical.text)
            if not canonical.url:
                raise SourceFailure(source.value, "No claim text to fact-check")
            return client.check(canonical.url)

        if source is SignalSource.WEB_ANALYSIS:
            client = _require(clients.web_analyzer, source)
            if canonical.url:
                return client.analyze(canonical.url, ContentType.URL, options.search_engine_id)
            if not canonical.text:
                raise SourceFailure(source.value, "No query text for web analysis")
            return client.analyze(canonical.text, ContentType.TEXT, options.search_engine_id)

        if source is SignalSource.SYNTHETIC_DETECTION:
            client = _require(clients.synthetic_detector, source)
            if canonical.media is None:
                raise SourceFailure(source.value, "No media to inspect")
            return client.detect(canonical.media)

        if source is SignalSource.URL_REPUTATION:
            client = _require(clients.url_reputation, source)
            if not canonical.url:
                raise SourceFailure(source.value, "No URL to look up")
            return client.lookup(canonical.url)

        raise SourceFailure(source.value, f"Unknown signal source {source!r}")


def _content_for(canonical: CanonicalRequest):
    """Pick the content handed to safety and credibility: text, then URL, then media."""
    if canonical.content_type in (ContentType.IMAGE, ContentType.VIDEO) and canonical.media:
        return canonical.media, canonical.content_type
    if canonical.text:
        return canonical.text, ContentType.TEXT
    if canonical.url:
        return canonical.url, ContentType.URL
    if canonical.media:
        return canonical.media, canonical.media.kind
    raise SourceFailure("content", "Request has no analysable content")


def _require(client, source: SignalSource):
    if client is None:
        raise SourceFailure(source.value, f"No collaborator configured for {source.value}")
    return client


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
