"""Signal aggregator — keeps usable payloads and turns the rest into information gaps."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from trustlens.models.signals import (
    PAYLOAD_TYPES,
    SignalPayload,
    SignalResult,
    SignalSource,
    SignalStatus,
)

logger = logging.getLogger(__name__)

SOURCE_LABELS = {
    SignalSource.SAFETY: "safety-classification",
    SignalSource.FACT_CHECK: "fact-check",
    SignalSource.WEB_ANALYSIS: "web-search",
    SignalSource.SYNTHETIC_DETECTION: "synthetic-media",
    SignalSource.URL_REPUTATION: "url-reputation",
    SignalSource.CREDIBILITY: "credibility",
}

_REASONS = {
    SignalStatus.FAILED: "failed",
    SignalStatus.TIMED_OUT: "timed out",
}


@dataclass(frozen=True)
class AggregatedSignals:
    payloads: dict[SignalSource, SignalPayload] = field(default_factory=dict)
    gaps: tuple[str, ...] = ()
    attempted: int = 0

    @property
    def succeeded(self) -> int:
        return len(self.payloads)


def aggregate(results: Sequence[SignalResult]) -> AggregatedSignals:
    """Collect successful payloads keyed by source.

    Failed and timed-out results, and ``ok`` results whose payload is not the
    source's expected type, are dropped and named in ``gaps``.
    """
    ordered = sorted(results, key=lambda r: list(SignalSource).index(r.source))
    payloads: dict[SignalSource, SignalPayload] = {}
    gaps: list[str] = []

    for result in ordered:
        if result.ok and isinstance(result.payload, PAYLOAD_TYPES[result.source]):
            payloads[result.source] = result.payload
            continue

        reason = _REASONS.get(result.status, "returned an unreadable payload")
        gaps.append(f"{SOURCE_LABELS[result.source]} signal unavailable ({reason})")
        if result.ok:
            logger.warning(
                "Discarding %s payload of unexpected type %s",
                result.source.value,
                type(result.payload).__name__,
            )

    return AggregatedSignals(payloads=payloads, gaps=tuple(gaps), attempted=len(results))
