"""Score synthesizer — fuses available signals into three bounded sub-scores."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from trustlens.models.assessment import EvidenceSource, FusedAssessment
from trustlens.models.signals import (
    CredibilityAssessment,
    FactCheckResult,
    FactCheckVerdict,
    SafetyAssessment,
    SafetyRating,
    SignalSource,
    SyntheticDetection,
    UrlReputation,
    WebAnalysis,
)
from trustlens.orchestrator.aggregator import AggregatedSignals

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 50.0
MAX_EVIDENCE_FOR_FULL_CREDIT = 5
FACT_CHECK_EVIDENCE_CREDIBILITY = 80
NO_SIGNAL_GAP = "no analysis signal was available"

THREAT_SEVERITY = {
    "MALWARE": 1.0,
    "SOCIAL_ENGINEERING": 1.0,
    "UNWANTED_SOFTWARE": 0.75,
    "SOCIAL_ENGINEERING_EXTENDED_COVERAGE": 0.6,
}
UNKNOWN_THREAT_SEVERITY = 0.8
UNSPECIFIED_THREAT_SEVERITY = 0.5

SAFETY_RATING_SCORES = {
    SafetyRating.SAFE: 100.0,
    SafetyRating.MISLEADING: 40.0,
    SafetyRating.HARMFUL: 10.0,
    SafetyRating.UNKNOWN: 50.0,
}

VERDICT_SCORES = {
    FactCheckVerdict.TRUE: 100.0,
    FactCheckVerdict.UNCERTAIN: 50.0,
    FactCheckVerdict.MISLEADING: 30.0,
    FactCheckVerdict.FALSE: 0.0,
}

# (weight, score) pairs; a missing signal simply contributes no pair.
Contribution = tuple[float, float]


class ScoreSynthesizer:
    """Fuses aggregated signals into a ``FusedAssessment``.

    Every sub-score is a weighted mean over the inputs that are present, so an
    absent signal never drags a score toward zero. A sub-score with no inputs
    at all falls back to ``NEUTRAL_SCORE``.
    """

    def synthesize(
        self, aggregated: AggregatedSignals, notes: Sequence[str] = ()
    ) -> FusedAssessment:
        payloads = aggregated.payloads
        base_gaps = list(notes) + list(aggregated.gaps)

        if not payloads:
            logger.warning("No signal succeeded out of %d attempted", aggregated.attempted)
            return FusedAssessment(
                source_integrity_score=0,
                content_authenticity_score=0,
                trust_explainability_score=0,
                evidence=(),
                information_gaps=_unique(base_gaps + [NO_SIGNAL_GAP]),
                attempted=aggregated.attempted,
                succeeded=0,
                degraded=True,
            )

        evidence = build_evidence(payloads)
        integrity, integrity_gap = self._sub_score(
            "source integrity", self._integrity_inputs(payloads)
        )
        authenticity, authenticity_gap = self._sub_score(
            "content authenticity", self._authenticity_inputs(payloads)
        )
        explainability = weighted_mean(
            [
                (0.5, 100.0 * aggregated.succeeded / max(aggregated.attempted, 1)),
                (0.5, 100.0 * min(len(evidence), MAX_EVIDENCE_FOR_FULL_CREDIT)
                 / MAX_EVIDENCE_FOR_FULL_CREDIT),
            ]
        )

        gaps = base_gaps + [gap for gap in (integrity_gap, authenticity_gap) if gap]
        web = payloads.get(SignalSource.WEB_ANALYSIS)
        if isinstance(web, WebAnalysis):
            gaps.extend(web.information_gaps)

        assessment = FusedAssessment(
            source_integrity_score=to_score(integrity),
            content_authenticity_score=to_score(authenticity),
            trust_explainability_score=to_score(explainability),
            evidence=evidence,
            information_gaps=_unique(gaps),
            attempted=aggregated.attempted,
            succeeded=aggregated.succeeded,
        )
        logger.info(
            "Fused scores: integrity=%d authenticity=%d explainability=%d (%d/%d signals)",
            assessment.source_integrity_score,
            assessment.content_authenticity_score,
            assessment.trust_explainability_score,
            assessment.succeeded,
            assessment.attempted,
        )
        return assessment

    def _sub_score(
        self, name: str, contributions: list[Contribution]
    ) -> tuple[float, str | None]:
        if not contributions:
            return NEUTRAL_SCORE, f"no signal available to assess {name}"
        return weighted_mean(contributions), None

    def _integrity_inputs(self, payloads: dict) -> list[Contribution]:
        contributions: list[Contribution] = []

        reputation = payloads.get(SignalSource.URL_REPUTATION)
        if isinstance(reputation, UrlReputation):
            contributions.append((0.3, reputation_score(reputation)))

        web = payloads.get(SignalSource.WEB_ANALYSIS)
        if isinstance(web, WebAnalysis) and web.current_information:
            relevance = [item.relevance for item in web.current_information]
            contributions.append((0.3, sum(relevance) / len(relevance)))

        credibility = payloads.get(SignalSource.CREDIBILITY)
        if isinstance(credibility, CredibilityAssessment):
            contributions.append((0.4, credibility.credibility_score))

        return contributions

    def _authenticity_inputs(self, payloads: dict) -> list[Contribution]:
        contributions: list[Contribution] = []

        synthetic = payloads.get(SignalSource.SYNTHETIC_DETECTION)
        if isinstance(synthetic, SyntheticDetection):
            score = 100.0 - synthetic.confidence_score if synthetic.is_synthetic else 100.0
            contributions.append((0.5, score))

        safety = payloads.get(SignalSource.SAFETY)
        if isinstance(safety, SafetyAssessment):
            contributions.append((0.3, safety_score(safety)))

        fact_check = payloads.get(SignalSource.FACT_CHECK)
        if isinstance(fact_check, FactCheckResult):
            contributions.append((0.2, VERDICT_SCORES[fact_check.verdict]))

        return contributions


def weighted_mean(contributions: Iterable[Contribution]) -> float:
    """Weighted mean with weights renormalized over the pairs given."""
    pairs = list(contributions)
    total_weight = sum(weight for weight, _ in pairs)
    if total_weight <= 0:
        raise ValueError("weighted_mean needs at least one positive weight")
    return sum(weight * score for weight, score in pairs) / total_weight


def reputation_score(reputation: UrlReputation) -> float:
    if reputation.is_safe:
        return 100.0
    if not reputation.threat_types:
        severity = UNSPECIFIED_THREAT_SEVERITY
    else:
        severity = max(
            THREAT_SEVERITY.get(threat.upper(), UNKNOWN_THREAT_SEVERITY)
            for threat in reputation.threat_types
        )
    return 100.0 * (1.0 - severity)


def safety_score(safety: SafetyAssessment) -> float:
    """Rating score pulled toward neutral as the classifier's confidence drops."""
    rated = SAFETY_RATING_SCORES[safety.safety_rating]
    confidence = max(0.0, min(100.0, safety.confidence_score)) / 100.0
    return NEUTRAL_SCORE + (rated - NEUTRAL_SCORE) * confidence


def build_evidence(payloads: dict) -> tuple[EvidenceSource, ...]:
    """Merge evidence from every signal, deduplicated by url, most credible first.

    Duplicates keep the first-seen title and the highest credibility; the sort
    is stable, so equal credibility keeps first-seen order.
    """
    candidates: list[EvidenceSource] = []

    fact_check = payloads.get(SignalSource.FACT_CHECK)
    if isinstance(fact_check, FactCheckResult):
        for item in fact_check.evidence:
            candidates.append(
                EvidenceSource(
                    url=item.source.strip(),
                    title=item.title.strip() or item.source.strip(),
                    credibility_score=FACT_CHECK_EVIDENCE_CREDIBILITY,
                )
            )

    web = payloads.get(SignalSource.WEB_ANALYSIS)
    if isinstance(web, WebAnalysis):
        for info in web.current_information:
            candidates.append(
                EvidenceSource(
                    url=info.url.strip(),
                    title=info.title.strip() or info.url.strip(),
                    credibility_score=to_score(info.relevance),
                )
            )

    merged: dict[str, EvidenceSource] = {}
    for candidate in candidates:
        if not candidate.url.lower().startswith(("http://", "https://")):
            continue
        existing = merged.get(candidate.url)
        if existing is None:
            merged[candidate.url] = candidate
        elif candidate.credibility_score > existing.credibility_score:
            merged[candidate.url] = EvidenceSource(
                url=existing.url,
                title=existing.title,
                credibility_score=candidate.credibility_score,
            )

    return tuple(sorted(merged.values(), key=lambda e: -e.credibility_score))


def to_score(value: float) -> int:
    """Round half up and clamp to 0..100."""
    return max(0, min(100, int(value + 0.5)))


def _unique(items: Iterable[str]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for item in items:
        if item and item not in seen:
            seen[item] = None
    return tuple(seen)
