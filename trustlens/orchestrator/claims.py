"""Multi-claim fact checking — one fact-check signal built from per-claim verdicts."""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from trustlens.collaborators.base import ClaimExtractor, FactChecker
from trustlens.models.signals import (
    ClaimCheck,
    FactCheckEvidence,
    FactCheckResult,
    FactCheckVerdict,
)

logger = logging.getLogger(__name__)

MAX_CLAIMS = 5

# Lowest first; the combined verdict is the lowest of the claim verdicts.
VERDICT_SEVERITY = {
    FactCheckVerdict.FALSE: 0,
    FactCheckVerdict.MISLEADING: 1,
    FactCheckVerdict.UNCERTAIN: 2,
    FactCheckVerdict.TRUE: 3,
}

UNVERIFIED_EXPLANATION = "Unable to verify claim"


async def check_claims(
    checker: FactChecker, extractor: ClaimExtractor | None, text: str
) -> FactCheckResult:
    """Fact-check up to ``MAX_CLAIMS`` claims from ``text`` concurrently.

    Without an extractor, or when extraction fails or finds nothing, the whole
    text is checked as one claim. A claim whose check fails counts as
    ``Uncertain``; when every check fails, the first error is raised.
    """
    claims = await extract_claims(extractor, text)
    outcomes = await asyncio.gather(
        *(checker.check(claim) for claim in claims), return_exceptions=True
    )

    failures = [outcome for outcome in outcomes if isinstance(outcome, BaseException)]
    for failure in failures:
        if isinstance(failure, asyncio.CancelledError):
            raise failure
    if len(failures) == len(outcomes):
        raise failures[0]
    if failures:
        logger.warning("%d of %d claim checks failed", len(failures), len(outcomes))

    return combine_claim_results(claims, outcomes)


async def extract_claims(extractor: ClaimExtractor | None, text: str) -> list[str]:
    if extractor is None:
        return [text]
    try:
        extracted = await extractor.extract(text)
    except Exception as exc:
        logger.warning("Claim extraction failed, checking the text as one claim: %s", exc)
        return [text]

    claims: list[str] = []
    seen: set[str] = set()
    for claim in extracted:
        key = claim.strip().lower()
        if key and key not in seen:
            seen.add(key)
            claims.append(claim.strip())
    if not claims:
        return [text]
    if len(claims) > MAX_CLAIMS:
        logger.info("Checking the first %d of %d claims", MAX_CLAIMS, len(claims))
    return claims[:MAX_CLAIMS]


def combine_claim_results(
    claims: Sequence[str], outcomes: Sequence[FactCheckResult | BaseException]
) -> FactCheckResult:
    """Fold per-claim outcomes into one result carrying the most severe verdict.

    Evidence is concatenated in claim order, deduplicated by source URL.
    """
    checks: list[ClaimCheck] = []
    evidence: list[FactCheckEvidence] = []
    seen_sources: set[str] = set()

    for claim, outcome in zip(claims, outcomes):
        if isinstance(outcome, FactCheckResult):
            checks.append(ClaimCheck(claim, outcome.verdict, outcome.explanation))
            for item in outcome.evidence:
                if item.source not in seen_sources:
                    seen_sources.add(item.source)
                    evidence.append(item)
        else:
            checks.append(ClaimCheck(claim, FactCheckVerdict.UNCERTAIN, UNVERIFIED_EXPLANATION))

    verdict = min((check.verdict for check in checks), key=VERDICT_SEVERITY.__getitem__)
    if len(checks) == 1:
        explanation = checks[0].explanation
    else:
        explanation = " ".join(
            f'"{check.claim}": {check.verdict.value}.' for check in checks
        )
    return FactCheckResult(
        verdict=verdict,
        evidence=tuple(evidence),
        explanation=explanation,
        claims=tuple(checks),
    )
