"""Fact-check collaborators — claim extraction and search-grounded Gemini verdicts."""

from __future__ import annotations

import logging

from trustlens.collaborators.gemini import GeminiClient, string_list
from trustlens.errors import CollaboratorResponseError
from trustlens.models.signals import FactCheckEvidence, FactCheckResult, FactCheckVerdict

logger = logging.getLogger(__name__)

FACT_CHECK_PROMPT = """\
You are a professional fact-checker. Verify the following claim with the highest \
level of accuracy and neutrality.

Claim: "{claim}"

1. Search the web for reliable and diverse sources to assess the claim.
2. Analyze the evidence, looking for corroboration and conflicts.
3. Formulate a verdict: "True", "False", "Misleading", or "Uncertain".
4. Explain the verdict, summarizing the evidence.
5. Cite your sources with full URLs, titles and relevant snippets.

Respond with valid JSON only, in this exact format:
{{
  "verdict": "True",
  "evidence": [
    {{"source": "https://www.example.com/article", "title": "...", "snippet": "..."}}
  ],
  "explanation": "..."
}}\
"""

CLAIM_EXTRACTION_PROMPT = """\
Break the following text down into individual, self-contained factual claims. \
Skip opinions, questions and greetings. Keep each claim to one sentence.

Text: "{text}"

Respond with valid JSON only, in this exact format:
{{
  "claims": ["..."]
}}\
"""


class GeminiFactChecker:
    """Fact-checks a single claim against live web search."""

    name: str = "Fact Check"

    def __init__(self, client: GeminiClient) -> None:
        self.client = client

    async def check(self, claim: str) -> FactCheckResult:
        parsed = await self.client.generate_json(
            FACT_CHECK_PROMPT.format(claim=claim), grounded=True
        )
        result = self._parse(parsed)
        logger.info(
            "Fact check verdict %s with %d evidence items",
            result.verdict.value,
            len(result.evidence),
        )
        return result

    def _parse(self, parsed: dict) -> FactCheckResult:
        raw_verdict = str(parsed.get("verdict", "")).strip().capitalize()
        try:
            verdict = FactCheckVerdict(raw_verdict)
        except ValueError as exc:
            raise CollaboratorResponseError(self.name, f"Invalid verdict {raw_verdict!r}") from exc

        evidence = []
        for item in parsed.get("evidence") or []:
            if not isinstance(item, dict):
                continue
            url = str(item.get("source", "")).strip()
            if not url:
                continue
            evidence.append(
                FactCheckEvidence(
                    source=url,
                    title=str(item.get("title") or url),
                    snippet=str(item.get("snippet", "")),
                )
            )
        return FactCheckResult(
            verdict=verdict,
            evidence=tuple(evidence),
            explanation=str(parsed.get("explanation", "")),
        )


class GeminiClaimExtractor:
    """Splits free text into individually checkable factual claims."""

    name: str = "Claim Extraction"

    def __init__(self, client: GeminiClient) -> None:
        self.client = client

    async def extract(self, text: str) -> list[str]:
        parsed = await self.client.generate_json(
            CLAIM_EXTRACTION_PROMPT.format(text=text[:4000]), temperature=0.2
        )
        if "claims" not in parsed:
            raise CollaboratorResponseError(self.name, "Response has no claims field")
        claims = [claim.strip() for claim in string_list(parsed["claims"])]
        logger.info("Extracted %d claims", len(claims))
        return claims
