"""Presentation formatter — Gemini phrasing of the fused verdict."""

from __future__ import annotations

import json
import logging
from typing import Mapping, Sequence

from trustlens.collaborators.base import signals_to_json
from trustlens.collaborators.gemini import GeminiClient
from trustlens.errors import PresentationFailure
from trustlens.models.assessment import AnalysisLabel, EvidenceSource, Presentation
from trustlens.models.request import ContentType
from trustlens.models.signals import SignalPayload, SignalSource

logger = logging.getLogger(__name__)

PRESENTATION_PROMPT = """\
You are a professional misinformation analyst. Convert the analysis signals below \
into a clean, factual presentation for end users.

Rules:
- Be specific: reference the actual findings in rawSignals, not generic advice.
- Do not restate or change any numeric score; the verdict label is final.
- The educational insight gives practical guidance tied to these findings.
- Write in the language with code "{language}".
- Respond with valid JSON only. No line breaks inside strings.

Required JSON format:
{{
  "oneLineDescription": "What was analyzed and the key finding, one sentence",
  "summary": "Factual summary of the analysis results",
  "educationalInsight": "Practical guidance based on these results",
  "sources": [{{"url": "https://...", "title": "...", "credibility": 0.9}}]
}}

Context:
contentType: {content_type}
analysisLabel: {label}
rawSignals: {signals}

candidateSources (prioritized list):
{sources}\
"""


class GeminiPresentationFormatter:
    """Phrases the one-liner, summary and educational insight for a verdict."""

    name: str = "Presentation"

    def __init__(self, client: GeminiClient) -> None:
        self.client = client

    async def format(
        self,
        content_type: ContentType,
        analysis_label: AnalysisLabel,
        raw_signals: Mapping[SignalSource, SignalPayload],
        candidate_sources: Sequence[EvidenceSource],
        language: str | None = None,
    ) -> Presentation:
        prompt = PRESENTATION_PROMPT.format(
            language=language or "en",
            content_type=content_type.value,
            label=analysis_label.value,
            signals=json.dumps(signals_to_json(raw_signals))[:4000],
            sources=json.dumps([source.to_dict() for source in candidate_sources])[:4000],
        )
        parsed = await self.client.generate_json(prompt, max_output_tokens=2000)

        fields = {
            key: str(parsed.get(key) or "").strip()
            for key in ("oneLineDescription", "summary", "educationalInsight")
        }
        missing = [key for key, value in fields.items() if not value]
        if missing:
            raise PresentationFailure(
                "Presentation response is missing fields", details={"missing": missing}
            )
        sources = tuple(s for s in parsed.get("sources") or [] if isinstance(s, dict))
        return Presentation(
            one_line_description=fields["oneLineDescription"],
            summary=fields["summary"],
            educational_insight=fields["educationalInsight"],
            sources=sources,
        )
