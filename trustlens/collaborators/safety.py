"""Safety assessment collaborator — Gemini content classification."""

from __future__ import annotations

import logging

from trustlens.collaborators.base import Content
from trustlens.collaborators.gemini import GeminiClient, as_percent, string_list
from trustlens.errors import CollaboratorResponseError
from trustlens.models.request import ContentType, MediaPayload
from trustlens.models.signals import SafetyAssessment, SafetyRating

logger = logging.getLogger(__name__)

SAFETY_PROMPT = """\
Analyze the {kind} content {where} and provide a safety assessment.

Perform the following tasks:
1. Classify the content into one of: SAFE, HARMFUL, MISLEADING, UNKNOWN.
2. Give a confidence score for your assessment between 0.0 and 1.0.
3. Write a brief, neutral explanation for the rating.
4. List the main topics the content falls into (e.g. "politics", "health", "finance").
5. Provide a detailed content analysis: key claims, tone, visual elements and potential concerns.

Respond with valid JSON only, in this exact format:
{{
  "safetyRating": "SAFE",
  "confidenceScore": 0.9,
  "explanation": "...",
  "topics": ["..."],
  "contentAnalysis": "..."
}}
{content}\
"""


class GeminiSafetyAssessor:
    """Classifies content as SAFE / HARMFUL / MISLEADING / UNKNOWN."""

    name: str = "Safety"

    def __init__(self, client: GeminiClient) -> None:
        self.client = client

    async def assess(self, content: Content, content_type: ContentType) -> SafetyAssessment:
        if isinstance(content, MediaPayload):
            prompt = SAFETY_PROMPT.format(kind=content.kind.value, where="provided", content="")
            parsed = await self.client.generate_json(prompt, media=content)
        else:
            prompt = SAFETY_PROMPT.format(
                kind=content_type.value,
                where="below",
                content=f'\nContent to analyze:\n"{content}"',
            )
            parsed = await self.client.generate_json(prompt)
        return self._parse(parsed)

    def _parse(self, parsed: dict) -> SafetyAssessment:
        try:
            rating = SafetyRating(str(parsed["safetyRating"]).upper())
        except (KeyError, ValueError) as exc:
            raise CollaboratorResponseError(self.name, f"Invalid safety rating: {exc}") from exc
        return SafetyAssessment(
            safety_rating=rating,
            confidence_score=as_percent(parsed.get("confidenceScore", 0.0), self.name, fractional=True),
            explanation=str(parsed.get("explanation", "")),
            topics=string_list(parsed.get("topics")),
            content_analysis=str(parsed.get("contentAnalysis", "")),
        )
