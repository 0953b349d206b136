"""Credibility scoring collaborator."""

from __future__ import annotations

from urllib.parse import urlparse

from trustlens.collaborators.base import Content
from trustlens.collaborators.gemini import GeminiClient, as_percent, string_list
from trustlens.errors import CollaboratorResponseError
from trustlens.models.request import ContentType, MediaPayload
from trustlens.models.signals import CredibilityAssessment

CREDIBILITY_PROMPT = """\
You assess the credibility of content. Identify the main claim or message, then \
provide a credibility score, a very brief factual summary of your assessment \
(max 2 sentences), and any misleading indicators. The content type is '{kind}'.
{content}
Respond with valid JSON only, in this exact format:
{{
  "credibilityScore": 75,
  "assessmentSummary": "...",
  "misleadingIndicators": ["..."]
}}
"credibilityScore" is a number from 0 to 100.\
"""


class GeminiCredibilityScorer:
    """Scores how credible a piece of content is, 0..100."""

    name: str = "Credibility"

    def __init__(self, client: GeminiClient) -> None:
        self.client = client

    async def score(self, content: Content, content_type: ContentType) -> CredibilityAssessment:
        if isinstance(content, MediaPayload):
            prompt = CREDIBILITY_PROMPT.format(kind=content.kind.value, content="")
            parsed = await self.client.generate_json(prompt, media=content)
        else:
            prompt = CREDIBILITY_PROMPT.format(
                kind=content_type.value, content=f"\nContent: {content}\n"
            )
            parsed = await self.client.generate_json(prompt)

        if "credibilityScore" not in parsed:
            raise CollaboratorResponseError(self.name, "Response is missing credibilityScore")
        return CredibilityAssessment(
            credibility_score=as_percent(parsed["credibilityScore"], self.name),
            assessment_summary=str(parsed.get("assessmentSummary", "")),
            misleading_indicators=string_list(parsed.get("misleadingIndicators")),
            source=describe_source(content, content_type),
        )


def describe_source(content: Content, content_type: ContentType) -> str:
    """Label where the content came from: the URL host, user text, or uploaded media."""
    if isinstance(content, MediaPayload):
        return "Uploaded Media"
    if content_type is ContentType.URL:
        return urlparse(content).hostname or "Invalid URL"
    return "User Text"
