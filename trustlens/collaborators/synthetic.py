"""Synthetic media detection collaborator."""

from __future__ import annotations

import logging

from trustlens.collaborators.gemini import GeminiClient, as_percent, string_list
from trustlens.errors import CollaboratorResponseError
from trustlens.models.request import MediaPayload
from trustlens.models.signals import SyntheticDetection

logger = logging.getLogger(__name__)

SYNTHETIC_PROMPT = """\
You are a media forensics analyst. Determine whether the provided {kind} was \
generated or manipulated by AI (deepfake, voice clone, diffusion image, spliced \
footage). Look for generation watermarks, lighting and shadow inconsistencies, \
warped geometry or text, unnatural skin, lip-sync drift, and spectral artifacts \
in audio.

Respond with valid JSON only, in this exact format:
{{
  "isSynthetic": false,
  "confidenceScore": 80,
  "analysis": "...",
  "markersDetected": ["..."]
}}
"confidenceScore" is your confidence (0-100) in the isSynthetic verdict.\
"""


class GeminiSyntheticDetector:
    """Detects AI-generated or manipulated images, video and audio."""

    name: str = "Synthetic Detection"

    def __init__(self, client: GeminiClient) -> None:
        self.client = client

    async def detect(self, media: MediaPayload) -> SyntheticDetection:
        parsed = await self.client.generate_json(
            SYNTHETIC_PROMPT.format(kind=media.kind.value), media=media
        )
        is_synthetic = parsed.get("isSynthetic")
        if not isinstance(is_synthetic, bool):
            raise CollaboratorResponseError(self.name, "Response is missing isSynthetic")
        result = SyntheticDetection(
            is_synthetic=is_synthetic,
            confidence_score=as_percent(parsed.get("confidenceScore", 0), self.name),
            analysis=str(parsed.get("analysis", "")),
            markers_detected=string_list(parsed.get("markersDetected")),
        )
        logger.info(
            "Synthetic detection on %s: synthetic=%s confidence=%.0f",
            media.kind.value,
            result.is_synthetic,
            result.confidence_score,
        )
        return result
