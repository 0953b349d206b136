"""Language detection and translation — Google Cloud Translation v2."""

from __future__ import annotations

import httpx

from trustlens.collaborators.base import DetectedLanguage
from trustlens.config import settings
from trustlens.errors import CollaboratorResponseError

TRANSLATE_API_URL = "https://translation.googleapis.com/language/translate/v2"


class CloudTranslator:
    name: str = "Translate"

    def __init__(self, api_key: str | None = None, timeout: float = 15.0) -> None:
        self.api_key = api_key or settings.translate_api_key
        self.timeout = timeout

    async def translate(self, text: str, target_language: str) -> str:
        if not text:
            return ""
        data = await self._post("", {"q": text, "target": target_language, "format": "text"})
        try:
            return data["translations"][0]["translatedText"]
        except (KeyError, IndexError, TypeError) as exc:
            raise CollaboratorResponseError(self.name, "Malformed translation response") from exc

    async def detect_language(self, text: str) -> DetectedLanguage:
        if not text:
            raise ValueError("Input text cannot be empty.")
        data = await self._post("/detect", {"q": text})
        try:
            detection = data["detections"][0][0]
            return DetectedLanguage(
                language=str(detection["language"]),
                confidence=float(detection.get("confidence", 0.0)),
            )
        except (KeyError, IndexError, TypeError) as exc:
            raise CollaboratorResponseError(self.name, "Could not detect language") from exc

    async def _post(self, path: str, body: dict) -> dict:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                f"{TRANSLATE_API_URL}{path}",
                params={"key": self.api_key},
                json=body,
            )
            response.raise_for_status()
        return response.json().get("data") or {}
