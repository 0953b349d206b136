"""Audio transcription collaborator — Google Speech-to-Text v1."""

from __future__ import annotations

import logging

import httpx

from trustlens.collaborators.base import Transcription
from trustlens.config import settings
from trustlens.errors import CollaboratorResponseError
from trustlens.models.request import MediaPayload

logger = logging.getLogger(__name__)

SPEECH_API_URL = "https://speech.googleapis.com/v1/speech:recognize"

# Speech-to-Text encodings keyed by MIME subtype; anything else is left to autodetection.
ENCODINGS = {
    "webm": "WEBM_OPUS",
    "ogg": "OGG_OPUS",
    "flac": "FLAC",
    "wav": "LINEAR16",
    "x-wav": "LINEAR16",
    "mpeg": "MP3",
    "mp3": "MP3",
}


class SpeechTranscriber:
    name: str = "Speech"

    def __init__(
        self,
        api_key: str | None = None,
        language_code: str | None = None,
        model: str | None = None,
        timeout: float = 60.0,
    ) -> None:
        self.api_key = api_key or settings.speech_api_key
        self.language_code = language_code or settings.speech_language_code
        self.model = model or settings.speech_model
        self.timeout = timeout

    async def transcribe(self, audio: MediaPayload) -> Transcription:
        config = {
            "languageCode": self.language_code,
            "enableAutomaticPunctuation": True,
            "model": self.model,
        }
        encoding = ENCODINGS.get(audio.mime_type.split("/", 1)[-1].split(";")[0])
        if encoding:
            config["encoding"] = encoding

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                SPEECH_API_URL,
                params={"key": self.api_key},
                json={"config": config, "audio": {"content": audio.data}},
            )
            response.raise_for_status()

        results = response.json().get("results") or []
        alternatives = [
            (result.get("alternatives") or [{}])[0] for result in results
        ]
        text = "\n".join(
            alt.get("transcript", "").strip() for alt in alternatives if alt.get("transcript")
        ).strip()
        if not text:
            raise CollaboratorResponseError(self.name, "No transcription result received")

        confidence = float(alternatives[0].get("confidence", 0.0)) * 100.0
        language = str(results[0].get("languageCode") or self.language_code)
        logger.info("Transcribed %d characters (confidence %.0f)", len(text), confidence)
        return Transcription(
            transcription=text,
            confidence=max(0.0, min(100.0, confidence)),
            language=language,
        )
