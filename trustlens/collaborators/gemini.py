"""Gemini client — generateContent over the Generative Language REST API."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

import httpx

from trustlens.config import settings
from trustlens.errors import CollaboratorResponseError
from trustlens.models.request import MediaPayload

logger = logging.getLogger(__name__)

GENERATIVE_API_URL = "https://generativelanguage.googleapis.com/v1beta/models"

_TRAILING_COMMA = re.compile(r",\s*([}\]])")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


class GeminiClient:
    """Thin async wrapper around ``models/{model}:generateContent``."""

    name: str = "Gemini"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        vision_model: str | None = None,
        timeout: float = 60.0,
    ) -> None:
        self.api_key = api_key or settings.gemini_api_key
        self.model = model or settings.gemini_model
        self.vision_model = vision_model or settings.gemini_vision_model
        self.timeout = timeout

    async def generate(
        self,
        prompt: str,
        media: MediaPayload | None = None,
        grounded: bool = False,
        temperature: float = 0.1,
        max_output_tokens: int | None = None,
        search_engine_id: str | None = None,
    ) -> str:
        """Run one prompt (plus optional inline media) and return the text answer."""
        parts: list[dict[str, Any]] = []
        if media is not None:
            parts.append({"inline_data": {"mime_type": media.mime_type, "data": media.data}})
        parts.append({"text": prompt})

        generation_config: dict[str, Any] = {"temperature": temperature}
        if max_output_tokens:
            generation_config["maxOutputTokens"] = max_output_tokens
        body: dict[str, Any] = {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": generation_config,
        }
        if grounded:
            search_tool: dict[str, Any] = {}
            if search_engine_id:
                search_tool["search_engine"] = search_engine_id
            body["tools"] = [{"google_search": search_tool}]
        else:
            # JSON mode cannot be combined with search grounding.
            generation_config["responseMimeType"] = "application/json"

        model = self.vision_model if media is not None else self.model
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                f"{GENERATIVE_API_URL}/{model}:generateContent",
                headers={
                    "Content-Type": "application/json",
                    "x-goog-api-key": self.api_key,
                },
                json=body,
            )
            response.raise_for_status()

        return self._extract_text(response.json())

    async def generate_json(self, prompt: str, **kwargs: Any) -> dict[str, Any]:
        """Like :meth:`generate`, but parse the answer as a JSON object."""
        raw_text = await self.generate(prompt, **kwargs)
        return parse_json_object(raw_text, source=self.name)

    def _extract_text(self, data: dict) -> str:
        candidates = data.get("candidates") or []
        if not candidates:
            raise CollaboratorResponseError(self.name, "Gemini returned no candidates")
        content = candidates[0].get("content") or {}
        for part in content.get("parts") or []:
            text = part.get("text")
            if text:
                return text
        raise CollaboratorResponseError(self.name, "Gemini returned an empty response")


def parse_json_object(raw_text: str, source: str = "Gemini") -> dict[str, Any]:
    """Parse a model answer into a JSON object.

    Handles markdown fences, prose around the object, stray control characters
    and trailing commas. Raises ``CollaboratorResponseError`` when nothing
    parseable remains.
    """
    text = raw_text.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        text = text.rsplit("```", 1)[0]

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        raise CollaboratorResponseError(source, "No JSON object found in model response")
    candidate = text[start : end + 1]

    attempts = [candidate]
    cleaned = _TRAILING_COMMA.sub(r"\1", _CONTROL_CHARS.sub("", candidate))
    if cleaned != candidate:
        attempts.append(cleaned)

    for attempt in attempts:
        try:
            parsed = json.loads(attempt)
        except json.JSONDecodeError as exc:
            logger.debug("%s: JSON parse attempt failed: %s", source, exc)
            continue
        if isinstance(parsed, dict):
            return parsed
        break

    logger.warning("%s: unparseable model response: %.200s", source, raw_text)
    raise CollaboratorResponseError(source, "Model response was not a valid JSON object")


def as_percent(value: Any, source: str = "Gemini", fractional: bool = False) -> float:
    """Coerce a model-reported score to 0..100.

    With ``fractional`` set, values up to 1.0 are read as a 0..1 fraction.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise CollaboratorResponseError(source, f"Expected a numeric score, got {value!r}")
    number = float(value)
    if fractional and number <= 1.0:
        number *= 100.0
    return max(0.0, min(100.0, number))


def string_list(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(str(item) for item in value if str(item).strip())
