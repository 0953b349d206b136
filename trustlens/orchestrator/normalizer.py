"""Input normalizer — validates a request and decides which signals apply."""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
import re
from dataclasses import replace
from urllib.parse import urlparse

from trustlens.collaborators.bundle import ClientBundle
from trustlens.errors import InvalidInput
from trustlens.models.request import (
    AnalysisRequest,
    AudioRequest,
    CanonicalRequest,
    ContentType,
    ImageRequest,
    MediaPayload,
    MediaRequest,
    TextRequest,
    UrlRequest,
    VideoRequest,
)
from trustlens.models.signals import MEDIA_SOURCES, TEXT_SOURCES, SignalSource

logger = logging.getLogger(__name__)

_DATA_URI = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[^,;]*)*;base64,(?P<data>.*)$", re.DOTALL)
_WHITESPACE = re.compile(r"\s+")

DEFAULT_MIME_TYPES = {
    ContentType.IMAGE: "image/jpeg",
    ContentType.VIDEO: "video/mp4",
    ContentType.AUDIO: "audio/webm",
}


class InputNormalizer:
    """Turns an ``AnalysisRequest`` into a ``CanonicalRequest``.

    Audio is transcribed, URLs are dereferenced when a page reader is
    configured, and text outside the working language is translated. Failures
    of those supporting collaborators are logged and recorded as notes; only
    malformed input raises ``InvalidInput``.
    """

    def __init__(
        self,
        clients: ClientBundle,
        working_language: str = "en",
        collaborator_timeout: float = 8.0,
    ) -> None:
        self.clients = clients
        self.working_language = working_language
        self.collaborator_timeout = collaborator_timeout

    async def normalize(self, request: AnalysisRequest) -> CanonicalRequest:
        if isinstance(request, TextRequest):
            text = (request.text or "").strip()
            if not text:
                raise InvalidInput("Text content is required")
            return await self._with_language(
                CanonicalRequest(
                    content_type=ContentType.TEXT,
                    text=text,
                    applicable_sources=TEXT_SOURCES,
                )
            )

        if isinstance(request, UrlRequest):
            url = validate_url(request.url)
            page_text, notes = await self._dereference(url)
            return await self._with_language(
                CanonicalRequest(
                    content_type=ContentType.URL,
                    text=page_text,
                    url=url,
                    applicable_sources=TEXT_SOURCES | {SignalSource.URL_REPUTATION},
                    notes=notes,
                )
            )

        if isinstance(request, AudioRequest):
            media = decode_media(request)
            return await self._transcribe(media)

        if isinstance(request, (ImageRequest, VideoRequest)):
            media = decode_media(request)
            return CanonicalRequest(
                content_type=media.kind,
                media=media,
                applicable_sources=MEDIA_SOURCES,
            )

        raise InvalidInput(f"Unsupported input type: {type(request).__name__}")

    async def _dereference(self, url: str) -> tuple[str | None, tuple[str, ...]]:
        reader = self.clients.page_reader
        if reader is None:
            return None, ()
        try:
            text = await asyncio.wait_for(reader.fetch_text(url), self.collaborator_timeout)
        except Exception as exc:
            logger.warning("Could not dereference %s: %s", url, exc)
            return None, ("page content could not be retrieved",)
        return (text.strip() or None), ()

    async def _transcribe(self, media: MediaPayload) -> CanonicalRequest:
        transcriber = self.clients.transcriber
        text = None
        language = None
        if transcriber is not None:
            try:
                result = await asyncio.wait_for(
                    transcriber.transcribe(media), self.collaborator_timeout
                )
                text = result.transcription.strip() or None
                language = result.language
            except Exception as exc:
                logger.warning("Audio transcription failed: %s", exc)

        if text is None:
            return CanonicalRequest(
                content_type=ContentType.AUDIO,
                media=media,
                applicable_sources=frozenset({SignalSource.SYNTHETIC_DETECTION}),
                notes=("audio transcription unavailable",),
            )

        canonical = CanonicalRequest(
            content_type=ContentType.AUDIO,
            text=text,
            media=media,
            applicable_sources=TEXT_SOURCES | {SignalSource.SYNTHETIC_DETECTION},
            source_language=_base_language(language) if language else None,
        )
        return await self._with_language(canonical)

    async def _with_language(self, canonical: CanonicalRequest) -> CanonicalRequest:
        """Detect the text's language and translate it into the working language."""
        translator = self.clients.translator
        if translator is None or not canonical.text:
            return canonical

        try:
            detected = await asyncio.wait_for(
                translator.detect_language(canonical.text), self.collaborator_timeout
            )
        except Exception as exc:
            logger.warning("Language detection failed: %s", exc)
            return canonical

        language = _base_language(detected.language)
        if language in ("", "und") or language == _base_language(self.working_language):
            return replace(canonical, source_language=language or canonical.source_language)

        try:
            translated = await asyncio.wait_for(
                translator.translate(canonical.text, self.working_language),
                self.collaborator_timeout,
            )
        except Exception as exc:
            logger.warning("Translation from %s failed: %s", language, exc)
            return replace(canonical, source_language=language)

        logger.info("Translated %s content into %s", language, self.working_language)
        return replace(
            canonical,
            text=translated.strip() or canonical.text,
            source_language=language,
        )


def validate_url(raw_url: str) -> str:
    url = (raw_url or "").strip()
    if not url:
        raise InvalidInput("URL is required")
    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError as exc:
        raise InvalidInput("Valid http(s) URL is required", details={"url": url}) from exc
    if parsed.scheme not in ("http", "https") or not hostname:
        raise InvalidInput("Valid http(s) URL is required", details={"url": url})
    return url


def decode_media(request: MediaRequest) -> MediaPayload:
    """Validate base64 media and its MIME type against the request's content type."""
    kind = request.content_type
    data = (request.data or "").strip()
    mime_type = (request.mime_type or "").strip().lower() or None
    if not data:
        raise InvalidInput(f"{kind.value.capitalize()} data is required")

    match = _DATA_URI.match(data)
    if match:
        data = match.group("data")
        uri_mime = (match.group("mime") or "").lower() or None
        if uri_mime and mime_type and uri_mime != mime_type:
            raise InvalidInput(
                "Declared MIME type does not match the data URI",
                details={"mimeType": mime_type, "dataUri": uri_mime},
            )
        mime_type = mime_type or uri_mime

    data = _WHITESPACE.sub("", data)

    if mime_type and not mime_type.startswith(f"{kind.value}/"):
        raise InvalidInput(
            f"MIME type {mime_type} is not valid for {kind.value} content",
            details={"mimeType": mime_type, "type": kind.value},
        )

    try:
        decoded = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidInput(f"{kind.value.capitalize()} data is not valid base64") from exc
    if not decoded:
        raise InvalidInput(f"{kind.value.capitalize()} data is empty")

    return MediaPayload(data=data, mime_type=mime_type or DEFAULT_MIME_TYPES[kind], kind=kind)


def _base_language(code: str) -> str:
    return code.strip().lower().replace("_", "-").split("-", 1)[0]
