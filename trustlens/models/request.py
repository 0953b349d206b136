"""Analysis request data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Union

from trustlens.models.signals import SignalSource


class ContentType(Enum):
    TEXT = "text"
    URL = "url"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"


@dataclass(frozen=True)
class TextRequest:
    """Free text submitted by the user."""

    content_type: ClassVar[ContentType] = ContentType.TEXT

    text: str


@dataclass(frozen=True)
class UrlRequest:
    """A link to analyse."""

    content_type: ClassVar[ContentType] = ContentType.URL

    url: str


@dataclass(frozen=True)
class ImageRequest:
    """Base64 image data, optionally wrapped in a data URI."""

    content_type: ClassVar[ContentType] = ContentType.IMAGE

    data: str
    mime_type: str | None = None


@dataclass(frozen=True)
class VideoRequest:
    content_type: ClassVar[ContentType] = ContentType.VIDEO

    data: str
    mime_type: str | None = None


@dataclass(frozen=True)
class AudioRequest:
    content_type: ClassVar[ContentType] = ContentType.AUDIO

    data: str
    mime_type: str | None = None


AnalysisRequest = Union[TextRequest, UrlRequest, ImageRequest, VideoRequest, AudioRequest]
MediaRequest = Union[ImageRequest, VideoRequest, AudioRequest]


@dataclass(frozen=True)
class AnalysisOptions:
    """Per-request options accepted by ``analyze_unified``."""

    search_engine_id: str | None = None


@dataclass(frozen=True)
class MediaPayload:
    """Validated media ready for collaborators: base64 data plus MIME type."""

    data: str
    mime_type: str
    kind: ContentType

    @property
    def data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


@dataclass(frozen=True)
class CanonicalRequest:
    """A request reduced to what the dispatcher needs."""

    content_type: ContentType
    text: str | None = None
    url: str | None = None
    media: MediaPayload | None = None
    applicable_sources: frozenset[SignalSource] = frozenset()
    source_language: str | None = None
    notes: tuple[str, ...] = field(default_factory=tuple)
