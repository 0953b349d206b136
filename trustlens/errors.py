"""Error taxonomy for the analysis pipeline.

Only ``InvalidInput`` ever leaves the orchestrator. Source and presentation
failures are absorbed into the returned response.
"""

from __future__ import annotations

from typing import Any


class AnalysisError(Exception):
    """Base class for every error raised inside the pipeline."""

    default_code = "ANALYSIS_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"{self.error_code}: {self.message}"


class InvalidInput(AnalysisError):
    """Empty or malformed payload, or a MIME type that contradicts the content type."""

    default_code = "INVALID_INPUT"


class SourceFailure(AnalysisError):
    """A single collaborator failed; recorded as an information gap."""

    default_code = "SOURCE_FAILURE"

    def __init__(self, source: str, message: str, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.source = source
        self.details.setdefault("source", source)


class CollaboratorResponseError(SourceFailure):
    """A collaborator answered, but with a body outside its contract."""

    default_code = "COLLABORATOR_RESPONSE_ERROR"


class PresentationFailure(AnalysisError):
    """The phrasing collaborator failed; templated text is used instead."""

    default_code = "PRESENTATION_FAILURE"
