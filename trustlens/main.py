"""TrustLens — FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Literal

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from trustlens.collaborators.bundle import build_client_bundle
from trustlens.config import settings
from trustlens.errors import InvalidInput
from trustlens.models.request import (
    AnalysisOptions,
    AnalysisRequest,
    AudioRequest,
    ImageRequest,
    TextRequest,
    UrlRequest,
    VideoRequest,
)
from trustlens.orchestrator.pipeline import UnifiedAnalyzer

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    clients = build_client_bundle(settings)
    app.state.analyzer = UnifiedAnalyzer.from_settings(clients, settings)
    yield


app = FastAPI(
    title="TrustLens",
    description="Unified content trust analysis",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Request / Response models ---


class AnalyzePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str | None = None
    url: str | None = None
    data: str | None = None
    image_data: str | None = Field(default=None, alias="imageData")
    video_data: str | None = Field(default=None, alias="videoData")
    audio_data: str | None = Field(default=None, alias="audioData")
    mime_type: str | None = Field(default=None, alias="mimeType")

    def media_data(self, media_type: str) -> str:
        """Base64 media for ``media_type``, from ``data`` or the matching typed field."""
        typed = {"image": self.image_data, "video": self.video_data, "audio": self.audio_data}
        return self.data or typed[media_type] or ""


class AnalyzeOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    search_engine_id: str | None = Field(default=None, alias="searchEngineId")


class AnalyzeRequest(BaseModel):
    type: Literal["text", "url", "image", "video", "audio"]
    payload: AnalyzePayload
    options: AnalyzeOptions | None = None

    def to_analysis_request(self) -> AnalysisRequest:
        payload = self.payload
        if self.type == "text":
            return TextRequest(text=payload.text or "")
        if self.type == "url":
            return UrlRequest(url=payload.url or "")
        media_types = {"image": ImageRequest, "video": VideoRequest, "audio": AudioRequest}
        return media_types[self.type](
            data=payload.media_data(self.type), mime_type=payload.mime_type
        )

    def to_options(self) -> AnalysisOptions:
        if self.options is None:
            return AnalysisOptions()
        return AnalysisOptions(search_engine_id=self.options.search_engine_id)


class SourceModel(BaseModel):
    url: str
    title: str
    credibilityScore: int = Field(ge=0, le=100)


class UnifiedResponseModel(BaseModel):
    analysisLabel: Literal["RED", "YELLOW", "ORANGE", "GREEN"]
    oneLineDescription: str
    summary: str
    educationalInsight: str
    sources: list[SourceModel]
    sourceIntegrityScore: int = Field(ge=0, le=100)
    contentAuthenticityScore: int = Field(ge=0, le=100)
    trustExplainabilityScore: int = Field(ge=0, le=100)


# --- Dependencies ---


def get_analyzer(request: Request) -> UnifiedAnalyzer:
    return request.app.state.analyzer


# --- Routes ---


@app.exception_handler(InvalidInput)
async def invalid_input_handler(request: Request, exc: InvalidInput):
    logger.info("Rejected invalid input: %s", exc)
    return JSONResponse(status_code=400, content=exc.to_dict())


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/api/analyze", response_model=UnifiedResponseModel)
async def analyze(req: AnalyzeRequest, analyzer: UnifiedAnalyzer = Depends(get_analyzer)):
    """Analyze one piece of content and return the fused trust verdict."""
    response = await analyzer.analyze_unified(req.to_analysis_request(), req.to_options())
    return response.to_dict()


def run() -> None:
    import uvicorn

    uvicorn.run("trustlens.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
