"""Web analysis collaborator — Custom Search grounding plus Gemini summarisation."""

from __future__ import annotations

import json
import logging
from urllib.parse import urlparse

import httpx

from trustlens.collaborators.gemini import GeminiClient, string_list
from trustlens.config import settings
from trustlens.errors import CollaboratorResponseError
from trustlens.models.request import ContentType
from trustlens.models.signals import WebAnalysis, WebInformation

logger = logging.getLogger(__name__)

CUSTOM_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"
MAX_SEARCH_RESULTS = 5

WEB_ANALYSIS_PROMPT = """\
You are an expert in real-time web analysis and fact-checking.

Perform a real-time analysis of the following {kind}:
"{query}"

Your task is to:
1. Search for current information related to this content.
2. Identify the most relevant and recent sources.
3. Check for any fact-checking articles or debunking information.
4. Identify information gaps that need further research.
5. Summarize your findings.
{grounding}
Respond with valid JSON only, in this exact format:
{{
  "realTimeFactCheck": true,
  "currentInformation": [
    {{"title": "...", "url": "https://example.com/article", "snippet": "...", "date": "2024-01-01", "relevance": 90}}
  ],
  "informationGaps": ["..."],
  "analysisSummary": "..."
}}
"relevance" is a number from 0 to 100.\
"""


class GeminiWebAnalyzer:
    """Corroborates content against current web sources."""

    name: str = "Web Analysis"

    def __init__(
        self,
        client: GeminiClient,
        search_api_key: str | None = None,
        default_search_engine_id: str | None = None,
        timeout: float = 15.0,
    ) -> None:
        self.client = client
        self.search_api_key = search_api_key if search_api_key is not None else settings.custom_search_api_key
        self.default_search_engine_id = (
            default_search_engine_id
            if default_search_engine_id is not None
            else settings.search_engine_id
        )
        self.timeout = timeout

    async def analyze(
        self, query: str, content_type: ContentType, search_engine_id: str | None = None
    ) -> WebAnalysis:
        engine_id = search_engine_id or self.default_search_engine_id
        search_results: list[dict] = []
        if self.search_api_key and engine_id:
            try:
                search_results = await self._custom_search(query, engine_id)
                logger.info("Custom Search returned %d items for grounding", len(search_results))
            except httpx.HTTPError as exc:
                logger.warning("Custom Search grounding failed: %s", exc)

        grounding = ""
        if search_results:
            grounding = (
                "\nUse the following web search results as grounding evidence. "
                'Prefer citing these URLs in "currentInformation":\n'
                f"{json.dumps(search_results)}\n"
            )

        prompt = WEB_ANALYSIS_PROMPT.format(
            kind="URL" if content_type is ContentType.URL else "content",
            query=query[:2000],
            grounding=grounding,
        )
        parsed = await self.client.generate_json(
            prompt, grounded=True, search_engine_id=search_engine_id
        )
        return self._parse(parsed)

    async def _custom_search(self, query: str, engine_id: str) -> list[dict]:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(
                CUSTOM_SEARCH_URL,
                params={
                    "key": self.search_api_key,
                    "cx": engine_id,
                    "q": query[:512],
                    "num": str(MAX_SEARCH_RESULTS),
                    "safe": "active",
                },
            )
            response.raise_for_status()

        results = []
        for index, item in enumerate(response.json().get("items") or []):
            url = str(item.get("link") or item.get("formattedUrl") or "")
            if not url:
                continue
            metatags = ((item.get("pagemap") or {}).get("metatags") or [{}])[0]
            results.append(
                {
                    "title": str(item.get("title", "")),
                    "url": url,
                    "snippet": str(item.get("snippet", "")),
                    "date": str(
                        metatags.get("article:published_time")
                        or metatags.get("og:updated_time")
                        or ""
                    ),
                    "relevance": max(0, 100 - index * 10),
                }
            )
        return results

    def _parse(self, parsed: dict) -> WebAnalysis:
        if "currentInformation" not in parsed and "analysisSummary" not in parsed:
            raise CollaboratorResponseError(self.name, "Response has no web analysis fields")
        return WebAnalysis(
            real_time_fact_check=bool(parsed.get("realTimeFactCheck", True)),
            current_information=sanitize_information(parsed.get("currentInformation")),
            information_gaps=string_list(parsed.get("informationGaps")),
            analysis_summary=str(parsed.get("analysisSummary", "")),
        )


def sanitize_information(raw_items: object) -> tuple[WebInformation, ...]:
    """Coerce model-reported sources into well-formed ``WebInformation`` records.

    Missing titles fall back to the URL host, then the snippet; relevance is
    clamped to 0..100 and defaults to ``100 - 10 * index`` when absent.
    """
    if not isinstance(raw_items, list):
        return ()

    items = []
    for index, record in enumerate(item for item in raw_items if isinstance(item, dict)):
        url = record.get("url") if isinstance(record.get("url"), str) else ""
        snippet = record.get("snippet") if isinstance(record.get("snippet"), str) else ""
        date = record.get("date") if isinstance(record.get("date"), str) else ""

        title = record.get("title") if isinstance(record.get("title"), str) else ""
        title = title.strip()
        if not title and url:
            title = urlparse(url).hostname or ""
        if not title and snippet.strip():
            title = snippet.strip()[:80]
        if not title:
            title = f"Untitled source {index + 1}"

        relevance = record.get("relevance")
        if isinstance(relevance, (int, float)) and not isinstance(relevance, bool):
            relevance = max(0.0, min(100.0, float(relevance)))
        else:
            relevance = float(max(0, 100 - index * 10))

        items.append(
            WebInformation(title=title, url=url, snippet=snippet, date=date, relevance=relevance)
        )
    return tuple(items)
