"""Page fetcher — dereferences a URL into readable plain text."""

from __future__ import annotations

import html
import logging
import re

import httpx

from trustlens.config import settings

logger = logging.getLogger(__name__)

MAX_TEXT_CHARS = 2000

_BLOCKS = re.compile(
    r"<(script|style|nav|header|footer|aside)\b[^>]*>.*?</\1\s*>",
    re.IGNORECASE | re.DOTALL,
)
_TAGS = re.compile(r"<[^>]+>")
_WHITESPACE = re.compile(r"\s+")


class PageFetcher:
    """Fetches an HTML or plain-text page and returns its visible text."""

    name: str = "Page Fetcher"

    def __init__(self, user_agent: str | None = None, timeout: float | None = None) -> None:
        self.user_agent = user_agent or settings.user_agent
        self.timeout = timeout if timeout is not None else settings.page_fetch_timeout_ms / 1000

    async def fetch_text(self, url: str) -> str:
        async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
            response = await client.get(
                url,
                headers={
                    "User-Agent": self.user_agent,
                    "Accept": "text/html,application/xhtml+xml,text/plain;q=0.9,*/*;q=0.8",
                },
            )
            response.raise_for_status()

        content_type = response.headers.get("content-type", "")
        if "text/html" not in content_type and "text/plain" not in content_type:
            logger.warning("Non-text content type %r for %s", content_type, url)
            return ""
        text = html_to_text(response.text)
        logger.info("Fetched %d characters from %s", len(text), url)
        return text


def html_to_text(markup: str, limit: int = MAX_TEXT_CHARS) -> str:
    text = _BLOCKS.sub(" ", markup)
    text = _TAGS.sub(" ", text)
    text = html.unescape(text)
    return _WHITESPACE.sub(" ", text).strip()[:limit]
