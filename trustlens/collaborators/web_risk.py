"""URL reputation collaborator — Google Web Risk ``uris:search``."""

from __future__ import annotations

import logging

import httpx

from trustlens.config import settings
from trustlens.models.signals import UrlReputation

logger = logging.getLogger(__name__)

WEB_RISK_URL = "https://webrisk.googleapis.com/v1/uris:search"
THREAT_TYPES = ("MALWARE", "SOCIAL_ENGINEERING", "UNWANTED_SOFTWARE")


class WebRiskClient:
    """Looks a URL up in Google's malware and phishing lists."""

    name: str = "Web Risk"

    def __init__(self, api_key: str | None = None, timeout: float = 10.0) -> None:
        self.api_key = api_key or settings.web_risk_api_key
        self.timeout = timeout

    async def lookup(self, url: str) -> UrlReputation:
        params: list[tuple[str, str]] = [("key", self.api_key), ("uri", url)]
        params.extend(("threatTypes", threat) for threat in THREAT_TYPES)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(WEB_RISK_URL, params=params)
            response.raise_for_status()

        threat = response.json().get("threat")
        if threat:
            threat_types = tuple(str(t) for t in threat.get("threatTypes") or [])
            logger.info("Web Risk flagged %s: %s", url, ", ".join(threat_types))
            return UrlReputation(
                is_safe=False,
                threat_types=threat_types,
                details=(
                    "The URL is considered unsafe. Threat types found: "
                    f"{', '.join(threat_types) or 'unspecified'}."
                ),
            )
        return UrlReputation(is_safe=True, details="The URL is considered safe.")
