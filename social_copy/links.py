"""Link tagging and shortening for generated copies."""

import asyncio
import logging
from typing import Optional
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

import requests

from social_copy.config import settings
from social_copy.security import safe_log_error

logger = logging.getLogger(__name__)


def add_utm(url: str, source: str, medium: str, campaign: str) -> str:
    """Add UTM parameters to a URL, keeping its other query parameters.

    Existing utm_source/utm_medium/utm_campaign values are replaced.
    """
    parsed = urlparse(url)
    utm = {
        "utm_source": source,
        "utm_medium": medium,
        "utm_campaign": campaign,
    }
    query = [(k, v) for k, v in parse_qsl(parsed.query, keep_blank_values=True) if k not in utm]
    query.extend((k, v) for k, v in utm.items() if v)
    return urlunparse(parsed._replace(query=urlencode(query)))


def append_link(copy: str, link: str) -> str:
    """Append a link on its own line."""
    return f"{copy.strip()}\n{link}"


class LinkService:
    """Tags article URLs and shortens them through Bitly when configured."""

    def __init__(
        self,
        access_token: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[int] = None
    ):
        self.access_token = settings.bitly_access_token if access_token is None else access_token
        self.api_url = api_url or settings.shortener_api_url
        self.timeout = timeout or settings.request_timeout

    @property
    def enabled(self) -> bool:
        return bool(self.access_token)

    def _shorten(self, url: str) -> str:
        response = requests.post(
            self.api_url,
            headers={"Authorization": f"Bearer {self.access_token}"},
            json={"long_url": url},
            timeout=self.timeout
        )
        response.raise_for_status()
        return response.json()["link"]

    async def shorten(self, url: str) -> str:
        """Shorten a URL, or return it unchanged if shortening is off or fails."""
        if not self.enabled:
            return url

        try:
            return await asyncio.to_thread(self._shorten, url)
        except (requests.RequestException, KeyError, TypeError, ValueError) as e:
            safe_log_error(logger, "URL shortening failed, using long URL", e)
            return url

    async def tagged_link(self, url: str, platform: str) -> str:
        """UTM-tag the article URL for a platform and shorten it."""
        tagged = add_utm(url, platform, settings.utm_medium, settings.utm_campaign)
        return await self.shorten(tagged)
