"""Scraper module for extracting title and description from article pages."""

import asyncio
import ipaddress
import logging
import socket
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup

from social_copy.config import settings
from social_copy.errors import ExtractionError

logger = logging.getLogger(__name__)

# Private IP ranges that should be blocked (SSRF protection)
BLOCKED_IP_RANGES = [
    ipaddress.ip_network("127.0.0.0/8"),      # Loopback
    ipaddress.ip_network("10.0.0.0/8"),       # Private Class A
    ipaddress.ip_network("172.16.0.0/12"),    # Private Class B
    ipaddress.ip_network("192.168.0.0/16"),   # Private Class C
    ipaddress.ip_network("169.254.0.0/16"),   # Link-local (cloud metadata)
    ipaddress.ip_network("0.0.0.0/8"),        # Current network
    ipaddress.ip_network("224.0.0.0/4"),      # Multicast
    ipaddress.ip_network("240.0.0.0/4"),      # Reserved
]

# Allowed URL schemes
ALLOWED_SCHEMES = {"http", "https"}


def is_safe_url(url: str) -> tuple[bool, str]:
    """Validate URL for SSRF protection.

    Args:
        url: URL to validate

    Returns:
        Tuple of (is_safe, reason)
    """
    if not url:
        return False, "Empty URL"

    try:
        parsed = urlparse(url)

        if parsed.scheme.lower() not in ALLOWED_SCHEMES:
            return False, f"Blocked scheme: {parsed.scheme}"

        if not parsed.netloc:
            return False, "Missing host"

        hostname = parsed.hostname
        if not hostname:
            return False, "Invalid hostname"

        if hostname.lower() in ("localhost", "localhost.localdomain"):
            return False, "Localhost blocked"

        try:
            ip_str = socket.gethostbyname(hostname)
            ip = ipaddress.ip_address(ip_str)

            for blocked_range in BLOCKED_IP_RANGES:
                if ip in blocked_range:
                    return False, f"Blocked IP range: {ip_str}"

        except socket.gaierror:
            # Could not resolve - the fetch itself will fail if it is bogus
            logger.warning(f"Could not resolve hostname: {hostname}")

        return True, "OK"

    except ValueError as e:
        return False, f"URL validation error: {str(e)}"


class ContentRecord:
    """Title and optional description extracted from an article page."""

    def __init__(self, title: str, description: Optional[str] = None):
        self.title = title
        self.description = description or None

    @property
    def combined_text(self) -> str:
        """Title plus description, used when embedding both."""
        if self.description:
            return f"{self.title}\n\n{self.description}"
        return self.title

    def to_dict(self) -> Dict[str, Any]:
        """Convert record to dictionary."""
        return {
            "title": self.title,
            "description": self.description,
        }


def _meta_content(soup: BeautifulSoup, **attrs: str) -> Optional[str]:
    tag = soup.find("meta", attrs=attrs)
    if tag is None:
        return None
    content = (tag.get("content") or "").strip()
    return content or None


def parse_html(html: str) -> ContentRecord:
    """Extract title and description from an HTML document.

    Title comes from og:title, falling back to <title>. Description comes
    from og:description, falling back to the standard description meta tag.

    Raises:
        ExtractionError: If no usable title is found
    """
    soup = BeautifulSoup(html, "html.parser")

    title = _meta_content(soup, property="og:title")
    if not title and soup.title:
        title = soup.title.get_text(" ", strip=True)
    if not title:
        raise ExtractionError("No title found in page")

    description = (
        _meta_content(soup, property="og:description")
        or _meta_content(soup, name="description")
    )
    return ContentRecord(title=title, description=description)


class PageScraper:
    """Fetches an article page and extracts its ContentRecord."""

    def __init__(self, timeout: Optional[int] = None, url_guard_enabled: Optional[bool] = None):
        self.headers = {
            "User-Agent": settings.user_agent
        }
        self.timeout = timeout or settings.request_timeout
        self.url_guard_enabled = (
            settings.url_guard_enabled if url_guard_enabled is None else url_guard_enabled
        )

    def _fetch(self, url: str) -> str:
        if self.url_guard_enabled:
            is_safe, reason = is_safe_url(url)
            if not is_safe:
                logger.warning(f"Blocked unsafe URL: {url} - Reason: {reason}")
                raise ExtractionError(f"Unsafe URL blocked: {reason}")

        response = requests.get(url, headers=self.headers, timeout=self.timeout)
        response.raise_for_status()
        return response.text

    async def fetch_html(self, url: str) -> str:
        """Download the raw HTML of a page.

        Raises:
            ExtractionError: If the URL is blocked or the request fails
        """
        try:
            return await asyncio.to_thread(self._fetch, url)
        except requests.RequestException as e:
            raise ExtractionError(f"Failed to fetch {url}: {e}") from e

    async def extract(self, url: str) -> ContentRecord:
        """Fetch a page and extract its title and description."""
        logger.info(f"Scraping article: {url}")
        html = await self.fetch_html(url)
        record = parse_html(html)
        logger.debug(f"Extracted title: {record.title!r}")
        return record
