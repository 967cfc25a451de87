from __future__ import annotations

"""
Relay fetcher: GET a page through a CORS-bypass relay and return its text.

Usage:
    fetcher = ProxyFetcher()
    html = await fetcher.fetch("https://www.twipcam.com/cam/abc")

No retries here; callers decide what to do with NetworkError / HttpError.
"""

import asyncio
import logging
from typing import Optional
from urllib.parse import quote

import requests

from discovery.config import DEFAULTS
from discovery.errors import HttpError, NetworkError


log = logging.getLogger(__name__)


def build_relay_url(url: str, relay_url: str = DEFAULTS["relay_url"]) -> str:
    """Percent-encode `url` (like encodeURIComponent) and append it to the relay prefix."""
    return f"{relay_url}{quote(url, safe='')}"


class ProxyFetcher:
    def __init__(
        self,
        relay_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        """
        Params:
            relay_url: relay prefix ending in the query param, e.g. ".../raw?url="
            session: optional requests.Session for connection reuse
            timeout: per-request timeout in seconds; None waits indefinitely
        """
        self.relay_url = relay_url or DEFAULTS["relay_url"]
        self.session = session or requests.Session()
        self.timeout = timeout

    async def fetch(self, url: str) -> str:
        """
        Fetch `url` through the relay.

        The blocking requests call runs in a worker thread; only this await
        suspends the caller, everything else stays on the event loop.

        Raises:
            NetworkError: the relay could not be reached.
            HttpError: the relay answered with a non-2xx status.
        """
        proxy_url = build_relay_url(url, self.relay_url)
        return await asyncio.to_thread(self._get_text, proxy_url)

    def _get_text(self, proxy_url: str) -> str:
        try:
            r = self.session.get(proxy_url, timeout=self.timeout)
        except requests.RequestException as e:
            log.warning("Relay request failed: %s (%s)", proxy_url, e, extra={"url": proxy_url})
            raise NetworkError(str(e)) from e

        if not 200 <= r.status_code < 300:
            log.warning("Relay returned %s for %s", r.status_code, proxy_url, extra={"url": proxy_url})
            raise HttpError(r.status_code, proxy_url)
        return r.text

    def close(self) -> None:
        self.session.close()
