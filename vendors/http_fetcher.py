"""Live Fetcher - aiohttp-backed implementation of pipeline.protocols.Fetcher"""

import asyncio
import time
from typing import Any, Dict, Optional

import aiohttp

from config import get_logger
from exceptions import VendorHTTPError
from vendors.session_manager_async import AsyncSessionManager

logger = get_logger(__name__).bind(component="vendor")


def vendor_for_url(url: str) -> str:
    """Pick the session pool for a URL"""
    if "legistar.com" in url:
        return "legistar"
    if "granicus.com" in url:
        return "granicus"
    return "default"


class AiohttpFetcher:
    """Fetch JSON/text over pooled aiohttp sessions. Raises VendorHTTPError on failure."""

    def __init__(self, timeout_total: int = 30):
        self.timeout_total = timeout_total

    async def _request(self, url: str, params: Optional[Dict[str, Any]], want_json: bool) -> Any:
        vendor = vendor_for_url(url)
        session = await AsyncSessionManager.get_session(vendor, timeout_total=self.timeout_total)

        kwargs: Dict[str, Any] = {}
        if params:
            kwargs["params"] = params

        # Legistar API: prefer JSON over XML
        if want_json and vendor == "legistar":
            kwargs["headers"] = {"Accept": "application/json, application/xml;q=0.9, */*;q=0.8"}

        # Granicus has SSL cert issues on S3 redirects
        if vendor == "granicus":
            kwargs["ssl"] = False

        start_time = time.time()

        try:
            logger.debug("vendor request", vendor=vendor, url=url[:120])
            async with session.get(url, **kwargs) as response:
                duration = time.time() - start_time

                if response.status >= 400:
                    error_body = await response.text()
                    logger.error(
                        "vendor http error",
                        vendor=vendor,
                        status_code=response.status,
                        url=url[:120],
                        error_body=error_body[:500] if error_body else None,
                        duration_seconds=round(duration, 2)
                    )
                    raise VendorHTTPError(
                        f"HTTP {response.status} {response.reason or ''}".strip(),
                        vendor=vendor,
                        status_code=response.status,
                        url=url
                    )

                if not want_json:
                    return await response.text()

                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    logger.error("vendor json parse failed", vendor=vendor, url=url[:120], error=str(e))
                    raise VendorHTTPError(f"JSON parse failed: {e}", vendor=vendor, url=url) from e

        except asyncio.TimeoutError as e:
            duration = time.time() - start_time
            logger.error("vendor request timeout", vendor=vendor, url=url[:120], duration_seconds=round(duration, 2))
            raise VendorHTTPError(f"Request timeout after {duration:.1f}s", vendor=vendor, url=url) from e

        except aiohttp.ClientError as e:
            duration = time.time() - start_time
            logger.error("vendor request failed", vendor=vendor, url=url[:120], error=str(e), error_type=type(e).__name__)
            raise VendorHTTPError(f"Request failed: {e}", vendor=vendor, url=url) from e

    async def get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET request, parse JSON."""
        return await self._request(url, params, want_json=True)

    async def get_text(self, url: str, params: Optional[Dict[str, Any]] = None) -> str:
        """GET request, return body text."""
        return await self._request(url, params, want_json=False)
