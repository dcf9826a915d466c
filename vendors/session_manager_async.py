"""
Async Session Manager for upstream sources

One pooled aiohttp session per vendor (legistar, granicus), created lazily
and reused for the whole refresh run. The conductor closes them on exit.
"""

from typing import Dict

import aiohttp

from config import get_logger

logger = get_logger(__name__).bind(component="vendor")


class AsyncSessionManager:
    """Class-level registry of aiohttp sessions keyed by vendor pool"""

    _sessions: Dict[str, aiohttp.ClientSession] = {}

    @classmethod
    async def get_session(cls, vendor: str, timeout_total: int = 30) -> aiohttp.ClientSession:
        """Session for a vendor pool, (re)created if missing or closed.

        timeout_total bounds each whole request; connects get 10s.
        """
        if vendor not in cls._sessions or cls._sessions[vendor].closed:
            timeout = aiohttp.ClientTimeout(
                total=timeout_total,
                connect=10,
                sock_read=timeout_total
            )

            # Small pool, at most two connections per host
            connector = aiohttp.TCPConnector(
                limit=5,
                limit_per_host=2,
                ttl_dns_cache=300,
                enable_cleanup_closed=True
            )

            headers = {
                "User-Agent": "civic-agendas/1.0 (+public meeting aggregator)",
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
                "Accept-Language": "en-US,en;q=0.9",
            }

            cls._sessions[vendor] = aiohttp.ClientSession(
                timeout=timeout,
                connector=connector,
                headers=headers,
                raise_for_status=False  # status handled in AiohttpFetcher
            )

            logger.debug("created async session", vendor=vendor, timeout_seconds=timeout_total)

        return cls._sessions[vendor]

    @classmethod
    async def close_all(cls):
        """Close all active sessions (cleanup on shutdown)."""
        logger.info("closing async sessions", session_count=len(cls._sessions))

        for vendor, session in cls._sessions.items():
            if not session.closed:
                await session.close()
                logger.debug("closed async session", vendor=vendor)

        cls._sessions.clear()
