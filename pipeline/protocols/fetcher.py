"""Fetcher Protocol - Interface for upstream HTTP access without concrete dependency

Adapters receive a Fetcher instead of opening sessions themselves, so tests can
hand them canned payloads and the live pipeline can hand them pooled aiohttp
sessions.
"""

from typing import Any, Dict, Optional, Protocol


class Fetcher(Protocol):
    """Upstream fetch capability used by every source adapter

    Used by:
    - vendors/adapters/legistar_adapter_async.py - Legistar Web API JSON
    - vendors/adapters/metro_adapter_async.py - Granicus RSS and AgendaViewer HTML

    Both methods raise VendorHTTPError on non-2xx responses, timeouts and
    transport errors.
    """

    async def get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any: ...

    async def get_text(self, url: str, params: Optional[Dict[str, Any]] = None) -> str: ...
