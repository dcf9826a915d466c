"""
Async City Council Adapter - stale passthrough for Houston City Council

The City Secretary site answers automated requests with 403, so there is no
live fetch. This adapter ages the last persisted snapshot instead: it keeps
the meeting list exactly as stored, stamps a refresh attempt and reports how
old the data is. It never raises.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from database.source_store import SourceStore
from exceptions import StorageError
from pipeline.utils import parse_iso_timestamp, to_iso_timestamp
from vendors.adapters.base_adapter_async import AsyncBaseAdapter, logger
from vendors.schemas import StaleSourceDocument

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

DEFAULT_DATA_SOURCES = {
    "primary": "https://www.houstontx.gov/citysec/agenda/agendaindex.html",
    "secondary": "https://houston.novusagenda.com/agendapublic/Meetings.aspx",
}


class AsyncCityCouncilAdapter(AsyncBaseAdapter):
    """Houston City Council (no automated access)"""

    source_key = "houston_city_council"
    source_name = "Houston City Council"

    def __init__(self, store: SourceStore, stale_after_days: int = 1):
        """
        Args:
            store: Where the last snapshot lives
            stale_after_days: Snapshots older than this many whole days are stale
        """
        super().__init__(vendor="novusagenda")
        self.store = store
        self.stale_after_days = stale_after_days

    def _stub_document(self, run_at: datetime) -> Dict[str, Any]:
        return {
            "source": self.source_name,
            "fetched_at": to_iso_timestamp(run_at),
            "note": "No data available - City Secretary site blocks automated access.",
            "data_sources": dict(DEFAULT_DATA_SOURCES),
            "officials": [],
            "meetings": [],
        }

    async def _fetch_source_impl(self, run_at: datetime) -> StaleSourceDocument:
        try:
            existing = self.store.load(self.source_key)
        except StorageError as e:
            logger.warning("no usable city council snapshot, creating stub", source=self.source_key, error=str(e))
            existing = self._stub_document(run_at)

        original_fetch = parse_iso_timestamp(existing.get("fetched_at")) or EPOCH
        stale_days = max((run_at - original_fetch).days, 0)

        meetings = existing.get("meetings")
        if not isinstance(meetings, list):
            meetings = []

        document = dict(existing)
        document.update({
            "source": existing.get("source") or self.source_name,
            "fetched_at": to_iso_timestamp(original_fetch),
            "stale": stale_days > self.stale_after_days,
            "stale_days": stale_days,
            "last_refresh_attempt": to_iso_timestamp(run_at),
            "note": (
                f"Data originally fetched {original_fetch.date().isoformat()}. "
                "City Secretary site (houstontx.gov) returns 403 to automated requests. "
                f"Data is {stale_days} day(s) old. Manual refresh needed when new PDFs are available."
            ),
            "meetings": meetings,
        })

        logger.info(
            "preserved city council snapshot",
            source=self.source_key,
            stale_days=stale_days,
            meetings=len(meetings),
        )
        return StaleSourceDocument(**document)
