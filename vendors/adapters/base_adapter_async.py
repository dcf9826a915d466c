"""Async Base Adapter - Shared fetcher plumbing, date parsing and summary for source adapters."""

import hashlib
from datetime import datetime
from typing import Optional, List, Dict, Any, Union

from pydantic import ValidationError

from config import get_logger
from pipeline.protocols import Fetcher
from pipeline.utils import ensure_utc, summarize_meetings, to_iso_timestamp, utc_now
from vendors.schemas import MeetingSchema, SourceDocument, StaleSourceDocument, validate_meeting_output

logger = get_logger(__name__).bind(component="vendor")


class AsyncBaseAdapter:
    """Async base adapter. Subclasses implement _fetch_source_impl().

    Contract: config errors raise in __init__; a failed top-level listing call
    raises out of fetch_source(); sub-resource failures degrade inside the
    subclass and never reach the caller.
    """

    source_key: str = ""
    source_name: str = ""

    def __init__(self, vendor: str, fetcher: Optional[Fetcher] = None):
        if not self.source_key:
            raise ValueError(f"{self.__class__.__name__} must define source_key")

        self.vendor = vendor
        self.fetcher = fetcher

        logger.debug("initialized async adapter", vendor=vendor, source=self.source_key)

    async def fetch_source(self, run_at: Optional[datetime] = None) -> Union[SourceDocument, StaleSourceDocument]:
        """Build this source's document for a run. Raises on top-level fetch failure."""
        run_at = ensure_utc(run_at) if run_at else utc_now()
        logger.info("starting fetch", source=self.source_key, vendor=self.vendor)
        document = await self._fetch_source_impl(run_at)
        logger.info(
            "fetch complete",
            source=self.source_key,
            meetings=len(document.meetings),
            items=document.summary.get("total_agenda_items") if isinstance(document, SourceDocument) else None,
        )
        return document

    async def _fetch_source_impl(self, run_at: datetime) -> Union[SourceDocument, StaleSourceDocument]:
        """Subclass must implement."""
        raise NotImplementedError(f"{self.__class__.__name__} must implement _fetch_source_impl()")

    def _parse_date(self, date_str: Optional[str]) -> Optional[datetime]:
        """Parse upstream date formats. Returns naive datetime or None."""
        if not date_str:
            return None

        date_str = date_str.strip()

        # ISO 8601 first
        if 'T' in date_str or date_str.count('-') >= 2:
            try:
                dt = datetime.fromisoformat(date_str.replace('Z', '+00:00'))
                return dt.replace(tzinfo=None)
            except ValueError:
                pass

        formats = [
            "%B %d, %Y", "%B %d %Y", "%b %d, %Y", "%b %d %Y",
            "%m/%d/%Y", "%Y-%m-%d",
        ]

        for fmt in formats:
            try:
                return datetime.strptime(date_str, fmt)
            except ValueError:
                continue

        logger.warning("failed to parse date", date_str=date_str, vendor=self.vendor, source=self.source_key)
        return None

    def _generate_fallback_id(self, title: str, date: Optional[str], meeting_type: Optional[str] = None) -> str:
        """Stable 8-char hash for meetings without a native id."""
        type_str = f"_{meeting_type}" if meeting_type else ""
        id_string = f"{self.source_key}_{date or 'nodate'}_{title}{type_str}"
        return hashlib.md5(id_string.encode()).hexdigest()[:8]

    def _build_meeting(self, meeting: Dict[str, Any]) -> Optional[MeetingSchema]:
        """Validate a raw meeting dict. Meetings without a usable date are dropped."""
        try:
            return validate_meeting_output(meeting)
        except ValidationError as e:
            logger.warning(
                "dropping invalid meeting",
                source=self.source_key,
                meeting_id=meeting.get("id"),
                date=meeting.get("date"),
                error=str(e),
            )
            return None

    def _build_document(self, run_at: datetime, meetings: List[MeetingSchema], **extras: Any) -> SourceDocument:
        """Wrap meetings in the source envelope with a freshly reduced summary"""
        summary = summarize_meetings(meetings)
        summary.update(extras.pop("summary_extras", {}))
        return SourceDocument(
            source=self.source_name,
            fetched_at=to_iso_timestamp(run_at),
            meetings=meetings,
            summary=summary,
            **extras,
        )
