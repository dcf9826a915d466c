"""
Async Legistar Adapter - Web API integration shared by the Legistar-backed sources

Fetch order, all sequential:
1. /bodies and /persons (fatal on failure)
2. /events filtered to the rolling window (fatal on failure)
3. /events/{id}/eventitems per event (failure -> meeting with no items)
4. /matters/{id}/attachments per item with a matter (failure -> no attachments)

Subclasses supply the per-source item/meeting shape, the consent policy and
the geo tagger. Sources using Legistar here: Harris County, Houston ISD.
"""

from datetime import datetime
from typing import Dict, Any, List, Optional

from exceptions import VendorError, VendorParsingError
from pipeline.protocols import Fetcher
from pipeline.utils import classify_meeting_date, date_window
from vendors.adapters.base_adapter_async import AsyncBaseAdapter, logger
from vendors.schemas import AttachmentSchema, MeetingSchema, SourceDocument


class AsyncLegistarAdapter(AsyncBaseAdapter):
    """Async adapter base for sources published through the Legistar Web API"""

    # Harris County publishes only active bodies; HISD publishes all with flags
    active_bodies_only: bool = False

    def __init__(
        self,
        api_base: str,
        fetcher: Fetcher,
        days_back: int = 90,
        days_forward: int = 60,
    ):
        """
        Initialize async Legistar adapter.

        Args:
            api_base: Legistar client root (e.g., "https://webapi.legistar.com/v1/houstonisd")
            fetcher: Upstream fetch capability
            days_back: Days of past events to include
            days_forward: Days of future events to include
        """
        super().__init__(vendor="legistar", fetcher=fetcher)
        if not api_base:
            raise ValueError(f"api_base required for {self.source_key}")
        self.api_base = api_base.rstrip("/")
        self.days_back = days_back
        self.days_forward = days_forward

    async def _fetch_list(self, url: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """GET a Legistar collection. Raises VendorParsingError if it isn't a list."""
        payload = await self.fetcher.get_json(url, params=params)

        # Legistar answers some errors with a 200 and an error object
        if not isinstance(payload, list):
            raise VendorParsingError(
                f"Expected list from Legistar API at {url}, got {type(payload).__name__}",
                vendor=self.vendor,
                source=self.source_key
            )
        return payload

    async def _fetch_source_impl(self, run_at: datetime) -> SourceDocument:
        bodies = await self._fetch_list(f"{self.api_base}/bodies")
        persons = await self._fetch_list(f"{self.api_base}/persons")

        min_date, max_date = date_window(run_at, self.days_back, self.days_forward)
        params = {
            "$filter": f"EventDate ge datetime'{min_date}' and EventDate le datetime'{max_date}'",
            "$orderby": "EventDate desc",
        }
        events = await self._fetch_list(f"{self.api_base}/events", params=params)
        logger.info("legistar events found", source=self.source_key, count=len(events), min_date=min_date, max_date=max_date)

        meetings: List[MeetingSchema] = []
        for event in events:
            meeting = await self._process_event(event, run_at)
            if meeting:
                meetings.append(meeting)

        mapped_bodies = [self._map_body(b) for b in bodies if not self.active_bodies_only or b.get("BodyActiveFlag") == 1]
        officials = [
            {
                "id": p.get("PersonId"),
                "name": p.get("PersonFullName"),
                "email": p.get("PersonEmail") or "",
                "active": True,
            }
            for p in persons
            if p.get("PersonActiveFlag") == 1
        ]

        return self._build_document(
            run_at,
            meetings,
            api_base=self.api_base + "/",
            bodies=mapped_bodies,
            officials=officials,
            summary_extras=self._summary_extras(mapped_bodies, officials),
        )

    async def _process_event(self, event: Dict[str, Any], run_at: datetime) -> Optional[MeetingSchema]:
        """Turn one Legistar event into a validated meeting, or None if undatable"""
        event_id = event.get("EventId")
        event_date = self._parse_date(event.get("EventDate"))
        if event_id is None or event_date is None:
            logger.warning("skipping event without id or date", source=self.source_key, event_id=event_id, event_date=event.get("EventDate"))
            return None

        meeting_date = event_date.date().isoformat()
        raw_items = await self._fetch_event_items(event_id)

        agenda_items = []
        for item_data in raw_items:
            attachments = await self._fetch_matter_attachments(item_data.get("EventItemMatterId"))
            agenda_items.append(self._build_item(item_data, attachments))

        meeting = {
            "id": event_id,
            "date": meeting_date,
            "time": event.get("EventTime") or "",
            "body": event.get("EventBodyName") or "",
            "location": event.get("EventLocation") or "",
            "agenda_url": event.get("EventAgendaFile") or None,
            "detail_url": event.get("EventInSiteURL") or None,
            "status": classify_meeting_date(meeting_date, run_at),
            "agenda_items": agenda_items,
        }
        meeting.update(self._meeting_extras(event, agenda_items, raw_items))
        return self._build_meeting(meeting)

    async def _fetch_event_items(self, event_id: Any) -> List[Dict[str, Any]]:
        """Fetch agenda items for an event. Returns [] on failure."""
        try:
            return await self._fetch_list(f"{self.api_base}/events/{event_id}/eventitems")
        except VendorError as e:
            logger.warning("failed to fetch event items", source=self.source_key, event_id=event_id, error=str(e))
            return []

    async def _fetch_matter_attachments(self, matter_id: Any) -> List[AttachmentSchema]:
        """Fetch attachments for a matter. Returns [] when there is no matter or the fetch fails."""
        if not matter_id:
            return []
        try:
            attachments = await self._fetch_list(f"{self.api_base}/matters/{matter_id}/attachments")
        except VendorError as e:
            # Plenty of matters simply have no attachment list
            logger.debug("no attachments for matter", source=self.source_key, matter_id=matter_id, error=str(e))
            return []

        return [
            AttachmentSchema(
                name=a.get("MatterAttachmentName"),
                url=a.get("MatterAttachmentHyperlink"),
                binary_url=a.get("MatterAttachmentBinaryUrl") or None,
            )
            for a in attachments
        ]

    def _map_body(self, body: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "id": body.get("BodyId"),
            "name": body.get("BodyName"),
            "type": body.get("BodyTypeName"),
            "members": body.get("BodyNumberOfMembers"),
            "active": body.get("BodyActiveFlag") == 1,
        }

    def _build_item(self, item_data: Dict[str, Any], attachments: List[AttachmentSchema]) -> Dict[str, Any]:
        """Subclass must implement. Return the normalized item dict."""
        raise NotImplementedError(f"{self.__class__.__name__} must implement _build_item()")

    def _meeting_extras(
        self,
        event: Dict[str, Any],
        agenda_items: List[Dict[str, Any]],
        raw_items: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        return {}

    def _summary_extras(self, bodies: List[Dict[str, Any]], officials: List[Dict[str, Any]]) -> Dict[str, int]:
        return {}
