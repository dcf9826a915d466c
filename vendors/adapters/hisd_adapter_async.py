"""
Houston ISD Board of Education - Legistar client "houstonisd"

HISD items carry vote outcomes (action, passed, mover, seconder) and notes;
consent is only ever signalled in the title.
"""

from typing import Any, Dict, List, Optional

from parsing.geo_tagger import tag_hisd
from vendors.adapters.legistar_adapter_async import AsyncLegistarAdapter
from vendors.schemas import AttachmentSchema
from vendors.utils.item_filters import is_consent_by_title


def _passed_flag(value: Any) -> Optional[bool]:
    if value is None:
        return None
    return value == 1


class AsyncHISDAdapter(AsyncLegistarAdapter):
    """Houston ISD Board of Education"""

    source_key = "hisd"
    source_name = "Houston ISD"

    def _map_body(self, body: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "id": body.get("BodyId"),
            "name": body.get("BodyName"),
            "type": body.get("BodyTypeName"),
            "active": body.get("BodyActiveFlag") == 1,
            "meets": body.get("BodyMeetFlag") == 1,
            "members": body.get("BodyNumberOfMembers"),
        }

    def _build_item(self, item_data: Dict[str, Any], attachments: List[AttachmentSchema]) -> Dict[str, Any]:
        title = item_data.get("EventItemTitle") or ""
        return {
            "id": item_data.get("EventItemId"),
            "sequence": item_data.get("EventItemAgendaSequence") or 0,
            "agenda_number": item_data.get("EventItemAgendaNumber") or None,
            "title": title,
            "full_title": title,
            "type": item_data.get("EventItemMatterType") or "Other",
            "matter_file": item_data.get("EventItemMatterFile") or None,
            "matter_name": item_data.get("EventItemMatterName") or None,
            "consent": is_consent_by_title(title),
            "action": item_data.get("EventItemActionName") or None,
            "passed": _passed_flag(item_data.get("EventItemPassedFlag")),
            "mover": item_data.get("EventItemMoverName") or None,
            "seconder": item_data.get("EventItemSeconderName") or None,
            "agenda_note": item_data.get("EventItemAgendaNote") or None,
            "minutes_note": item_data.get("EventItemMinutesNote") or None,
            "geographic_tags": tag_hisd(title),
            "attachments": attachments,
        }

    def _meeting_extras(
        self,
        event: Dict[str, Any],
        agenda_items: List[Dict[str, Any]],
        raw_items: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        return {
            "body_id": event.get("EventBodyId"),
            "type": event.get("EventComment") or "Regular",
            "agenda_status": event.get("EventAgendaStatusName") or None,
            "item_count": len(agenda_items),
        }

    def _summary_extras(self, bodies: List[Dict[str, Any]], officials: List[Dict[str, Any]]) -> Dict[str, int]:
        return {
            "active_bodies": sum(1 for b in bodies if b["active"]),
            "active_officials": len(officials),
        }
