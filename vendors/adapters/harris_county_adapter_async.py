"""
Harris County Commissioners Court - Legistar client "harriscountytx"

Consent items live in the 900+ agenda sequence block, so consent is flagged
by sequence or by title. Meetings also carry per-meeting roll-ups (type
breakdown, consent and geo-tagged counts) the county dashboard reads.
"""

from typing import Any, Dict, List

from parsing.geo_tagger import tag_harris_county
from vendors.adapters.legistar_adapter_async import AsyncLegistarAdapter
from vendors.schemas import AttachmentSchema
from vendors.utils.item_filters import is_consent_by_sequence_or_title


class AsyncHarrisCountyAdapter(AsyncLegistarAdapter):
    """Harris County Commissioners Court"""

    source_key = "harris_county"
    source_name = "Harris County Commissioners Court"
    active_bodies_only = True

    def _build_item(self, item_data: Dict[str, Any], attachments: List[AttachmentSchema]) -> Dict[str, Any]:
        title = item_data.get("EventItemTitle") or ""
        return {
            "id": item_data.get("EventItemId"),
            "agenda_number": item_data.get("EventItemAgendaNumber") or None,
            "title": title,
            "type": item_data.get("EventItemMatterType") or "Other",
            "matter_file": item_data.get("EventItemMatterFile") or None,
            "matter_status": item_data.get("EventItemMatterStatus") or None,
            "consent": is_consent_by_sequence_or_title(title, item_data.get("EventItemAgendaSequence")),
            "geographic_tags": tag_harris_county(title),
            "attachments": attachments,
        }

    def _meeting_extras(
        self,
        event: Dict[str, Any],
        agenda_items: List[Dict[str, Any]],
        raw_items: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        type_breakdown: Dict[str, int] = {}
        for item in agenda_items:
            type_breakdown[item["type"]] = type_breakdown.get(item["type"], 0) + 1

        return {
            "comment": event.get("EventComment") or "",
            "total_items": len(agenda_items),
            "total_raw_items": len(raw_items),
            "consent_items": sum(1 for item in agenda_items if item["consent"]),
            "type_breakdown": type_breakdown,
            "geo_tagged_items": sum(1 for item in agenda_items if item["geographic_tags"].is_tagged()),
        }
