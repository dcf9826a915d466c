"""
Pipeline Utilities - Shared helper functions

Timestamps, meeting-date classification and the per-source summary reduction.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Iterable, Optional, Tuple

from vendors.schemas import MeetingSchema


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC"""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_iso_timestamp(dt: datetime) -> str:
    """
    Format a run timestamp the way every persisted document stores it.

    Example:
        >>> to_iso_timestamp(datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc))
        '2024-03-01T12:00:00.000Z'
    """
    dt = ensure_utc(dt)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def parse_iso_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a persisted fetched_at string. Returns aware UTC datetime or None."""
    if not value:
        return None
    try:
        return ensure_utc(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
    except (ValueError, AttributeError):
        return None


def date_window(run_at: datetime, days_back: int, days_forward: int) -> Tuple[str, str]:
    """
    Rolling [run - days_back, run + days_forward] window as YYYY-MM-DD strings.

    Example:
        >>> date_window(datetime(2024, 3, 1, tzinfo=timezone.utc), 90, 60)
        ('2023-12-02', '2024-04-30')
    """
    run_day = ensure_utc(run_at).date()
    return (
        (run_day - timedelta(days=days_back)).isoformat(),
        (run_day + timedelta(days=days_forward)).isoformat(),
    )


def classify_meeting_date(meeting_date: str, run_at: datetime) -> str:
    """
    Upcoming if the meeting falls on or after the run's calendar day, else past.

    Pure function of (date, run timestamp), so the classification can be
    reproduced from any persisted document and its fetched_at.
    """
    if date.fromisoformat(meeting_date) >= ensure_utc(run_at).date():
        return "upcoming"
    return "past"


def summarize_meetings(meetings: Iterable[MeetingSchema]) -> Dict[str, int]:
    """
    Reduce a built meeting list to the counters stored in each document's summary.

    Nothing here looks outside the meetings themselves, so the same numbers
    come back when a persisted document is reloaded and summarized again.
    """
    summary = {
        "total_meetings": 0,
        "upcoming_meetings": 0,
        "past_meetings": 0,
        "projected_meetings": 0,
        "total_agenda_items": 0,
        "consent_items": 0,
        "geo_tagged_items": 0,
    }

    for meeting in meetings:
        summary["total_meetings"] += 1
        summary[f"{meeting.status}_meetings"] += 1
        summary["total_agenda_items"] += len(meeting.agenda_items)
        summary["consent_items"] += sum(1 for item in meeting.agenda_items if item.consent)
        summary["geo_tagged_items"] += sum(
            1 for item in meeting.agenda_items if item.geographic_tags.is_tagged()
        )

    return summary


def count_meetings_and_items(document: Dict[str, Any]) -> Tuple[int, int]:
    """Meeting/item counts for a raw persisted document (any source, any shape)"""
    meetings = document.get("meetings") or []
    items = sum(len(m.get("agenda_items") or []) for m in meetings if isinstance(m, dict))
    return len(meetings), items
