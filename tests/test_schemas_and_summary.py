"""
Tests for the output schemas, meeting-date classification and summary reduction

The summary must be recomputable from a persisted document: serialize a
document, parse it back through the schema and the numbers match.
"""

import json
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from parsing.geo_tagger import tag_harris_county, tag_hisd, tag_metro
from pipeline.utils import (
    classify_meeting_date,
    count_meetings_and_items,
    date_window,
    parse_iso_timestamp,
    summarize_meetings,
    to_iso_timestamp,
)
from vendors.schemas import (
    CountyGeoTags,
    ErrorPlaceholder,
    MeetingSchema,
    SchoolGeoTags,
    SourceDocument,
    TransitGeoTags,
    validate_meeting_output,
)


RUN_AT = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def _meeting(meeting_id, date, status, items):
    return validate_meeting_output({
        "id": meeting_id,
        "date": date,
        "status": status,
        "agenda_items": items,
    })


def _item(item_id, title, consent=False, tags=None):
    return {
        "id": item_id,
        "title": title,
        "consent": consent,
        "geographic_tags": tags if tags is not None else tag_harris_county(title),
    }


class TestMeetingSchema:

    def test_valid_meeting(self):
        meeting = _meeting(1, "2024-03-05", "upcoming", [_item(10, "Precinct 1 paving")])
        assert meeting.date == "2024-03-05"
        assert meeting.agenda_items[0].geographic_tags.precincts == ["1"]

    @pytest.mark.parametrize("bad_date", ["2024-3-5", "03/05/2024", "2024-02-30", "2024-03-05T10:00:00", ""])
    def test_rejects_non_calendar_dates(self, bad_date):
        with pytest.raises(ValidationError):
            _meeting(1, bad_date, "past", [])

    def test_rejects_unknown_status(self):
        with pytest.raises(ValidationError):
            _meeting(1, "2024-03-05", "cancelled", [])

    def test_source_extras_kept(self):
        meeting = validate_meeting_output({
            "id": "abc", "date": "2024-03-05", "status": "past", "comment": "Regular session",
        })
        assert meeting.model_dump()["comment"] == "Regular session"

    def test_geo_tag_shapes_survive_json_round_trip(self):
        meeting = _meeting("m1", "2024-03-05", "past", [
            _item(1, "Precinct 2", tags=tag_harris_county("Precinct 2")),
            _item(2, "District IV", tags=tag_hisd("District IV")),
            _item(3, "Route 5", tags=tag_metro("Route 5")),
        ])
        reloaded = MeetingSchema(**json.loads(meeting.model_dump_json()))
        tag_types = [type(item.geographic_tags) for item in reloaded.agenda_items]
        assert tag_types == [CountyGeoTags, SchoolGeoTags, TransitGeoTags]


class TestClassification:

    def test_today_is_upcoming(self):
        assert classify_meeting_date("2024-03-01", RUN_AT) == "upcoming"

    def test_yesterday_is_past(self):
        assert classify_meeting_date("2024-02-29", RUN_AT) == "past"

    def test_future_is_upcoming(self):
        assert classify_meeting_date("2024-04-30", RUN_AT) == "upcoming"

    def test_date_window(self):
        assert date_window(RUN_AT, 90, 60) == ("2023-12-02", "2024-04-30")


class TestTimestamps:

    def test_millisecond_z_format(self):
        ts = datetime(2024, 3, 1, 12, 0, 5, 123456, tzinfo=timezone.utc)
        assert to_iso_timestamp(ts) == "2024-03-01T12:00:05.123Z"

    def test_parse_round_trip(self):
        assert parse_iso_timestamp("2024-03-01T12:00:00.000Z") == RUN_AT

    def test_parse_garbage(self):
        assert parse_iso_timestamp("yesterday") is None
        assert parse_iso_timestamp(None) is None


class TestSummary:

    def _meetings(self):
        return [
            _meeting(1, "2024-03-05", "upcoming", [
                _item(1, "Consent: Precinct 1 paving", consent=True),
                _item(2, "Budget workshop"),
            ]),
            _meeting(2, "2024-02-01", "past", [
                _item(3, "Drainage at Brays Bayou", consent=True),
            ]),
            _meeting(3, "2024-03-28", "projected", []),
        ]

    def test_counts(self):
        summary = summarize_meetings(self._meetings())
        assert summary == {
            "total_meetings": 3,
            "upcoming_meetings": 1,
            "past_meetings": 1,
            "projected_meetings": 1,
            "total_agenda_items": 3,
            "consent_items": 2,
            "geo_tagged_items": 2,
        }

    def test_empty(self):
        summary = summarize_meetings([])
        assert all(v == 0 for v in summary.values())

    def test_recomputed_from_persisted_document(self):
        meetings = self._meetings()
        document = SourceDocument(
            source="Test",
            fetched_at=to_iso_timestamp(RUN_AT),
            meetings=meetings,
            summary=summarize_meetings(meetings),
        )
        reloaded = SourceDocument(**json.loads(json.dumps(document.to_json_dict())))
        assert summarize_meetings(reloaded.meetings) == document.summary

    def test_count_meetings_and_items_on_raw_dicts(self):
        document = {"meetings": [{"agenda_items": [{}, {}]}, {"agenda_items": []}, {}]}
        assert count_meetings_and_items(document) == (3, 2)
        assert count_meetings_and_items({}) == (0, 0)


class TestErrorPlaceholder:

    def test_shape(self):
        placeholder = ErrorPlaceholder(source="hisd", error="Source file not found: hisd.json")
        assert placeholder.model_dump(mode="json") == {
            "source": "hisd",
            "fetched_at": None,
            "error": "Source file not found: hisd.json",
            "meetings": [],
        }
