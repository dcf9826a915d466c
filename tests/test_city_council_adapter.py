"""
Tests for the Houston City Council stale passthrough

The adapter never talks to the network: it ages the last snapshot, flags
staleness and keeps the meeting list exactly as it was stored.
"""

import asyncio
import copy
import os
from datetime import datetime, timezone

from vendors.adapters.city_council_adapter_async import AsyncCityCouncilAdapter


SNAPSHOT = {
    "source": "Houston City Council",
    "fetched_at": "2024-02-25T08:00:00.000Z",
    "note": "Manually extracted from City Secretary PDFs",
    "data_sources": {
        "primary": "https://www.houstontx.gov/citysec/agenda/agendaindex.html",
        "secondary": "https://houston.novusagenda.com/agendapublic/Meetings.aspx",
    },
    "officials": [{"name": "Council Member", "district": "A"}],
    "manual_notes": "entered by hand",
    "meetings": [
        {
            "id": "cc-2024-02-27",
            "date": "2024-02-27",
            "body": "City Council",
            "status": "upcoming",
            "agenda_items": [{"id": 1, "title": "Ordinance amending Chapter 40"}],
        },
    ],
}


def _refresh(store, run_at, stale_after_days=1):
    adapter = AsyncCityCouncilAdapter(store, stale_after_days=stale_after_days)
    return asyncio.run(adapter.fetch_source(run_at)).to_json_dict()


class TestCityCouncilAdapter:

    def test_stale_snapshot(self, store, run_at):
        store.save("houston_city_council", SNAPSHOT)
        document = _refresh(store, run_at)

        assert document["stale"] is True
        assert document["stale_days"] == 5
        assert document["fetched_at"] == "2024-02-25T08:00:00.000Z"
        assert document["last_refresh_attempt"] == "2024-03-01T12:00:00.000Z"
        assert document["note"] == (
            "Data originally fetched 2024-02-25. "
            "City Secretary site (houstontx.gov) returns 403 to automated requests. "
            "Data is 5 day(s) old. Manual refresh needed when new PDFs are available."
        )

    def test_meetings_and_extra_keys_untouched(self, store, run_at):
        store.save("houston_city_council", SNAPSHOT)
        document = _refresh(store, run_at)

        # meeting status is left as stored, not reclassified
        assert document["meetings"] == SNAPSHOT["meetings"]
        assert document["officials"] == SNAPSHOT["officials"]
        assert document["data_sources"] == SNAPSHOT["data_sources"]
        assert document["manual_notes"] == "entered by hand"

    def test_snapshot_not_mutated(self, store, run_at):
        original = copy.deepcopy(SNAPSHOT)
        store.save("houston_city_council", SNAPSHOT)
        _refresh(store, run_at)
        assert SNAPSHOT == original

    def test_one_day_old_is_not_stale(self, store, run_at):
        snapshot = dict(SNAPSHOT, fetched_at="2024-02-29T06:00:00.000Z")
        store.save("houston_city_council", snapshot)
        document = _refresh(store, run_at)
        assert document["stale_days"] == 1
        assert document["stale"] is False

    def test_threshold_is_configurable(self, store, run_at):
        store.save("houston_city_council", SNAPSHOT)
        assert _refresh(store, run_at, stale_after_days=7)["stale"] is False

    def test_missing_file_gives_stub(self, store, run_at):
        document = _refresh(store, run_at)
        assert document["meetings"] == []
        assert document["officials"] == []
        assert document["stale_days"] == 0
        assert document["stale"] is False
        assert document["fetched_at"] == "2024-03-01T12:00:00.000Z"
        assert document["data_sources"]["secondary"] == "https://houston.novusagenda.com/agendapublic/Meetings.aspx"

    def test_unreadable_file_gives_stub(self, store, run_at):
        with open(store.path_for("houston_city_council"), "w", encoding="utf-8") as f:
            f.write("{not json")
        document = _refresh(store, run_at)
        assert document["meetings"] == []
        assert document["source"] == "Houston City Council"

    def test_missing_fetched_at_counts_from_epoch(self, store):
        snapshot = {k: v for k, v in SNAPSHOT.items() if k != "fetched_at"}
        store.save("houston_city_council", snapshot)
        run_at = datetime(1970, 1, 11, 0, 0, tzinfo=timezone.utc)
        document = _refresh(store, run_at)
        assert document["stale_days"] == 10
        assert document["stale"] is True
        assert document["fetched_at"] == "1970-01-01T00:00:00.000Z"

    def test_does_not_write(self, store, run_at):
        store.save("houston_city_council", SNAPSHOT)
        before = os.path.getmtime(store.path_for("houston_city_council"))
        _refresh(store, run_at)
        assert os.path.getmtime(store.path_for("houston_city_council")) == before

    def test_naive_run_time_treated_as_utc(self, store):
        store.save("houston_city_council", SNAPSHOT)
        document = _refresh(store, datetime(2024, 3, 1, 12, 0))
        assert document["stale_days"] == 5
        assert document["last_refresh_attempt"] == "2024-03-01T12:00:00.000Z"

    def test_hand_entered_meeting_entries_kept(self, store, run_at):
        meetings = ["Council meeting 2024-02-27 (see PDF)", {"id": "cc-2024-03-05", "agenda_items": []}]
        store.save("houston_city_council", dict(SNAPSHOT, meetings=meetings))
        document = _refresh(store, run_at)
        assert document["meetings"] == meetings
        assert document["stale"] is True
