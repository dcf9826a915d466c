"""
Tests for the METRO (Granicus) adapter

RSS parsing, title/pubDate dating, date+type dedup, AgendaViewer item
extraction, and the 4th-Thursday projection of board and committee meetings.
"""

import asyncio
from datetime import date, datetime, timezone

import pytest

from exceptions import VendorHTTPError, VendorParsingError
from tests.fakes import FakeFetcher
from vendors.adapters.metro_adapter_async import (
    AsyncMetroAdapter,
    classify_meeting_type,
    fourth_thursday,
    projected_meeting_dates,
)
from vendors.adapters.parsers.granicus_parser import (
    extract_clip_id,
    parse_agendaviewer_items,
    parse_publisher_rss,
)
from vendors.schemas import TransitGeoTags


RSS_URL = "https://ridemetro.granicus.com/ViewPublisherRSS.php?view_id=5&mode=agendas"
VIEWER_URL = "https://ridemetro.granicus.com/AgendaViewer.php?view_id=5&clip_id="

RSS_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>METRO Agendas</title>
    <item>
      <title>Board Meeting - January 25, 2024</title>
      <link>https://ridemetro.granicus.com/MediaPlayer.php?view_id=5&amp;clip_id=1234</link>
      <pubDate>Thu, 18 Jan 2024 10:00:00 -0600</pubDate>
    </item>
    <item>
      <title>Board Meeting - January 25, 2024 (Revised)</title>
      <link>https://ridemetro.granicus.com/MediaPlayer.php?view_id=5&amp;clip_id=1235</link>
      <pubDate>Mon, 22 Jan 2024 10:00:00 -0600</pubDate>
    </item>
    <item>
      <title>Committee Meeting - March 20, 2024</title>
      <link>https://ridemetro.granicus.com/MediaPlayer.php?view_id=5&amp;clip_id=1300</link>
      <pubDate>Wed, 13 Mar 2024 10:00:00 -0500</pubDate>
    </item>
    <item>
      <title>Special Board Meeting</title>
      <link>https://ridemetro.granicus.com/MediaPlayer.php?view_id=5&amp;clip_id=1301</link>
      <pubDate>Mon, 12 Feb 2024 09:00:00 -0600</pubDate>
    </item>
    <item>
      <title>Untitled</title>
      <link>https://ridemetro.granicus.com/MediaPlayer.php?view_id=5&amp;clip_id=1302</link>
    </item>
  </channel>
</rss>
"""

AGENDA_1234 = """
<html><body><table>
  <tr><td>1.</td><td>Call to order</td></tr>
  <tr><td>Approval of Consent Agenda items</td></tr>
  <tr><td>Route 82 service change in Southwest Houston</td></tr>
  <tr><td>12345678901</td></tr>
  <tr><th>Header only</th></tr>
</table></body></html>
"""


def _routes():
    return {
        RSS_URL: RSS_FEED,
        VIEWER_URL + "1234": AGENDA_1234,
        VIEWER_URL + "1300": "<html><body><table></table></body></html>",
    }


def _fetch(fetcher, run_at, projected_months=6):
    adapter = AsyncMetroAdapter(RSS_URL, VIEWER_URL, fetcher=fetcher, projected_months=projected_months)
    return asyncio.run(adapter.fetch_source(run_at))


class TestProjection:

    def test_fourth_thursday(self):
        assert fourth_thursday(2024, 3) == date(2024, 3, 28)
        assert fourth_thursday(2024, 8) == date(2024, 8, 22)
        assert fourth_thursday(2024, 6) == date(2024, 6, 27)

    def test_committee_is_eight_days_before_board(self):
        assert projected_meeting_dates(date(2024, 3, 1), 1) == [(date(2024, 3, 28), date(2024, 3, 20))]

    def test_year_rollover(self):
        dates = projected_meeting_dates(date(2024, 11, 5), 3)
        assert [board for board, _ in dates] == [date(2024, 11, 28), date(2024, 12, 26), date(2025, 1, 23)]

    def test_meeting_type(self):
        assert classify_meeting_type("Board Meeting - January 25, 2024") == "Board Meeting"
        assert classify_meeting_type("Finance Committee Meeting") == "Committee Meeting"
        assert classify_meeting_type("Special Committee Meeting") == "Special Meeting"
        assert classify_meeting_type("Board Workshop") == "Workshop"


class TestGranicusParser:

    def test_rss_items(self):
        items = parse_publisher_rss(RSS_FEED)
        assert len(items) == 5
        assert items[0]["title"] == "Board Meeting - January 25, 2024"
        assert items[0]["link"].endswith("clip_id=1234")
        assert items[4]["pub_date"] == ""

    def test_bad_xml(self):
        with pytest.raises(VendorParsingError):
            parse_publisher_rss("<rss><channel><item>")

    def test_bare_channel(self):
        assert parse_publisher_rss("<channel><item><title>A</title></item></channel>")[0]["title"] == "A"

    def test_clip_id(self):
        assert extract_clip_id("https://x.granicus.com/MediaPlayer.php?view_id=5&clip_id=77") == "77"
        assert extract_clip_id("https://x.granicus.com/ViewPublisher.php") is None
        assert extract_clip_id(None) is None

    def test_agendaviewer_rows(self):
        assert parse_agendaviewer_items(AGENDA_1234) == [
            "Approval of Consent Agenda items",
            "Route 82 service change in Southwest Houston",
        ]


class TestMetroAdapter:

    def test_meeting_counts(self, run_at):
        document = _fetch(FakeFetcher(_routes()), run_at)
        # 3 live (duplicate and undatable items dropped) + 12 projected - 1 already live
        assert document.summary == {
            "total_meetings": 14,
            "upcoming_meetings": 1,
            "past_meetings": 2,
            "projected_meetings": 11,
            "total_agenda_items": 2,
            "consent_items": 1,
            "geo_tagged_items": 1,
        }

    def test_sorted_newest_first(self, run_at):
        document = _fetch(FakeFetcher(_routes()), run_at)
        dates = [m.date for m in document.meetings]
        assert dates == sorted(dates, reverse=True)
        assert dates[0] == "2024-08-22"
        assert dates[-1] == "2024-01-25"

    def test_live_meeting_shape(self, run_at):
        document = _fetch(FakeFetcher(_routes()), run_at).to_json_dict()
        board = next(m for m in document["meetings"] if m["date"] == "2024-01-25")
        assert board["id"] == "1234"
        assert board["type"] == "Board Meeting"
        assert board["status"] == "past"
        assert board["agenda_url"] == VIEWER_URL + "1234"
        assert [i["id"] for i in board["agenda_items"]] == ["1234-1", "1234-2"]
        assert [i["agenda_number"] for i in board["agenda_items"]] == [1, 2]
        assert board["agenda_items"][0]["consent"] is True
        assert board["agenda_items"][1]["geographic_tags"] == {
            "routes": ["Route 82"],
            "locations": ["Southwest"],
        }

    def test_items_tagged_with_transit_tags(self, run_at):
        document = _fetch(FakeFetcher(_routes()), run_at)
        board = next(m for m in document.meetings if m.date == "2024-01-25")
        assert all(isinstance(i.geographic_tags, TransitGeoTags) for i in board.agenda_items)

    def test_date_from_pubdate_when_title_has_none(self, run_at):
        document = _fetch(FakeFetcher(_routes()), run_at)
        special = next(m for m in document.meetings if m.type == "Special Meeting")
        assert special.date == "2024-02-12"
        # agenda fetch 404s -> meeting kept without items
        assert special.agenda_items == []

    def test_duplicates_skipped_before_agenda_fetch(self, run_at):
        fetcher = FakeFetcher(_routes())
        _fetch(fetcher, run_at)
        assert VIEWER_URL + "1235" not in fetcher.called_urls()
        assert VIEWER_URL + "1302" not in fetcher.called_urls()

    def test_projected_committee_skipped_when_live(self, run_at):
        document = _fetch(FakeFetcher(_routes()), run_at)
        march_20 = [m for m in document.meetings if m.date == "2024-03-20"]
        assert len(march_20) == 1
        assert march_20[0].status == "upcoming"
        assert march_20[0].type == "Committee Meeting"

        march_28 = [m for m in document.meetings if m.date == "2024-03-28"]
        assert [(m.status, m.type) for m in march_28] == [("projected", "Board Meeting (Projected)")]

    def test_projection_starts_after_run_date(self):
        fetcher = FakeFetcher({RSS_URL: "<rss><channel></channel></rss>"})
        run_at = datetime(2024, 3, 29, 9, 0, tzinfo=timezone.utc)
        document = _fetch(fetcher, run_at, projected_months=2)
        assert [(m.date, m.type) for m in document.meetings] == [
            ("2024-04-25", "Board Meeting (Projected)"),
            ("2024-04-17", "Committee Meetings (Projected)"),
        ]

    def test_projected_ids_are_stable(self, run_at):
        first = _fetch(FakeFetcher(_routes()), run_at)
        second = _fetch(FakeFetcher(_routes()), run_at)
        assert [m.id for m in first.meetings] == [m.id for m in second.meetings]

    def test_document_extras(self, run_at):
        document = _fetch(FakeFetcher(_routes()), run_at).to_json_dict()
        assert document["source"] == "Houston METRO"
        assert document["data_sources"]["rss_feed"] == RSS_URL
        assert document["data_sources"]["minutes_rss"].endswith("mode=minutes")
        assert len(document["meeting_schedule"]["committees"]) == 5
        assert "4th Thursday" in document["meeting_schedule"]["board_meetings"]

    def test_rss_failure_is_fatal(self, run_at):
        fetcher = FakeFetcher(_routes())
        fetcher.fail(RSS_URL, status_code=502)
        with pytest.raises(VendorHTTPError):
            _fetch(fetcher, run_at)
