"""
Shared fixtures: a canned-response Fetcher, a tmp-dir store and a fixed run time
"""

from datetime import datetime, timezone

import pytest

from database.source_store import SourceStore
from tests.fakes import FakeFetcher


@pytest.fixture
def fake_fetcher():
    return FakeFetcher()


@pytest.fixture
def store(tmp_path):
    return SourceStore(str(tmp_path))


@pytest.fixture
def run_at():
    return datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
