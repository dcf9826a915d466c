"""
Combiner - merge the per-source documents into all_agendas.json

Each source's last persisted document is copied verbatim. A source whose
file is missing or unreadable gets an error placeholder instead, so the
frontend always sees the same four keys.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from config import get_logger
from database.source_store import SOURCE_FILES, SourceStore
from exceptions import StorageError
from pipeline.utils import count_meetings_and_items, ensure_utc, to_iso_timestamp, utc_now
from vendors.schemas import CombinedDocument, ErrorPlaceholder

logger = get_logger(__name__).bind(component="combiner")


def _load_or_placeholder(store: SourceStore, source_key: str) -> Dict[str, Any]:
    try:
        return store.load(source_key)
    except StorageError as e:
        logger.warning("source unavailable for combine", source=source_key, error=e.message)
        return ErrorPlaceholder(source=source_key, error=e.message).model_dump(mode="json")


def combine_sources(store: SourceStore, run_at: Optional[datetime] = None) -> CombinedDocument:
    """Build and persist the combined document.

    Never fails because of a bad source file; only a failed write of the
    combined file raises (StorageError).
    """
    run_at = ensure_utc(run_at) if run_at else utc_now()

    sources = {}
    total_meetings = 0
    total_items = 0

    for source_key in SOURCE_FILES:
        document = _load_or_placeholder(store, source_key)
        sources[source_key] = document

        meetings, items = count_meetings_and_items(document)
        total_meetings += meetings
        total_items += items
        logger.info("source combined", source=source_key, meetings=meetings, items=items)

    combined = CombinedDocument(fetched_at=to_iso_timestamp(run_at), sources=sources)
    path = store.save_combined(combined.to_json_dict())

    logger.info(
        "combine complete",
        sources=len(sources),
        total_meetings=total_meetings,
        total_items=total_items,
        path=path,
    )
    return combined
