"""Adapter factory - get the right adapter for each source"""

from typing import Dict, Optional

from config import Config, config, get_logger
from database.source_store import SourceStore
from exceptions import ConfigurationError
from pipeline.protocols import Fetcher

from vendors.adapters.base_adapter_async import AsyncBaseAdapter
from vendors.adapters.city_council_adapter_async import AsyncCityCouncilAdapter
from vendors.adapters.harris_county_adapter_async import AsyncHarrisCountyAdapter
from vendors.adapters.hisd_adapter_async import AsyncHISDAdapter
from vendors.adapters.metro_adapter_async import AsyncMetroAdapter

logger = get_logger(__name__).bind(component="vendor")

# Run order for refresh
SOURCE_KEYS = ["harris_county", "hisd", "houston_city_council", "metro"]


def get_async_adapter(
    source_key: str,
    fetcher: Fetcher,
    store: SourceStore,
    cfg: Optional[Config] = None,
) -> AsyncBaseAdapter:
    """Get async adapter for a source. Raises ConfigurationError if unknown."""
    cfg = cfg or config

    if source_key == "harris_county":
        return AsyncHarrisCountyAdapter(
            cfg.HARRIS_COUNTY_API_BASE,
            fetcher=fetcher,
            days_back=cfg.DAYS_BACK,
            days_forward=cfg.DAYS_FORWARD,
        )
    if source_key == "hisd":
        return AsyncHISDAdapter(
            cfg.HISD_API_BASE,
            fetcher=fetcher,
            days_back=cfg.DAYS_BACK,
            days_forward=cfg.DAYS_FORWARD,
        )
    if source_key == "houston_city_council":
        return AsyncCityCouncilAdapter(store, stale_after_days=cfg.CITY_COUNCIL_STALE_AFTER_DAYS)
    if source_key == "metro":
        return AsyncMetroAdapter(
            cfg.METRO_RSS_URL,
            cfg.METRO_AGENDA_VIEWER_URL,
            fetcher=fetcher,
            projected_months=cfg.METRO_PROJECTED_MONTHS,
        )

    raise ConfigurationError(f"Unsupported source: {source_key}", config_key="source")


def build_adapters(fetcher: Fetcher, store: SourceStore, cfg: Optional[Config] = None) -> Dict[str, AsyncBaseAdapter]:
    """All adapters keyed by source, in run order"""
    adapters = {key: get_async_adapter(key, fetcher, store, cfg) for key in SOURCE_KEYS}
    logger.debug("adapters built", sources=list(adapters))
    return adapters
