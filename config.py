import os
import logging
import sys

import structlog

from exceptions import ConfigurationError

logger = logging.getLogger("civic_agendas")


def get_logger(name: str = "civic_agendas"):
    """structlog logger for a module

    Usage:
        logger = get_logger(__name__)
        logger = logger.bind(component="vendor", source="hisd")
        logger.info("fetching events", days_back=90)

    Args:
        name: Usually the calling module's __name__
    """
    return structlog.get_logger(name)


class Config:
    """Configuration management for the agenda pipeline"""

    def __init__(self):
        default_data_dir = os.path.join(os.getcwd(), "data")
        self.DATA_DIR = os.getenv("CIVIC_DATA_DIR", default_data_dir)

        # Logging
        self.LOG_LEVEL = os.getenv("CIVIC_LOG_LEVEL", "INFO").upper()
        self.DEBUG = os.getenv("CIVIC_DEBUG", "false").lower() == "true"

        # Rolling event window for the Legistar sources
        self.DAYS_BACK = self._parse_int("CIVIC_DAYS_BACK", "90")
        self.DAYS_FORWARD = self._parse_int("CIVIC_DAYS_FORWARD", "60")
        self.HTTP_TIMEOUT = self._parse_int("CIVIC_HTTP_TIMEOUT", "30")

        # Upstream endpoints
        self.HARRIS_COUNTY_API_BASE = os.getenv(
            "HARRIS_COUNTY_API_BASE", "https://webapi.legistar.com/v1/harriscountytx"
        )
        self.HISD_API_BASE = os.getenv(
            "HISD_API_BASE", "https://webapi.legistar.com/v1/houstonisd"
        )
        self.METRO_RSS_URL = os.getenv(
            "METRO_RSS_URL",
            "https://ridemetro.granicus.com/ViewPublisherRSS.php?view_id=5&mode=agendas",
        )
        self.METRO_AGENDA_VIEWER_URL = os.getenv(
            "METRO_AGENDA_VIEWER_URL",
            "https://ridemetro.granicus.com/AgendaViewer.php?view_id=5&clip_id=",
        )
        self.METRO_PROJECTED_MONTHS = self._parse_int("METRO_PROJECTED_MONTHS", "6")

        # City Secretary site answers 403 to scripts, so we only age the last manual snapshot
        self.CITY_COUNCIL_STALE_AFTER_DAYS = self._parse_int("CITY_COUNCIL_STALE_AFTER_DAYS", "1")

        self._validate()

    def _parse_int(self, key: str, default: str) -> int:
        """Read an integer env var, raising ConfigurationError on junk"""
        raw = os.getenv(key, default)
        try:
            return int(raw)
        except ValueError:
            raise ConfigurationError(f"{key} must be an integer, got {raw!r}", config_key=key)

    def _validate(self):
        """Validate configuration values"""
        if self.DAYS_BACK < 0:
            raise ConfigurationError("CIVIC_DAYS_BACK must not be negative", config_key="CIVIC_DAYS_BACK")

        if self.DAYS_FORWARD < 0:
            raise ConfigurationError("CIVIC_DAYS_FORWARD must not be negative", config_key="CIVIC_DAYS_FORWARD")

        if self.HTTP_TIMEOUT <= 0:
            raise ConfigurationError("CIVIC_HTTP_TIMEOUT must be positive", config_key="CIVIC_HTTP_TIMEOUT")

        if self.METRO_PROJECTED_MONTHS < 0:
            raise ConfigurationError(
                "METRO_PROJECTED_MONTHS must not be negative", config_key="METRO_PROJECTED_MONTHS"
            )

    def ensure_data_dir(self) -> str:
        """Create DATA_DIR on first use and return it"""
        if not os.path.exists(self.DATA_DIR):
            logger.info("creating data directory %s", self.DATA_DIR)
            os.makedirs(self.DATA_DIR, exist_ok=True)
        return self.DATA_DIR

    def summary(self) -> dict:
        """Get a summary of current configuration"""
        return {
            "data_dir": self.DATA_DIR,
            "debug": self.DEBUG,
            "log_level": self.LOG_LEVEL,
            "days_back": self.DAYS_BACK,
            "days_forward": self.DAYS_FORWARD,
            "http_timeout": self.HTTP_TIMEOUT,
            "harris_county_api_base": self.HARRIS_COUNTY_API_BASE,
            "hisd_api_base": self.HISD_API_BASE,
            "metro_rss_url": self.METRO_RSS_URL,
            "metro_projected_months": self.METRO_PROJECTED_MONTHS,
            "city_council_stale_after_days": self.CITY_COUNCIL_STALE_AFTER_DAYS,
        }


def configure_structlog(is_development: bool = False, log_level: str = "INFO"):
    """Route structlog through stdlib logging on stdout

    Args:
        is_development: key=value lines for a terminal instead of JSON
        log_level: Standard level name, unknown names fall back to INFO
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if is_development:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.KeyValueRenderer(key_order=["event"], drop_missing=True),
        ]
    else:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=numeric_level,
    )


# Global configuration instance
config = Config()

configure_structlog(is_development=config.DEBUG, log_level=config.LOG_LEVEL)
