"""Pipeline Protocols - Type interfaces for dependency injection"""

from pipeline.protocols.fetcher import Fetcher

__all__ = ["Fetcher"]
