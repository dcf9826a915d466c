"""
Pipeline Run Models - results of a refresh

One SourceRunResult per adapter run, collected into a RefreshReport. The
report is what the CLI turns into an exit status.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class SyncStatus(Enum):
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class SourceRunResult:
    source_key: str
    status: SyncStatus
    meetings_found: int = 0
    items_found: int = 0
    stale: bool = False
    duration_seconds: float = 0.0
    error_message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass
class RefreshReport:
    """Outcome of refreshing every source plus the combine step"""
    results: List[SourceRunResult] = field(default_factory=list)
    combined_path: Optional[str] = None

    @property
    def succeeded(self) -> List[str]:
        return [r.source_key for r in self.results if r.status == SyncStatus.COMPLETED]

    @property
    def failed(self) -> List[str]:
        return [r.source_key for r in self.results if r.status == SyncStatus.FAILED]

    @property
    def all_failed(self) -> bool:
        """Overall failure: nothing refreshed at all"""
        return bool(self.results) and not self.succeeded

    def to_dict(self) -> Dict[str, Any]:
        return {
            "results": [r.to_dict() for r in self.results],
            "succeeded": self.succeeded,
            "failed": self.failed,
            "combined_path": self.combined_path,
        }
