"""
Source Store - per-source JSON documents on disk

One pretty-printed UTF-8 file per source plus the combined document. Writes
go through a temp file and os.replace so a crash mid-write leaves the last
good file in place.
"""

import json
import os
import tempfile
from typing import Any, Dict

from config import get_logger
from exceptions import SourceNotFoundError, StorageError

logger = get_logger(__name__).bind(component="store")

SOURCE_FILES = {
    "harris_county": "harris_county.json",
    "hisd": "hisd.json",
    "houston_city_council": "houston_city_council.json",
    "metro": "metro.json",
}

COMBINED_FILE = "all_agendas.json"


class SourceStore:
    """Load and save source documents under a data directory"""

    def __init__(self, data_dir: str):
        """
        Args:
            data_dir: Directory holding the per-source and combined JSON files
        """
        self.data_dir = data_dir

    def filename_for(self, source_key: str) -> str:
        try:
            return SOURCE_FILES[source_key]
        except KeyError:
            raise StorageError(f"Unknown source key: {source_key}")

    def path_for(self, source_key: str) -> str:
        return os.path.join(self.data_dir, self.filename_for(source_key))

    def _read_json(self, path: str) -> Dict[str, Any]:
        if not os.path.exists(path):
            raise SourceNotFoundError(f"Source file not found: {os.path.basename(path)}", path=path)

        try:
            with open(path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, ValueError) as e:
            raise StorageError(f"Source file unreadable: {os.path.basename(path)} ({e})", path=path, original_error=e) from e

        if not isinstance(document, dict):
            raise StorageError(
                f"Source file unreadable: {os.path.basename(path)} (expected object, got {type(document).__name__})",
                path=path
            )
        return document

    def _write_json(self, path: str, document: Dict[str, Any]) -> str:
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=os.path.dirname(path) or ".", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2, ensure_ascii=False)
                f.write("\n")
            os.replace(tmp_path, path)
        except OSError as e:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StorageError(f"Failed to write {os.path.basename(path)}: {e}", path=path, original_error=e) from e

        logger.debug("wrote document", path=path)
        return path

    def load(self, source_key: str) -> Dict[str, Any]:
        """Load a source's last persisted document.

        Raises:
            SourceNotFoundError: No file yet
            StorageError: File exists but isn't a JSON object
        """
        return self._read_json(self.path_for(source_key))

    def save(self, source_key: str, document: Dict[str, Any]) -> str:
        """Persist a source document. Returns the written path."""
        return self._write_json(self.path_for(source_key), document)

    def path_for_combined(self) -> str:
        return os.path.join(self.data_dir, COMBINED_FILE)

    def load_combined(self) -> Dict[str, Any]:
        return self._read_json(self.path_for_combined())

    def save_combined(self, document: Dict[str, Any]) -> str:
        return self._write_json(self.path_for_combined(), document)
