"""JSON-file-backed implementation of KeyValueStorage.

All keys live in one JSON object.  Writes go to a temporary file that
is then moved over the original, so a crash mid-write never leaves a
truncated file behind.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from cartcore.domain.repository.cart_storage import KeyValueStorage

logger = logging.getLogger(__name__)


class JsonKeyValueStorage(KeyValueStorage):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    # --- KeyValueStorage interface --------------------------------------------

    def get(self, key: str) -> Any | None:
        return self._load_raw().get(key)

    def set(self, key: str, record: dict[str, Any]) -> None:
        records = self._load_raw()
        records[key] = record
        self._persist_raw(records)

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> dict[str, Any]:
        try:
            data = json.loads(self._file_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("Storage file %s is not valid JSON; treating as empty", self._file_path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Storage file %s does not hold an object; treating as empty", self._file_path)
            return {}
        return data

    def _persist_raw(self, records: dict[str, Any]) -> None:
        tmp_path = self._file_path.with_suffix(self._file_path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(records, indent=2) + "\n", encoding="utf-8")
        os.replace(tmp_path, self._file_path)

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("{}", encoding="utf-8")
