"""Write-once storage for prediction records."""
from __future__ import annotations

import json
import os
import re
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from ..config import Settings
from ..errors import StoreError

Record = Dict[str, Any]

_RECORD_ID = re.compile(r"^[A-Za-z0-9][A-Za-z0-9-]{0,127}$")


class PredictionStore(Protocol):
    def put(self, record_id: str, record: Record) -> None: ...

    def get(self, record_id: str) -> Optional[Record]: ...

    def list(self) -> List[Record]: ...


class InMemoryPredictionStore:
    """Process-local store; iteration follows insertion order."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: Dict[str, Record] = {}

    def put(self, record_id: str, record: Record) -> None:
        with self._lock:
            self._records[record_id] = dict(record)

    def get(self, record_id: str) -> Optional[Record]:
        with self._lock:
            record = self._records.get(record_id)
        return dict(record) if record is not None else None

    def list(self) -> List[Record]:
        with self._lock:
            return [dict(record) for record in self._records.values()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class FileSystemPredictionStore:
    """Store each record as ``<root>/<id>.json`` on the local filesystem."""

    def __init__(self, root: Path) -> None:
        self._root = root
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StoreError(f"Cannot create prediction store at {root}: {exc}") from exc

    @property
    def root(self) -> Path:
        return self._root

    def put(self, record_id: str, record: Record) -> None:
        if not _RECORD_ID.match(record_id):
            raise StoreError(f"Invalid record id: {record_id!r}")
        target = self._root / f"{record_id}.json"
        payload = json.dumps(record, indent=2)
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self._root, prefix=".tmp-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                os.replace(tmp_name, target)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StoreError(f"Failed to write prediction {record_id}: {exc}") from exc

    def get(self, record_id: str) -> Optional[Record]:
        if not _RECORD_ID.match(record_id):
            return None
        path = self._root / f"{record_id}.json"
        if not path.is_file():
            return None
        return self._read(path)

    def list(self) -> List[Record]:
        try:
            paths = sorted(self._root.glob("*.json"))
        except OSError as exc:
            raise StoreError(f"Failed to list predictions: {exc}") from exc
        return [self._read(path) for path in paths if not path.name.startswith(".")]

    @staticmethod
    def _read(path: Path) -> Record:
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise StoreError(f"Failed to read prediction {path.stem}: {exc}") from exc


def create_store(settings: Settings) -> PredictionStore:
    backend = settings.store_backend.strip().lower()
    if backend == "memory":
        return InMemoryPredictionStore()
    if backend == "filesystem":
        return FileSystemPredictionStore(Path(settings.store_dir))
    raise ValueError(f"Unsupported store backend {settings.store_backend!r}; use 'memory' or 'filesystem'")


__all__ = [
    "PredictionStore",
    "InMemoryPredictionStore",
    "FileSystemPredictionStore",
    "create_store",
]
