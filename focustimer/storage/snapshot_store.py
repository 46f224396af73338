"""Persistence adapters for the timer snapshot.

Both stores hold exactly one snapshot and expose the same two calls:

``save(snapshot)``
    Overwrite the stored snapshot.  I/O failures are logged, never raised;
    the engine's in-memory state stays authoritative.
``load()``
    Return the stored ``Snapshot``, or ``None`` when nothing usable is
    stored (missing, unreadable, or malformed).
"""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError

from ..paths import STATE_PATH
from ..timer.snapshot import MalformedSnapshot, Snapshot
from .db import get_session
from .models import KeyValue

log = logging.getLogger(__name__)

STATE_KEY = "timer_state"


def _decode(raw: str, source: str) -> Snapshot | None:
    try:
        return Snapshot.from_dict(json.loads(raw))
    except (json.JSONDecodeError, MalformedSnapshot) as exc:
        log.warning("Discarding malformed timer state in %s: %s", source, exc)
        return None


class SqliteSnapshotStore:
    """Keeps the snapshot as one JSON row in the ``kv_store`` table."""

    def __init__(self, key: str = STATE_KEY) -> None:
        self._key = key

    def save(self, snapshot: Snapshot) -> None:
        payload = json.dumps(snapshot.to_dict())
        try:
            with get_session() as db:
                row = db.get(KeyValue, self._key)
                if row is None:
                    db.add(KeyValue(key=self._key, value=payload))
                else:
                    row.value = payload
                    row.updated_at = datetime.now(timezone.utc)
        except SQLAlchemyError:
            log.exception("Failed to save timer state")

    def load(self) -> Snapshot | None:
        try:
            with get_session() as db:
                row = db.get(KeyValue, self._key)
                raw = row.value if row is not None else None
        except SQLAlchemyError:
            log.exception("Failed to load timer state")
            return None
        if raw is None:
            return None
        return _decode(raw, f"kv_store[{self._key}]")


class JsonSnapshotStore:
    """Keeps the snapshot in a single JSON file, replaced atomically."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or STATE_PATH

    def save(self, snapshot: Snapshot) -> None:
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(snapshot.to_dict(), indent=2) + "\n",
                           encoding="utf-8")
            os.replace(tmp, self._path)
        except OSError:
            log.exception("Failed to save timer state to %s", self._path)

    def load(self) -> Snapshot | None:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError):
            log.exception("Failed to read timer state from %s", self._path)
            return None
        return _decode(raw, str(self._path))


def create_store(backend: str):
    """Build the store named by the ``storage_backend`` setting.

    Unknown names fall back to SQLite.
    """
    if backend == "json":
        return JsonSnapshotStore()
    if backend != "sqlite":
        log.warning("Unknown storage backend %r; using sqlite", backend)
    return SqliteSnapshotStore()
