"""Storage package."""

from .db import configure_engine, get_session, init_db
from .models import KeyValue
from .snapshot_store import JsonSnapshotStore, SqliteSnapshotStore, create_store

__all__ = [
    "configure_engine",
    "get_session",
    "init_db",
    "KeyValue",
    "JsonSnapshotStore",
    "SqliteSnapshotStore",
    "create_store",
]
