"""Snapshot domain: the Snapshot model, its bounded store, and markdown export."""

from mindmark.snapshots.kv import JsonFileKeyValueStore, KeyValueStore, MemoryKeyValueStore
from mindmark.snapshots.markdown import render_markdown
from mindmark.snapshots.models import Snapshot
from mindmark.snapshots.store import SnapshotStore

__all__ = [
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "Snapshot",
    "SnapshotStore",
    "render_markdown",
]
