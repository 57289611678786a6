"""Bounded, duplicate-aware snapshot store.

All snapshots live as one list under a single key of a
:class:`~mindmark.snapshots.kv.KeyValueStore`, most recent first. Every
mutation is a read-modify-write of that whole list, serialized by a lock
so concurrent captures cannot overwrite each other's updates.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import ValidationError

from mindmark.errors import StoreError
from mindmark.snapshots.kv import KeyValueStore
from mindmark.snapshots.markdown import render_markdown
from mindmark.snapshots.models import Snapshot

logger = logging.getLogger(__name__)

STORE_KEY = "mindmark_snapshots"
MAX_SNAPSHOTS = 100
DEDUP_WINDOW = timedelta(minutes=5)

# Alias to avoid shadowing by SnapshotStore.list method
_list = list


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class SnapshotStore:
    """CRUD, search, and export over the persisted snapshot list."""

    def __init__(
        self,
        kv: KeyValueStore,
        *,
        max_snapshots: int = MAX_SNAPSHOTS,
        dedup_window: timedelta = DEDUP_WINDOW,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._kv = kv
        self._max = max_snapshots
        self._dedup_window = dedup_window
        self._clock = clock
        self._lock = threading.RLock()

    # ── Private helpers ──────────────────────────────────────────

    def _load(self) -> _list[Snapshot]:
        raw = self._kv.get(STORE_KEY, [])
        if not isinstance(raw, _list):
            logger.warning("Snapshot list under %r is not a list, starting fresh", STORE_KEY)
            return []
        snapshots: _list[Snapshot] = []
        for entry in raw:
            try:
                snapshots.append(Snapshot.model_validate(entry))
            except ValidationError as exc:
                logger.warning("Skipping unreadable snapshot record: %s", exc.errors()[:1])
        return snapshots

    def _persist(self, snapshots: _list[Snapshot]) -> None:
        payload: _list[dict[str, Any]] = [s.model_dump(mode="json") for s in snapshots]
        if not self._kv.set(STORE_KEY, payload):
            raise StoreError("Failed to persist snapshots")

    def _is_duplicate(self, existing: Snapshot, candidate: Snapshot, now: datetime) -> bool:
        return existing.url == candidate.url and now - existing.created_at < self._dedup_window

    # ── Write operations ─────────────────────────────────────────

    def save(self, snapshot: Snapshot) -> _list[Snapshot]:
        """Prepend a snapshot, evicting the oldest beyond the size bound.

        A snapshot whose url was already captured within the dedup window
        is discarded and the store is returned unchanged.
        """
        with self._lock:
            existing = self._load()
            now = self._clock()
            if any(self._is_duplicate(s, snapshot, now) for s in existing):
                logger.info("Duplicate capture of %s within dedup window, skipping", snapshot.url)
                return existing

            snapshots = [snapshot, *existing][: self._max]
            evicted = len(existing) + 1 - len(snapshots)
            if evicted > 0:
                logger.debug("Evicted %d oldest snapshot(s)", evicted)
            self._persist(snapshots)
            logger.info("Snapshot saved. Total: %d", len(snapshots))
            return snapshots

    def delete_by_id(self, snapshot_id: str) -> _list[Snapshot]:
        """Remove the snapshot with this id; an unknown id is a no-op."""
        with self._lock:
            snapshots = self._load()
            remaining = [s for s in snapshots if s.id != snapshot_id]
            if len(remaining) == len(snapshots):
                logger.debug("No snapshot %s to delete", snapshot_id)
                return snapshots
            self._persist(remaining)
            logger.info("Deleted snapshot %s", snapshot_id)
            return remaining

    def update_intent(self, snapshot_id: str, new_intent: str) -> _list[Snapshot]:
        """Replace one snapshot's intent; an unknown id is a no-op."""
        with self._lock:
            snapshots = self._load()
            updated = [
                s.model_copy(update={"intent": new_intent.strip()}) if s.id == snapshot_id else s
                for s in snapshots
            ]
            if updated == snapshots:
                return snapshots
            self._persist(updated)
            logger.info("Updated intent of %s", snapshot_id)
            return updated

    # ── Read operations ──────────────────────────────────────────

    def list(self) -> _list[Snapshot]:
        """Return all snapshots, most recent first."""
        with self._lock:
            return self._load()

    def get(self, snapshot_id: str) -> Snapshot | None:
        """Return a snapshot by id, or None if not found."""
        for snapshot in self.list():
            if snapshot.id == snapshot_id:
                return snapshot
        return None

    def search(self, query: str) -> _list[Snapshot]:
        """Return snapshots whose title, intent, url, or summary contains ``query``."""
        return [s for s in self.list() if s.matches(query)]

    def to_markdown(self, now: datetime | None = None) -> str:
        """Render the whole store as one markdown document."""
        return render_markdown(self.list(), generated_at=now or self._clock())
