"""Message protocol served to the UI or any other caller.

Each request is a mapping with an ``action`` key; each response is
``{"success": bool, "data": ..., "error": ...}`` with ``data`` present on
success and ``error`` on failure. No exception escapes :meth:`handle`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from datetime import timedelta
from typing import Any

from pydantic import BaseModel

from mindmark.capture.models import Tab
from mindmark.capture.orchestrator import CaptureOrchestrator
from mindmark.config import MindmarkConfig
from mindmark.errors import InvalidRequestError
from mindmark.snapshots.kv import JsonFileKeyValueStore
from mindmark.snapshots.models import Snapshot
from mindmark.snapshots.store import SnapshotStore

logger = logging.getLogger(__name__)

TabProvider = Callable[[], Awaitable[Tab | None]]

CAPTURE_CURRENT_TAB = "capture_current_tab"
GET_SNAPSHOTS = "get_snapshots"
DELETE_SNAPSHOT = "delete_snapshot"
UPDATE_SNAPSHOT_INTENT = "update_snapshot_intent"
EXPORT_MARKDOWN = "export_markdown"


class Response(BaseModel):
    """Result envelope for one protocol request."""

    success: bool
    data: Any = None
    error: str | None = None

    def to_message(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


def _dump(snapshots: list[Snapshot]) -> list[dict[str, Any]]:
    return [s.model_dump(mode="json") for s in snapshots]


async def _no_tab() -> Tab | None:
    return None


class SnapshotService:
    """Routes protocol actions to the orchestrator and the snapshot store."""

    def __init__(
        self,
        store: SnapshotStore,
        orchestrator: CaptureOrchestrator,
        tab_provider: TabProvider = _no_tab,
    ) -> None:
        self.store = store
        self.orchestrator = orchestrator
        self.tab_provider = tab_provider
        self._handlers: dict[str, Callable[[Mapping[str, Any]], Awaitable[Any]]] = {
            CAPTURE_CURRENT_TAB: self._capture_current_tab,
            GET_SNAPSHOTS: self._get_snapshots,
            DELETE_SNAPSHOT: self._delete_snapshot,
            UPDATE_SNAPSHOT_INTENT: self._update_snapshot_intent,
            EXPORT_MARKDOWN: self._export_markdown,
        }

    @classmethod
    def from_config(
        cls, config: MindmarkConfig, tab_provider: TabProvider = _no_tab
    ) -> SnapshotService:
        """Wire a service with a JSON-file store and the default orchestrator."""
        store = SnapshotStore(
            JsonFileKeyValueStore(config.store_path),
            max_snapshots=config.store.max_snapshots,
            dedup_window=timedelta(seconds=config.store.dedup_window_seconds),
        )
        return cls(store, CaptureOrchestrator(config), tab_provider)

    async def handle(self, message: Mapping[str, Any] | None) -> dict[str, Any]:
        """Serve one request and return its response message."""
        return (await self.dispatch(message)).to_message()

    async def dispatch(self, message: Mapping[str, Any] | None) -> Response:
        if message is None:
            message = {}
        if not isinstance(message, Mapping):
            return Response(success=False, error="Invalid message")

        action = message.get("action")
        if not action:
            return Response(success=False, error="No action specified")
        if not isinstance(action, str):
            return Response(success=False, error=f"Invalid action: {action!r}")

        handler = self._handlers.get(action)
        if handler is None:
            return Response(success=False, error=f"Unknown action: {action}")

        logger.debug("Action: %s", action)
        try:
            data = await handler(message)
        except Exception as exc:
            if not isinstance(exc, InvalidRequestError):
                logger.exception("Action %s failed", action)
            return Response(success=False, error=str(exc) or type(exc).__name__)
        return Response(success=True, data=data)

    # ── Handlers ─────────────────────────────────────────────────

    async def _capture_current_tab(self, message: Mapping[str, Any]) -> dict[str, Any]:
        tab = await self.tab_provider()
        if tab is None or not (tab.id is not None or tab.url):
            raise InvalidRequestError("No active tab found")

        snapshot = await self.orchestrator.capture(tab)
        await asyncio.to_thread(self.store.save, snapshot)
        return snapshot.model_dump(mode="json")

    async def _get_snapshots(self, message: Mapping[str, Any]) -> list[dict[str, Any]]:
        query = message.get("query")
        if isinstance(query, str) and query.strip():
            return _dump(await asyncio.to_thread(self.store.search, query))
        snapshots = await asyncio.to_thread(self.store.list)
        logger.debug("Retrieved %d snapshots", len(snapshots))
        return _dump(snapshots)

    async def _delete_snapshot(self, message: Mapping[str, Any]) -> list[dict[str, Any]]:
        snapshot_id = message.get("id")
        if not snapshot_id:
            raise InvalidRequestError("Missing snapshot ID")
        return _dump(await asyncio.to_thread(self.store.delete_by_id, str(snapshot_id)))

    async def _update_snapshot_intent(self, message: Mapping[str, Any]) -> list[dict[str, Any]]:
        snapshot_id = message.get("id")
        new_intent = message.get("new_intent")
        if not snapshot_id or not isinstance(new_intent, str) or not new_intent.strip():
            raise InvalidRequestError("Missing ID or intent")
        remaining = await asyncio.to_thread(self.store.update_intent, str(snapshot_id), new_intent)
        return _dump(remaining)

    async def _export_markdown(self, message: Mapping[str, Any]) -> str:
        markdown = await asyncio.to_thread(self.store.to_markdown)
        logger.info("Exported snapshot markdown (%d chars)", len(markdown))
        return markdown
