"""Snapshot domain model: pure Pydantic v2 data type.

A Snapshot is one captured page: a bounded excerpt, a short summary,
the inferred intent with tags and a next action, and capture metadata.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

UNTITLED = "Untitled Page"


def new_snapshot_id() -> str:
    return f"mm_{uuid.uuid4().hex[:16]}"


def _split_lines(value: Any) -> Any:
    if isinstance(value, str):
        return [line for line in value.splitlines() if line.strip()]
    return value


class Snapshot(BaseModel):
    """One persisted capture record."""

    id: str = Field(default_factory=new_snapshot_id)
    title: str = UNTITLED
    url: str = ""
    excerpt: str = ""
    summary: list[str] = Field(default_factory=list)
    intent: str = "Review this page"
    tags: list[str] = Field(default_factory=list)
    next_action: str = "Read later"
    word_count: int = 0
    created_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))
    online: bool = False

    @field_validator("title", mode="before")
    @classmethod
    def _title_placeholder(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return UNTITLED
        return value

    @field_validator("summary", mode="before")
    @classmethod
    def _summary_as_list(cls, value: Any) -> Any:
        value = _split_lines(value)
        if isinstance(value, list):
            return [str(s).strip() for s in value if str(s).strip()]
        return value

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_as_list(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, list):
            return [str(t).strip().lower() for t in value if str(t).strip()]
        return value

    @field_validator("created_at")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        return value if value.tzinfo else value.replace(tzinfo=UTC)

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match over title, intent, url, and summary."""
        needle = query.strip().lower()
        if not needle:
            return True
        haystacks = (self.title, self.intent, self.url, " ".join(self.summary))
        return any(needle in h.lower() for h in haystacks)
