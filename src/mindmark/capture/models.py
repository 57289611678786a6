"""Capture inputs: the tab being captured and the content read from it."""

from __future__ import annotations

from pydantic import BaseModel


class Tab(BaseModel):
    """Caller-supplied metadata about the page to capture."""

    id: int | str | None = None
    title: str = ""
    url: str = ""


class PageContent(BaseModel):
    """Text extracted from a page, already truncated to a bounded length."""

    title: str = ""
    text: str = ""
    url: str = ""
    word_count: int = 0
    error: str = ""

    @property
    def success(self) -> bool:
        return bool(self.text) and not self.error
