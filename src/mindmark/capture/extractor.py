"""Page content extraction.

Uses ``urllib.request`` for HTTP fetching and ``trafilatura`` for main
content extraction, falling back to the page's meta description when the
extracted text is too thin. Extraction never raises: any failure yields an
empty-text :class:`PageContent` carrying the best title and url available.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from urllib.error import URLError
from urllib.request import Request, urlopen

import trafilatura

from mindmark.capture.models import PageContent, Tab
from mindmark.snapshots.models import UNTITLED

logger = logging.getLogger(__name__)

ContentExtractor = Callable[[Tab], PageContent]

_USER_AGENT = "MindMark/0.3 (+https://github.com/mindmark; page capture)"

# Extracted text shorter than this is replaced by a longer meta description
_THIN_TEXT_CHARS = 80

_ZERO_WIDTH_RE = re.compile("[\u200b-\u200d\ufeff]")
_WHITESPACE_RE = re.compile(r"\s+")


def _squash(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", _ZERO_WIDTH_RE.sub("", text)).strip()


def _placeholder(tab: Tab, error: str) -> PageContent:
    return PageContent(title=tab.title or UNTITLED, url=tab.url, error=error)


class PageFetcher:
    """Fetch a tab's url and extract its readable text."""

    def __init__(self, timeout: int = 15, max_chars: int = 6000) -> None:
        self.timeout = timeout
        self.max_chars = max_chars

    def __call__(self, tab: Tab) -> PageContent:
        return self.fetch(tab)

    def _download(self, url: str) -> str:
        request = Request(url, headers={"User-Agent": _USER_AGENT})  # noqa: S310
        with urlopen(request, timeout=self.timeout) as response:  # noqa: S310
            return response.read().decode("utf-8", errors="replace")

    def fetch(self, tab: Tab) -> PageContent:
        """Extract page content for ``tab``.

        Args:
            tab: The tab to read; only ``url`` and ``title`` are used.

        Returns:
            Extracted content, or an empty-text placeholder with ``error`` set.
        """
        if not tab.url:
            return _placeholder(tab, "Empty URL")

        try:
            html = self._download(tab.url)
        except (URLError, TimeoutError, OSError) as exc:
            logger.warning("Failed to fetch %s: %s", tab.url, exc)
            return _placeholder(tab, f"Fetch failed: {exc}")
        except Exception as exc:
            logger.warning("Unexpected error fetching %s: %s", tab.url, exc)
            return _placeholder(tab, f"Fetch failed: {exc}")

        try:
            extracted = trafilatura.extract(
                html,
                include_comments=False,
                include_tables=True,
                output_format="txt",
            )
            metadata = trafilatura.extract_metadata(html)
        except Exception as exc:
            logger.warning("Extraction failed for %s: %s", tab.url, exc)
            return _placeholder(tab, f"Extraction failed: {exc}")

        text = _squash(extracted or "")
        title = ""
        if metadata:
            title = (metadata.title or "").strip()
            description = _squash(metadata.description or "")
            if len(text) < _THIN_TEXT_CHARS and len(description) > len(text):
                text = description

        text = text[: self.max_chars]
        logger.debug("Extracted %d chars from %s", len(text), tab.url)
        return PageContent(
            title=title or tab.title or UNTITLED,
            text=text,
            url=tab.url,
            word_count=len(text.split()),
            error="" if text else "No content extracted",
        )
