"""Capture orchestration: extract, understand, and assemble a Snapshot.

For each capture the orchestrator decides whether the AI backend may be
used (network reachable *and* a Claude backend available), runs the
summary and intent sub-tasks concurrently, and falls back to the
deterministic summarizer/classifier for whichever sub-task fails. AI and
extraction failures never propagate to the caller.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from functools import partial
from typing import Any, Protocol

from mindmark.capture.extractor import ContentExtractor, PageFetcher
from mindmark.capture.models import PageContent, Tab
from mindmark.capture.network import is_online
from mindmark.config import MindmarkConfig
from mindmark.llm import LLMError, call_claude, claude_available
from mindmark.snapshots.models import UNTITLED, Snapshot
from mindmark.understand.classifier import IntentResult, classify_fallback, parse_ai_intent
from mindmark.understand.prompts import (
    INTENT_MAX_TOKENS,
    INTENT_TEMPERATURE,
    SUMMARY_MAX_TOKENS,
    SUMMARY_TEMPERATURE,
    get_intent_prompt,
    get_summary_prompt,
)
from mindmark.understand.summarizer import (
    NO_CONTENT,
    parse_ai_summary,
    summarize_fallback,
    target_sentence_count,
)
from mindmark.understand.text import normalize, word_count

logger = logging.getLogger(__name__)

ReachabilityProbe = Callable[[float], Awaitable[bool]]


class AIBackend(Protocol):
    """An optional text-generation capability."""

    def available(self) -> bool: ...

    def prompt(
        self, prompt: str, *, max_tokens: int, temperature: float, label: str
    ) -> Any: ...


class ClaudeBackend:
    """AI backend backed by :func:`mindmark.llm.call_claude`."""

    def __init__(self, model: str | None = None, timeout: int = 60) -> None:
        self.model = model
        self.timeout = timeout

    def available(self) -> bool:
        return claude_available()

    def prompt(self, prompt: str, *, max_tokens: int, temperature: float, label: str) -> str:
        return call_claude(
            prompt,
            model=self.model,
            timeout=self.timeout,
            max_tokens=max_tokens,
            temperature=temperature,
            label=label,
        )


class CaptureOrchestrator:
    """Turns a tab into a Snapshot, preferring AI and degrading gracefully."""

    def __init__(
        self,
        config: MindmarkConfig | None = None,
        *,
        extractor: ContentExtractor | None = None,
        backend: AIBackend | None = None,
        probe: ReachabilityProbe | None = None,
    ) -> None:
        self.config = config or MindmarkConfig()
        self.extractor = extractor or PageFetcher(
            timeout=self.config.extract.timeout,
            max_chars=self.config.extract.max_chars,
        )
        if backend is None and self.config.ai.enabled:
            backend = ClaudeBackend(model=self.config.ai.model, timeout=self.config.ai.timeout)
        self.backend = backend
        self.probe = probe or partial(is_online, url=self.config.network.probe_url)

    # ── Capability checks ────────────────────────────────────────

    async def check_online(self) -> bool:
        try:
            return bool(await self.probe(self.config.network.probe_timeout))
        except Exception as exc:
            logger.warning("Reachability probe failed: %s", exc)
            return False

    def backend_available(self) -> bool:
        if self.backend is None:
            return False
        try:
            return bool(self.backend.available())
        except Exception as exc:
            logger.warning("AI capability probe failed: %s", exc)
            return False

    async def _ask(self, prompt: str, *, max_tokens: int, temperature: float, label: str) -> Any:
        if self.backend is None:
            raise LLMError("No AI backend configured")
        return await asyncio.to_thread(
            self.backend.prompt,
            prompt,
            max_tokens=max_tokens,
            temperature=temperature,
            label=label,
        )

    # ── Sub-tasks ────────────────────────────────────────────────

    async def extract(self, tab: Tab) -> PageContent:
        try:
            content = await asyncio.to_thread(self.extractor, tab)
        except Exception as exc:
            logger.warning("Content extraction failed for %s: %s", tab.url, exc)
            return PageContent(title=tab.title or UNTITLED, url=tab.url, error=str(exc))
        if content.error:
            logger.info("Capturing %s with degraded content: %s", tab.url, content.error)
        return content

    async def summarize(self, text: str, *, use_ai: bool) -> list[str]:
        """Summarize normalized page text, with AI when ``use_ai`` allows."""
        if not text:
            return [NO_CONTENT]

        words = word_count(text)
        target = target_sentence_count(words, self.config.summary.short_word_threshold)

        if use_ai:
            logger.info("AI summarizing (%d words → %d sentences)", words, target)
            try:
                response = await self._ask(
                    get_summary_prompt(text, target, words),
                    max_tokens=SUMMARY_MAX_TOKENS,
                    temperature=SUMMARY_TEMPERATURE,
                    label="summary",
                )
                sentences = parse_ai_summary(response)
                if sentences:
                    return sentences
                logger.warning("AI summary failed validation, using offline summarizer")
            except Exception as exc:
                logger.warning("AI summarization failed: %s", exc)

        logger.info("Using offline summarizer")
        return summarize_fallback(text, target)

    async def classify(self, title: str, text: str, *, use_ai: bool) -> IntentResult:
        """Infer the intent behind opening a page, with AI when ``use_ai`` allows."""
        if use_ai:
            try:
                response = await self._ask(
                    get_intent_prompt(title, text),
                    max_tokens=INTENT_MAX_TOKENS,
                    temperature=INTENT_TEMPERATURE,
                    label="intent",
                )
                result = parse_ai_intent(response)
                if result is not None:
                    logger.info("AI intent: %r", result.intent)
                    return result
                logger.warning("AI intent failed validation, using pattern rules")
            except Exception as exc:
                logger.warning("AI intent detection failed: %s", exc)

        logger.info("Using pattern-based intent")
        return classify_fallback(title, text)

    # ── Public API ───────────────────────────────────────────────

    async def capture(self, tab: Tab) -> Snapshot:
        """Extract, summarize, and classify ``tab`` into a new Snapshot.

        Args:
            tab: Tab metadata; its title and url back up the extracted ones.

        Returns:
            A complete, not yet persisted, Snapshot.
        """
        content = await self.extract(tab)

        online = await self.check_online()
        use_ai = online and self.backend_available()
        if not use_ai:
            logger.info("AI path unavailable (online=%s), using deterministic path", online)

        title = content.title or tab.title or UNTITLED
        url = content.url or tab.url or ""
        text = normalize(content.text, self.config.summary.max_input_chars)

        summary, intent = await asyncio.gather(
            self.summarize(text, use_ai=use_ai),
            self.classify(title, text, use_ai=use_ai),
        )

        snapshot = Snapshot(
            title=title,
            url=url,
            excerpt=text[: self.config.store.excerpt_chars],
            summary=summary,
            intent=intent.intent,
            tags=intent.tags,
            next_action=intent.next_action,
            word_count=content.word_count or word_count(text),
            online=online,
        )
        logger.info("Captured %r (%d words)", snapshot.title, snapshot.word_count)
        return snapshot
