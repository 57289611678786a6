"""Tests for CaptureOrchestrator: AI path, fallbacks and snapshot assembly."""

from __future__ import annotations

import asyncio
import json

import pytest

from mindmark.capture.models import PageContent, Tab
from mindmark.capture.orchestrator import CaptureOrchestrator
from mindmark.config import MindmarkConfig
from mindmark.llm import LLMError
from mindmark.snapshots.models import UNTITLED
from mindmark.understand.summarizer import NO_CONTENT

SENTENCES = [
    "React Hooks let function components hold state and side effects.",
    "The useEffect hook synchronizes a component with an external system.",
    "Custom hooks extract reusable stateful logic out of components.",
    "Rules of hooks require calling them at the top level of a component.",
    "The useMemo hook caches expensive calculations between renders.",
]
PAGE_TEXT = " ".join(SENTENCES)

AI_SUMMARY = json.dumps([
    "Hooks give function components state and lifecycle features.",
    "Custom hooks package reusable stateful logic.",
])
AI_INTENT = json.dumps({
    "intent": "Follow React Hooks tutorial",
    "tags": ["react", "hooks"],
    "next_action": "Try code examples",
})


class FakeBackend:
    def __init__(self, responses=None, *, available=True, errors=None):
        self.responses = responses or {}
        self.errors = errors or {}
        self._available = available
        self.calls: list[str] = []

    def available(self):
        return self._available

    def prompt(self, prompt, *, max_tokens, temperature, label):
        self.calls.append(label)
        if label in self.errors:
            raise self.errors[label]
        return self.responses.get(label, "")


def _extractor(title="React Hooks Guide", text=PAGE_TEXT, url=None, error=""):
    def extract(tab: Tab) -> PageContent:
        return PageContent(
            title=title,
            text=text,
            url=tab.url if url is None else url,
            word_count=len(text.split()),
            error=error,
        )

    return extract


def _probe(result: bool):
    async def probe(timeout: float) -> bool:
        return result

    return probe


def _orchestrator(*, online=True, backend=None, extractor=None, config=None):
    return CaptureOrchestrator(
        config or MindmarkConfig(),
        extractor=extractor or _extractor(),
        backend=backend,
        probe=_probe(online),
    )


TAB = Tab(id=1, title="Tab Title", url="https://react.dev/hooks")


class TestOfflineCapture:
    def test_deterministic_snapshot(self):
        backend = FakeBackend({"summary": AI_SUMMARY, "intent": AI_INTENT})
        snapshot = asyncio.run(_orchestrator(online=False, backend=backend).capture(TAB))

        assert backend.calls == []
        assert snapshot.online is False
        assert snapshot.title == "React Hooks Guide"
        assert snapshot.url == "https://react.dev/hooks"
        assert snapshot.summary == SENTENCES[:3]
        assert snapshot.intent == "Reference react hooks for development"
        assert snapshot.tags == ["documentation", "reference"]
        assert snapshot.next_action == "Bookmark for quick reference"
        assert snapshot.word_count == len(PAGE_TEXT.split())
        assert snapshot.excerpt == PAGE_TEXT

    def test_offline_is_repeatable(self):
        orchestrator = _orchestrator(online=False)
        first = asyncio.run(orchestrator.capture(TAB))
        second = asyncio.run(orchestrator.capture(TAB))
        assert first.summary == second.summary
        assert (first.intent, first.tags, first.next_action) == (
            second.intent,
            second.tags,
            second.next_action,
        )

    def test_ai_disabled_uses_fallback(self):
        config = MindmarkConfig()
        config.ai.enabled = False
        orchestrator = _orchestrator(online=True, config=config)
        assert orchestrator.backend is None
        snapshot = asyncio.run(orchestrator.capture(TAB))
        assert snapshot.online is True
        assert snapshot.summary == SENTENCES[:3]

    def test_backend_unavailable_uses_fallback(self):
        backend = FakeBackend({"summary": AI_SUMMARY}, available=False)
        snapshot = asyncio.run(_orchestrator(backend=backend).capture(TAB))
        assert backend.calls == []
        assert snapshot.summary == SENTENCES[:3]

    def test_probe_exception_counts_as_offline(self):
        async def broken(timeout: float) -> bool:
            raise OSError("no route")

        orchestrator = CaptureOrchestrator(
            MindmarkConfig(), extractor=_extractor(), backend=FakeBackend(), probe=broken
        )
        snapshot = asyncio.run(orchestrator.capture(TAB))
        assert snapshot.online is False


class TestAICapture:
    def test_uses_ai_results(self):
        backend = FakeBackend({"summary": AI_SUMMARY, "intent": AI_INTENT})
        snapshot = asyncio.run(_orchestrator(backend=backend).capture(TAB))

        assert sorted(backend.calls) == ["intent", "summary"]
        assert snapshot.online is True
        assert snapshot.summary == json.loads(AI_SUMMARY)
        assert snapshot.intent == "Follow React Hooks tutorial"
        assert snapshot.tags == ["react", "hooks"]
        assert snapshot.next_action == "Try code examples"

    def test_summary_fails_intent_succeeds(self):
        backend = FakeBackend(
            {"intent": AI_INTENT}, errors={"summary": LLMError("rate limited")}
        )
        snapshot = asyncio.run(_orchestrator(backend=backend).capture(TAB))
        assert snapshot.summary == SENTENCES[:3]
        assert snapshot.intent == "Follow React Hooks tutorial"

    def test_intent_fails_summary_succeeds(self):
        backend = FakeBackend(
            {"summary": AI_SUMMARY}, errors={"intent": RuntimeError("boom")}
        )
        snapshot = asyncio.run(_orchestrator(backend=backend).capture(TAB))
        assert snapshot.summary == json.loads(AI_SUMMARY)
        assert snapshot.intent == "Reference react hooks for development"

    def test_invalid_ai_output_falls_back(self):
        backend = FakeBackend({"summary": "Sure.", "intent": "I am not sure."})
        snapshot = asyncio.run(_orchestrator(backend=backend).capture(TAB))
        assert snapshot.summary == SENTENCES[:3]
        assert snapshot.tags == ["documentation", "reference"]

    def test_backend_availability_error_is_swallowed(self):
        class Exploding(FakeBackend):
            def available(self):
                raise RuntimeError("sdk missing")

        snapshot = asyncio.run(_orchestrator(backend=Exploding()).capture(TAB))
        assert snapshot.summary == SENTENCES[:3]


class TestDegradedContent:
    def test_empty_text_gets_sentinel(self):
        orchestrator = _orchestrator(
            extractor=_extractor(title="", text="", error="Fetch failed"), online=False
        )
        snapshot = asyncio.run(orchestrator.capture(TAB))
        assert snapshot.summary == [NO_CONTENT]
        assert snapshot.title == "Tab Title"
        assert snapshot.word_count == 0
        assert snapshot.intent
        assert snapshot.tags

    def test_extractor_exception_is_swallowed(self):
        def broken(tab: Tab) -> PageContent:
            raise ValueError("parser exploded")

        orchestrator = _orchestrator(extractor=broken, online=False)
        snapshot = asyncio.run(orchestrator.capture(TAB))
        assert snapshot.summary == [NO_CONTENT]
        assert snapshot.title == "Tab Title"
        assert snapshot.url == "https://react.dev/hooks"

    def test_title_falls_back_to_placeholder(self):
        orchestrator = _orchestrator(extractor=_extractor(title=""), online=False)
        snapshot = asyncio.run(orchestrator.capture(Tab(id=2, url="https://x.example")))
        assert snapshot.title == UNTITLED

    def test_url_falls_back_to_tab(self):
        orchestrator = _orchestrator(extractor=_extractor(url=""), online=False)
        snapshot = asyncio.run(orchestrator.capture(TAB))
        assert snapshot.url == TAB.url

    def test_text_is_normalized_and_bounded(self):
        config = MindmarkConfig()
        config.summary.max_input_chars = 100
        config.store.excerpt_chars = 40
        raw = "See https://example.com/a {x} " + PAGE_TEXT
        orchestrator = _orchestrator(extractor=_extractor(text=raw), config=config, online=False)
        snapshot = asyncio.run(orchestrator.capture(TAB))
        assert "https://" not in snapshot.excerpt
        assert "{" not in snapshot.excerpt
        assert len(snapshot.excerpt) <= 40


class TestSummarize:
    @pytest.mark.parametrize("use_ai", [True, False])
    def test_empty_text(self, use_ai: bool):
        orchestrator = _orchestrator(backend=FakeBackend({"summary": AI_SUMMARY}))
        assert asyncio.run(orchestrator.summarize("", use_ai=use_ai)) == [NO_CONTENT]

    def test_long_text_targets_four_sentences(self):
        text = " ".join(SENTENCES * 20)
        orchestrator = _orchestrator()
        assert len(asyncio.run(orchestrator.summarize(text, use_ai=False))) == 4


class TestProbeTimeout:
    def test_timed_out_probe_still_produces_snapshot(self):
        async def slow_head(timeout: float) -> bool:
            await asyncio.sleep(timeout * 10)
            return True

        async def probe(timeout: float) -> bool:
            return await asyncio.wait_for(slow_head(timeout), timeout)

        config = MindmarkConfig()
        config.network.probe_timeout = 0.01
        backend = FakeBackend({"summary": AI_SUMMARY, "intent": AI_INTENT})
        orchestrator = CaptureOrchestrator(
            config, extractor=_extractor(), backend=backend, probe=probe
        )
        snapshot = asyncio.run(orchestrator.capture(TAB))

        assert backend.calls == []
        assert snapshot.online is False
        assert snapshot.summary == SENTENCES[:3]
        assert snapshot.intent == "Reference react hooks for development"
