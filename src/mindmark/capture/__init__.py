"""Capture domain: reading a page and turning it into a Snapshot."""

from mindmark.capture.extractor import ContentExtractor, PageFetcher
from mindmark.capture.models import PageContent, Tab
from mindmark.capture.network import is_online
from mindmark.capture.orchestrator import AIBackend, CaptureOrchestrator, ClaudeBackend

__all__ = [
    "AIBackend",
    "CaptureOrchestrator",
    "ClaudeBackend",
    "ContentExtractor",
    "PageContent",
    "PageFetcher",
    "Tab",
    "is_online",
]
