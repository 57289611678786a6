"""Summarization: deterministic fallback and AI response validation."""

from __future__ import annotations

import logging
from typing import Any

from mindmark.understand.responses import RawText, StructuredArray, array_candidates
from mindmark.understand.text import ensure_terminal, normalize, segment, split_sentences

logger = logging.getLogger(__name__)

NO_CONTENT = "(No content available)"
SUMMARY_UNAVAILABLE = "Content summary unavailable."

# Fixed-width chunking
_CHUNK_WIDTH = 150
_CHUNK_MIN_CUT = 100
_CHUNK_MIN_CHARS = 25
_CHUNK_MAX_CHARS = 180

# Fewer sentences than this from the segmenter switches to chunking
_MIN_SEGMENTED = 3

# AI output validation
AI_MIN_CHARS = 20
AI_MAX_CHARS = 150
AI_MAX_SENTENCES = 4
AI_MIN_SENTENCES = 2


def target_sentence_count(word_count: int, short_threshold: int = 400) -> int:
    """Shorter pages get fewer summary sentences."""
    return 3 if word_count < short_threshold else 4


def _chunk(clean: str, target_count: int) -> list[str]:
    chunks: list[str] = []
    i = 0
    while i < len(clean) and len(chunks) < target_count:
        chunk = clean[i : i + _CHUNK_WIDTH].strip()

        last_period = chunk.rfind(".")
        last_space = chunk.rfind(" ")
        if last_period > _CHUNK_MIN_CUT:
            chunk = chunk[: last_period + 1]
        elif last_space > _CHUNK_MIN_CUT:
            chunk = chunk[:last_space] + "."
        elif not chunk.endswith("."):
            chunk += "."

        if _CHUNK_MIN_CHARS < len(chunk) < _CHUNK_MAX_CHARS:
            chunks.append(chunk)

        i += _CHUNK_WIDTH
    return chunks


def summarize_fallback(text: str | None, target_count: int = 5) -> list[str]:
    """Summarize without an LLM.

    Returns the first ``target_count`` usable sentences in document order.
    When the text has fewer than three, it is cut into ~150 character
    chunks instead, ending each at a period or word boundary where one
    falls late enough in the window.

    Args:
        text: Raw or normalized page text.
        target_count: Maximum number of sentences to return.

    Returns:
        Between one and ``target_count`` sentence-like strings.
    """
    if not text:
        return [NO_CONTENT]

    target_count = max(1, target_count)
    clean = normalize(text)

    sentences = list(segment(clean))
    if len(sentences) >= _MIN_SEGMENTED:
        return sentences[:target_count]

    chunks = _chunk(clean, target_count)
    return chunks or [SUMMARY_UNAVAILABLE]


def _clean_sentences(items: list[Any]) -> list[str]:
    sentences = [str(item).strip() for item in items if item is not None]
    sentences = [s for s in sentences if AI_MIN_CHARS < len(s) < AI_MAX_CHARS]
    return [ensure_terminal(s) for s in sentences][:AI_MAX_SENTENCES]


def parse_ai_summary(response: Any) -> list[str] | None:
    """Validate an AI summarizer response.

    Tries the whole response as a JSON array, then the first embedded
    array, then plain sentence splitting. Returns the first attempt that
    produces at least two usable sentences, or None.
    """
    for candidate in array_candidates(response):
        match candidate:
            case StructuredArray(items=items):
                sentences = _clean_sentences(items)
            case RawText(text=raw) if len(raw) > 30:
                sentences = _clean_sentences(split_sentences(raw))
            case _:
                continue
        if len(sentences) >= AI_MIN_SENTENCES:
            logger.debug(
                "AI summary accepted from %s: %d sentences",
                type(candidate).__name__,
                len(sentences),
            )
            return sentences
    return None
