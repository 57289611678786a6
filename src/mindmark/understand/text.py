"""Text normalization and sentence segmentation for captured page text."""

from __future__ import annotations

import re
from collections.abc import Iterator

_URL_RE = re.compile(r"https?://\S+")
_ZERO_WIDTH_RE = re.compile("[\u200b-\u200d\ufeff]")
_CODE_PUNCT_RE = re.compile(r"[{}\[\]+=<>;:()/\\]+")
_WHITESPACE_RE = re.compile(r"\s+")

_SENTENCE_RE = re.compile(r"[^.!?]+[.!?]+")
_TERMINAL_RE = re.compile(r"[.!?]$")

# Exclusive bounds on a usable sentence, in characters
MIN_SENTENCE_CHARS = 30
MAX_SENTENCE_CHARS = 180


def normalize(raw: str | None, max_len: int | None = None) -> str:
    """Clean raw extracted page text.

    Strips URL-like tokens, zero-width characters and clusters of
    code/markup punctuation, collapses whitespace, trims, and truncates
    to ``max_len`` characters. Never raises; ``None`` yields ``""``.
    """
    if not raw:
        return ""
    text = _URL_RE.sub("", str(raw))
    text = _ZERO_WIDTH_RE.sub("", text)
    text = _CODE_PUNCT_RE.sub(" ", text)
    text = _WHITESPACE_RE.sub(" ", text).strip()
    if max_len is not None:
        text = text[:max_len].rstrip()
    return text


def ensure_terminal(sentence: str) -> str:
    """Append a period unless the sentence already ends in . ! or ?."""
    return sentence if _TERMINAL_RE.search(sentence) else sentence + "."


def segment(text: str) -> Iterator[str]:
    """Yield sentence-like units of ``text`` within the usable length band.

    Units end at sentence-terminal punctuation, which is kept. Trailing
    text with no terminal punctuation is not a unit.
    """
    for match in _SENTENCE_RE.finditer(text or ""):
        sentence = match.group(0).strip()
        if MIN_SENTENCE_CHARS < len(sentence) < MAX_SENTENCE_CHARS:
            yield ensure_terminal(sentence)


def split_sentences(text: str) -> list[str]:
    """Split free text after each run of terminal punctuation followed by space."""
    return [part.strip() for part in re.split(r"(?<=[.!?])\s+", text or "") if part.strip()]


def word_count(text: str) -> int:
    return len(text.split()) if text else 0
