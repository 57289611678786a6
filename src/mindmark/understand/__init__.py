"""Understanding captured text: normalization, summaries, and intent."""

from mindmark.understand.classifier import (
    CATEGORY_RULES,
    IntentResult,
    classify_fallback,
    extract_topic,
    parse_ai_intent,
)
from mindmark.understand.summarizer import parse_ai_summary, summarize_fallback
from mindmark.understand.text import normalize, segment

__all__ = [
    "CATEGORY_RULES",
    "IntentResult",
    "classify_fallback",
    "extract_topic",
    "normalize",
    "parse_ai_intent",
    "parse_ai_summary",
    "segment",
    "summarize_fallback",
]
