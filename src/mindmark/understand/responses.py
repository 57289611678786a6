"""Shapes an AI response can take, and the ordered cascades that parse them.

A response is interpreted as one of three variants:

* :class:`StructuredArray`: a JSON array (summary sentences)
* :class:`StructuredObject`: a JSON object (intent classification)
* :class:`RawText`: free text, used when nothing structured parses

Each cascade yields candidate variants in a fixed order; callers take the
first candidate that validates and ignore the rest.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from mindmark.llm import strip_json_fences

logger = logging.getLogger(__name__)

_ARRAY_RE = re.compile(r"\[[\s\S]*?\]")
_OBJECT_RE = re.compile(r"\{[\s\S]*?\}")


@dataclass(frozen=True)
class StructuredArray:
    items: list[Any]


@dataclass(frozen=True)
class StructuredObject:
    fields: dict[str, Any]


@dataclass(frozen=True)
class RawText:
    text: str


AIResponse = StructuredArray | StructuredObject | RawText


def response_text(response: Any) -> str:
    """Flatten whatever the backend returned into response text.

    Accepts plain strings, mappings carrying ``text`` or ``result``, and
    objects exposing those attributes.
    """
    if response is None:
        return ""
    if isinstance(response, str):
        return response.strip()
    if isinstance(response, dict):
        value = response.get("text") or response.get("result") or ""
        return str(value).strip()
    value = getattr(response, "text", None) or getattr(response, "result", None) or ""
    return str(value).strip()


def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, ValueError):
        return None


def _first_match(pattern: re.Pattern[str], text: str) -> Any:
    match = pattern.search(text)
    if match is None:
        return None
    return _loads(match.group(0))


def array_candidates(response: Any) -> Iterator[AIResponse]:
    """Yield summary candidates: whole array, embedded array, raw text."""
    if isinstance(response, list):
        yield StructuredArray(response)
        return

    raw = response_text(response)
    if not raw:
        return

    text = strip_json_fences(raw)
    whole = _loads(text)
    if isinstance(whole, list):
        yield StructuredArray(whole)

    embedded = _first_match(_ARRAY_RE, text)
    if isinstance(embedded, list):
        yield StructuredArray(embedded)
    else:
        logger.debug("No JSON array in AI response: %.200s", raw)

    yield RawText(raw)


def object_candidates(response: Any) -> Iterator[StructuredObject]:
    """Yield classification candidates: whole object, embedded object."""
    if isinstance(response, dict) and not ({"text", "result"} & response.keys()):
        yield StructuredObject(response)
        return

    raw = response_text(response)
    if not raw:
        return

    text = strip_json_fences(raw)
    whole = _loads(text)
    if isinstance(whole, dict):
        yield StructuredObject(whole)

    embedded = _first_match(_OBJECT_RE, text)
    if isinstance(embedded, dict):
        yield StructuredObject(embedded)
    else:
        logger.debug("No JSON object in AI response: %.200s", raw)
