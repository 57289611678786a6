"""Intent classification: ordered pattern rules and AI response validation.

The deterministic classifier walks :data:`CATEGORY_RULES` in order and the
first rule whose pattern matches wins. The order is part of the contract:
a page that mentions both a tutorial and a purchase is a tutorial.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field

from mindmark.understand.responses import object_candidates

logger = logging.getLogger(__name__)

DEFAULT_INTENT = "Review this page"
DEFAULT_NEXT_ACTION = "Read and analyze"
DEFAULT_TAGS = ("general", "reading")

# Defaults for fields an AI response leaves out
AI_DEFAULT_INTENT = "Review this page"
AI_DEFAULT_TAGS = ("general",)
AI_DEFAULT_NEXT_ACTION = "Read later"

MAX_TAGS = 4


class IntentResult(BaseModel):
    """Why the page was opened, plus tags and a suggested next step."""

    intent: str
    tags: list[str] = Field(default_factory=list)
    next_action: str


@dataclass(frozen=True)
class CategoryRule:
    """One category: trigger pattern, topic keywords, and output templates."""

    name: str
    pattern: re.Pattern[str]
    tags: tuple[str, ...]
    next_action: str
    fallback_intent: str
    intent_template: str | None = None
    topic_keywords: tuple[str, ...] = field(default_factory=tuple)

    def matches(self, combined: str) -> bool:
        return self.pattern.search(combined) is not None

    def build(self, title: str) -> IntentResult:
        intent = self.fallback_intent
        if self.intent_template is not None:
            topic = extract_topic(title, self.topic_keywords)
            if topic:
                intent = self.intent_template.format(topic=topic)
        return IntentResult(intent=intent, tags=list(self.tags), next_action=self.next_action)


def _words(*alternatives: str) -> re.Pattern[str]:
    return re.compile(r"\b(" + "|".join(alternatives) + r")\b")


CATEGORY_RULES: tuple[CategoryRule, ...] = (
    CategoryRule(
        name="documentation",
        pattern=_words(
            "docs?", "documentation", "api", "reference", "manual",
            "specification", "readme", "guide",
        ),
        topic_keywords=("docs", "documentation", "api", "reference", "manual"),
        intent_template="Reference {topic} for development",
        fallback_intent="Reference documentation",
        next_action="Bookmark for quick reference",
        tags=("documentation", "reference"),
    ),
    CategoryRule(
        name="tutorial",
        pattern=_words(
            "tutorial", r"how[\s-]to", "walkthrough", r"step[\s-]by[\s-]step", "learn",
            "course", "lesson", "beginner", "introduction",
        ),
        topic_keywords=("tutorial", "learn", "guide", "how to"),
        intent_template="Follow {topic} tutorial",
        fallback_intent="Follow tutorial",
        next_action="Practice the steps",
        tags=("tutorial", "learning"),
    ),
    CategoryRule(
        name="shopping",
        pattern=_words(
            "buy", "price", "purchase", "order", "cart", "shop", "deal", "sale",
            "discount", "checkout", "product", "store", "amazon", "ebay",
        ),
        topic_keywords=("buy", "price", "purchase", "order"),
        intent_template="Research {topic} purchase",
        fallback_intent="Research product purchase",
        next_action="Compare prices and reviews",
        tags=("shopping", "product"),
    ),
    CategoryRule(
        name="recipe",
        pattern=_words(
            "recipe", "cook", "bake", "ingredient", "serving", "meal", "dish",
            "cuisine", "food", "preparation",
        ),
        topic_keywords=("recipe", "cook", "bake"),
        intent_template="Try {topic} recipe",
        fallback_intent="Try recipe",
        next_action="Add ingredients to list",
        tags=("recipe", "cooking"),
    ),
    CategoryRule(
        name="academic",
        pattern=_words(
            "study", "paper", "research", "journal", "thesis", "academic",
            "publication", "abstract", "doi", "scholar",
        ),
        topic_keywords=("research", "study", "paper"),
        intent_template="Research {topic} literature",
        fallback_intent="Research academic topic",
        next_action="Add to research notes",
        tags=("academic", "research"),
    ),
    CategoryRule(
        name="news",
        pattern=_words(
            "news", "breaking", "update", "announcement", "press", "release",
            "report", "latest",
        ),
        fallback_intent="Read news update",
        next_action="Stay informed",
        tags=("news", "article"),
    ),
    CategoryRule(
        name="programming",
        pattern=_words(
            "code", "programming", "javascript", "python", "java", "react", "vue",
            "angular", "node", "function", "class", "github", "npm",
        ),
        topic_keywords=("javascript", "python", "react", "node", "programming"),
        intent_template="Learn {topic} programming",
        fallback_intent="Learn programming concept",
        next_action="Try code examples",
        tags=("programming", "code"),
    ),
    CategoryRule(
        name="entertainment",
        pattern=_words(
            "movie", "film", "game", "video", "music", "stream", "watch", "play",
            "tv", "series",
        ),
        fallback_intent="Explore entertainment",
        next_action="Watch or enjoy later",
        tags=("entertainment", "media"),
    ),
    CategoryRule(
        name="tools",
        pattern=_words(
            "tool", "software", "app", "application", "download", "install", "setup",
            "plugin", "extension",
        ),
        topic_keywords=("tool", "app", "software"),
        intent_template="Evaluate {topic}",
        fallback_intent="Evaluate tool",
        next_action="Test features",
        tags=("tools", "software"),
    ),
)


def extract_topic(title: str, keywords: tuple[str, ...] | list[str]) -> str | None:
    """Pick a specific topic phrase out of a page title.

    The first word longer than three letters that is not a keyword is the
    topic, joined with the following word when that one is longer than two
    letters. Non-letters are stripped from each word before comparing.
    """
    words = (title or "").lower().split()
    keyword_set = {k.lower() for k in keywords}

    for i, raw in enumerate(words):
        word = re.sub(r"[^a-z]", "", raw)
        if len(word) > 3 and word not in keyword_set:
            if i + 1 < len(words):
                next_word = re.sub(r"[^a-z]", "", words[i + 1])
                if len(next_word) > 2:
                    return f"{word} {next_word}"
            return word
    return None


def match_category(title: str, excerpt: str = "") -> CategoryRule | None:
    """Return the first rule matching the title and excerpt, if any."""
    combined = f"{title or ''} {excerpt or ''}".lower()
    for rule in CATEGORY_RULES:
        if rule.matches(combined):
            return rule
    return None


def classify_fallback(title: str, excerpt: str = "") -> IntentResult:
    """Classify a page's intent from its title and excerpt without an LLM."""
    rule = match_category(title, excerpt)
    if rule is None:
        return IntentResult(
            intent=DEFAULT_INTENT,
            tags=list(DEFAULT_TAGS),
            next_action=DEFAULT_NEXT_ACTION,
        )
    return rule.build(title or "")


def clean_tags(raw: Any) -> list[str]:
    """Lower-case, de-duplicate, and cap a tag list; drops non-strings."""
    if not isinstance(raw, list):
        return []
    tags: list[str] = []
    for item in raw:
        if not isinstance(item, str):
            continue
        tag = item.strip().lstrip("#").lower()
        if tag and tag not in tags:
            tags.append(tag)
    return tags[:MAX_TAGS]


def _text_field(fields: dict[str, Any], key: str) -> str:
    value = fields.get(key)
    return value.strip() if isinstance(value, str) else ""


def parse_ai_intent(response: Any) -> IntentResult | None:
    """Validate an AI classification response.

    Tries the whole response as a JSON object, then the first embedded
    object. Missing fields get generic defaults; a response with no usable
    field at all is rejected (returns None).
    """
    for candidate in object_candidates(response):
        fields = candidate.fields
        intent = _text_field(fields, "intent")
        next_action = _text_field(fields, "next_action")
        tags = clean_tags(fields.get("tags"))

        if not (intent or next_action or tags):
            continue

        return IntentResult(
            intent=intent or AI_DEFAULT_INTENT,
            tags=tags or list(AI_DEFAULT_TAGS),
            next_action=next_action or AI_DEFAULT_NEXT_ACTION,
        )
    return None
