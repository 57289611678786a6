"""Tests for the pattern-based intent classifier and AI intent validation."""

from __future__ import annotations

import json

import pytest

from mindmark.understand.classifier import (
    CATEGORY_RULES,
    IntentResult,
    classify_fallback,
    clean_tags,
    extract_topic,
    match_category,
    parse_ai_intent,
)


class TestCategoryOrder:
    def test_rule_order_is_fixed(self):
        assert [r.name for r in CATEGORY_RULES] == [
            "documentation",
            "tutorial",
            "shopping",
            "recipe",
            "academic",
            "news",
            "programming",
            "entertainment",
            "tools",
        ]

    def test_tutorial_beats_shopping(self):
        result = classify_fallback("Beginner tutorial: where to buy film cameras")
        assert "tutorial" in result.tags
        assert result.next_action == "Practice the steps"

    def test_documentation_beats_tutorial(self):
        rule = match_category("Learn the Fetch API", "reference for every method")
        assert rule is not None
        assert rule.name == "documentation"

    def test_news_beats_programming(self):
        rule = match_category("Python 3.13 release notes")
        assert rule is not None
        assert rule.name == "news"


class TestClassifyFallback:
    def test_shopping_scenario(self):
        result = classify_fallback("Best Laptop Deals 2024", "Buy a laptop for $800")
        assert result.tags == ["shopping", "product"]
        assert "price" in result.next_action.lower()
        assert result.intent == "Research best laptop purchase"

    def test_documentation_with_topic(self):
        result = classify_fallback("React Hooks API Reference")
        assert result.intent == "Reference react hooks for development"
        assert result.tags == ["documentation", "reference"]
        assert result.next_action == "Bookmark for quick reference"

    def test_documentation_without_topic(self):
        result = classify_fallback("API docs")
        assert result.intent == "Reference documentation"

    def test_recipe(self):
        result = classify_fallback("Grandma's Lasagna Recipe", "ingredients and preparation")
        assert result.intent == "Try grandmas lasagna recipe"
        assert result.tags == ["recipe", "cooking"]

    def test_academic(self):
        result = classify_fallback("Attention Is All You Need", "abstract: we propose")
        assert result.tags == ["academic", "research"]
        assert result.intent == "Research attention literature"

    def test_news_has_fixed_intent(self):
        result = classify_fallback("Breaking: markets rally")
        assert result.intent == "Read news update"
        assert result.tags == ["news", "article"]

    def test_programming(self):
        result = classify_fallback("Rust borrow checker explained", "fn main code sample")
        assert result.intent == "Learn rust borrow programming"
        assert result.next_action == "Try code examples"

    def test_entertainment(self):
        result = classify_fallback("Watch the season finale")
        assert result.intent == "Explore entertainment"
        assert result.tags == ["entertainment", "media"]

    def test_tools(self):
        result = classify_fallback("Obsidian", "download the desktop software")
        assert result.intent == "Evaluate obsidian"
        assert result.tags == ["tools", "software"]

    def test_no_match_is_generic(self):
        result = classify_fallback("Untitled", "lorem ipsum dolor sit amet")
        assert result == IntentResult(
            intent="Review this page",
            tags=["general", "reading"],
            next_action="Read and analyze",
        )

    def test_matches_whole_words_only(self):
        # "deals" and "apis" are not trigger words
        assert match_category("deals apis") is None

    @pytest.mark.parametrize(
        "title",
        ["", "x", "How to bake bread", "Python docs", "Buy now!!!", "Weather today"],
    )
    def test_total(self, title: str):
        result = classify_fallback(title, "")
        assert 1 <= len(result.tags) <= 4
        assert result.intent
        assert result.next_action


class TestExtractTopic:
    def test_pairs_with_next_word(self):
        assert extract_topic("React Hooks Guide", ["docs"]) == "react hooks"

    def test_skips_keywords_and_short_words(self):
        assert extract_topic("The API Reference for Django", ["api", "reference"]) == "django"

    def test_short_next_word_not_paired(self):
        assert extract_topic("Kubernetes in Action", []) == "kubernetes"

    def test_strips_non_letters(self):
        assert extract_topic("C++/Rust: FFI!", []) == "crust ffi"

    def test_none_when_nothing_qualifies(self):
        assert extract_topic("a to be", []) is None
        assert extract_topic("", []) is None


class TestCleanTags:
    def test_normalizes(self):
        assert clean_tags(["React", " #hooks ", "react", 3, ""]) == ["react", "hooks"]

    def test_caps_at_four(self):
        assert clean_tags(["a", "b", "c", "d", "e"]) == ["a", "b", "c", "d"]

    def test_non_list(self):
        assert clean_tags("react") == []


class TestParseAIIntent:
    def test_full_object(self):
        response = json.dumps({
            "intent": "Follow React Hooks tutorial",
            "tags": ["react", "hooks"],
            "next_action": "Try code examples",
        })
        assert parse_ai_intent(response) == IntentResult(
            intent="Follow React Hooks tutorial",
            tags=["react", "hooks"],
            next_action="Try code examples",
        )

    def test_object_after_preamble(self):
        response = 'Sure! {"intent": "Research laptop purchase", "tags": ["shopping"]} done'
        result = parse_ai_intent(response)
        assert result is not None
        assert result.intent == "Research laptop purchase"
        assert result.next_action == "Read later"

    def test_partial_object_gets_defaults(self):
        result = parse_ai_intent('{"next_action": "Compare prices"}')
        assert result == IntentResult(
            intent="Review this page", tags=["general"], next_action="Compare prices"
        )

    def test_structured_dict_response(self):
        result = parse_ai_intent({"intent": "Study the paper", "tags": "not-a-list"})
        assert result is not None
        assert result.intent == "Study the paper"
        assert result.tags == ["general"]

    def test_rejects_object_without_fields(self):
        assert parse_ai_intent('{"foo": "bar"}') is None

    def test_rejects_non_json(self):
        assert parse_ai_intent("I think the user wants to shop.") is None
        assert parse_ai_intent("") is None
