"""Prompts for AI-backed summarization and intent classification."""

from __future__ import annotations

SUMMARY_MAX_TOKENS = 250
SUMMARY_TEMPERATURE = 0.15

INTENT_MAX_TOKENS = 250
INTENT_TEMPERATURE = 0.2

# Characters of page text shown to the classifier
INTENT_EXCERPT_CHARS = 1200


def get_summary_prompt(text: str, target_sentences: int, word_count: int) -> str:
    """Build the summarizer prompt for ``target_sentences`` short sentences."""
    return f"""You are an expert summarizer. Create {target_sentences} SHORT sentences \
that explain WHAT this page is and WHY someone would save it.

CRITICAL RULES:
- Return ONLY a JSON array: ["sentence 1", "sentence 2", "sentence 3"]
- Each sentence: 12-20 words MAXIMUM (very short!)
- NO filler: "This page", "This article", "The author", "In this"
- Answer: WHAT is this? WHY is it useful? WHO needs it?
- Be DIRECT - say it in the simplest way

PERFECT EXAMPLES (Short & Clear):
"Complete HTML element reference with syntax examples and browser compatibility."
"React Hooks enable state management in functional components without classes."
"Build REST APIs using Node.js, Express, and MongoDB with authentication."

Content ({word_count} words):
\"\"\"
{text}
\"\"\"

Return {target_sentences} SHORT sentences as JSON array:"""


def get_intent_prompt(title: str, excerpt: str) -> str:
    """Build the classifier prompt returning intent, tags, and next_action."""
    return f"""Analyze this webpage to determine the user's specific intent, relevant tags, \
and actionable next step.

CRITICAL: Return ONLY valid JSON (no markdown, no explanation):
{{
  "intent": "specific action-oriented intent",
  "tags": ["keyword1", "keyword2"],
  "next_action": "concrete helpful action"
}}

INTENT PATTERNS (Be SPECIFIC, not generic):
GOOD: "Reference HTML elements for development", "Follow React Hooks tutorial", \
"Research laptop purchase"
BAD: "Learn about HTML", "Read this page", "Review content"

DOCUMENTATION:
- "Reference [topic] documentation", "Study [topic] API guide", "Understand [topic] syntax"

TUTORIALS:
- "Follow [topic] tutorial", "Learn [skill] fundamentals", "Build [project] step-by-step"

SHOPPING:
- "Research [product] purchase", "Compare [product] options", "Find best [product] deals"

ARTICLES/BLOGS:
- "Understand [concept] deeply", "Explore [topic] insights", "Learn [topic] best practices"

RECIPES:
- "Try [dish] recipe", "Master [cooking technique]", "Cook [meal] for [occasion]"

ACADEMIC:
- "Research [topic] literature", "Study [subject] theory", "Review [topic] paper"

TAGS: 2-4 short lowercase keywords (no hashtags)

NEXT_ACTION: Specific, helpful suggestion
- "Try code examples", "Compare prices", "Practice exercises", "Bookmark for reference", \
"Install package"

Title: {title}
Excerpt: {excerpt[:INTENT_EXCERPT_CHARS]}

Return ONLY the JSON object:"""
