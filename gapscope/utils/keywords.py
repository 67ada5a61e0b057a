"""
Keyword text helpers.

Search intent tagging by pattern matching.
"""

from typing import Dict, List

INTENT_PATTERNS: Dict[str, List[str]] = {
    "informational": [
        "how", "what", "why", "when", "where", "guide", "tutorial",
        "tips", "learn", "example", "definition",
    ],
    "navigational": [
        "login", "signin", "account", "download", "contact", "support", "official",
    ],
    "commercial": [
        "best", "top", "review", "compare", "vs", "versus", "comparison", "alternative",
    ],
    "transactional": [
        "buy", "price", "cost", "purchase", "cheap", "deal", "discount", "order", "shop",
    ],
}


def categorize_keyword_intent(keyword: str, difficulty: float) -> str:
    """
    Categorize search intent from keyword text.

    Pattern groups are checked in order (informational, navigational,
    commercial, transactional); the first group with a substring match wins.
    Without a match, easy keywords (difficulty < 40) are treated as
    informational and the rest as commercial.
    """
    keyword_lower = (keyword or "").lower()

    for intent, patterns in INTENT_PATTERNS.items():
        if any(pattern in keyword_lower for pattern in patterns):
            return intent

    return "informational" if difficulty < 40 else "commercial"

