"""
Placeholder gap generator.

Last-resort fallback when no provider returns data. Output is random
and clearly illustrative: the selector tags it with the "mock"
provenance so callers can warn that it is not real ranking data.
"""

import logging
import random
from typing import List, Optional, Sequence

from .models import KeywordGap
from .scoring import score_gap

logger = logging.getLogger(__name__)

KEYWORD_PREFIXES = [
    "analytics", "data", "business", "revenue", "growth",
    "marketing", "strategy", "insight", "performance", "metrics", "dashboard",
    "reporting", "forecast", "prediction", "trends", "visualization",
]

KEYWORD_SUFFIXES = [
    "software", "platform", "service", "tool", "solution",
    "management", "analysis", "optimization", "tracking", "reporting", "dashboard",
    "integration", "automation", "intelligence", "framework", "methodology",
]


def generate_mock_gaps(
    primary_domain: str,
    competitor_domains: Sequence[str],
    per_competitor: int = 10,
    rng: Optional[random.Random] = None,
) -> List[KeywordGap]:
    """
    Generate the same number of placeholder gaps for every competitor.

    Args:
        primary_domain: Primary domain (for relevance scoring)
        competitor_domains: Normalized competitor domains
        per_competitor: Gaps per competitor (capped by the keyword pool)
        rng: Random source (seed it for reproducible output)

    Returns:
        Scored placeholder gaps, grouped by competitor
    """
    rng = rng or random.Random()
    pool = [
        f"{prefix} {suffix}"
        for prefix in KEYWORD_PREFIXES
        for suffix in KEYWORD_SUFFIXES
        if prefix != suffix
    ]
    count = min(max(0, per_competitor), len(pool))
    gaps: List[KeywordGap] = []

    for competitor in competitor_domains:
        for keyword in rng.sample(pool, count):
            gaps.append(score_gap(
                keyword=keyword,
                volume=rng.randint(100, 10099),
                difficulty=float(rng.randint(1, 100)),
                competitor=competitor,
                competitor_rank=rng.randint(1, 30),
                primary_domain=primary_domain,
            ))

    logger.warning(
        f"Generated {len(gaps)} placeholder gaps for {len(competitor_domains)} competitors "
        f"(illustrative data, not real rankings)"
    )
    return gaps
