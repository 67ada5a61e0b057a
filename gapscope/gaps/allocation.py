"""
Per-Competitor Fairness Allocator

Caps gap records per competitor so a competitor with a large keyword
footprint cannot crowd out a smaller one. Candidates are taken in
classifier order; each competitor's list stops growing at the cap.
"""

import logging
from typing import Dict, List, Sequence, TypeVar

from .classifier import GapCandidate, unique_competitors
from .models import KeywordGap
from .scoring import score_candidate

logger = logging.getLogger(__name__)

T = TypeVar("T")


def allocate_gaps(
    gap_candidates: Sequence[GapCandidate],
    competitor_domains: Sequence[str],
    target_per_competitor: int,
    primary_domain: str,
) -> Dict[str, List[KeywordGap]]:
    """
    Score and distribute gap candidates into bounded per-competitor lists.

    Args:
        gap_candidates: Classifier gap pairs, in classifier order
        competitor_domains: Competitors to allocate for
        target_per_competitor: Maximum gaps kept per competitor
        primary_domain: Primary domain (for relevance scoring)

    Returns:
        Ordered mapping competitor -> scored gaps (at most the cap each)
    """
    buckets: Dict[str, List[KeywordGap]] = {
        competitor: [] for competitor in unique_competitors(competitor_domains)
    }

    cap = max(0, target_per_competitor)
    dropped = 0

    for candidate in gap_candidates:
        bucket = buckets.get(candidate.competitor)
        if bucket is None:
            continue
        if len(bucket) >= cap:
            dropped += 1
            continue
        bucket.append(score_candidate(candidate, primary_domain))

    logger.info(
        "Allocated gaps per competitor: "
        + ", ".join(f"{comp}={len(gaps)}" for comp, gaps in buckets.items())
        + f" (cap {cap}, {dropped} over cap)"
    )
    return buckets


def allocate(
    gap_candidates: Sequence[GapCandidate],
    competitor_domains: Sequence[str],
    target_per_competitor: int,
    primary_domain: str,
) -> List[KeywordGap]:
    """Flattened allocate_gaps output in competitor order."""
    buckets = allocate_gaps(gap_candidates, competitor_domains, target_per_competitor, primary_domain)
    return [gap for gaps in buckets.values() for gap in gaps]


def cap_total(items: Sequence[T], target: int) -> List[T]:
    """Aggregate cap for shared and missing records, which have no competitor."""
    return list(items[: max(0, target)])
