"""
Prioritizer and result views.

prioritize() flags the five highest composite-scored gaps. Ranking is
done on index lists over the one canonical gap list, so every view
(ranked, filtered, grouped, paged) references the same KeywordGap
objects and sees the same flags.
"""

import logging
from collections import Counter
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from .models import KeywordGap, KeywordType, OpportunityTier
from .scoring import composite_score

logger = logging.getLogger(__name__)

TOP_OPPORTUNITY_COUNT = 5
DEFAULT_PAGE_SIZE = 15


def rank_gaps(gaps: Sequence[KeywordGap]) -> List[int]:
    """
    Indices of gaps ordered by composite score, highest first.

    The sort is stable: equal scores keep their original order.
    """
    scores = [composite_score(gap) for gap in gaps]
    return sorted(range(len(gaps)), key=lambda i: -scores[i])


def ranked_view(gaps: Sequence[KeywordGap]) -> List[KeywordGap]:
    """The same gap objects, ordered by composite score."""
    return [gaps[i] for i in rank_gaps(gaps)]


def prioritize(gaps: List[KeywordGap]) -> List[KeywordGap]:
    """
    Flag the top opportunities in place.

    Exactly min(5, len(gaps)) gaps end up with is_top_opportunity=True;
    flags set by earlier runs or by providers are cleared first.

    Args:
        gaps: Canonical gap list (order is preserved)

    Returns:
        The same list, for convenience
    """
    for gap in gaps:
        gap.is_top_opportunity = False

    top_indices = rank_gaps(gaps)[:TOP_OPPORTUNITY_COUNT]
    for index in top_indices:
        gaps[index].is_top_opportunity = True

    if top_indices:
        logger.info(
            "Top opportunities: "
            + ", ".join(f"'{gaps[i].keyword}' ({gaps[i].competitor or gaps[i].keyword_type.value})" for i in top_indices)
        )
    return gaps


# ============================================================================
# VIEWS
# ============================================================================

def _matches(value: Any, expected: Union[str, Any, None]) -> bool:
    if expected is None:
        return True
    return value == expected


def filter_gaps(
    gaps: Sequence[KeywordGap],
    competitor: Optional[str] = None,
    opportunity: Optional[Union[str, OpportunityTier]] = None,
    keyword_type: Optional[Union[str, KeywordType]] = None,
) -> List[KeywordGap]:
    """Filter by competitor, opportunity tier and/or keyword type ("all" disables a filter)."""
    competitor = None if competitor == "all" else competitor
    opportunity = None if opportunity == "all" else opportunity
    keyword_type = None if keyword_type == "all" else keyword_type

    return [
        gap for gap in gaps
        if _matches(gap.competitor, competitor)
        and _matches(gap.opportunity, opportunity)
        and _matches(gap.keyword_type, keyword_type)
    ]


def unique_competitors(gaps: Sequence[KeywordGap]) -> List[str]:
    """Sorted distinct competitors present in the gaps."""
    return sorted({gap.competitor for gap in gaps if gap.competitor})


def group_by_competitor(gaps: Sequence[KeywordGap]) -> Dict[str, List[KeywordGap]]:
    groups: Dict[str, List[KeywordGap]] = {}
    for gap in gaps:
        if gap.competitor:
            groups.setdefault(gap.competitor, []).append(gap)
    return groups


def paginate(
    gaps: Sequence[KeywordGap],
    page: int = 1,
    per_page: int = DEFAULT_PAGE_SIZE,
) -> Tuple[List[KeywordGap], int, int]:
    """
    Slice one page of gaps.

    Returns:
        (items, valid_page, max_page); page is clamped to [1, max_page]
    """
    per_page = max(1, per_page)
    max_page = max(1, -(-len(gaps) // per_page))
    page = min(max_page, max(1, page))
    start = (page - 1) * per_page
    return list(gaps[start:start + per_page]), page, max_page


def summarize_gaps(gaps: Sequence[KeywordGap]) -> Dict[str, Any]:
    """Counts by competitor, tier and type plus the flagged keywords."""
    return {
        "total": len(gaps),
        "by_competitor": dict(Counter(gap.competitor for gap in gaps if gap.competitor)),
        "by_opportunity": {
            tier.value: sum(1 for gap in gaps if gap.opportunity == tier)
            for tier in OpportunityTier
        },
        "by_type": {
            kind.value: sum(1 for gap in gaps if gap.keyword_type == kind)
            for kind in KeywordType
        },
        "top_opportunities": [
            {
                "keyword": gap.keyword,
                "competitor": gap.competitor,
                "score": round(composite_score(gap), 1),
            }
            for gap in ranked_view(gaps)
            if gap.is_top_opportunity
        ],
    }
