"""
Domain Intersection Row Transform

Turns DataForSEO domain_intersection items (competitor as target1,
primary as target2) into scored KeywordGaps. Two response shapes are
handled:

1. SERP element shape (Labs API):
   {"keyword_data": {...},
    "first_domain_serp_element": {"rank_group": 3, "url": ...},
    "second_domain_serp_element": {...} | null}
   Some accounts nest the rank one level deeper under "serp_item".

2. Metrics shape (edge function):
   {"keyword_data": {...},
    "target1_metrics": {"organic": {"pos": 3}},
    "target2_metrics": {"organic": {"pos": 0}}}

Flattened rows ({"keyword", "search_volume", "target1_position", ...})
are accepted as well.
"""

import logging
from typing import Any, Dict, List, Optional

from .classifier import ranks_well
from .errors import MalformedProviderResponse
from .models import KeywordGap, coerce_rank
from .scoring import score_gap

logger = logging.getLogger(__name__)


def _dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _serp_rank(element: Any) -> Optional[int]:
    element = _dict(element)
    if not element:
        return None
    rank = element.get("rank_group") or element.get("rank_absolute")
    if rank is None:
        serp_item = _dict(element.get("serp_item"))
        rank = serp_item.get("rank_group") or serp_item.get("rank_absolute")
    return coerce_rank(rank)


def _target_rank(item: Dict[str, Any], target: int) -> Optional[int]:
    """Rank of target1 (competitor) or target2 (primary) in any known shape."""
    serp_key = "first_domain_serp_element" if target == 1 else "second_domain_serp_element"
    if serp_key in item:
        return _serp_rank(item.get(serp_key))

    metrics = _dict(item.get(f"target{target}_metrics"))
    if metrics:
        return coerce_rank(_dict(metrics.get("organic")).get("pos"))

    return coerce_rank(item.get(f"target{target}_position"))


def _keyword_metrics(item: Dict[str, Any]) -> Dict[str, Any]:
    keyword_data = _dict(item.get("keyword_data"))
    keyword_info = _dict(keyword_data.get("keyword_info"))
    keyword_properties = _dict(keyword_data.get("keyword_properties"))

    keyword = keyword_data.get("keyword") or item.get("keyword")
    volume = keyword_info.get("search_volume", item.get("search_volume")) or 0

    difficulty = keyword_properties.get("keyword_difficulty", item.get("keyword_difficulty"))
    if difficulty is None:
        competition = keyword_info.get("competition", item.get("competition"))
        if isinstance(competition, (int, float)):
            # Google Ads competition is 0-1
            difficulty = competition * 100 if competition <= 1 else competition
    difficulty = difficulty or 0

    return {
        "keyword": keyword,
        "volume": int(volume),
        "difficulty": min(100.0, max(0.0, float(difficulty))),
    }


def transform_intersection_rows(
    rows: Any,
    competitor: str,
    primary_domain: str,
    limit: Optional[int] = None,
) -> List[KeywordGap]:
    """
    Convert intersection items for one competitor into KeywordGaps.

    Rows where the competitor does not rank in the top 30, or where the
    primary already ranks there, are not gaps and are dropped. Rows that
    cannot be read are skipped with a warning.

    Args:
        rows: Raw intersection items
        competitor: Competitor domain (target1)
        primary_domain: Primary domain (target2)
        limit: Maximum gaps to keep for this competitor

    Returns:
        Scored gaps for the competitor

    Raises:
        MalformedProviderResponse: If rows is not a list, or no row at all
            could be read
    """
    if not isinstance(rows, list):
        raise MalformedProviderResponse(
            f"Intersection response for {competitor} is not a list", payload=rows
        )

    gaps: List[KeywordGap] = []
    unreadable = 0
    seen = set()

    for item in rows:
        if limit is not None and len(gaps) >= limit:
            break
        try:
            if not isinstance(item, dict):
                raise ValueError(f"row is {type(item).__name__}")
            metrics = _keyword_metrics(item)
            if not metrics["keyword"]:
                raise ValueError("row has no keyword")
        except (TypeError, ValueError) as e:
            unreadable += 1
            logger.warning(f"Skipping intersection row for {competitor}: {e}")
            continue

        competitor_rank = _target_rank(item, 1)
        primary_rank = _target_rank(item, 2)

        if not ranks_well(competitor_rank) or ranks_well(primary_rank):
            continue
        if metrics["keyword"] in seen:
            continue
        seen.add(metrics["keyword"])

        gaps.append(score_gap(
            keyword=metrics["keyword"],
            volume=metrics["volume"],
            difficulty=metrics["difficulty"],
            competitor=competitor,
            competitor_rank=competitor_rank,
            primary_domain=primary_domain,
        ))

    if rows and unreadable == len(rows):
        raise MalformedProviderResponse(
            f"No readable intersection rows for {competitor}", payload=rows[:3]
        )

    logger.debug(f"Intersection {competitor}: {len(rows)} rows -> {len(gaps)} gaps")
    return gaps

