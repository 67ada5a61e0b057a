"""
Opportunity Scorer

Deterministic scores for each (keyword, competitor) pair:

1. Relevance (0-100)
   100 - competition_index, +20 when the keyword contains the primary
   domain name.

2. Competitive Advantage (0-100)
   round((30 - competitor_rank) / 30 × 50) + min(50, round(volume / 100))
   A competitor sitting just inside the top 30 is easier to attack than
   one entrenched at #1.

3. Opportunity Tier
   high:   volume > 500 AND competition < 30 AND relevance > 70
   low:    volume < 100 AND competition > 60 AND relevance < 40
   medium: everything else

Composite Score (used by the prioritizer):
    relevance × 0.4 + competitive_advantage × 0.4 + min(100, volume / 10) × 0.2

The weights and thresholds are what the keyword table badges are
calibrated against; keep them in sync with the UI.
"""

import math
import logging

from ..utils.domain import normalize_domain
from .classifier import GapCandidate, RANKS_WELL_THRESHOLD
from .models import KeywordGap, KeywordRecord, KeywordType, OpportunityTier

logger = logging.getLogger(__name__)


# ============================================================================
# CONSTANTS
# ============================================================================

DOMAIN_MATCH_BONUS = 20

HIGH_TIER_MIN_VOLUME = 500
HIGH_TIER_MAX_COMPETITION = 30
HIGH_TIER_MIN_RELEVANCE = 70

LOW_TIER_MAX_VOLUME = 100
LOW_TIER_MIN_COMPETITION = 60
LOW_TIER_MAX_RELEVANCE = 40

COMPOSITE_WEIGHTS = {
    "relevance": 0.4,
    "competitive_advantage": 0.4,
    "volume": 0.2,
}

# Shared and missing keywords have no competitor to score against
SHARED_RELEVANCE = 70
SHARED_ADVANTAGE = 60
MISSING_RELEVANCE = 40
MISSING_ADVANTAGE = 0
MISSING_HIGH_MIN_VOLUME = 500


def clamp(value: float, low: float = 0, high: float = 100) -> float:
    return min(high, max(low, value))


def round_half_up(value: float) -> int:
    """Round .5 upwards (not to even) so scores match the keyword table."""
    return int(math.floor(value + 0.5))


# ============================================================================
# SCORES
# ============================================================================

def calculate_relevance(keyword: str, competition_index: float, primary_domain: str) -> float:
    """
    Relevance proxy (0-100).

    Args:
        keyword: Keyword text
        competition_index: 0-100, higher is harder
        primary_domain: Primary domain (normalized before matching)

    Returns:
        Relevance score
    """
    domain_name = normalize_domain(primary_domain).lower()
    bonus = DOMAIN_MATCH_BONUS if domain_name and domain_name in keyword.lower() else 0
    return clamp(100 - competition_index + bonus)


def calculate_competitive_advantage(competitor_rank: int, monthly_search_volume: int) -> int:
    """
    Competitive advantage (0-100) against one competitor.

    Args:
        competitor_rank: Competitor's position (1-30 for gaps)
        monthly_search_volume: Monthly searches

    Returns:
        Advantage score
    """
    rank_component = round_half_up(
        ((RANKS_WELL_THRESHOLD - competitor_rank) / RANKS_WELL_THRESHOLD) * 50
    )
    volume_component = min(50, round_half_up(monthly_search_volume / 100))
    return int(clamp(rank_component + volume_component))


def determine_opportunity_tier(
    monthly_search_volume: int,
    competition_index: float,
    relevance: float,
) -> OpportunityTier:
    """Classify into high / medium / low."""
    if (
        monthly_search_volume > HIGH_TIER_MIN_VOLUME
        and competition_index < HIGH_TIER_MAX_COMPETITION
        and relevance > HIGH_TIER_MIN_RELEVANCE
    ):
        return OpportunityTier.HIGH

    if (
        monthly_search_volume < LOW_TIER_MAX_VOLUME
        and competition_index > LOW_TIER_MIN_COMPETITION
        and relevance < LOW_TIER_MAX_RELEVANCE
    ):
        return OpportunityTier.LOW

    return OpportunityTier.MEDIUM


def composite_score(gap: KeywordGap) -> float:
    """Weighted score used to rank gaps."""
    return (
        (gap.relevance or 0) * COMPOSITE_WEIGHTS["relevance"]
        + (gap.competitive_advantage or 0) * COMPOSITE_WEIGHTS["competitive_advantage"]
        + min(100, gap.volume / 10) * COMPOSITE_WEIGHTS["volume"]
    )


# ============================================================================
# GAP CONSTRUCTION
# ============================================================================

def score_gap(
    keyword: str,
    volume: int,
    difficulty: float,
    competitor: str,
    competitor_rank: int,
    primary_domain: str,
) -> KeywordGap:
    """Score one (keyword, competitor) pair into a KeywordGap."""
    relevance = calculate_relevance(keyword, difficulty, primary_domain)
    return KeywordGap(
        keyword=keyword,
        competitor=competitor,
        volume=volume,
        difficulty=difficulty,
        rank=competitor_rank,
        opportunity=determine_opportunity_tier(volume, difficulty, relevance),
        relevance=relevance,
        competitive_advantage=calculate_competitive_advantage(competitor_rank, volume),
        keyword_type=KeywordType.GAP,
    )


def score_candidate(candidate: GapCandidate, primary_domain: str) -> KeywordGap:
    record = candidate.record
    return score_gap(
        keyword=record.keyword,
        volume=record.monthly_search_volume,
        difficulty=record.competition_index,
        competitor=candidate.competitor,
        competitor_rank=candidate.competitor_rank,
        primary_domain=primary_domain,
    )


def build_shared_gap(record: KeywordRecord) -> KeywordGap:
    return KeywordGap(
        keyword=record.keyword,
        competitor=None,
        volume=record.monthly_search_volume,
        difficulty=record.competition_index,
        rank=record.primary_rank,
        opportunity=OpportunityTier.MEDIUM,
        relevance=SHARED_RELEVANCE,
        competitive_advantage=SHARED_ADVANTAGE,
        keyword_type=KeywordType.SHARED,
    )


def build_missing_gap(record: KeywordRecord) -> KeywordGap:
    opportunity = (
        OpportunityTier.HIGH
        if record.monthly_search_volume > MISSING_HIGH_MIN_VOLUME
        else OpportunityTier.MEDIUM
    )
    return KeywordGap(
        keyword=record.keyword,
        competitor=None,
        volume=record.monthly_search_volume,
        difficulty=record.competition_index,
        rank=None,
        opportunity=opportunity,
        relevance=MISSING_RELEVANCE,
        competitive_advantage=MISSING_ADVANTAGE,
        keyword_type=KeywordType.MISSING,
    )
