"""
Gap Classifier

Splits merged keyword records into three disjoint groups:

- gap: primary does not rank well, a listed competitor does
  (evaluated per (record, competitor) pair)
- shared: primary ranks well and at least one listed competitor does
- missing: nobody listed ranks well but search volume > 100

"Ranks well" means a position of 30 or better.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from ..utils.domain import competitor_key, normalize_domain
from .models import KeywordRecord

logger = logging.getLogger(__name__)

RANKS_WELL_THRESHOLD = 30
MISSING_MIN_VOLUME = 100


def ranks_well(rank: Optional[int]) -> bool:
    """True for positions 1-30."""
    return rank is not None and 1 <= rank <= RANKS_WELL_THRESHOLD


@dataclass
class GapCandidate:
    """A (record, competitor) pair where the competitor ranks well and the primary does not."""
    record: KeywordRecord
    competitor: str
    competitor_rank: int


@dataclass
class Classification:
    """Classifier output."""
    gap_candidates: List[GapCandidate] = field(default_factory=list)
    shared_candidates: List[KeywordRecord] = field(default_factory=list)
    missing_candidates: List[KeywordRecord] = field(default_factory=list)
    skipped: int = 0

    def summary(self) -> dict:
        return {
            "gap_pairs": len(self.gap_candidates),
            "gap_keywords": len({c.record.keyword for c in self.gap_candidates}),
            "shared": len(self.shared_candidates),
            "missing": len(self.missing_candidates),
            "skipped": self.skipped,
        }


def _validate(record: Any) -> KeywordRecord:
    if isinstance(record, dict):
        record = KeywordRecord.from_dict(record)
    if not isinstance(record, KeywordRecord):
        raise ValueError(f"Unsupported record type {type(record).__name__}")
    if not record.keyword:
        raise ValueError("Record is missing 'keyword'")
    return record


def unique_competitors(competitor_domains: Sequence[str]) -> List[str]:
    """Competitor keys in first-seen order, without blanks or repeats."""
    keys: List[str] = []
    for domain in competitor_domains:
        key = competitor_key(domain)
        if key and key not in keys:
            keys.append(key)
    return keys


def classify_keywords(
    records: Sequence[KeywordRecord],
    primary_domain: str,
    competitor_domains: Sequence[str],
) -> Classification:
    """
    Classify merged records against a competitor set.

    Args:
        records: Merged KeywordRecords
        primary_domain: Primary domain (used for logging only; primary
            rank is already on each record)
        competitor_domains: Competitors to evaluate, repeats collapsed;
            rankings for any other domain present on a record are ignored

    Returns:
        Classification with gap pairs and shared/missing records
    """
    competitors = unique_competitors(competitor_domains)
    result = Classification()

    for raw in records:
        try:
            record = _validate(raw)
        except ValueError as e:
            result.skipped += 1
            logger.warning(f"Skipping malformed keyword record: {e}")
            continue

        primary_ranks_well = ranks_well(record.primary_rank)
        ranking_competitors = [
            (competitor, record.competitor_rank(competitor))
            for competitor in competitors
            if ranks_well(record.competitor_rank(competitor))
        ]

        if ranking_competitors:
            if primary_ranks_well:
                result.shared_candidates.append(record)
            else:
                for competitor, rank in ranking_competitors:
                    result.gap_candidates.append(GapCandidate(record, competitor, rank))
        elif not primary_ranks_well and record.monthly_search_volume > MISSING_MIN_VOLUME:
            result.missing_candidates.append(record)

    logger.info(
        f"Classified {len(records)} records for {normalize_domain(primary_domain)}: "
        f"{result.summary()}"
    )
    return result
