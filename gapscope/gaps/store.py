"""
Ranking Record Store

Merges the primary domain's keyword rankings with each competitor's
rankings into one KeywordRecord per keyword text. Keyword text is used
exactly as ingested (no case or whitespace folding).
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from ..utils.domain import competitor_key, normalize_domain
from .errors import InvalidDomainInput, NoKeywordData
from .models import DataSource, KeywordRecord

logger = logging.getLogger(__name__)

KeywordInput = Union[KeywordRecord, Dict[str, Any]]


def _is_real_url(url: Optional[str]) -> bool:
    return bool(url) and "http" in url


def _to_record(item: KeywordInput) -> KeywordRecord:
    if isinstance(item, KeywordRecord):
        return item
    return KeywordRecord.from_dict(item)


class RankingRecordStore:
    """
    In-memory keyword map for one analysis run.

    Usage:
        store = RankingRecordStore("https://www.example.com")
        store.add_primary(primary_keywords)
        store.add_competitor("rival.com", rival_keywords)
        records = store.records()
    """

    def __init__(self, primary_domain: str):
        self.primary_domain = normalize_domain(primary_domain)
        if not self.primary_domain:
            raise InvalidDomainInput(f"Invalid primary domain: {primary_domain!r}")

        self._records: Dict[str, KeywordRecord] = {}
        self.skipped = 0

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, keyword: str) -> bool:
        return keyword in self._records

    def add_primary(self, keywords: Iterable[KeywordInput]) -> None:
        """Seed the map with the primary domain's keywords."""
        for item in keywords:
            try:
                source = _to_record(item)
            except ValueError as e:
                self.skipped += 1
                logger.warning(f"Skipping malformed primary keyword: {e}")
                continue

            self._records[source.keyword] = KeywordRecord(
                keyword=source.keyword,
                monthly_search_volume=source.monthly_search_volume,
                competition_index=source.competition_index,
                primary_rank=source.primary_rank,
                primary_url=source.primary_url,
                cpc=source.cpc,
                data_source=DataSource.API if _is_real_url(source.primary_url) else DataSource.SAMPLE,
            )

    def add_competitor(self, domain: str, keywords: Iterable[KeywordInput]) -> None:
        """
        Record a competitor's rankings.

        Each input keyword carries the competitor's own position in its
        rank field. Existing records get this competitor's entry added or
        overwritten; unseen keywords become new records the primary domain
        does not rank for.
        """
        competitor = competitor_key(domain)
        if not competitor:
            logger.warning(f"Skipping competitor with invalid domain: {domain!r}")
            return

        for item in keywords:
            try:
                source = _to_record(item)
            except ValueError as e:
                self.skipped += 1
                logger.warning(f"Skipping malformed keyword for {competitor}: {e}")
                continue

            is_real = _is_real_url(source.primary_url)
            existing = self._records.get(source.keyword)

            if existing is not None:
                existing.competitor_ranks[competitor] = source.primary_rank
                existing.competitor_urls[competitor] = source.primary_url
                if is_real and existing.data_source == DataSource.SAMPLE:
                    existing.data_source = DataSource.MIXED
                continue

            self._records[source.keyword] = KeywordRecord(
                keyword=source.keyword,
                monthly_search_volume=source.monthly_search_volume,
                competition_index=source.competition_index,
                primary_rank=None,
                primary_url=None,
                competitor_ranks={competitor: source.primary_rank},
                competitor_urls={competitor: source.primary_url},
                cpc=source.cpc,
                data_source=DataSource.API if is_real else DataSource.SAMPLE,
            )

    def records(self) -> List[KeywordRecord]:
        """All merged records in insertion order."""
        return list(self._records.values())


def merge_keyword_data(
    primary_domain: str,
    primary_keywords: Sequence[KeywordInput],
    competitor_results: Sequence[Mapping[str, Any]],
) -> List[KeywordRecord]:
    """
    Merge primary and competitor keyword lists into KeywordRecords.

    Args:
        primary_domain: Primary domain or URL
        primary_keywords: Primary domain's keywords (rank = primary position)
        competitor_results: [{"domain": str, "keywords": [...]}, ...]

    Returns:
        One KeywordRecord per distinct keyword text

    Raises:
        InvalidDomainInput: If the primary domain is empty
        NoKeywordData: If there are no keywords at all
    """
    total = len(primary_keywords) + sum(
        len(result.get("keywords") or []) for result in competitor_results
    )
    if total == 0:
        raise NoKeywordData("No keyword data to merge")

    store = RankingRecordStore(primary_domain)
    store.add_primary(primary_keywords)

    for result in competitor_results:
        store.add_competitor(result.get("domain", ""), result.get("keywords") or [])

    records = store.records()
    logger.info(
        f"Merged {total} keyword rows into {len(records)} records for "
        f"{store.primary_domain} ({len(competitor_results)} competitors, {store.skipped} skipped)"
    )
    return records
