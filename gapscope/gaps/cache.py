"""
Analysis Result Cache

In-memory cache of recent gap analyses, keyed by
(normalized primary domain, sorted normalized competitors, location code).
Each entry also records the inputs it was built from (gap target,
strategy order, keyword record fingerprint); a lookup whose inputs
differ is a miss. Illustrative (mock) results are never cached so real
providers are retried on the next request.
"""

import copy
import hashlib
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Iterable, Optional, Sequence, Tuple

from ..utils.domain import normalize_domain_key
from .models import AnalysisResult, KeywordRecord, StrategyName

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, Tuple[str, ...], int]
CacheVariant = Tuple[int, Tuple[str, ...], str]


def make_cache_key(primary_domain: str, competitor_domains: Iterable[str], location_code: int) -> CacheKey:
    competitors = sorted(
        key for key in (normalize_domain_key(c) for c in competitor_domains) if key
    )
    return (normalize_domain_key(primary_domain), tuple(competitors), int(location_code))


def records_fingerprint(records: Sequence[KeywordRecord]) -> str:
    """Stable digest of keyword records, independent of their order."""
    rows = sorted(json.dumps(record.to_dict(), sort_keys=True) for record in records)
    return hashlib.md5("\n".join(rows).encode()).hexdigest()[:16]


def make_cache_variant(
    target_gap_count: int,
    strategy_order: Sequence[StrategyName],
    records: Sequence[KeywordRecord],
) -> CacheVariant:
    return (
        int(target_gap_count),
        tuple(StrategyName(s).value for s in strategy_order),
        records_fingerprint(records),
    )


@dataclass
class CacheEntry:
    """Cache entry with metadata."""
    key: CacheKey
    result: AnalysisResult
    created_at: datetime
    expires_at: datetime
    variant: Optional[CacheVariant] = None
    hit_count: int = 0

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


class GapResultCache:
    """
    TTL cache for AnalysisResults.

    Entries are deep-copied in and out, so flags set on a returned result
    never leak into the cached copy.
    """

    def __init__(
        self,
        ttl_minutes: int = 60,
        max_entries: int = 128,
        enabled: bool = True,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.ttl = timedelta(minutes=ttl_minutes)
        self.max_entries = max_entries
        self.enabled = enabled
        self._clock = clock
        self._entries: Dict[CacheKey, CacheEntry] = {}

        self._hits = 0
        self._misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def get(
        self,
        primary_domain: str,
        competitor_domains: Iterable[str],
        location_code: int,
        variant: Optional[CacheVariant] = None,
    ) -> Optional[AnalysisResult]:
        """Cached result, or None when missing, expired or built from other inputs."""
        if not self.enabled:
            return None

        key = make_cache_key(primary_domain, competitor_domains, location_code)
        entry = self._entries.get(key)

        if entry is None:
            self._misses += 1
            return None

        if entry.is_expired(self._clock()):
            del self._entries[key]
            self._misses += 1
            return None

        if entry.variant != variant:
            self._misses += 1
            logger.debug(f"Cache entry for {key} was built from different inputs")
            return None

        entry.hit_count += 1
        self._hits += 1
        logger.debug(f"Cache HIT for {key}")
        return copy.deepcopy(entry.result)

    def set(
        self,
        primary_domain: str,
        competitor_domains: Iterable[str],
        location_code: int,
        result: AnalysisResult,
        variant: Optional[CacheVariant] = None,
    ) -> None:
        if not self.enabled or result.is_illustrative:
            return

        key = make_cache_key(primary_domain, competitor_domains, location_code)
        now = self._clock()

        if key not in self._entries and len(self._entries) >= self.max_entries:
            oldest = min(self._entries.values(), key=lambda e: e.created_at)
            del self._entries[oldest.key]

        self._entries[key] = CacheEntry(
            key=key,
            result=copy.deepcopy(result),
            created_at=now,
            expires_at=now + self.ttl,
            variant=variant,
        )
        logger.debug(f"Cached {len(result.gaps)} gaps for {key}")

    def invalidate(self, primary_domain: Optional[str] = None) -> int:
        """
        Drop entries for one primary domain, or everything.

        Returns:
            Number of entries removed
        """
        if primary_domain is None:
            count = len(self._entries)
            self._entries.clear()
        else:
            domain_key = normalize_domain_key(primary_domain)
            stale = [key for key in self._entries if key[0] == domain_key]
            for key in stale:
                del self._entries[key]
            count = len(stale)

        logger.info(f"Invalidated {count} cached gap analyses")
        return count

    def get_stats(self) -> Dict[str, Any]:
        total_requests = self._hits + self._misses
        hit_rate = (self._hits / total_requests * 100) if total_requests else 0
        return {
            "enabled": self.enabled,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate_percent": round(hit_rate, 1),
            "entry_count": len(self._entries),
            "max_entries": self.max_entries,
        }
