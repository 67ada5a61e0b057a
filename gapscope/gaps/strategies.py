"""
Provider Strategy Selector

Ordered fallback chain over interchangeable gap strategies:

1. direct                   - local analysis of already-fetched records
2. dataforseo_intersection  - provider-side domain intersection per competitor
3. ai_estimate              - Claude estimates from a keyword sample
4. mock                     - random placeholder data (illustrative only)

Strategies run one at a time; the first one that returns at least one
gap wins. A failing strategy is logged and the next one is tried; only
when every strategy fails does the caller get AllStrategiesExhausted.
"""

import asyncio
import logging
import random
from typing import List, Optional, Protocol, Sequence

from .ai_estimate import sample_keyword_payload, validate_estimated_gaps
from .allocation import allocate, cap_total
from .classifier import classify_keywords
from .errors import AllStrategiesExhausted, GapAnalysisError, NoKeywordData, ProviderUnavailable
from .intersection import transform_intersection_rows
from .mock import generate_mock_gaps
from .models import AnalysisResult, GapAnalysisRequest, KeywordGap, KeywordRecord, StrategyName
from .prioritizer import prioritize
from .providers import GapEstimator, IntersectionProvider
from .scoring import build_missing_gap, build_shared_gap

logger = logging.getLogger(__name__)


class GapStrategy(Protocol):
    """One way of producing gaps; returns None or [] when it has nothing."""
    name: StrategyName

    async def try_fetch(self, request: GapAnalysisRequest) -> Optional[List[KeywordGap]]:
        ...


# ============================================================================
# DIRECT ANALYSIS
# ============================================================================

def run_direct_analysis(
    primary_domain: str,
    competitor_domains: Sequence[str],
    records: Sequence[KeywordRecord],
    target_per_competitor: int,
) -> List[KeywordGap]:
    """
    Classify, score, allocate and prioritize merged records.

    Pure and deterministic: identical input yields identical output,
    including top-opportunity flags.

    Returns:
        Shared gaps, then missing gaps, then per-competitor gaps
    """
    classification = classify_keywords(records, primary_domain, competitor_domains)

    shared = [build_shared_gap(r) for r in cap_total(classification.shared_candidates, target_per_competitor)]
    missing = [build_missing_gap(r) for r in cap_total(classification.missing_candidates, target_per_competitor)]
    competitor_gaps = allocate(
        classification.gap_candidates,
        competitor_domains,
        target_per_competitor,
        primary_domain,
    )

    return prioritize(shared + missing + competitor_gaps)


class DirectAnalysisStrategy:
    name = StrategyName.DIRECT

    async def try_fetch(self, request: GapAnalysisRequest) -> Optional[List[KeywordGap]]:
        if not request.keyword_records:
            raise NoKeywordData("No keyword records for direct analysis")

        return run_direct_analysis(
            request.primary_domain,
            request.competitor_domains,
            request.keyword_records,
            request.target_gap_count,
        )


# ============================================================================
# DOMAIN INTERSECTION
# ============================================================================

class DomainIntersectionStrategy:
    """
    One intersection query per competitor, issued concurrently.

    A failing competitor is logged and skipped; the strategy only fails
    when every competitor query fails.
    """
    name = StrategyName.DOMAIN_INTERSECTION

    def __init__(self, provider: Optional[IntersectionProvider]):
        self.provider = provider

    async def _fetch_competitor(self, competitor: str, request: GapAnalysisRequest) -> List[KeywordGap]:
        rows = await self.provider.fetch_intersection(
            competitor, request.primary_domain, request.location_code
        )
        return transform_intersection_rows(
            rows, competitor, request.primary_domain, limit=request.target_gap_count
        )

    async def try_fetch(self, request: GapAnalysisRequest) -> Optional[List[KeywordGap]]:
        if self.provider is None:
            raise ProviderUnavailable("Domain intersection provider is not configured", provider="dataforseo")

        competitors = request.competitor_domains
        results = await asyncio.gather(
            *[self._fetch_competitor(comp, request) for comp in competitors],
            return_exceptions=True,
        )

        gaps: List[KeywordGap] = []
        errors = []
        for comp, result in zip(competitors, results):
            if isinstance(result, BaseException):
                logger.warning(f"Intersection failed for {comp}: {result}")
                errors.append(f"{comp}: {result}")
            else:
                logger.info(f"Intersection {comp}: {len(result)} gaps")
                gaps.extend(result)

        if competitors and len(errors) == len(competitors):
            raise ProviderUnavailable(
                "All intersection queries failed (" + "; ".join(errors) + ")",
                provider="dataforseo",
            )

        return prioritize(gaps)


# ============================================================================
# AI ESTIMATE
# ============================================================================

class AIEstimateStrategy:
    name = StrategyName.AI_ESTIMATE

    def __init__(self, estimator: Optional[GapEstimator], sample_size: int = 100):
        self.estimator = estimator
        self.sample_size = sample_size

    async def try_fetch(self, request: GapAnalysisRequest) -> Optional[List[KeywordGap]]:
        if self.estimator is None:
            raise ProviderUnavailable("AI gap estimator is not configured", provider="claude")
        if not request.keyword_records:
            raise NoKeywordData("No keyword records to sample for AI estimate")

        sample = sample_keyword_payload(request.keyword_records, self.sample_size)
        payload = await self.estimator.estimate_gaps_with_model(
            request.primary_domain,
            request.competitor_domains,
            sample,
            request.target_gap_count,
        )
        gaps = validate_estimated_gaps(payload, request.primary_domain, request.target_gap_count)
        return prioritize(gaps)


# ============================================================================
# MOCK
# ============================================================================

class MockStrategy:
    name = StrategyName.MOCK

    def __init__(self, per_competitor: int = 10, rng: Optional[random.Random] = None):
        self.per_competitor = per_competitor
        self.rng = rng

    async def try_fetch(self, request: GapAnalysisRequest) -> Optional[List[KeywordGap]]:
        gaps = generate_mock_gaps(
            request.primary_domain,
            request.competitor_domains,
            per_competitor=min(self.per_competitor, request.target_gap_count),
            rng=self.rng,
        )
        return prioritize(gaps)


# ============================================================================
# SELECTOR
# ============================================================================

class StrategySelector:
    """
    Runs strategies in order until one yields gaps.

    Usage:
        selector = StrategySelector([DirectAnalysisStrategy(), MockStrategy()])
        result = await selector.select(request)
    """

    def __init__(self, strategies: Sequence[GapStrategy]):
        self.strategies = list(strategies)

    async def select(self, request: GapAnalysisRequest) -> AnalysisResult:
        failures = []

        for strategy in self.strategies:
            name = strategy.name.value
            logger.info(f"Trying gap strategy '{name}' for {request.primary_domain}")

            try:
                gaps = await strategy.try_fetch(request)
            except GapAnalysisError as e:
                logger.warning(f"Strategy '{name}' failed: {e}")
                failures.append((name, str(e)))
                continue
            except Exception as e:
                logger.error(f"Strategy '{name}' raised unexpectedly: {e}", exc_info=True)
                failures.append((name, f"{type(e).__name__}: {e}"))
                continue

            if not gaps:
                logger.warning(f"Strategy '{name}' returned no gaps")
                failures.append((name, "no gaps"))
                continue

            logger.info(f"Strategy '{name}' produced {len(gaps)} gaps")
            return AnalysisResult(gaps=gaps, strategy=strategy.name, failures=failures)

        raise AllStrategiesExhausted(failures)
