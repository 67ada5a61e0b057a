"""
Keyword Gap Analyzer

Entry points for the gap engine:

- analyze_keyword_gaps(): one-shot analysis returning KeywordGaps
- KeywordGapAnalyzer: configured analyzer with providers, strategy
  order and result cache; returns an AnalysisResult with provenance
- collect_keyword_records(): fetch and merge ranked keywords from
  DataForSEO for the primary domain and its competitors
"""

import asyncio
import logging
import random
from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence, Union

from ..analyzer.client import ClaudeClient
from ..collector.client import DataForSEOClient
from ..utils.config import Settings, get_settings
from ..utils.domain import clean_competitor_list, competitor_key, normalize_domain
from .cache import GapResultCache, make_cache_variant
from .errors import InvalidDomainInput, ProviderUnavailable
from .models import (
    DEFAULT_STRATEGY_ORDER,
    AnalysisResult,
    GapAnalysisRequest,
    KeywordGap,
    KeywordRecord,
    StrategyName,
)
from .providers import (
    ClaudeGapEstimator,
    DataForSEOIntersectionProvider,
    GapEstimator,
    IntersectionProvider,
)
from .store import merge_keyword_data
from .strategies import (
    AIEstimateStrategy,
    DirectAnalysisStrategy,
    DomainIntersectionStrategy,
    GapStrategy,
    MockStrategy,
    StrategySelector,
)

logger = logging.getLogger(__name__)

StrategyInput = Union[StrategyName, str]


def parse_strategy_order(order: Optional[Sequence[StrategyInput]]) -> List[StrategyName]:
    """
    Validate a strategy order.

    Raises:
        ValueError: On an unknown strategy name
    """
    if not order:
        return list(DEFAULT_STRATEGY_ORDER)

    parsed: List[StrategyName] = []
    for item in order:
        name = StrategyName(item)
        if name not in parsed:
            parsed.append(name)
    return parsed


def prepare_records(records: Sequence[Union[KeywordRecord, Dict[str, Any]]]) -> List[KeywordRecord]:
    """
    Coerce caller records and normalize their competitor keys.

    Malformed records are skipped with a warning.
    """
    prepared = []
    for raw in records:
        try:
            record = raw if isinstance(raw, KeywordRecord) else KeywordRecord.from_dict(raw)
        except ValueError as e:
            logger.warning(f"Skipping malformed keyword record: {e}")
            continue

        prepared.append(replace(
            record,
            competitor_ranks={competitor_key(d): r for d, r in record.competitor_ranks.items()},
            competitor_urls={competitor_key(d): u for d, u in record.competitor_urls.items()},
        ))
    return prepared


class KeywordGapAnalyzer:
    """
    Runs the strategy chain with configured providers.

    Usage:
        async with KeywordGapAnalyzer.from_settings() as analyzer:
            result = await analyzer.analyze("example.com", ["rival.com"], records)
            if result.is_illustrative:
                print("Showing sample data")
    """

    def __init__(
        self,
        intersection_provider: Optional[IntersectionProvider] = None,
        gap_estimator: Optional[GapEstimator] = None,
        settings: Optional[Settings] = None,
        cache: Optional[GapResultCache] = None,
        rng: Optional[random.Random] = None,
    ):
        self.settings = settings or get_settings()
        self.intersection_provider = intersection_provider
        self.gap_estimator = gap_estimator
        self.cache = cache
        self.rng = rng
        self._owned_clients: List[Any] = []

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        cache: Optional[GapResultCache] = None,
    ) -> "KeywordGapAnalyzer":
        """Build an analyzer with every provider the environment configures."""
        settings = settings or get_settings()
        intersection_provider = None
        gap_estimator = None
        owned: List[Any] = []

        if settings.has_dataforseo:
            dataforseo = DataForSEOClient(
                login=settings.DATAFORSEO_LOGIN,
                password=settings.DATAFORSEO_PASSWORD,
                timeout=settings.API_TIMEOUT,
            )
            owned.append(dataforseo)
            intersection_provider = DataForSEOIntersectionProvider(
                dataforseo,
                language_code=settings.DEFAULT_LANGUAGE,
                limit=settings.INTERSECTION_LIMIT,
            )
        else:
            logger.info("DataForSEO credentials not set; intersection strategy disabled")

        if settings.has_anthropic:
            gap_estimator = ClaudeGapEstimator(
                ClaudeClient(api_key=settings.ANTHROPIC_API_KEY, model=settings.CLAUDE_MODEL)
            )
        else:
            logger.info("ANTHROPIC_API_KEY not set; AI estimate strategy disabled")

        analyzer = cls(
            intersection_provider=intersection_provider,
            gap_estimator=gap_estimator,
            settings=settings,
            cache=cache if cache is not None else GapResultCache(ttl_minutes=settings.CACHE_TTL_MINUTES),
        )
        analyzer._owned_clients = owned
        return analyzer

    def build_strategies(self, order: Sequence[StrategyName]) -> List[GapStrategy]:
        factories = {
            StrategyName.DIRECT: lambda: DirectAnalysisStrategy(),
            StrategyName.DOMAIN_INTERSECTION: lambda: DomainIntersectionStrategy(self.intersection_provider),
            StrategyName.AI_ESTIMATE: lambda: AIEstimateStrategy(
                self.gap_estimator, sample_size=self.settings.AI_SAMPLE_SIZE
            ),
            StrategyName.MOCK: lambda: MockStrategy(
                per_competitor=self.settings.MOCK_GAPS_PER_COMPETITOR, rng=self.rng
            ),
        }
        return [factories[name]() for name in order]

    async def analyze(
        self,
        primary_domain: str,
        competitor_domains: Sequence[str],
        keyword_records: Sequence[Union[KeywordRecord, Dict[str, Any]]] = (),
        target_gap_count: Optional[int] = None,
        strategy_order: Optional[Sequence[StrategyInput]] = None,
        location_code: Optional[int] = None,
        use_cache: bool = True,
    ) -> AnalysisResult:
        """
        Analyze keyword gaps for a domain against its competitors.

        Args:
            primary_domain: Primary domain or URL
            competitor_domains: Competitor domains or URLs
            keyword_records: Merged KeywordRecords (or dicts)
            target_gap_count: Gaps kept per competitor
            strategy_order: Strategies to try, in order
            location_code: DataForSEO location code
            use_cache: Read and write the result cache

        Returns:
            AnalysisResult from the first strategy with gaps

        Raises:
            InvalidDomainInput: Empty primary domain or no usable competitor
            ValueError: Unknown strategy name
            AllStrategiesExhausted: No strategy produced gaps
        """
        primary = normalize_domain(primary_domain).rstrip("/")
        if not primary:
            raise InvalidDomainInput(f"Invalid primary domain: {primary_domain!r}")

        competitors = clean_competitor_list(competitor_domains, primary)
        if not competitors:
            raise InvalidDomainInput("At least one competitor domain is required")

        order = parse_strategy_order(strategy_order)
        location = location_code if location_code is not None else self.settings.DEFAULT_LOCATION_CODE
        target = target_gap_count if target_gap_count is not None else self.settings.GAPS_PER_COMPETITOR

        records = prepare_records(keyword_records)
        variant = make_cache_variant(target, order, records)

        if use_cache and self.cache is not None:
            cached = self.cache.get(primary, competitors, location, variant)
            if cached is not None:
                logger.info(f"Using cached keyword gaps for {primary}")
                return cached

        request = GapAnalysisRequest(
            primary_domain=primary,
            competitor_domains=competitors,
            keyword_records=records,
            target_gap_count=target,
            location_code=location,
        )

        logger.info(
            f"Analyzing keyword gaps for {primary} vs {', '.join(competitors)} "
            f"({len(request.keyword_records)} records, strategies: {[s.value for s in order]})"
        )

        result = await StrategySelector(self.build_strategies(order)).select(request)

        if result.is_illustrative:
            logger.warning(f"Keyword gaps for {primary} are placeholder data")
        elif use_cache and self.cache is not None:
            self.cache.set(primary, competitors, location, result, variant)

        return result

    async def close(self):
        for client in self._owned_clients:
            await client.close()
        self._owned_clients = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


async def analyze_keyword_gaps(
    primary_domain: str,
    competitor_domains: Sequence[str],
    keyword_records: Sequence[Union[KeywordRecord, Dict[str, Any]]],
    target_gap_count: int,
    strategy_order: Optional[Sequence[StrategyInput]] = None,
    intersection_provider: Optional[IntersectionProvider] = None,
    gap_estimator: Optional[GapEstimator] = None,
    location_code: Optional[int] = None,
) -> List[KeywordGap]:
    """
    One-shot keyword gap analysis.

    Strategies whose provider is not passed in fail over to the next one.

    Returns:
        Non-empty, fully scored KeywordGaps (canonical order, top five flagged)

    Raises:
        AllStrategiesExhausted: If no strategy produced gaps
    """
    analyzer = KeywordGapAnalyzer(
        intersection_provider=intersection_provider,
        gap_estimator=gap_estimator,
    )
    result = await analyzer.analyze(
        primary_domain,
        competitor_domains,
        keyword_records,
        target_gap_count=target_gap_count,
        strategy_order=strategy_order,
        location_code=location_code,
        use_cache=False,
    )
    return result.gaps


async def collect_keyword_records(
    client: DataForSEOClient,
    primary_domain: str,
    competitor_domains: Sequence[str],
    location_code: int = 2840,
    language_code: str = "en",
    limit: int = 200,
) -> List[KeywordRecord]:
    """
    Fetch ranked keywords for every domain and merge them.

    Competitor fetches run concurrently; a failed competitor is logged
    and left out rather than failing the whole collection.

    Raises:
        ProviderUnavailable: If the primary domain fetch fails
        NoKeywordData: If no domain returned keywords
    """
    primary = normalize_domain(primary_domain)
    competitors = clean_competitor_list(competitor_domains, primary)

    results = await asyncio.gather(
        client.get_ranked_keywords(primary, location_code, language_code, limit),
        *[client.get_ranked_keywords(comp, location_code, language_code, limit) for comp in competitors],
        return_exceptions=True,
    )

    primary_keywords, competitor_results = results[0], results[1:]
    if isinstance(primary_keywords, BaseException):
        raise ProviderUnavailable(
            f"Ranked keywords failed for {primary}: {primary_keywords}", provider="dataforseo"
        ) from primary_keywords

    merged_inputs = []
    for comp, keywords in zip(competitors, competitor_results):
        if isinstance(keywords, BaseException):
            logger.warning(f"Ranked keywords failed for competitor {comp}: {keywords}")
            continue
        merged_inputs.append({"domain": comp, "keywords": keywords})

    return merge_keyword_data(primary, primary_keywords, merged_inputs)
