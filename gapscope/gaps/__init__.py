"""
Keyword Gap Analysis & Opportunity Scoring Engine

Pipeline (direct strategy):
    raw rankings -> normalize domains -> merge records -> classify
    -> score -> per-competitor allocation -> prioritize (top 5 flagged)

The strategy selector wraps the pipeline with provider fallbacks:
direct -> DataForSEO domain intersection -> Claude estimate -> mock.

Example Usage:
    from gapscope.gaps import analyze_keyword_gaps, merge_keyword_data

    records = merge_keyword_data("example.com", primary_keywords, [
        {"domain": "rival.com", "keywords": rival_keywords},
    ])
    gaps = await analyze_keyword_gaps("example.com", ["rival.com"], records, 50)
"""

from .errors import (
    GapAnalysisError,
    InvalidDomainInput,
    NoKeywordData,
    ProviderUnavailable,
    MalformedProviderResponse,
    AllStrategiesExhausted,
)
from .models import (
    KeywordRecord,
    KeywordGap,
    KeywordType,
    OpportunityTier,
    DataSource,
    StrategyName,
    DEFAULT_STRATEGY_ORDER,
    GapAnalysisRequest,
    AnalysisResult,
)
from .store import RankingRecordStore, merge_keyword_data
from .classifier import Classification, GapCandidate, classify_keywords, ranks_well
from .scoring import (
    calculate_relevance,
    calculate_competitive_advantage,
    determine_opportunity_tier,
    composite_score,
    score_gap,
)
from .allocation import allocate, allocate_gaps
from .prioritizer import (
    prioritize,
    rank_gaps,
    ranked_view,
    filter_gaps,
    unique_competitors,
    group_by_competitor,
    paginate,
    summarize_gaps,
)
from .intersection import transform_intersection_rows
from .ai_estimate import parse_model_json, validate_estimated_gaps
from .mock import generate_mock_gaps
from .providers import (
    IntersectionProvider,
    GapEstimator,
    DataForSEOIntersectionProvider,
    ClaudeGapEstimator,
)
from .strategies import (
    GapStrategy,
    DirectAnalysisStrategy,
    DomainIntersectionStrategy,
    AIEstimateStrategy,
    MockStrategy,
    StrategySelector,
    run_direct_analysis,
)
from .cache import GapResultCache, make_cache_key, make_cache_variant, records_fingerprint
from .engine import (
    KeywordGapAnalyzer,
    analyze_keyword_gaps,
    collect_keyword_records,
)

__all__ = [
    # Errors
    "GapAnalysisError",
    "InvalidDomainInput",
    "NoKeywordData",
    "ProviderUnavailable",
    "MalformedProviderResponse",
    "AllStrategiesExhausted",

    # Models
    "KeywordRecord",
    "KeywordGap",
    "KeywordType",
    "OpportunityTier",
    "DataSource",
    "StrategyName",
    "DEFAULT_STRATEGY_ORDER",
    "GapAnalysisRequest",
    "AnalysisResult",

    # Pipeline
    "RankingRecordStore",
    "merge_keyword_data",
    "Classification",
    "GapCandidate",
    "classify_keywords",
    "ranks_well",
    "calculate_relevance",
    "calculate_competitive_advantage",
    "determine_opportunity_tier",
    "composite_score",
    "score_gap",
    "allocate",
    "allocate_gaps",
    "prioritize",
    "rank_gaps",
    "ranked_view",
    "filter_gaps",
    "unique_competitors",
    "group_by_competitor",
    "paginate",
    "summarize_gaps",

    # Providers and strategies
    "transform_intersection_rows",
    "parse_model_json",
    "validate_estimated_gaps",
    "generate_mock_gaps",
    "IntersectionProvider",
    "GapEstimator",
    "DataForSEOIntersectionProvider",
    "ClaudeGapEstimator",
    "GapStrategy",
    "DirectAnalysisStrategy",
    "DomainIntersectionStrategy",
    "AIEstimateStrategy",
    "MockStrategy",
    "StrategySelector",
    "run_direct_analysis",

    # Engine
    "GapResultCache",
    "make_cache_key",
    "make_cache_variant",
    "records_fingerprint",
    "KeywordGapAnalyzer",
    "analyze_keyword_gaps",
    "collect_keyword_records",
]
