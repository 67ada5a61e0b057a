"""
Pytest Configuration and Shared Fixtures

Provides common fixtures and configuration for all test modules.
"""

import random
from typing import Any, Dict, List
from unittest.mock import AsyncMock, MagicMock

import pytest

from gapscope.gaps import GapResultCache, KeywordGapAnalyzer, KeywordRecord
from gapscope.utils.config import Settings


# ============================================================================
# Settings
# ============================================================================

@pytest.fixture
def settings() -> Settings:
    """Settings with no provider credentials (env and .env ignored)."""
    return Settings(
        _env_file=None,
        DATAFORSEO_LOGIN=None,
        DATAFORSEO_PASSWORD=None,
        ANTHROPIC_API_KEY=None,
        GAPS_PER_COMPETITOR=50,
        MOCK_GAPS_PER_COMPETITOR=10,
    )


# ============================================================================
# Mock Data Fixtures
# ============================================================================

@pytest.fixture
def make_record():
    """Factory for KeywordRecords with sensible defaults."""
    def _make(
        keyword: str,
        volume: int = 1000,
        competition: float = 25,
        primary_rank=None,
        ranks: Dict[str, Any] = None,
    ) -> KeywordRecord:
        return KeywordRecord(
            keyword=keyword,
            monthly_search_volume=volume,
            competition_index=competition,
            primary_rank=primary_rank,
            competitor_ranks=dict(ranks or {}),
        )
    return _make


@pytest.fixture
def sample_records(make_record) -> List[KeywordRecord]:
    """Mixed records for example.com vs rival.com / other.com."""
    return [
        make_record("widget pricing", volume=1200, competition=25, ranks={"rival.com": 3}),
        make_record("obscure term", volume=50, competition=80),
        make_record("seo tools", volume=800, competition=40, ranks={"rival.com": 2, "other.com": 40}),
        make_record("widget reviews", volume=600, competition=35, primary_rank=5, ranks={"rival.com": 8}),
        make_record("widget history", volume=900, competition=20),
        make_record("cheap widgets", volume=300, competition=55, primary_rank=45, ranks={"other.com": 12}),
        make_record("widget repair guide", volume=150, competition=10, ranks={"other.com": 25, "rival.com": 29}),
    ]


@pytest.fixture
def primary_keywords() -> List[Dict[str, Any]]:
    """Primary domain's ranked keywords as returned by the collector."""
    return [
        {
            "keyword": "widget reviews",
            "monthly_search_volume": 600,
            "competition_index": 35,
            "position": 5,
            "rankingUrl": "https://example.com/reviews",
        },
        {
            "keyword": "widget history",
            "monthly_search_volume": 900,
            "competition_index": 20,
            "position": 55,
            "rankingUrl": "https://example.com/history",
        },
    ]


@pytest.fixture
def competitor_results() -> List[Dict[str, Any]]:
    return [
        {
            "domain": "https://www.rival.com",
            "keywords": [
                {
                    "keyword": "widget pricing",
                    "monthly_search_volume": 1200,
                    "competition_index": 25,
                    "position": 3,
                    "rankingUrl": "https://rival.com/pricing",
                },
                {
                    "keyword": "widget reviews",
                    "monthly_search_volume": 600,
                    "competition_index": 35,
                    "position": 8,
                    "rankingUrl": "https://rival.com/reviews",
                },
            ],
        },
        {
            "domain": "other.com",
            "keywords": [
                {
                    "keyword": "widget pricing",
                    "monthly_search": 1200,
                    "difficulty": 25,
                    "position": 14,
                    "rankingUrl": "/pricing",
                },
            ],
        },
    ]


@pytest.fixture
def serp_element_rows() -> List[Dict[str, Any]]:
    """Domain intersection rows in the Labs API shape."""
    return [
        {
            "keyword_data": {
                "keyword": "widget pricing",
                "keyword_info": {"search_volume": 1200, "competition": 0.4},
                "keyword_properties": {"keyword_difficulty": 25},
            },
            "first_domain_serp_element": {"rank_group": 3, "url": "https://rival.com/pricing"},
            "second_domain_serp_element": None,
        },
        {
            "keyword_data": {
                "keyword": "widget reviews",
                "keyword_info": {"search_volume": 600},
                "keyword_properties": {"keyword_difficulty": 35},
            },
            "first_domain_serp_element": {"rank_group": 8},
            "second_domain_serp_element": {"rank_group": 5},
        },
        {
            "keyword_data": {
                "keyword": "widget parts",
                "keyword_info": {"search_volume": 400, "competition": 0.2},
                "keyword_properties": {},
            },
            "first_domain_serp_element": {"serp_item": {"rank_absolute": 12}},
            "second_domain_serp_element": {"serp_item": {"rank_absolute": 64}},
        },
    ]


@pytest.fixture
def metrics_rows() -> List[Dict[str, Any]]:
    """Domain intersection rows in the target metrics shape."""
    return [
        {
            "keyword_data": {
                "keyword": "widget pricing",
                "keyword_info": {"search_volume": 1200},
                "keyword_properties": {"keyword_difficulty": 25},
            },
            "target1_metrics": {"organic": {"pos": 3}},
            "target2_metrics": {"organic": {"pos": 0}},
        },
        {
            "keyword_data": {
                "keyword": "widget colors",
                "keyword_info": {"search_volume": 90},
                "keyword_properties": {"keyword_difficulty": 70},
            },
            "target1_metrics": {"organic": {"pos": 41}},
            "target2_metrics": {"organic": {"pos": 0}},
        },
    ]


@pytest.fixture
def ai_payload() -> Dict[str, Any]:
    """Parsed model output for two competitors."""
    return {
        "keywordGaps": [
            {
                "keyword": "widget subscription",
                "volume": 1500,
                "difficulty": 20,
                "competitor": "rival.com",
                "rank": 4,
                "opportunity": "High",
                "relevance": 85,
                "competitiveAdvantage": 70,
            },
            {
                "keyword": "widget install",
                "volume": 300,
                "difficulty": 45,
                "competitor": "www.other.com",
            },
        ]
    }


# ============================================================================
# Provider Fixtures
# ============================================================================

@pytest.fixture
def mock_intersection_provider(serp_element_rows):
    """Intersection provider returning the Labs-shape rows for every competitor."""
    provider = MagicMock()
    provider.fetch_intersection = AsyncMock(return_value=serp_element_rows)
    return provider


@pytest.fixture
def mock_gap_estimator(ai_payload):
    estimator = MagicMock()
    estimator.estimate_gaps_with_model = AsyncMock(return_value=ai_payload)
    return estimator


@pytest.fixture
def analyzer(settings) -> KeywordGapAnalyzer:
    """Analyzer with no providers and a seeded random source."""
    return KeywordGapAnalyzer(
        settings=settings,
        cache=GapResultCache(ttl_minutes=60),
        rng=random.Random(42),
    )


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
