"""
Keyword Gap Data Model

KeywordRecord: one merged ranking row per keyword (primary + competitors).
KeywordGap: one scored opportunity per (keyword, competitor) pair.
AnalysisResult: the gaps a strategy produced plus where they came from.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ..utils.keywords import categorize_keyword_intent

# Positions outside 1-100 mean "not found in top 100"
MIN_RANK = 1
MAX_RANK = 100


class OpportunityTier(str, Enum):
    """Coarse attractiveness of a keyword gap."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class KeywordType(str, Enum):
    """How a keyword relates to the primary domain and its competitors."""
    GAP = "gap"          # Competitor ranks well, primary does not
    SHARED = "shared"    # Both rank well
    MISSING = "missing"  # Nobody ranks well, but volume > 100


class DataSource(str, Enum):
    """Where the ranking data of a merged record came from."""
    API = "api"
    SAMPLE = "sample"
    MIXED = "mixed"


class StrategyName(str, Enum):
    """Gap strategies in default fallback order."""
    DIRECT = "direct"
    DOMAIN_INTERSECTION = "dataforseo_intersection"
    AI_ESTIMATE = "ai_estimate"
    MOCK = "mock"


DEFAULT_STRATEGY_ORDER: List[StrategyName] = [
    StrategyName.DIRECT,
    StrategyName.DOMAIN_INTERSECTION,
    StrategyName.AI_ESTIMATE,
    StrategyName.MOCK,
]

PROVENANCE: Dict[StrategyName, str] = {
    StrategyName.DIRECT: "direct",
    StrategyName.DOMAIN_INTERSECTION: "dataforseo",
    StrategyName.AI_ESTIMATE: "ai_estimate",
    StrategyName.MOCK: "mock",
}


def coerce_rank(value: Any) -> Optional[int]:
    """
    Convert a raw position to a rank in 1-100.

    None, 0, non-numeric and out-of-range values all mean "not ranking".
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        rank = int(value)
    except (TypeError, ValueError):
        return None
    if rank < MIN_RANK or rank > MAX_RANK:
        return None
    return rank


def _first_present(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


@dataclass
class KeywordRecord:
    """Merged ranking data for one keyword."""
    keyword: str
    monthly_search_volume: int = 0
    competition_index: float = 0.0
    primary_rank: Optional[int] = None
    primary_url: Optional[str] = None
    competitor_ranks: Dict[str, Optional[int]] = field(default_factory=dict)
    competitor_urls: Dict[str, Optional[str]] = field(default_factory=dict)
    cpc: float = 0.0
    data_source: DataSource = DataSource.SAMPLE

    def competitor_rank(self, competitor: str) -> Optional[int]:
        return self.competitor_ranks.get(competitor)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KeywordRecord":
        """
        Build a record from provider or API data.

        Accepts snake_case, camelCase and the keyword-tool field names
        (monthly_search, position, rankingUrl, competitorRankings).

        Raises:
            ValueError: If the keyword is missing or metrics are not numeric
        """
        if not isinstance(data, dict):
            raise ValueError(f"Keyword record must be a mapping, got {type(data).__name__}")

        keyword = data.get("keyword")
        if not isinstance(keyword, str) or not keyword.strip():
            raise ValueError("Keyword record is missing 'keyword'")

        volume = _first_present(
            data, "monthly_search_volume", "monthlySearchVolume",
            "monthly_search", "search_volume", "volume", default=0,
        )
        competition = _first_present(
            data, "competition_index", "competitionIndex", "difficulty", default=0,
        )

        try:
            volume = max(0, int(volume))
            competition = min(100.0, max(0.0, float(competition)))
            cpc = float(_first_present(data, "cpc", default=0.0))
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid metrics for keyword '{keyword}': {e}") from e

        competitor_ranks = _first_present(
            data, "competitor_ranks", "competitorRanks", "competitorRankings", default={},
        )
        competitor_urls = _first_present(
            data, "competitor_urls", "competitorUrls", default={},
        )

        return cls(
            keyword=keyword,
            monthly_search_volume=volume,
            competition_index=competition,
            primary_rank=coerce_rank(
                _first_present(data, "primary_rank", "primaryRank", "position")
            ),
            primary_url=_first_present(data, "primary_url", "primaryUrl", "rankingUrl"),
            competitor_ranks={
                str(domain): coerce_rank(rank)
                for domain, rank in dict(competitor_ranks).items()
            },
            competitor_urls={
                str(domain): url for domain, url in dict(competitor_urls).items()
            },
            cpc=cpc,
            data_source=DataSource(data.get("data_source", DataSource.SAMPLE.value)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "keyword": self.keyword,
            "monthlySearchVolume": self.monthly_search_volume,
            "competitionIndex": self.competition_index,
            "primaryRank": self.primary_rank,
            "primaryUrl": self.primary_url,
            "competitorRanks": dict(self.competitor_ranks),
            "competitorUrls": dict(self.competitor_urls),
            "cpc": self.cpc,
            "dataSource": self.data_source.value,
        }


@dataclass
class KeywordGap:
    """
    One keyword opportunity.

    volume and difficulty are copied from the source record when the gap
    is created; later changes to the record are not reflected here.
    """
    keyword: str
    competitor: Optional[str]
    volume: int
    difficulty: float
    rank: Optional[int]
    opportunity: OpportunityTier
    relevance: float
    competitive_advantage: float
    keyword_type: KeywordType = KeywordType.GAP
    is_top_opportunity: bool = False

    @property
    def identity(self) -> Tuple[str, Optional[str]]:
        return (self.keyword, self.competitor)

    @property
    def intent(self) -> str:
        return categorize_keyword_intent(self.keyword, self.difficulty)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the field names the keyword table expects."""
        return {
            "keyword": self.keyword,
            "competitor": self.competitor,
            "volume": self.volume,
            "difficulty": self.difficulty,
            "rank": self.rank,
            "opportunity": self.opportunity.value,
            "relevance": self.relevance,
            "competitiveAdvantage": self.competitive_advantage,
            "isTopOpportunity": self.is_top_opportunity,
            "keywordType": self.keyword_type.value,
            "intent": self.intent,
        }


@dataclass
class GapAnalysisRequest:
    """Inputs shared by every gap strategy."""
    primary_domain: str
    competitor_domains: List[str]
    keyword_records: List[KeywordRecord] = field(default_factory=list)
    target_gap_count: int = 50  # Per competitor
    location_code: int = 2840


@dataclass
class AnalysisResult:
    """Gaps produced by the first successful strategy."""
    gaps: List[KeywordGap]
    strategy: StrategyName
    failures: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def provenance(self) -> str:
        return PROVENANCE[self.strategy]

    @property
    def is_illustrative(self) -> bool:
        """Mock data is placeholder output, not real rankings."""
        return self.strategy == StrategyName.MOCK

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strategy": self.strategy.value,
            "provenance": self.provenance,
            "is_illustrative": self.is_illustrative,
            "total": len(self.gaps),
            "gaps": [gap.to_dict() for gap in self.gaps],
        }
