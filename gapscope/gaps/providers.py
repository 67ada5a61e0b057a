"""
Provider capabilities used by the gap strategies.

The strategies only depend on two narrow async capabilities:

- IntersectionProvider.fetch_intersection(competitor, primary, location_code)
- GapEstimator.estimate_gaps_with_model(primary, competitors, sample_keywords, target_count)

Both return raw rows; validation happens in the strategy. The DataForSEO
and Claude adapters below translate transport failures into
ProviderUnavailable.
"""

import json
import logging
from typing import Any, Dict, List, Protocol, Sequence

from ..analyzer.client import ClaudeClient
from ..collector.client import DataForSEOClient, DataForSEOError
from .ai_estimate import parse_model_json
from .errors import ProviderUnavailable

logger = logging.getLogger(__name__)


class IntersectionProvider(Protocol):
    async def fetch_intersection(self, competitor: str, primary: str, location_code: int) -> Any:
        ...


class GapEstimator(Protocol):
    async def estimate_gaps_with_model(
        self,
        primary: str,
        competitors: Sequence[str],
        sample_keywords: List[Dict[str, Any]],
        target_count: int,
    ) -> Any:
        ...


class DataForSEOIntersectionProvider:
    """Domain intersection via DataForSEO Labs (competitor = target1, primary = target2)."""

    def __init__(self, client: DataForSEOClient, language_code: str = "en", limit: int = 100):
        self.client = client
        self.language_code = language_code
        self.limit = limit

    async def fetch_intersection(self, competitor: str, primary: str, location_code: int) -> Any:
        try:
            return await self.client.fetch_domain_intersection(
                competitor,
                primary,
                location_code=location_code,
                language_code=self.language_code,
                limit=self.limit,
            )
        except DataForSEOError as e:
            raise ProviderUnavailable(
                f"Domain intersection failed for {competitor}: {e}", provider="dataforseo"
            ) from e


GAP_ESTIMATE_SYSTEM = (
    "You are an expert SEO keyword analyst who identifies valuable keyword opportunities. "
    "Respond with JSON only."
)


def build_gap_estimate_prompt(
    primary: str,
    competitors: Sequence[str],
    sample_keywords: List[Dict[str, Any]],
    target_count: int,
) -> str:
    return (
        f'Analyze the keyword data for main domain "{primary}" and competitors '
        f"{', '.join(competitors)}.\n"
        "Identify keyword gaps: keywords a competitor ranks for that the main domain "
        "does not rank for, or ranks poorly for (below position 30).\n\n"
        f"Return up to {target_count} gaps for EACH competitor, evenly distributed.\n\n"
        f"Keyword data: {json.dumps(sample_keywords)}\n\n"
        'Respond with {"keywordGaps": [...]} where each item has: keyword (string), '
        "volume (monthly searches), difficulty (1-100), competitor (domain that ranks), "
        "rank (competitor position, if known), opportunity (high/medium/low), "
        "relevance (1-100), competitiveAdvantage (1-100).\n"
        "Every item MUST include the competitor field."
    )


class ClaudeGapEstimator:
    """Estimates gaps from a keyword sample with Claude."""

    def __init__(self, client: ClaudeClient, temperature: float = 0.7):
        self.client = client
        self.temperature = temperature

    async def estimate_gaps_with_model(
        self,
        primary: str,
        competitors: Sequence[str],
        sample_keywords: List[Dict[str, Any]],
        target_count: int,
    ) -> Any:
        prompt = build_gap_estimate_prompt(primary, competitors, sample_keywords, target_count)
        response = await self.client.complete_with_retry(
            prompt,
            system=GAP_ESTIMATE_SYSTEM,
            temperature=self.temperature,
        )
        if not response.success:
            raise ProviderUnavailable(f"Claude gap estimate failed: {response.error}", provider="claude")

        usage = self.client.get_usage_summary()
        logger.info(
            f"Claude gap estimate for {primary}: {response.usage.total_tokens} tokens "
            f"({usage['total_calls']} calls, ${usage['estimated_cost']:.4f} so far)"
        )

        return parse_model_json(response.content)
