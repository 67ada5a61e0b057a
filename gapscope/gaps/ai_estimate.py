"""
AI-Estimated Gap Validation

Model output is untrusted: it is parsed as JSON and every row is
validated against EstimatedGapRow before it becomes a KeywordGap.
A non-JSON reply, a non-array payload, an empty array or any row
without a competitor raises MalformedProviderResponse.
"""

import json
import logging
import re
from typing import Any, Dict, List, Literal, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..utils.domain import competitor_key
from .classifier import ranks_well
from .errors import MalformedProviderResponse
from .models import KeywordGap, KeywordType, OpportunityTier, coerce_rank
from .scoring import (
    calculate_competitive_advantage,
    calculate_relevance,
    determine_opportunity_tier,
)

logger = logging.getLogger(__name__)

_JSON_BLOCK = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)


class EstimatedGapRow(BaseModel):
    """One gap row as returned by the model."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    keyword: str = Field(min_length=1)
    competitor: str = Field(min_length=1)
    volume: int = Field(default=0, ge=0)
    difficulty: float = Field(default=50, ge=0, le=100)
    rank: Optional[int] = None
    opportunity: Optional[Literal["high", "medium", "low"]] = None
    relevance: Optional[float] = Field(default=None, ge=0, le=100)
    competitive_advantage: Optional[float] = Field(
        default=None, ge=0, le=100, alias="competitiveAdvantage"
    )

    @field_validator("keyword", "competitor")
    @classmethod
    def strip_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("opportunity", mode="before")
    @classmethod
    def lower_opportunity(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value


def parse_model_json(text: str) -> Any:
    """
    Parse JSON from a model reply.

    Accepts bare JSON or a ```json fenced block.

    Raises:
        MalformedProviderResponse: If no JSON can be decoded
    """
    if not text or not text.strip():
        raise MalformedProviderResponse("Model returned an empty response")

    candidate = text.strip()
    match = _JSON_BLOCK.search(candidate)
    if match:
        candidate = match.group(1).strip()

    try:
        return json.loads(candidate)
    except json.JSONDecodeError as e:
        raise MalformedProviderResponse(f"Model response is not valid JSON: {e}", payload=text[:500]) from e


def extract_rows(payload: Any) -> List[Any]:
    """Pull the gap array out of {"keywordGaps": [...]} or a bare array."""
    rows = payload.get("keywordGaps") if isinstance(payload, dict) else payload

    if not isinstance(rows, list):
        raise MalformedProviderResponse("Model response does not contain a keywordGaps array", payload=payload)
    if not rows:
        raise MalformedProviderResponse("Model returned an empty keywordGaps array", payload=payload)
    return rows


def validate_estimated_gaps(
    payload: Any,
    primary_domain: str,
    target_per_competitor: Optional[int] = None,
) -> List[KeywordGap]:
    """
    Validate model rows and convert them to KeywordGaps.

    Missing relevance / competitive advantage / tier values are filled
    in with the standard formulas. Provider-set top-opportunity flags are
    ignored; the prioritizer sets them.

    Args:
        payload: Parsed model JSON
        primary_domain: Primary domain (for relevance)
        target_per_competitor: Keep at most this many rows per competitor

    Returns:
        Validated KeywordGaps

    Raises:
        MalformedProviderResponse: On any schema violation
    """
    rows = extract_rows(payload)
    gaps: List[KeywordGap] = []
    per_competitor: Dict[str, int] = {}

    for index, raw in enumerate(rows):
        try:
            row = EstimatedGapRow.model_validate(raw)
        except ValidationError as e:
            raise MalformedProviderResponse(
                f"Model gap row {index} failed validation: {e.errors()[0].get('msg')} "
                f"at {'.'.join(str(p) for p in e.errors()[0].get('loc', ()))}",
                payload=raw,
            ) from e

        competitor = competitor_key(row.competitor)
        count = per_competitor.get(competitor, 0)
        if target_per_competitor is not None and count >= target_per_competitor:
            continue
        per_competitor[competitor] = count + 1

        rank = coerce_rank(row.rank)
        relevance = (
            row.relevance if row.relevance is not None
            else calculate_relevance(row.keyword, row.difficulty, primary_domain)
        )
        if row.competitive_advantage is not None:
            advantage = row.competitive_advantage
        elif ranks_well(rank):
            advantage = calculate_competitive_advantage(rank, row.volume)
        else:
            advantage = 0

        opportunity = (
            OpportunityTier(row.opportunity) if row.opportunity
            else determine_opportunity_tier(row.volume, row.difficulty, relevance)
        )

        gaps.append(KeywordGap(
            keyword=row.keyword,
            competitor=competitor,
            volume=row.volume,
            difficulty=row.difficulty,
            rank=rank,
            opportunity=opportunity,
            relevance=relevance,
            competitive_advantage=advantage,
            keyword_type=KeywordType.GAP,
        ))

    logger.info(
        f"Validated {len(gaps)} AI-estimated gaps: "
        + ", ".join(f"{comp}={n}" for comp, n in per_competitor.items())
    )
    return gaps


def sample_keyword_payload(records: Sequence[Any], sample_size: int) -> List[Dict[str, Any]]:
    """Bounded, JSON-serializable keyword sample sent to the model."""
    return [record.to_dict() for record in records[: max(0, sample_size)]]
