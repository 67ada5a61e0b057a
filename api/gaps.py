"""
API Endpoint for Keyword Gap Analysis

FastAPI app that:
1. Validates the primary domain and competitor list
2. Runs the gap strategy chain (direct -> intersection -> AI -> mock)
3. Returns prioritized gaps with their provenance

Keyword records are optional; without them the direct strategy is
skipped and the provider strategies take over.
"""

import logging
import sys
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

from gapscope import __version__
from gapscope.gaps import (
    AllStrategiesExhausted,
    InvalidDomainInput,
    KeywordGapAnalyzer,
    NoKeywordData,
    StrategyName,
    filter_gaps,
    paginate,
    ranked_view,
    summarize_gaps,
)
from gapscope.utils import get_settings

# Configure logging to stdout
logging.basicConfig(
    level=get_settings().LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
    force=True,
)
logger = logging.getLogger(__name__)

# Quiet down chatty loggers
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

app = FastAPI(
    title="Gapscope Keyword Gap Engine",
    description="Keyword gap analysis and opportunity scoring powered by DataForSEO and Claude AI",
    version=__version__,
)

_analyzer: Optional[KeywordGapAnalyzer] = None


def get_analyzer() -> KeywordGapAnalyzer:
    """Shared analyzer built from environment settings."""
    global _analyzer
    if _analyzer is None:
        _analyzer = KeywordGapAnalyzer.from_settings()
    return _analyzer


@app.on_event("shutdown")
async def shutdown_event():
    global _analyzer
    if _analyzer is not None:
        await _analyzer.close()
        _analyzer = None


# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================

class GapAnalysisBody(BaseModel):
    """Request to analyze keyword gaps."""
    domain: str = Field(..., description="Primary domain or URL (e.g., 'example.com')")
    competitors: List[str] = Field(..., description="Competitor domains or URLs")
    keywords: Optional[List[Dict[str, Any]]] = Field(
        default=None,
        description="Merged keyword records; omit to rely on provider strategies",
    )
    location_code: Optional[int] = Field(default=None, description="DataForSEO location code")
    target_gap_count: Optional[int] = Field(default=None, ge=1, le=500, description="Gaps per competitor")
    strategies: Optional[List[StrategyName]] = Field(
        default=None,
        description="Strategy order (direct, dataforseo_intersection, ai_estimate, mock)",
    )


class GapAnalysisResponse(BaseModel):
    """Prioritized gaps for one page of results."""
    strategy: str
    provenance: str
    is_illustrative: bool
    total: int
    page: int
    max_page: int
    summary: Dict[str, Any]
    failures: List[Dict[str, str]] = []
    gaps: List[Dict[str, Any]]


# ============================================================================
# API ENDPOINTS
# ============================================================================

@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "Gapscope Keyword Gap Engine"}


@app.get("/health")
async def health():
    """Detailed health check including configured providers."""
    settings = get_settings()
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "version": __version__,
        "providers": {
            "dataforseo": settings.has_dataforseo,
            "claude": settings.has_anthropic,
        },
    }


@app.post("/api/keyword-gaps", response_model=GapAnalysisResponse)
async def analyze_gaps(
    body: GapAnalysisBody,
    page: int = Query(1, ge=1),
    per_page: int = Query(15, ge=1, le=200),
    competitor: str = Query("all"),
    opportunity: str = Query("all"),
    keyword_type: str = Query("all"),
    analyzer: KeywordGapAnalyzer = Depends(get_analyzer),
):
    """
    Analyze keyword gaps for a domain.

    Filters and pagination apply to the prioritized list; top-opportunity
    flags are computed before filtering.
    """
    try:
        result = await analyzer.analyze(
            body.domain,
            body.competitors,
            body.keywords or [],
            target_gap_count=body.target_gap_count,
            strategy_order=body.strategies,
            location_code=body.location_code,
        )
    except (InvalidDomainInput, NoKeywordData) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AllStrategiesExhausted as e:
        logger.error(f"Gap analysis failed for {body.domain}: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    if result.is_illustrative:
        logger.warning(f"Returning placeholder gaps for {body.domain}")

    filtered = filter_gaps(
        ranked_view(result.gaps),
        competitor=competitor,
        opportunity=opportunity,
        keyword_type=keyword_type,
    )
    items, current_page, max_page = paginate(filtered, page=page, per_page=per_page)

    return GapAnalysisResponse(
        strategy=result.strategy.value,
        provenance=result.provenance,
        is_illustrative=result.is_illustrative,
        total=len(filtered),
        page=current_page,
        max_page=max_page,
        summary=summarize_gaps(result.gaps),
        failures=[{"strategy": name, "reason": reason} for name, reason in result.failures],
        gaps=[gap.to_dict() for gap in items],
    )


# ============================================================================
# RUN SERVER
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.gaps:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
