"""Creative analysis API endpoints."""

import logging

from fastapi import APIRouter

from creative_engine.api.v1.dependencies import AnalysisServiceDep
from creative_engine.config import settings
from creative_engine.schemas.analysis import (
    AnalysisResultResponse,
    AnalysisRunRequest,
    AnalysisRunResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/run", response_model=AnalysisRunResponse)
async def run_analysis(
    request: AnalysisRunRequest,
    analysis: AnalysisServiceDep,
) -> AnalysisRunResponse:
    """Analyze a batch of creatives and return them best score first."""
    options = request.to_options(
        default_min_spend=settings.analysis_min_spend,
        default_min_conversions=settings.analysis_min_conversions,
    )
    results = await analysis.analyze_creatives(
        [creative.to_record() for creative in request.creatives],
        options,
        persist_metrics=request.persist_metrics,
    )
    return AnalysisRunResponse(
        received=len(request.creatives),
        analyzed=len(results),
        results=[AnalysisResultResponse.from_result(result) for result in results],
    )
