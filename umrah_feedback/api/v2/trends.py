"""
Trend Analysis Endpoints

- GET|POST /functions/analyse_surveys?range=1m|6m|1y - run the problem
  extraction over recent surveys and store the snapshot for that range
- OPTIONS /functions/analyse_surveys - CORS preflight, never analyses
- GET /trends/latest?range= - most recent stored snapshot

The analyse endpoint catches every failure itself and answers with
``{"error": ...}`` plus the permissive CORS headers browser clients of the
function expect.
"""

from typing import Optional
import logging

from fastapi import APIRouter, Header, Query, Response
from fastapi.responses import JSONResponse

from umrah_feedback.api.deps import DbSession, BearerToken, require_bearer_token
from umrah_feedback.exceptions import FeedbackAPIError, ErrorCode, render_exception
from umrah_feedback.schemas.trend import TrendAnalysisResponse, LatestTrendResponse, ProblemCount
from umrah_feedback.services.trend_service import (
    get_latest_snapshot,
    run_trend_analysis,
    snapshot_problem_counts,
)

logger = logging.getLogger(__name__)
router = APIRouter()

ANALYSE_PATH = "/functions/analyse_surveys"

FUNCTION_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


@router.options(ANALYSE_PATH, include_in_schema=False)
async def analyse_surveys_preflight():
    """CORS preflight for the analysis function."""
    return Response(status_code=200, headers=FUNCTION_CORS_HEADERS)


@router.api_route(
    ANALYSE_PATH,
    methods=["GET", "POST"],
    response_model=TrendAnalysisResponse,
    responses={401: {"description": "Missing authorization header"}, 500: {"description": "Analysis failed"}},
)
async def analyse_surveys(
    db: DbSession,
    range_token: Optional[str] = Query(None, alias="range"),
    authorization: Optional[str] = Header(None),
):
    """Extract the top five problems from recent free-text answers."""
    logger.info("Processing request with range: %s", range_token or "1m")
    try:
        require_bearer_token(authorization)
        result = await run_trend_analysis(db, range_token)
    except Exception as e:
        return render_exception(e, headers=FUNCTION_CORS_HEADERS)

    return JSONResponse(content=result.to_response(), headers=FUNCTION_CORS_HEADERS)


@router.get("/trends/latest", response_model=LatestTrendResponse)
async def latest_trend(
    db: DbSession,
    _token: BearerToken,
    range_token: Optional[str] = Query(None, alias="range"),
):
    """Most recent snapshot, optionally for one range."""
    snapshot = await get_latest_snapshot(db, range_token)
    if snapshot is None:
        raise FeedbackAPIError(
            status_code=404,
            code=ErrorCode.NOT_FOUND,
            detail="No trend analysis has been generated yet",
        )

    counts = snapshot_problem_counts(snapshot)
    return LatestTrendResponse(
        range=snapshot.range,
        top_problems=[item.problem for item in counts],
        problem_counts=[ProblemCount(**item.to_dict()) for item in counts],
        analysed_at=snapshot.analysed_at,
    )
