"""
Trend Analysis Schemas
"""

from pydantic import BaseModel
from datetime import datetime
from enum import Enum


class TrendRange(str, Enum):
    ONE_MONTH = "1m"
    SIX_MONTHS = "6m"
    ONE_YEAR = "1y"


class ProblemCount(BaseModel):
    problem: str
    count: int
    rank: int


class TrendAnalysisResponse(BaseModel):
    """Body returned by the analyse_surveys invocation."""
    top_problems: list[str]
    problem_counts: list[ProblemCount]
    range: TrendRange
    total_surveys_analyzed: int


class LatestTrendResponse(BaseModel):
    """Most recent stored snapshot, as read by the admin dashboard."""
    range: str
    top_problems: list[str]
    problem_counts: list[ProblemCount]
    analysed_at: datetime
