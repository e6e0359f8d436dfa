from umrah_feedback.schemas.survey import (
    ResponseType,
    ResponseItem,
    SurveyAnswers,
    SurveySubmission,
    SurveyRead,
    EligibilityResponse,
)
from umrah_feedback.schemas.trend import (
    TrendRange,
    ProblemCount,
    TrendAnalysisResponse,
    LatestTrendResponse,
)
from umrah_feedback.schemas.umrah_id import (
    UmrahIdRequest,
    UmraTakerRead,
    ProfileRead,
    UmrahIdVerification,
    UmrahIdLinkResult,
)

__all__ = [
    "ResponseType",
    "ResponseItem",
    "SurveyAnswers",
    "SurveySubmission",
    "SurveyRead",
    "EligibilityResponse",
    "TrendRange",
    "ProblemCount",
    "TrendAnalysisResponse",
    "LatestTrendResponse",
    "UmrahIdRequest",
    "UmraTakerRead",
    "ProfileRead",
    "UmrahIdVerification",
    "UmrahIdLinkResult",
]
