"""
Survey API Endpoints

Questionnaire submission and read-back for pilgrims, plus the
administrator listing.
"""

from fastapi import APIRouter, status
import logging

from umrah_feedback.api.deps import DbSession, CurrentProfile, AdminProfile
from umrah_feedback.exceptions import ForbiddenError
from umrah_feedback.schemas.survey import SurveySubmission, SurveyRead, EligibilityResponse
from umrah_feedback.services import survey_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=SurveyRead, status_code=status.HTTP_201_CREATED)
async def submit_survey(
    data: SurveySubmission,
    db: DbSession,
    current_profile: CurrentProfile,
):
    """Submit the caller's questionnaire. Only one submission is accepted."""
    return await survey_service.submit_survey(db, current_profile, data)


@router.get("/", response_model=list[SurveyRead])
async def list_surveys(
    db: DbSession,
    admin: AdminProfile,
):
    """All submitted surveys, newest first."""
    return await survey_service.list_all_surveys(db)


@router.get("/mine", response_model=list[SurveyRead])
async def list_my_surveys(
    db: DbSession,
    current_profile: CurrentProfile,
):
    return await survey_service.list_user_surveys(db, current_profile.id)


@router.get("/eligibility", response_model=EligibilityResponse)
async def survey_eligibility(
    db: DbSession,
    current_profile: CurrentProfile,
):
    """Whether the caller may still take the questionnaire."""
    can_take, reason = await survey_service.check_eligibility(db, current_profile)
    return EligibilityResponse(can_take_survey=can_take, reason=reason)


@router.get("/{survey_id}", response_model=SurveyRead)
async def get_survey(
    survey_id: int,
    db: DbSession,
    current_profile: CurrentProfile,
):
    """One survey. Pilgrims only see their own; administrators see all."""
    survey = await survey_service.get_survey(db, survey_id)
    if survey.user_id != current_profile.id and not current_profile.is_admin:
        raise ForbiddenError("You can only view your own surveys")
    return survey
