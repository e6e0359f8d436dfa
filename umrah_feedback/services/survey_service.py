"""
Survey collection service.

One questionnaire per pilgrim: submitting marks the profile completed and
later submissions are refused.
"""

from datetime import datetime
from typing import Optional
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from umrah_feedback.exceptions import ConflictError, NotFoundError
from umrah_feedback.models.profile import Profile
from umrah_feedback.models.survey import Survey
from umrah_feedback.models.umra_taker import UmraTaker
from umrah_feedback.schemas.survey import SurveySubmission

logger = logging.getLogger(__name__)

ALREADY_SUBMITTED = "You have already submitted a survey."
ALREADY_COMPLETED = "You have already completed the survey."


async def submit_survey(db: AsyncSession, profile: Profile, submission: SurveySubmission) -> Survey:
    """Store a questionnaire for ``profile`` and mark the profile completed."""
    if profile.survey_completed:
        raise ConflictError(ALREADY_SUBMITTED)

    answers = submission.answers.model_dump(mode="json", by_alias=True, exclude_none=True)
    answers.setdefault("submittedAt", datetime.utcnow().isoformat() + "Z")

    survey = Survey(user_id=profile.id, title=submission.title, answers=answers)
    db.add(survey)
    profile.survey_completed = True
    await db.commit()
    await db.refresh(survey)

    logger.info(
        "Survey submitted",
        extra={"survey_id": survey.id, "profile_id": profile.id, "responses": len(answers.get("responses", []))},
    )
    return survey


async def list_user_surveys(db: AsyncSession, user_id: str) -> list[Survey]:
    result = await db.execute(
        select(Survey).where(Survey.user_id == user_id).order_by(Survey.created_at.desc(), Survey.id.desc())
    )
    return list(result.scalars().all())


async def list_all_surveys(db: AsyncSession) -> list[Survey]:
    result = await db.execute(select(Survey).order_by(Survey.created_at.desc(), Survey.id.desc()))
    return list(result.scalars().all())


async def get_survey(db: AsyncSession, survey_id: int) -> Survey:
    result = await db.execute(select(Survey).where(Survey.id == survey_id))
    survey = result.scalar_one_or_none()
    if survey is None:
        raise NotFoundError("Survey", str(survey_id))
    return survey


async def check_eligibility(db: AsyncSession, profile: Profile) -> tuple[bool, Optional[str]]:
    """
    Whether ``profile`` may take the questionnaire, and why not.

    An unknown or missing Umrah ID does not block the survey.
    """
    if profile.survey_completed:
        return False, ALREADY_COMPLETED

    if not profile.id_number:
        return True, None

    result = await db.execute(select(UmraTaker.id).where(UmraTaker.id_number == profile.id_number))
    if result.scalar_one_or_none() is None:
        logger.warning(
            "Profile ID number not found in umra_takers, allowing survey access",
            extra={"profile_id": profile.id},
        )
    return True, None
