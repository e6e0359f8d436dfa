"""
Umrah ID Endpoints

Checks a permit number against the registry and links it to the
caller's profile.
"""

from fastapi import APIRouter

from umrah_feedback.api.deps import DbSession, CurrentProfile
from umrah_feedback.schemas.umrah_id import (
    ProfileRead,
    UmraTakerRead,
    UmrahIdRequest,
    UmrahIdVerification,
    UmrahIdLinkResult,
)
from umrah_feedback.services import umrah_id_service

router = APIRouter()


@router.post("/verify", response_model=UmrahIdVerification)
async def verify_umrah_id(
    data: UmrahIdRequest,
    db: DbSession,
    current_profile: CurrentProfile,
):
    taker = await umrah_id_service.verify_umrah_id(db, data.id_number, current_profile.id)
    if taker is None:
        return UmrahIdVerification(valid=False, data=None)
    return UmrahIdVerification(valid=True, data=UmraTakerRead.model_validate(taker))


@router.post("/link", response_model=UmrahIdLinkResult)
async def link_umrah_id(
    data: UmrahIdRequest,
    db: DbSession,
    current_profile: CurrentProfile,
):
    profile = await umrah_id_service.link_umrah_id(db, current_profile, data.id_number)
    return UmrahIdLinkResult(success=True, data=ProfileRead.model_validate(profile))
