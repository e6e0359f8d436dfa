"""
Umrah ID verification.

An ID is usable when it exists in the permit registry (``umra_takers``)
and no other profile has claimed it.
"""

from typing import Optional
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from umrah_feedback.exceptions import ConflictError, NotFoundError
from umrah_feedback.models.profile import Profile
from umrah_feedback.models.umra_taker import UmraTaker

logger = logging.getLogger(__name__)


async def find_taker(db: AsyncSession, id_number: str) -> Optional[UmraTaker]:
    result = await db.execute(select(UmraTaker).where(UmraTaker.id_number == id_number))
    return result.scalar_one_or_none()


async def _claimed_by_other(db: AsyncSession, id_number: str, profile_id: Optional[str]) -> bool:
    query = select(Profile.id).where(Profile.id_number == id_number)
    if profile_id:
        query = query.where(Profile.id != profile_id)
    result = await db.execute(query.limit(1))
    return result.scalar_one_or_none() is not None


async def verify_umrah_id(
    db: AsyncSession,
    id_number: str,
    profile_id: Optional[str] = None,
) -> Optional[UmraTaker]:
    """Registry entry for ``id_number`` if it can be linked, else None."""
    taker = await find_taker(db, id_number)
    if taker is None:
        return None
    if await _claimed_by_other(db, id_number, profile_id):
        logger.info("Umrah ID already linked to another profile")
        return None
    return taker


async def link_umrah_id(db: AsyncSession, profile: Profile, id_number: str) -> Profile:
    """Store ``id_number`` on ``profile``."""
    if await find_taker(db, id_number) is None:
        raise NotFoundError("Umrah ID", id_number)
    if await _claimed_by_other(db, id_number, profile.id):
        raise ConflictError("This Umrah ID is already linked to another account.")

    profile.id_number = id_number
    await db.commit()
    await db.refresh(profile)
    return profile
