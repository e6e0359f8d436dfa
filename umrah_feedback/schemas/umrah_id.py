"""
Umrah ID verification schemas
"""

from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import Optional


class UmrahIdRequest(BaseModel):
    id_number: str = Field(..., min_length=1, max_length=64)


class UmraTakerRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    id_number: str
    umra_date: Optional[date] = None


class ProfileRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    id_number: Optional[str] = None
    survey_completed: bool
    is_admin: bool
    created_at: datetime


class UmrahIdVerification(BaseModel):
    valid: bool
    data: Optional[UmraTakerRead] = None


class UmrahIdLinkResult(BaseModel):
    success: bool
    data: ProfileRead
