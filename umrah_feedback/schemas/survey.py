"""
Survey Schemas
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional, Union
from enum import Enum


class ResponseType(str, Enum):
    RATING = "rating"
    CHOICE = "choice"
    CHECKBOX = "checkbox"
    SLIDER = "slider"
    TEXT = "text"


class ResponseItem(BaseModel):
    """One answer as produced by the questionnaire form."""
    model_config = ConfigDict(extra="allow")

    id: str = Field(..., min_length=1)
    type: ResponseType
    value: Union[str, int, float, list[str], None] = None
    comment: Optional[str] = None


class SurveyAnswers(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    responses: list[ResponseItem] = Field(default_factory=list)
    submitted_at: Optional[datetime] = Field(None, alias="submittedAt")


class SurveySubmission(BaseModel):
    """Schema for submitting a questionnaire."""
    title: str = Field("Umrah Feedback", min_length=1, max_length=255)
    answers: SurveyAnswers


class SurveyRead(BaseModel):
    """Stored survey as returned by the API."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    title: str
    answers: dict
    created_at: datetime


class EligibilityResponse(BaseModel):
    can_take_survey: bool
    reason: Optional[str] = None
