"""
Test factories for generating realistic test data.

Uses factory_boy for declarative test data generation.
"""

from .survey import (
    SurveyFactory,
    RatingResponseFactory,
    ChoiceResponseFactory,
    CheckboxResponseFactory,
    SliderResponseFactory,
    TextResponseFactory,
    build_answers,
)

__all__ = [
    "SurveyFactory",
    "RatingResponseFactory",
    "ChoiceResponseFactory",
    "CheckboxResponseFactory",
    "SliderResponseFactory",
    "TextResponseFactory",
    "build_answers",
]
