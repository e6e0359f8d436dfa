from umrah_feedback.models.survey import Survey
from umrah_feedback.models.trend_history import TrendHistory
from umrah_feedback.models.profile import Profile
from umrah_feedback.models.umra_taker import UmraTaker

__all__ = [
    "Survey",
    "TrendHistory",
    "Profile",
    "UmraTaker",
]
