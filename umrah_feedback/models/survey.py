"""
Submitted feedback questionnaires.

``answers`` keeps the form payload exactly as the client produced it:

    {"responses": [{"id": "q12", "type": "text", "value": "..."}, ...],
     "submittedAt": "2026-03-01T10:00:00Z"}
"""

from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, JSON
from umrah_feedback.database import Base


class Survey(Base):
    """One submitted questionnaire. Immutable once stored."""

    __tablename__ = "surveys"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), index=True, nullable=False)
    title = Column(String(255), nullable=False, default="Umrah Feedback")
    answers = Column(JSON, nullable=False, default=dict)
    # Naive UTC, compared directly against analysis cutoffs
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<Survey id={self.id} user_id={self.user_id}>"
