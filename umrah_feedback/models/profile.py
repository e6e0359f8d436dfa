from datetime import datetime

from sqlalchemy import Column, String, Boolean, DateTime
from umrah_feedback.database import Base


class Profile(Base):
    """Per-user state keyed by the bearer token subject."""

    __tablename__ = "profiles"

    id = Column(String(64), primary_key=True)
    email = Column(String(255), index=True)
    full_name = Column(String(255))
    id_number = Column(String(64), index=True)  # linked Umrah ID, see UmraTaker
    survey_completed = Column(Boolean, default=False, nullable=False)
    is_admin = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Profile {self.id}>"
