from sqlalchemy import Column, Integer, String, Date
from umrah_feedback.database import Base


class UmraTaker(Base):
    """Registered Umrah permit holder, loaded from the pilgrimage registry."""

    __tablename__ = "umra_takers"

    id = Column(Integer, primary_key=True, index=True)
    id_number = Column(String(64), unique=True, index=True, nullable=False)
    umra_date = Column(Date)

    def __repr__(self):
        return f"<UmraTaker {self.id_number}>"
