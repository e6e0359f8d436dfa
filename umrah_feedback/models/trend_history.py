from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, JSON
from umrah_feedback.database import Base


class TrendHistory(Base):
    """
    Persisted result of one trend analysis run.

    Only one live row per ``range`` is intended. That is maintained by
    deleting the range's rows before inserting, not by a unique constraint.

    ``problems`` layout:
        {"list": [str, ...5], "counts": [{"problem", "count", "rank"}, ...5]}
    Rows written by older clients may hold a bare list of strings instead.
    """

    __tablename__ = "trend_history"

    id = Column(Integer, primary_key=True, index=True)
    range = Column(String(8), nullable=False, index=True)
    problems = Column(JSON, nullable=False)
    analysed_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<TrendHistory id={self.id} range={self.range} analysed_at={self.analysed_at}>"
