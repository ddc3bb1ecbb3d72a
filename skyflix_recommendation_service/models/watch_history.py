"""Append-only log of viewing sessions"""
from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, Integer

from skyflix_recommendation_service.models.base import Base


class WatchHistory(Base):
    """One entry per viewing session. ``watch_progress`` is a percentage (0-100)."""
    __tablename__ = 'watch_history'

    watch_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey('users.user_id'), nullable=False)
    film_id = Column(Integer, ForeignKey('films.film_id'), nullable=False)
    watch_date = Column(DateTime, nullable=False)
    watch_duration = Column(Integer, nullable=False, default=0)
    watch_progress = Column(Float, nullable=False, default=0.0)

    __table_args__ = (
        Index("idx_watch_history_watch_date", "watch_date"),
        Index("idx_watch_history_user_id", "user_id"),
    )

    def __repr__(self):
        return (
            f"<WatchHistory(user_id={self.user_id}, film_id={self.film_id}, "
            f"progress={self.watch_progress})>"
        )
