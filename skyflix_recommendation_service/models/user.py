"""Platform users and their explicit taste signals"""
from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from skyflix_recommendation_service.models.base import Base


class User(Base):
    __tablename__ = 'users'

    user_id = Column(Integer, primary_key=True)
    username = Column(String(100), nullable=False)
    email = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    preferences = relationship('UserPreference', lazy='selectin', cascade='all, delete-orphan')

    def __repr__(self):
        return f"<User(user_id={self.user_id}, username='{self.username}')>"


class UserPreference(Base):
    """One taste signal: a genre, an actor, or both, scored in [0, 1]."""
    __tablename__ = 'user_preferences'

    preference_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey('users.user_id'), nullable=False)
    genre_id = Column(Integer, ForeignKey('genres.genre_id'), nullable=True)
    actor_id = Column(Integer, ForeignKey('actors.actor_id'), nullable=True)
    preference_score = Column(Float, nullable=False, default=0.0)
    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        Index("idx_user_preferences_user_id", "user_id"),
    )
