"""Catalog genres, studios and actors"""
from sqlalchemy import Column, Integer, String

from skyflix_recommendation_service.models.base import Base


class Genre(Base):
    __tablename__ = 'genres'

    genre_id = Column(Integer, primary_key=True)
    genre_name = Column(String(100), nullable=False)

    def __repr__(self):
        return f"<Genre(genre_id={self.genre_id}, genre_name='{self.genre_name}')>"


class Studio(Base):
    __tablename__ = 'studios'

    studio_id = Column(Integer, primary_key=True)
    studio_name = Column(String(255), nullable=False)

    def __repr__(self):
        return f"<Studio(studio_id={self.studio_id}, studio_name='{self.studio_name}')>"


class Actor(Base):
    __tablename__ = 'actors'

    actor_id = Column(Integer, primary_key=True)
    actor_name = Column(String(255), nullable=False)

    def __repr__(self):
        return f"<Actor(actor_id={self.actor_id}, actor_name='{self.actor_name}')>"
