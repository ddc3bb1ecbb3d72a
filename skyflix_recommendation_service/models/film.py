"""Film catalog entries with their genre and cast links"""
from datetime import UTC, datetime

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from skyflix_recommendation_service.models.base import Base


class Film(Base):
    """A film in the streaming catalog.

    ``ratings`` holds rating aggregates by source, e.g. ``{"internal": [4.5]}``.
    ``view_count`` only ever grows.
    """
    __tablename__ = 'films'

    film_id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    release_year = Column(Integer, nullable=False)
    duration = Column(Integer, nullable=True)
    age_rating = Column(String(20), nullable=True)
    studio_id = Column(Integer, ForeignKey('studios.studio_id'), nullable=True)
    view_count = Column(Integer, nullable=False, default=0)
    ratings = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    studio = relationship('Studio', lazy='joined')
    genres = relationship('FilmGenre', lazy='selectin', cascade='all, delete-orphan')
    cast = relationship('FilmCast', lazy='selectin', cascade='all, delete-orphan')

    __table_args__ = (
        Index("idx_release_year", "release_year"),
        Index("idx_age_rating", "age_rating"),
    )

    @property
    def genre_ids(self) -> list[int]:
        return [g.genre_id for g in self.genres]

    def to_dict(self) -> dict:
        """Serialize the film with its genres and cast."""
        return {
            'film_id': self.film_id,
            'title': self.title,
            'description': self.description,
            'release_year': self.release_year,
            'duration': self.duration,
            'age_rating': self.age_rating,
            'studio_id': self.studio_id,
            'view_count': self.view_count,
            'ratings': self.ratings,
            'genres': [
                {'genre_id': g.genre_id, 'genre_name': g.genre.genre_name if g.genre else None}
                for g in self.genres
            ],
            'cast': [
                {
                    'actor_id': c.actor_id,
                    'character_name': c.character_name,
                    'role': c.role,
                    'screen_time': c.screen_time,
                }
                for c in self.cast
            ],
        }

    def __repr__(self):
        return f"<Film(film_id={self.film_id}, title='{self.title}')>"


class FilmGenre(Base):
    __tablename__ = 'film_genres'

    film_id = Column(Integer, ForeignKey('films.film_id'), primary_key=True)
    genre_id = Column(Integer, ForeignKey('genres.genre_id'), primary_key=True)

    genre = relationship('Genre', lazy='joined')

    __table_args__ = (
        Index("idx_film_genres_genre_id", "genre_id"),
    )


class FilmCast(Base):
    __tablename__ = 'film_cast'

    film_id = Column(Integer, ForeignKey('films.film_id'), primary_key=True)
    actor_id = Column(Integer, ForeignKey('actors.actor_id'), primary_key=True)
    character_name = Column(String(255), nullable=True)
    role = Column(String(50), nullable=True)
    screen_time = Column(Integer, nullable=True)

    __table_args__ = (
        Index("idx_film_cast_actor_id", "actor_id"),
    )
