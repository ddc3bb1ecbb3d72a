"""SQLAlchemy models"""

from skyflix_recommendation_service.models.base import Base
from skyflix_recommendation_service.models.film import Film, FilmCast, FilmGenre
from skyflix_recommendation_service.models.genre import Actor, Genre, Studio
from skyflix_recommendation_service.models.user import User, UserPreference
from skyflix_recommendation_service.models.watch_history import WatchHistory

__all__ = [
    "Base",
    "Actor",
    "Film",
    "FilmCast",
    "FilmGenre",
    "Genre",
    "Studio",
    "User",
    "UserPreference",
    "WatchHistory",
]
