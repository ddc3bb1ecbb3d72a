"""Repository classes"""

from skyflix_recommendation_service.repos.film_repository import FilmRepository
from skyflix_recommendation_service.repos.user_repository import UserRepository
from skyflix_recommendation_service.repos.watch_history_repository import WatchHistoryRepository

__all__ = [
    "FilmRepository",
    "UserRepository",
    "WatchHistoryRepository",
]
