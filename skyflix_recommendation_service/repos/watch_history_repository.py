"""Repository for aggregating watch history."""

import logging
from datetime import datetime
from typing import Dict, List

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from skyflix_recommendation_service.ml.scoring import COMPLETE_PROGRESS
from skyflix_recommendation_service.models import Film, WatchHistory

logger = logging.getLogger(__name__)


class WatchHistoryRepository:
    """
    Repository for reading and aggregating viewing sessions.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_trending_aggregates(self, since: datetime) -> List[Dict]:
        """
        Group viewing sessions since a date by film.

        Sessions whose film is missing from the catalog are dropped.

        Args:
            since: Start of the window (inclusive)

        Returns:
            List of dicts with film_id, title, description, view_count,
            average_watch_duration and complete_views
        """
        complete_views = func.sum(
            case((WatchHistory.watch_progress == COMPLETE_PROGRESS, 1), else_=0)
        )

        results = (
            self.db.query(
                WatchHistory.film_id,
                Film.title,
                Film.description,
                func.count(WatchHistory.watch_id).label('view_count'),
                func.avg(WatchHistory.watch_duration).label('average_watch_duration'),
                complete_views.label('complete_views'),
            )
            .join(Film, Film.film_id == WatchHistory.film_id)
            .filter(WatchHistory.watch_date >= since)
            .group_by(WatchHistory.film_id, Film.title, Film.description)
            .all()
        )

        logger.debug(f"Aggregated watch history for {len(results)} films since {since}")

        return [
            {
                'film_id': row.film_id,
                'title': row.title,
                'description': row.description,
                'view_count': int(row.view_count),
                'average_watch_duration': float(row.average_watch_duration or 0.0),
                'complete_views': int(row.complete_views or 0),
            }
            for row in results
        ]

    def get_recent_interactions(self, since: datetime) -> List[Dict]:
        """
        Get (user, film, progress) triples for sessions since a date.

        Args:
            since: Start of the window (inclusive)

        Returns:
            List of dicts ordered by watch date
        """
        results = (
            self.db.query(
                WatchHistory.user_id,
                WatchHistory.film_id,
                WatchHistory.watch_progress,
            )
            .filter(WatchHistory.watch_date >= since)
            .order_by(WatchHistory.watch_date, WatchHistory.watch_id)
            .all()
        )

        return [
            {
                'user_id': row.user_id,
                'film_id': row.film_id,
                'watch_progress': float(row.watch_progress),
            }
            for row in results
        ]

    # noinspection PyTypeChecker
    def get_watched_film_ids(self, user_id: int) -> List[int]:
        """Get IDs of every film the user has watched, at any time."""
        result = (
            self.db.query(WatchHistory.film_id)
            .filter(WatchHistory.user_id == user_id)
            .distinct()
            .all()
        )
        return [row[0] for row in result]
