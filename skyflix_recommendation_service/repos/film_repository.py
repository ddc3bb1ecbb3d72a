"""Repository for reading the film catalog."""

import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session

from skyflix_recommendation_service.models import Film, FilmCast, FilmGenre, Genre

logger = logging.getLogger(__name__)


class FilmRepository:
    """
    Repository for reading films, their genres and their cast.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_film(self, film_id: int) -> Optional[Film]:
        """Get a film by ID."""
        return self.db.query(Film).filter(Film.film_id == film_id).first()

    # noinspection PyTypeChecker
    def get_films_by_genre(self, genre_id: int) -> List[Film]:
        """
        Get every film tagged with a genre.

        Args:
            genre_id: Genre ID

        Returns:
            List of Film objects (empty for unknown genres)
        """
        return (
            self.db.query(Film)
            .join(FilmGenre, FilmGenre.film_id == Film.film_id)
            .filter(FilmGenre.genre_id == genre_id)
            .order_by(Film.film_id)
            .all()
        )

    def get_genre_stats(self) -> List[Dict]:
        """
        Aggregate film count and total views per genre.

        Returns:
            List of dicts with genre_id, genre_name, film_count, total_views
        """
        results = (
            self.db.query(
                FilmGenre.genre_id,
                Genre.genre_name,
                func.count(FilmGenre.film_id).label('film_count'),
                func.coalesce(func.sum(Film.view_count), 0).label('total_views'),
            )
            .join(Film, Film.film_id == FilmGenre.film_id)
            .join(Genre, Genre.genre_id == FilmGenre.genre_id)
            .group_by(FilmGenre.genre_id, Genre.genre_name)
            .all()
        )

        return [
            {
                'genre_id': row.genre_id,
                'genre_name': row.genre_name,
                'film_count': int(row.film_count),
                'total_views': int(row.total_views),
            }
            for row in results
        ]

    # noinspection PyTypeChecker
    def find_similar_candidates(self, film: Film, year_window: int) -> List[Film]:
        """
        Find films sharing a genre, a nearby release year, or the age rating.

        Args:
            film: Source film (excluded from the results)
            year_window: Largest release-year difference that still matches

        Returns:
            List of candidate Film objects
        """
        criteria = [
            Film.film_id.in_(
                select(FilmGenre.film_id).where(FilmGenre.genre_id.in_(film.genre_ids))
            ),
            Film.release_year.between(
                film.release_year - year_window,
                film.release_year + year_window
            ),
        ]
        if film.age_rating is not None:
            criteria.append(Film.age_rating == film.age_rating)

        candidates = (
            self.db.query(Film)
            .filter(and_(Film.film_id != film.film_id, or_(*criteria)))
            .order_by(Film.film_id)
            .all()
        )

        logger.debug(f"Found {len(candidates)} similarity candidates for film {film.film_id}")
        return candidates

    # noinspection PyTypeChecker
    def find_films_for_preferences(
            self,
            genre_ids: Iterable[int],
            actor_ids: Iterable[int],
            exclude_film_ids: Iterable[int] = ()
    ) -> List[Film]:
        """
        Find films in any preferred genre or featuring any preferred actor.

        Args:
            genre_ids: Preferred genre IDs
            actor_ids: Preferred actor IDs
            exclude_film_ids: Film IDs to leave out (e.g. already watched)

        Returns:
            List of Film objects; empty when there are no preferences
        """
        genre_ids = list(genre_ids)
        actor_ids = list(actor_ids)
        exclude_film_ids = list(exclude_film_ids)

        criteria = []
        if genre_ids:
            criteria.append(Film.film_id.in_(
                select(FilmGenre.film_id).where(FilmGenre.genre_id.in_(genre_ids))
            ))
        if actor_ids:
            criteria.append(Film.film_id.in_(
                select(FilmCast.film_id).where(FilmCast.actor_id.in_(actor_ids))
            ))

        if not criteria:
            return []

        query = self.db.query(Film).filter(or_(*criteria))
        if exclude_film_ids:
            query = query.filter(Film.film_id.notin_(exclude_film_ids))

        return query.order_by(Film.film_id).all()
