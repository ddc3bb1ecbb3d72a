"""Recommendation engine: trending cache, genre stats, personalized and similar content."""
import logging
import threading
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from types import MappingProxyType
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Tuple

import numpy as np
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from skyflix_recommendation_service.config import is_development
from skyflix_recommendation_service.exceptions import NotFoundError, UpstreamIOError, ValidationError
from skyflix_recommendation_service.ml import SimilarityScorer
from skyflix_recommendation_service.ml.scoring import (
    TRENDING_LIMIT,
    derived_rating,
    genre_popularity_score,
    internal_rating,
    rank_trending,
)
from skyflix_recommendation_service.models import Film
from skyflix_recommendation_service.models.database import SessionLocal
from skyflix_recommendation_service.repos import FilmRepository, UserRepository, WatchHistoryRepository

logger = logging.getLogger(__name__)

TRENDING_WINDOW = timedelta(days=30)
TRENDING_CACHE_TTL = timedelta(hours=1)
INTERACTION_WINDOW = timedelta(days=30)
PERSONALIZED_LIMIT = 10
SIMILAR_LIMIT = 5
DEFAULT_GENRE_LIMIT = 10


class InitializationState(Enum):
    """Lifecycle of the engine's read-models."""
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class TrendingCacheEntry:
    film_id: int
    title: str
    description: Optional[str]
    view_count: int
    average_watch_duration: float
    completion_rate: float
    score: float

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass(frozen=True)
class TrendingSnapshot:
    """Immutable trending cache contents. Replaced wholesale on every refresh."""
    entries: Tuple[TrendingCacheEntry, ...] = ()
    last_update: Optional[datetime] = None

    def is_fresh(self, now: datetime, ttl: timedelta = TRENDING_CACHE_TTL) -> bool:
        return self.last_update is not None and now - self.last_update < ttl

    def to_dict(self) -> Dict:
        return {
            'trending': [entry.to_dict() for entry in self.entries],
            'last_updated': self.last_update,
        }


@dataclass(frozen=True)
class GenreStats:
    genre_id: int
    genre_name: str
    film_count: int
    total_views: int
    popularity_score: float

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass(frozen=True)
class UserInteraction:
    film_id: int
    rating: float

    def to_dict(self) -> Dict:
        return asdict(self)


class RecommendationEngine:
    """
    Serves trending, genre, personalized and similar-content recommendations.

    Construct once per process and share it between request handlers. Each
    cached read-model is rebuilt off to the side and published with a single
    reference assignment, so readers see either the old or the new version.
    """

    def __init__(
            self,
            session_factory: Callable[[], Session] = SessionLocal,
            similarity_scorer: Optional[SimilarityScorer] = None,
            rng: Optional[np.random.Generator] = None,
            clock: Optional[Callable[[], datetime]] = None,
            debug: Optional[bool] = None
    ):
        """
        Initialize the recommendation engine.

        Args:
            session_factory: Callable returning catalog database sessions
            similarity_scorer: Scorer for similar content (default weights if None)
            rng: Random generator for personalized ranking
            clock: Callable returning the current aware UTC time
            debug: Attach diagnostics to similar-content results
                (None = only in the Development environment)
        """
        self._session_factory = session_factory
        self.similarity_scorer = similarity_scorer or SimilarityScorer()
        self._rng = rng if rng is not None else np.random.default_rng()
        self._clock = clock or (lambda: datetime.now(UTC))
        self.debug = is_development() if debug is None else debug

        self._state = InitializationState.UNINITIALIZED
        self._trending = TrendingSnapshot()
        self._swap_lock = threading.Lock()
        self._genre_stats: Optional[Mapping[int, GenreStats]] = None
        self._user_interactions: Optional[Mapping[int, Tuple[UserInteraction, ...]]] = None

    # ===== STATE =====

    @property
    def state(self) -> InitializationState:
        return self._state

    @property
    def trending(self) -> TrendingSnapshot:
        return self._trending

    @property
    def last_update(self) -> Optional[datetime]:
        return self._trending.last_update

    @property
    def genre_stats(self) -> Optional[Mapping[int, GenreStats]]:
        return self._genre_stats

    @property
    def user_interactions(self) -> Optional[Mapping[int, Tuple[UserInteraction, ...]]]:
        return self._user_interactions

    @contextmanager
    def _catalog(self, operation: str) -> Iterator[Session]:
        """Open a catalog session, reporting store failures as UpstreamIOError."""
        db = self._session_factory()
        try:
            yield db
        except SQLAlchemyError as e:
            logger.error(f"Catalog query failed during {operation}: {e}")
            raise UpstreamIOError(operation, str(e)) from e
        finally:
            db.close()

    # ===== INITIALIZATION =====

    def initialize_recommendations(self) -> None:
        """
        Build every read-model: trending cache, genre stats, user interactions.

        A failing step aborts the remaining ones; steps that already finished
        keep their results. Safe to call repeatedly.
        """
        logger.info("Initializing recommendation system...")
        self._state = InitializationState.INITIALIZING

        try:
            self.refresh_trending_cache()
            self.initialize_genre_recommendations()
            self.initialize_collaborative_data()
        except Exception:
            self._state = InitializationState.FAILED
            logger.error("Error initializing recommendations", exc_info=True)
            raise

        self._state = InitializationState.READY
        logger.info("✓ Recommendation system initialized")

    def refresh_trending_cache(self) -> TrendingSnapshot:
        """
        Rebuild the trending cache from the trailing 30-day watch history.

        The previous snapshot stays in place if the catalog query fails.

        Returns:
            The newly published snapshot
        """
        now = self._clock()

        with self._catalog('refresh_trending_cache') as db:
            aggregates = WatchHistoryRepository(db).get_trending_aggregates(now - TRENDING_WINDOW)

        ranked = rank_trending(aggregates, limit=TRENDING_LIMIT)
        snapshot = TrendingSnapshot(
            entries=tuple(TrendingCacheEntry(**entry) for entry in ranked),
            last_update=now
        )

        with self._swap_lock:
            self._trending = snapshot

        logger.info(f"✓ Trending cache refreshed ({len(snapshot.entries)} films)")
        return snapshot

    def initialize_genre_recommendations(self) -> Mapping[int, GenreStats]:
        """Rebuild per-genre film counts, total views and popularity."""
        with self._catalog('initialize_genre_recommendations') as db:
            rows = FilmRepository(db).get_genre_stats()

        stats = {
            row['genre_id']: GenreStats(
                genre_id=row['genre_id'],
                genre_name=row['genre_name'],
                film_count=row['film_count'],
                total_views=row['total_views'],
                popularity_score=genre_popularity_score(row['total_views'], row['film_count'])
            )
            for row in rows
        }

        self._genre_stats = MappingProxyType(stats)
        logger.info(f"✓ Genre stats initialized ({len(stats)} genres)")
        return self._genre_stats

    def initialize_collaborative_data(self) -> Mapping[int, Tuple[UserInteraction, ...]]:
        """Rebuild the per-user interaction table from the trailing 30 days."""
        since = self._clock() - INTERACTION_WINDOW

        with self._catalog('initialize_collaborative_data') as db:
            rows = WatchHistoryRepository(db).get_recent_interactions(since)

        grouped: Dict[int, List[UserInteraction]] = defaultdict(list)
        for row in rows:
            grouped[row['user_id']].append(
                UserInteraction(film_id=row['film_id'], rating=derived_rating(row['watch_progress']))
            )

        self._user_interactions = MappingProxyType(
            {user_id: tuple(items) for user_id, items in grouped.items()}
        )
        logger.info(f"✓ Collaborative data initialized ({len(grouped)} users)")
        return self._user_interactions

    # ===== READ OPERATIONS =====

    def get_trending_content(self) -> TrendingSnapshot:
        """
        Get trending content, refreshing first if the cache is over an hour old.

        Returns:
            Snapshot with at most 20 entries, ordered by score
        """
        snapshot = self._trending
        if snapshot.is_fresh(self._clock()):
            return snapshot

        logger.info("Trending cache is stale, refreshing")
        return self.refresh_trending_cache()

    def get_recommendations_by_genre(self, genre_id: int, limit: int = DEFAULT_GENRE_LIMIT) -> List[Dict]:
        """
        Get the most popular films in a genre.

        Popularity is view count times the film's first internal rating.

        Args:
            genre_id: Genre ID
            limit: Number of films (positive integer)

        Returns:
            List of film dicts with 'popularity_score'; empty for unknown genres
        """
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValidationError('limit', limit, 'must be a positive integer')

        if self._genre_stats is None:
            self.initialize_genre_recommendations()

        with self._catalog('get_recommendations_by_genre') as db:
            films = FilmRepository(db).get_films_by_genre(genre_id)
            scored = [
                dict(film.to_dict(), popularity_score=(film.view_count or 0) * internal_rating(film.ratings))
                for film in films
            ]

        scored.sort(key=lambda f: (-f['popularity_score'], -f['view_count'], f['film_id']))
        return scored[:limit]

    def get_personalized_recommendations(self, user_id: int) -> List[Dict]:
        """
        Get unwatched films matching a user's preferred genres or actors.

        Qualifying films are ranked by a uniform random score, so repeated
        calls may order them differently.

        Args:
            user_id: User ID

        Returns:
            Up to 10 film dicts with 'recommendation_score'
        """
        with self._catalog('get_personalized_recommendations') as db:
            users = UserRepository(db)
            user = users.get_user(user_id)
            if user is None:
                logger.warning(f"User not found: {user_id}")
                raise NotFoundError('user', user_id)

            preferences = users.get_preferences(user_id)
            preferred_genres = [p.genre_id for p in preferences if p.genre_id is not None]
            preferred_actors = [p.actor_id for p in preferences if p.actor_id is not None]
            watched = WatchHistoryRepository(db).get_watched_film_ids(user_id)

            candidates = [
                film.to_dict()
                for film in FilmRepository(db).find_films_for_preferences(
                    preferred_genres, preferred_actors, exclude_film_ids=watched
                )
            ]

        if not candidates:
            logger.info(f"No personalized candidates for user {user_id}")
            return []

        scores = self._rng.random(len(candidates))
        order = np.argsort(-scores, kind='stable')[:PERSONALIZED_LIMIT]

        return [dict(candidates[i], recommendation_score=float(scores[i])) for i in order]

    def get_similar_content(self, film_id: int) -> Dict:
        """
        Get films similar to a given film.

        Args:
            film_id: Source film ID

        Returns:
            {'similar': [...up to 5 films...], 'debug': dict or None}
        """
        with self._catalog('get_similar_content') as db:
            repo = FilmRepository(db)
            film = repo.get_film(film_id)
            if film is None:
                logger.warning(f"Film not found: {film_id}")
                raise NotFoundError('film', film_id)

            candidates = repo.find_similar_candidates(
                film, year_window=self.similarity_scorer.year_window
            )
            ranked = self.similarity_scorer.rank(
                self._similarity_attributes(film),
                [self._similarity_attributes(c) for c in candidates],
                n=SIMILAR_LIMIT
            )

            similar = [
                self._format_similar(candidates[item['index']], item)
                for item in ranked
            ]
            debug = self._similar_debug(film, len(similar)) if self.debug else None

        return {'similar': similar, 'debug': debug}

    def get_genre_stats(self) -> List[Dict]:
        """Get cached genre stats sorted by popularity (empty if never built)."""
        if self._genre_stats is None:
            return []
        stats = sorted(self._genre_stats.values(), key=lambda g: (-g.popularity_score, g.genre_id))
        return [g.to_dict() for g in stats]

    def get_user_interactions(self, user_id: int) -> List[Dict]:
        """Get a user's cached interactions (empty if none or never built)."""
        if self._user_interactions is None:
            return []
        return [i.to_dict() for i in self._user_interactions.get(user_id, ())]

    def get_stats(self) -> Dict:
        """Get statistics about the recommendation engine."""
        snapshot = self._trending
        return {
            'state': self._state.value,
            'trending': {
                'count': len(snapshot.entries),
                'last_updated': snapshot.last_update,
                'fresh': snapshot.is_fresh(self._clock()),
            },
            'genres': len(self._genre_stats) if self._genre_stats is not None else None,
            'users_with_interactions': (
                len(self._user_interactions) if self._user_interactions is not None else None
            ),
        }

    # ===== HELPERS =====

    def _similarity_attributes(self, film: Film) -> Dict:
        return {
            'genre_ids': film.genre_ids,
            'release_year': film.release_year,
            'age_rating': film.age_rating,
            'view_count': film.view_count,
        }

    def _format_similar(self, film: Film, ranked: Dict) -> Dict:
        data = film.to_dict()
        return {
            'film_id': data['film_id'],
            'title': data['title'],
            'description': data['description'],
            'release_year': data['release_year'],
            'age_rating': data['age_rating'],
            'genres': data['genres'],
            'view_count': data['view_count'],
            'studio': (
                {'studio_id': film.studio.studio_id, 'studio_name': film.studio.studio_name}
                if film.studio is not None else None
            ),
            'similarity_score': ranked['similarity_score'],
            'similarity_reasons': ranked['similarity_reasons'],
        }

    def _similar_debug(self, film: Film, total_found: int) -> Dict:
        window = self.similarity_scorer.year_window
        return {
            'original_film': {
                'genres': film.to_dict()['genres'],
                'release_year': film.release_year,
                'age_rating': film.age_rating,
            },
            'total_similar_found': total_found,
            'search_criteria': {
                'genre_ids': film.genre_ids,
                'year_range': f"{film.release_year - window} to {film.release_year + window}",
                'age_rating': film.age_rating,
            },
        }
