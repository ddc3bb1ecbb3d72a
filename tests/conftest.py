"""Shared test fixtures and configuration for pytest."""
import os

# Keep the module-level engine in the blueprint off the production database
os.environ.setdefault('DATABASE_URL', 'sqlite:///:memory:')

import pytest
import numpy as np
from datetime import UTC, datetime, timedelta
import json
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from skyflix_recommendation_service.models import (
    Actor,
    Base,
    Film,
    FilmCast,
    FilmGenre,
    Genre,
    Studio,
    User,
    UserPreference,
    WatchHistory,
)


# ===== Database Fixtures =====

@pytest.fixture(scope="function")
def test_db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_db_engine):
    """Session factory bound to the test database."""
    return sessionmaker(bind=test_db_engine)


@pytest.fixture(scope="function")
def test_db_session(session_factory):
    """Create a database session for testing."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def now() -> datetime:
    return datetime.now(UTC)


# ===== Catalog Fixtures =====

@pytest.fixture
def sample_catalog(test_db_session, now):
    """
    Seed a small catalog.

    Genres: 1 Action, 2 Drama, 3 Comedy, 4 Horror (no films)
    Films:
        1 Film A  2020 PG-13 {Action, Drama}  500 views  internal 4.0  cast {1}
        2 Film B  2021 PG-13 {Action}        1500 views  internal 3.0  cast {2}
        3 Film C  1990 R     {Comedy}        3000 views  no ratings    cast {3}
        4 Film D  2018 G     {Drama}          200 views  internal []   cast {2}
        5 Film E  2000 R     {Comedy}         100 views  internal 5.0
    Users:
        1 alice prefers Action and actor 3; watched films 1 and 2 recently
        2 bob has no preferences; watched film 3 forty days ago
    """
    db = test_db_session

    db.add_all([
        Genre(genre_id=1, genre_name='Action'),
        Genre(genre_id=2, genre_name='Drama'),
        Genre(genre_id=3, genre_name='Comedy'),
        Genre(genre_id=4, genre_name='Horror'),
        Studio(studio_id=1, studio_name='SkyFlix Studios'),
        Actor(actor_id=1, actor_name='Actor One'),
        Actor(actor_id=2, actor_name='Actor Two'),
        Actor(actor_id=3, actor_name='Actor Three'),
    ])
    db.flush()

    films = [
        Film(film_id=1, title='Film A', description='An action drama.', release_year=2020,
             age_rating='PG-13', studio_id=1, view_count=500, ratings={'internal': [4.0]},
             genres=[FilmGenre(genre_id=1), FilmGenre(genre_id=2)],
             cast=[FilmCast(actor_id=1, character_name='Hero', role='lead', screen_time=90)]),
        Film(film_id=2, title='Film B', description='More action.', release_year=2021,
             age_rating='PG-13', studio_id=1, view_count=1500, ratings={'internal': [3.0]},
             genres=[FilmGenre(genre_id=1)],
             cast=[FilmCast(actor_id=2, character_name='Sidekick', role='lead', screen_time=80)]),
        Film(film_id=3, title='Film C', description='An old comedy.', release_year=1990,
             age_rating='R', studio_id=None, view_count=3000, ratings=None,
             genres=[FilmGenre(genre_id=3)],
             cast=[FilmCast(actor_id=3, character_name='Clown', role='lead', screen_time=70)]),
        Film(film_id=4, title='Film D', description='A quiet drama.', release_year=2018,
             age_rating='G', studio_id=1, view_count=200, ratings={'internal': []},
             genres=[FilmGenre(genre_id=2)],
             cast=[FilmCast(actor_id=2, character_name='Father', role='support', screen_time=30)]),
        Film(film_id=5, title='Film E', description='Another comedy.', release_year=2000,
             age_rating='R', studio_id=None, view_count=100, ratings={'internal': [5.0]},
             genres=[FilmGenre(genre_id=3)]),
    ]
    db.add_all(films)

    db.add_all([
        User(user_id=1, username='alice', email='alice@example.com', preferences=[
            UserPreference(genre_id=1, preference_score=0.9),
            UserPreference(actor_id=3, preference_score=0.6),
        ]),
        User(user_id=2, username='bob', email='bob@example.com'),
    ])
    db.flush()

    db.add_all([
        WatchHistory(user_id=1, film_id=1, watch_date=now - timedelta(days=1),
                     watch_duration=120, watch_progress=100),
        WatchHistory(user_id=1, film_id=2, watch_date=now - timedelta(days=2),
                     watch_duration=60, watch_progress=50),
        WatchHistory(user_id=2, film_id=3, watch_date=now - timedelta(days=40),
                     watch_duration=90, watch_progress=100),
    ])
    db.commit()

    return films


@pytest.fixture
def add_watch_history(test_db_session, now):
    """Factory adding watch-history rows for a film."""
    def _add(film_id: int, sessions: int, complete: int = 0, user_id: int = 1,
             days_ago: int = 1, duration: int = 60):
        for i in range(sessions):
            test_db_session.add(WatchHistory(
                user_id=user_id,
                film_id=film_id,
                watch_date=now - timedelta(days=days_ago),
                watch_duration=duration,
                watch_progress=100 if i < complete else 40,
            ))
        test_db_session.commit()
    return _add


# ===== Engine Fixtures =====

@pytest.fixture
def engine(session_factory):
    """Recommendation engine over the test database with a seeded RNG."""
    from skyflix_recommendation_service.services import RecommendationEngine
    return RecommendationEngine(
        session_factory=session_factory,
        rng=np.random.default_rng(42),
        debug=False
    )


# ===== Configuration Fixtures =====

@pytest.fixture
def mock_local_settings(tmp_path):
    """Write a local.settings.json file."""
    settings = {
        "Values": {
            "DATABASE_URL": "sqlite:///:memory:",
            "AZURE_FUNCTIONS_ENVIRONMENT": "Development"
        }
    }

    settings_file = tmp_path / "local.settings.json"
    with open(settings_file, 'w') as f:
        json.dump(settings, f)

    yield settings_file
