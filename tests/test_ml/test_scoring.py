"""Unit tests for skyflix_recommendation_service.ml.scoring."""
import pytest

from skyflix_recommendation_service.ml.scoring import (
    completion_rate,
    derived_rating,
    genre_popularity_score,
    internal_rating,
    rank_trending,
    trending_score,
)


def _aggregate(film_id, view_count, complete_views, duration=60.0):
    return {
        'film_id': film_id,
        'title': f'Film {film_id}',
        'description': None,
        'view_count': view_count,
        'average_watch_duration': duration,
        'complete_views': complete_views,
    }


class TestCompletionRate:
    """Tests for completion_rate function."""

    def test_completion_rate(self):
        """Test completion rate over sessions."""
        assert completion_rate(4, 10) == pytest.approx(0.4)
        assert completion_rate(0, 3) == 0.0
        assert completion_rate(2, 2) == 1.0

    def test_completion_rate_without_sessions(self):
        """Test no sessions gives a zero rate."""
        assert completion_rate(0, 0) == 0.0


class TestTrendingScore:
    """Tests for trending_score function."""

    def test_trending_score(self):
        """Test views x 0.5 plus completion x 50."""
        # 10 sessions, 4 complete
        assert trending_score(10, completion_rate(4, 10)) == pytest.approx(25.0)
        assert trending_score(1, 1.0) == pytest.approx(50.5)
        assert trending_score(0, 0.0) == 0.0


class TestDerivedRating:
    """Tests for derived_rating function."""

    @pytest.mark.parametrize("progress,expected", [
        (100, 5.0),
        (50, 2.5),
        (0, 0.0),
        (20, 1.0),
    ])
    def test_derived_rating(self, progress, expected):
        """Test rating derived from watch progress."""
        assert derived_rating(progress) == pytest.approx(expected)


class TestGenrePopularityScore:
    """Tests for genre_popularity_score function."""

    def test_average_views_per_film(self):
        """Test popularity is average views per film."""
        assert genre_popularity_score(2000, 2) == 1000.0

    def test_no_films(self):
        """Test genres without films score zero."""
        assert genre_popularity_score(0, 0) == 0.0


class TestInternalRating:
    """Tests for internal_rating function."""

    @pytest.mark.parametrize("ratings,expected", [
        ({'internal': [4.0, 2.0]}, 4.0),
        ({'internal': []}, 0.0),
        ({'internal': [None]}, 0.0),
        ({'internal': 3.5}, 3.5),
        ({'internal': None}, 0.0),
        ({'imdb': 8.1}, 0.0),
        ({}, 0.0),
        (None, 0.0),
    ])
    def test_internal_rating(self, ratings, expected):
        """Test first internal rating, or 0 when absent."""
        assert internal_rating(ratings) == expected


class TestRankTrending:
    """Tests for rank_trending function."""

    def test_rank_trending_orders_by_score(self):
        """Test entries are ordered by descending score."""
        # Arrange
        aggregates = [
            _aggregate(1, view_count=1, complete_views=0),
            _aggregate(2, view_count=10, complete_views=4),
            _aggregate(3, view_count=1, complete_views=1),
        ]

        # Act
        ranked = rank_trending(aggregates)

        # Assert
        assert [e['film_id'] for e in ranked] == [3, 2, 1]
        assert ranked[0]['score'] == pytest.approx(50.5)
        assert ranked[1]['score'] == pytest.approx(25.0)
        assert ranked[1]['completion_rate'] == pytest.approx(0.4)
        assert 'complete_views' not in ranked[0]

    def test_rank_trending_breaks_ties(self):
        """Test ties are broken by view count, then film ID."""
        # Arrange: films 9 and 4 tie on score and views
        aggregates = [
            _aggregate(9, view_count=10, complete_views=0),
            _aggregate(4, view_count=10, complete_views=0),
            _aggregate(7, view_count=1, complete_views=1),
        ]

        # Act
        ranked = rank_trending(aggregates)

        # Assert
        assert [e['film_id'] for e in ranked] == [7, 4, 9]

    def test_rank_trending_limit(self):
        """Test at most 20 entries are kept by default."""
        # Arrange
        aggregates = [_aggregate(i, view_count=i, complete_views=0) for i in range(1, 26)]

        # Act
        ranked = rank_trending(aggregates)

        # Assert
        assert len(ranked) == 20
        assert ranked[0]['film_id'] == 25
        assert ranked[-1]['film_id'] == 6
        assert len(rank_trending(aggregates, limit=3)) == 3

    def test_rank_trending_empty(self):
        """Test empty aggregates."""
        assert rank_trending([]) == []
