"""Scoring formulas for trending content, genre popularity and interactions."""
from typing import Dict, List, Optional

TRENDING_VIEW_WEIGHT = 0.5
TRENDING_COMPLETION_WEIGHT = 50
TRENDING_LIMIT = 20

COMPLETE_PROGRESS = 100
MAX_DERIVED_RATING = 5


def completion_rate(complete_views: int, view_count: int) -> float:
    """
    Fraction of viewing sessions that reached 100% progress.

    Args:
        complete_views: Sessions with progress == 100
        view_count: Total sessions

    Returns:
        Completion rate in [0, 1] (0 when there are no sessions)
    """
    if view_count <= 0:
        return 0.0
    return complete_views / view_count


def trending_score(view_count: int, rate: float) -> float:
    """Composite trending score: views x 0.5 + completion rate x 50."""
    return view_count * TRENDING_VIEW_WEIGHT + rate * TRENDING_COMPLETION_WEIGHT


def derived_rating(watch_progress: float) -> float:
    """Implicit 0-5 rating derived from how much of a film was watched."""
    if watch_progress == COMPLETE_PROGRESS:
        return float(MAX_DERIVED_RATING)
    return MAX_DERIVED_RATING * (watch_progress / 100)


def genre_popularity_score(total_views: int, film_count: int) -> float:
    """Average views per film in a genre."""
    if film_count <= 0:
        return 0.0
    return total_views / film_count


def internal_rating(ratings: Optional[Dict]) -> float:
    """First internal rating of a film, or 0 when it has none."""
    if not ratings:
        return 0.0
    internal = ratings.get('internal')
    if isinstance(internal, list):
        if not internal or internal[0] is None:
            return 0.0
        return float(internal[0])
    if internal is None:
        return 0.0
    return float(internal)


def rank_trending(aggregates: List[Dict], limit: int = TRENDING_LIMIT) -> List[Dict]:
    """
    Score per-film watch aggregates and keep the top entries.

    Ties on score are broken by view count (descending), then film ID.

    Args:
        aggregates: Dicts with film_id, title, description, view_count,
            average_watch_duration and complete_views
        limit: Number of entries to keep

    Returns:
        Scored dicts sorted by score, at most ``limit`` long
    """
    scored = []
    for item in aggregates:
        rate = completion_rate(item['complete_views'], item['view_count'])
        scored.append({
            'film_id': item['film_id'],
            'title': item['title'],
            'description': item['description'],
            'view_count': item['view_count'],
            'average_watch_duration': item['average_watch_duration'],
            'completion_rate': rate,
            'score': trending_score(item['view_count'], rate),
        })

    scored.sort(key=lambda e: (-e['score'], -e['view_count'], e['film_id']))
    return scored[:limit]
