"""
Build the recommendation read-models once and report on them.

Usage:
    python scripts/refresh_recommendations.py
    python scripts/refresh_recommendations.py --show-trending --show-genres
"""

import sys
from pathlib import Path

# Add parent directory to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

import logging
import argparse

from skyflix_recommendation_service.services import RecommendationEngine

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def report(engine: RecommendationEngine, show_trending: bool = False, show_genres: bool = False) -> dict:
    """
    Log engine statistics and, optionally, the trending list and genre stats.

    Args:
        engine: Initialized recommendation engine
        show_trending: Log each trending entry
        show_genres: Log each genre's popularity

    Returns:
        Engine statistics
    """
    stats = engine.get_stats()

    logger.info("="*70)
    logger.info("RECOMMENDATION STATS")
    logger.info("="*70)
    logger.info(f"State: {stats['state']}")
    logger.info(f"Trending entries: {stats['trending']['count']}")
    logger.info(f"Last updated: {stats['trending']['last_updated']}")
    logger.info(f"Genres: {stats['genres']}")
    logger.info(f"Users with interactions: {stats['users_with_interactions']}")

    if show_trending:
        logger.info("\nTrending:")
        for rank, entry in enumerate(engine.trending.entries, start=1):
            logger.info(
                f"  {rank:2d}. {entry.title} (score: {entry.score:.2f}, "
                f"views: {entry.view_count}, completion: {entry.completion_rate:.0%})"
            )

    if show_genres:
        logger.info("\nGenres:")
        for genre in engine.get_genre_stats():
            logger.info(
                f"  {genre['genre_name']}: {genre['film_count']} films, "
                f"popularity {genre['popularity_score']:.1f}"
            )

    return stats


def main():
    """Main execution function."""
    parser = argparse.ArgumentParser(
        description='Build recommendation read-models and report on them'
    )
    parser.add_argument(
        '--show-trending',
        action='store_true',
        help='Print the trending list'
    )
    parser.add_argument(
        '--show-genres',
        action='store_true',
        help='Print genre popularity'
    )

    args = parser.parse_args()

    try:
        engine = RecommendationEngine()
        engine.initialize_recommendations()
        report(engine, show_trending=args.show_trending, show_genres=args.show_genres)

    except Exception as e:
        logger.error(f"Error refreshing recommendations: {str(e)}", exc_info=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
