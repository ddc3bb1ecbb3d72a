"""Service classes"""

from .recommendation_engine import (
    GenreStats,
    InitializationState,
    RecommendationEngine,
    TrendingCacheEntry,
    TrendingSnapshot,
    UserInteraction,
)

__all__ = [
    "GenreStats",
    "InitializationState",
    "RecommendationEngine",
    "TrendingCacheEntry",
    "TrendingSnapshot",
    "UserInteraction",
]
