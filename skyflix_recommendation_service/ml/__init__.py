"""Scoring for trending, genre and similarity recommendations"""

from skyflix_recommendation_service.ml.similarity_scorer import SimilarityScorer

__all__ = ["SimilarityScorer"]
