"""Score catalog films by similarity to a source film."""
import logging
from typing import Dict, List, Sequence

import numpy as np
from sklearn.preprocessing import MultiLabelBinarizer  # type: ignore

logger = logging.getLogger(__name__)

REASON_GENRES = "Similar genres"
REASON_AGE_RATING = "Same age rating"
REASON_PERIOD = "Released in similar period"


class SimilarityScorer:
    """
    Weighted similarity between a source film and a set of candidates.

    score = genre_weight x |shared genres|
            + (year_weight - |year difference| / year_decay)
            + age_rating_bonus if the age ratings match
            + min(view_count / view_divisor, max_view_bonus)
    """

    def __init__(
        self,
        genre_weight: float = 5.0,
        year_weight: float = 3.0,
        year_decay: float = 2.0,
        age_rating_bonus: float = 2.0,
        view_divisor: float = 1000.0,
        max_view_bonus: float = 2.0,
        year_window: int = 5
    ):
        """
        Initialize similarity scorer.

        Args:
            genre_weight: Points per shared genre
            year_weight: Points for an identical release year
            year_decay: Year difference that costs one point
            age_rating_bonus: Points for a matching age rating
            view_divisor: Views worth one point of popularity
            max_view_bonus: Cap on popularity points
            year_window: Year difference still described as a similar period
        """
        self.genre_weight = genre_weight
        self.year_weight = year_weight
        self.year_decay = year_decay
        self.age_rating_bonus = age_rating_bonus
        self.view_divisor = view_divisor
        self.max_view_bonus = max_view_bonus
        self.year_window = year_window

    def compute_genre_overlap(
        self,
        source_genres: Sequence[int],
        candidate_genres: Sequence[Sequence[int]]
    ) -> np.ndarray:
        """
        Count genres each candidate shares with the source.

        Args:
            source_genres: Genre IDs of the source film
            candidate_genres: Genre ID lists, one per candidate

        Returns:
            Array of shared-genre counts (n_candidates,)
        """
        encoder = MultiLabelBinarizer()
        matrix = encoder.fit_transform([list(g) for g in candidate_genres] + [list(source_genres)])
        return matrix[:-1] @ matrix[-1]

    def compute_scores(self, source: Dict, candidates: List[Dict]) -> Dict[str, np.ndarray]:
        """
        Compute every similarity component for all candidates.

        Args:
            source: Dict with genre_ids, release_year, age_rating
            candidates: Dicts with genre_ids, release_year, age_rating, view_count

        Returns:
            Dict of component arrays plus the combined 'score'
        """
        genre_overlap = self.compute_genre_overlap(
            source['genre_ids'],
            [c['genre_ids'] for c in candidates]
        )

        years = np.array([c['release_year'] for c in candidates], dtype=float)
        year_diff = np.abs(years - source['release_year'])
        year_score = self.year_weight - year_diff / self.year_decay

        same_rating = np.array([
            source['age_rating'] is not None and c['age_rating'] == source['age_rating']
            for c in candidates
        ], dtype=bool)
        rating_score = np.where(same_rating, self.age_rating_bonus, 0.0)

        views = np.array([c['view_count'] or 0 for c in candidates], dtype=float)
        view_score = np.minimum(views / self.view_divisor, self.max_view_bonus)

        score = self.genre_weight * genre_overlap + year_score + rating_score + view_score

        return {
            'genre_overlap': genre_overlap,
            'year_diff': year_diff,
            'same_rating': same_rating,
            'views': views,
            'score': score,
        }

    def explain(self, genre_overlap: int, same_rating: bool, year_diff: float) -> str:
        """Human-readable reasons a candidate matched."""
        reasons = []
        if genre_overlap > 0:
            reasons.append(REASON_GENRES)
        if same_rating:
            reasons.append(REASON_AGE_RATING)
        if year_diff <= self.year_window:
            reasons.append(REASON_PERIOD)
        return ", ".join(reasons)

    def rank(self, source: Dict, candidates: List[Dict], n: int = 5) -> List[Dict]:
        """
        Rank candidates by similarity to the source.

        Candidates scoring <= 0 are dropped. Ordering is by score, then view
        count, both descending; remaining ties keep candidate order.

        Args:
            source: Source film attributes
            candidates: Candidate film attributes
            n: Number of results

        Returns:
            List of dicts with the candidate 'index', 'similarity_score'
            and 'similarity_reasons'
        """
        if not candidates:
            return []

        components = self.compute_scores(source, candidates)
        scores = components['score']

        order = np.lexsort((-components['views'], -scores))

        ranked: List[Dict] = []
        for idx in order:
            if scores[idx] <= 0:
                continue
            ranked.append({
                'index': int(idx),
                'similarity_score': float(scores[idx]),
                'similarity_reasons': self.explain(
                    int(components['genre_overlap'][idx]),
                    bool(components['same_rating'][idx]),
                    float(components['year_diff'][idx]),
                ),
            })
            if len(ranked) >= n:
                break

        logger.debug(f"Ranked {len(ranked)} of {len(candidates)} candidates")
        return ranked
