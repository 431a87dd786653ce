"""Match score calculation between two member context windows.

Combines five signals into one weighted score:
- semantic_similarity * 0.40 (cosine of embeddings)
- skills_complement * 0.20 (skills vs seeking text, skill overlap)
- seeking_alignment * 0.15 (Jaccard of open_to tags)
- spatial_proximity * 0.15 (same location, overlapping travel)
- graph_signals * 0.10 (shared communities)
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from contextmatch.processing.normalizer import TextNormalizer
from contextmatch.profile.models import ContextWindow

logger = logging.getLogger(__name__)

# Weights for each signal (must sum to 1.0). Order is the tie-break order
# for the primary match reason.
SIGNAL_WEIGHTS: Dict[str, float] = {
    "semantic_similarity": 0.40,
    "skills_complement": 0.20,
    "seeking_alignment": 0.15,
    "spatial_proximity": 0.15,
    "graph_signals": 0.10,
}

SIGNAL_REASONS: Dict[str, str] = {
    "semantic_similarity": "similar context",
    "skills_complement": "complementary skills",
    "seeking_alignment": "aligned goals",
    "spatial_proximity": "nearby location",
    "graph_signals": "shared communities",
}

# Minimum total score for a candidate to count as a match
MATCH_THRESHOLD = 0.5


class DimensionMismatchError(ValueError):
    """Raised when two embeddings have different lengths."""

    def __init__(self, len_a: int, len_b: int):
        super().__init__(f"Vectors must have the same length ({len_a} != {len_b})")
        self.len_a = len_a
        self.len_b = len_b


def cosine_similarity(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """Cosine similarity between two vectors.

    Returns:
        Value in [-1, 1]; 0.0 when either vector has zero magnitude.

    Raises:
        DimensionMismatchError: If the vectors differ in length.
    """
    if len(vec_a) != len(vec_b):
        raise DimensionMismatchError(len(vec_a), len(vec_b))

    dot = sum(a * b for a, b in zip(vec_a, vec_b))
    norm_a = math.sqrt(sum(a * a for a in vec_a))
    norm_b = math.sqrt(sum(b * b for b in vec_b))

    denominator = norm_a * norm_b
    if denominator == 0:
        return 0.0
    return dot / denominator


@dataclass(frozen=True)
class MatchBreakdown:
    """Per-signal sub-scores, each 0.0-1.0."""
    semantic_similarity: float
    skills_complement: float
    seeking_alignment: float
    spatial_proximity: float
    graph_signals: float

    def as_dict(self) -> Dict[str, float]:
        """Sub-scores keyed by signal name, in weight-table order."""
        return {name: getattr(self, name) for name in SIGNAL_WEIGHTS}


@dataclass(frozen=True)
class MatchScore:
    """Score for one candidate with breakdown."""
    user_id: str                 # Candidate's id
    total_score: float           # Weighted sum (0.0-1.0)
    breakdown: MatchBreakdown

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "total_score": round(self.total_score, 3),
            "breakdown": {
                name: round(value, 3) for name, value in self.breakdown.as_dict().items()
            },
        }

    @property
    def total_percentage(self) -> int:
        """Return total as percentage (0-100)."""
        return int(round(self.total_score * 100))


def primary_match_reason(breakdown: MatchBreakdown) -> str:
    """Pick the label of the strongest signal in a breakdown.

    Ties go to the signal listed first in SIGNAL_WEIGHTS.
    """
    scores = breakdown.as_dict()
    # max() keeps the first of equal values
    top = max(scores, key=lambda name: scores[name])
    return SIGNAL_REASONS[top]


class MatchScorer:
    """Calculates match scores between context windows."""

    # Skill overlap ratio inside this open range gets a 0.5 boost
    OVERLAP_SWEET_SPOT = (0.1, 0.6)
    OVERLAP_BOOST = 0.5

    # Spatial contributions
    LOCATION_EXACT = 1.0
    LOCATION_CONTAINS = 0.7
    LOCATION_SHARED_TOKEN = 0.5
    MIN_LOCATION_TOKEN_LENGTH = 3
    TRAVEL_OVERLAP = 0.5

    # Neutral score when either side has no open_to preferences
    NEUTRAL_ALIGNMENT = 0.5

    # Graph signal curve: base + slope * log2(count + 1)
    GRAPH_BASE = 0.3
    GRAPH_SLOPE = 0.2

    def __init__(
        self,
        weights: Optional[Mapping[str, float]] = None,
        threshold: float = MATCH_THRESHOLD,
    ):
        """Initialize the scorer.

        Args:
            weights: Signal weights (default: SIGNAL_WEIGHTS)
            threshold: Minimum total score kept by find_top_matches
        """
        self.weights = dict(weights) if weights is not None else dict(SIGNAL_WEIGHTS)
        self.threshold = threshold
        self.normalizer = TextNormalizer()

    def calculate_match_score(
        self,
        user: ContextWindow,
        candidate: ContextWindow,
        shared_communities: int = 0,
    ) -> MatchScore:
        """Calculate the match score between two members.

        Args:
            user: Member the matches are for
            candidate: The other side of the pair
            shared_communities: Number of communities both belong to

        Returns:
            MatchScore for the candidate

        Raises:
            DimensionMismatchError: If the embeddings differ in length
        """
        breakdown = MatchBreakdown(
            semantic_similarity=self.calculate_semantic_similarity(user, candidate),
            skills_complement=self.calculate_skills_complement(user, candidate),
            seeking_alignment=self.calculate_seeking_alignment(user, candidate),
            spatial_proximity=self.calculate_spatial_proximity(user, candidate),
            graph_signals=self.calculate_graph_signals(shared_communities),
        )

        total = sum(
            value * self.weights[name] for name, value in breakdown.as_dict().items()
        )

        return MatchScore(
            user_id=candidate.user_id,
            total_score=total,
            breakdown=breakdown,
        )

    def calculate_semantic_similarity(
        self, user: ContextWindow, candidate: ContextWindow
    ) -> float:
        """Cosine similarity of embeddings rescaled from [-1, 1] to [0, 1].

        No embedding on either side means no similarity can be claimed.
        """
        if not user.embedding or not candidate.embedding:
            return 0.0

        similarity = cosine_similarity(user.embedding, candidate.embedding)
        return (similarity + 1) / 2

    def calculate_skills_complement(
        self, user: ContextWindow, candidate: ContextWindow
    ) -> float:
        """Average of the skill checks that apply to this pair.

        Checks:
        1. user's skills mentioned in candidate's seeking text
        2. candidate's skills mentioned in user's seeking text
        3. overlap between the two skill sets

        Returns:
            Score from 0 to 1 (0 if no check applied)
        """
        scores: List[float] = []

        if candidate.seeking and user.skills:
            found = self.normalizer.count_mentions(user.skills, candidate.seeking)
            scores.append(found / len(user.skills))

        if user.seeking and candidate.skills:
            found = self.normalizer.count_mentions(candidate.skills, user.seeking)
            scores.append(found / len(candidate.skills))

        if user.skills and candidate.skills:
            scores.append(self._skill_overlap_score(user.skills, candidate.skills))

        if not scores:
            return 0.0
        return min(sum(scores) / len(scores), 1.0)

    def _skill_overlap_score(self, skills_a: List[str], skills_b: List[str]) -> float:
        """Overlap ratio with a boost for partial overlap.

        Some shared skills make collaboration easy; near-identical skill
        sets make the pairing redundant.
        """
        set_a = self.normalizer.skill_set(skills_a)
        set_b = self.normalizer.skill_set(skills_b)
        largest = max(len(set_a), len(set_b))
        if largest == 0:
            return 0.0

        ratio = len(set_a & set_b) / largest
        low, high = self.OVERLAP_SWEET_SPOT
        if low < ratio < high:
            return self.OVERLAP_BOOST + ratio
        return ratio

    def calculate_seeking_alignment(
        self, user: ContextWindow, candidate: ContextWindow
    ) -> float:
        """Jaccard similarity of open_to preferences.

        Unknown preferences should not penalize, so an empty set on either
        side gives a neutral score.
        """
        if not user.open_to or not candidate.open_to:
            return self.NEUTRAL_ALIGNMENT

        shared = user.open_to & candidate.open_to
        union = user.open_to | candidate.open_to
        return len(shared) / len(union)

    def calculate_spatial_proximity(
        self, user: ContextWindow, candidate: ContextWindow
    ) -> float:
        """Score current location match plus overlapping travel.

        Contributions accumulate and the result is capped at 1.
        """
        score = 0.0

        if user.current_location and candidate.current_location:
            score += self._location_score(user.current_location, candidate.current_location)

        if user.upcoming_travel and candidate.upcoming_travel:
            if self._travel_overlaps(user.upcoming_travel, candidate.upcoming_travel):
                score += self.TRAVEL_OVERLAP

        return min(score, 1.0)

    def _location_score(self, location_a: str, location_b: str) -> float:
        loc_a = self.normalizer.fold(location_a)
        loc_b = self.normalizer.fold(location_b)

        if loc_a == loc_b:
            return self.LOCATION_EXACT
        if self.normalizer.contains_either(loc_a, loc_b):
            return self.LOCATION_CONTAINS

        tokens_b = set(self.normalizer.tokenize_location(loc_b))
        for token in self.normalizer.tokenize_location(loc_a):
            if len(token) >= self.MIN_LOCATION_TOKEN_LENGTH and token in tokens_b:
                return self.LOCATION_SHARED_TOKEN
        return 0.0

    def _travel_overlaps(self, travel_a: List[str], travel_b: List[str]) -> bool:
        """Check if any pair of travel entries refers to the same trip.

        Blank entries never match.
        """
        folded_b = [t for t in self.normalizer.fold_all(travel_b) if t.strip()]
        for t1 in self.normalizer.fold_all(travel_a):
            if not t1.strip():
                continue
            for t2 in folded_b:
                if self.normalizer.contains_either(t1, t2):
                    return True
        return False

    def calculate_graph_signals(self, shared_communities: int) -> float:
        """Log-scaled score for shared communities.

        1 shared community = 0.5, 3 = 0.7, 11 or more = 1.0.
        """
        if shared_communities <= 0:
            return 0.0
        return min(self.GRAPH_BASE + self.GRAPH_SLOPE * math.log2(shared_communities + 1), 1.0)

    def find_top_matches(
        self,
        user: ContextWindow,
        candidates: List[ContextWindow],
        shared_communities: Optional[Mapping[str, int]] = None,
        limit: int = 10,
    ) -> List[MatchScore]:
        """Score a candidate pool and keep the best matches.

        Args:
            user: Member the matches are for
            candidates: Candidate pool (may include the user)
            shared_communities: Candidate id -> shared community count
            limit: Maximum number of matches to return

        Returns:
            MatchScores at or above the threshold, highest first. Equal
            scores keep their order from the candidate pool.

        Raises:
            ValueError: If limit is below 1
            DimensionMismatchError: If any candidate's embedding length
                differs from the user's
        """
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")
        if shared_communities is None:
            shared_communities = {}

        scores = []
        for candidate in candidates:
            if candidate.user_id == user.user_id:
                continue
            score = self.calculate_match_score(
                user,
                candidate,
                shared_communities.get(candidate.user_id, 0),
            )
            if score.total_score >= self.threshold:
                scores.append(score)
            else:
                logger.debug(
                    f"Dropped {candidate.user_id}: {score.total_score:.3f} below {self.threshold}"
                )

        # sorted() is stable, so ties keep pool order
        ranked = sorted(scores, key=lambda s: s.total_score, reverse=True)[:limit]

        logger.info(
            f"Scored {len(candidates)} candidates for {user.user_id}, "
            f"{len(scores)} above threshold, returning {len(ranked)}"
        )
        return ranked


_default_scorer = MatchScorer()


def calculate_match_score(
    user: ContextWindow,
    candidate: ContextWindow,
    shared_communities: int = 0,
) -> MatchScore:
    """Score a pair with the default weights."""
    return _default_scorer.calculate_match_score(user, candidate, shared_communities)


def calculate_graph_signals(shared_communities: int) -> float:
    """Graph signal for a shared community count."""
    return _default_scorer.calculate_graph_signals(shared_communities)


def find_top_matches(
    user: ContextWindow,
    candidates: List[ContextWindow],
    shared_communities: Optional[Mapping[str, int]] = None,
    limit: int = 10,
) -> List[MatchScore]:
    """Select top matches with the default weights and threshold."""
    return _default_scorer.find_top_matches(user, candidates, shared_communities, limit)
