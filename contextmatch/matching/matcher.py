"""Match generation for one member against the community.

Applies the candidate filters (self, already matched, missing embedding,
incomplete profile), counts shared communities and ranks the rest with
MatchScorer.
"""

import logging
from dataclasses import dataclass
from typing import Any, Collection, Dict, Iterable, List, Mapping, Optional

from contextmatch import config
from contextmatch.matching.scorer import (
    DimensionMismatchError,
    MatchScore,
    MatchScorer,
    primary_match_reason,
)
from contextmatch.profile.models import ContextWindow

logger = logging.getLogger(__name__)

# Matches generated per request unless the caller asks otherwise
DEFAULT_GENERATE_LIMIT = 5


@dataclass(frozen=True)
class MatchSuggestion:
    """A ranked match with the label of its strongest signal."""
    score: MatchScore
    primary_reason: str

    @property
    def user_id(self) -> str:
        return self.score.user_id

    def to_dict(self) -> Dict[str, Any]:
        result = self.score.to_dict()
        result["primary_reason"] = self.primary_reason
        return result


class CandidateMatcher:
    """Generates match suggestions for a member from a candidate pool."""

    def __init__(self, settings: Optional["config.ScoringSettings"] = None):
        """Initialize the matcher.

        Args:
            settings: Scoring settings (default: built-in weights and threshold)
        """
        if settings is None:
            settings = config.ScoringSettings()
        self.settings = settings
        self.scorer = MatchScorer(
            weights=settings.weights,
            threshold=settings.match_threshold,
        )

    @staticmethod
    def count_shared_communities(
        user_communities: Iterable[str],
        candidate_communities: Iterable[str],
    ) -> int:
        """Count communities both members belong to."""
        return len(set(user_communities) & set(candidate_communities))

    def eligible_candidates(
        self,
        user: ContextWindow,
        candidates: Iterable[ContextWindow],
        exclude_user_ids: Collection[str] = (),
    ) -> List[ContextWindow]:
        """Filter the pool down to candidates worth scoring.

        Args:
            user: Member the matches are for
            candidates: Full candidate pool
            exclude_user_ids: Ids to skip, e.g. members already matched

        Returns:
            Candidates in pool order
        """
        excluded = set(exclude_user_ids)
        excluded.add(user.user_id)

        eligible = []
        for candidate in candidates:
            if candidate.user_id in excluded:
                continue
            if not candidate.has_embedding:
                logger.debug(f"Skipping {candidate.user_id}: no embedding yet")
                continue
            if candidate.completeness() < self.settings.min_completeness:
                logger.debug(
                    f"Skipping {candidate.user_id}: completeness {candidate.completeness():.1f}"
                )
                continue
            eligible.append(candidate)

        return eligible

    def shared_community_counts(
        self,
        user: ContextWindow,
        candidates: Iterable[ContextWindow],
        communities: Mapping[str, Iterable[str]],
    ) -> Dict[str, int]:
        """Map each candidate id to the number of communities shared with user."""
        user_communities = set(communities.get(user.user_id, ()))
        return {
            candidate.user_id: self.count_shared_communities(
                user_communities, communities.get(candidate.user_id, ())
            )
            for candidate in candidates
        }

    def generate(
        self,
        user: ContextWindow,
        candidates: Iterable[ContextWindow],
        communities: Optional[Mapping[str, Iterable[str]]] = None,
        exclude_user_ids: Collection[str] = (),
        limit: int = DEFAULT_GENERATE_LIMIT,
        skip_mismatched: bool = False,
    ) -> List[MatchSuggestion]:
        """Generate ranked match suggestions for a member.

        Args:
            user: Member the matches are for
            candidates: Candidate pool
            communities: User id -> community ids (both user and candidates)
            exclude_user_ids: Ids never to suggest
            limit: Maximum suggestions
            skip_mismatched: Drop candidates whose embedding length differs
                from the user's instead of raising

        Returns:
            MatchSuggestions, highest score first

        Raises:
            ValueError: If the user has no embedding yet, or limit is outside
                1..MAX_MATCH_LIMIT
            DimensionMismatchError: On an embedding length mismatch, unless
                skip_mismatched is set
        """
        if not user.has_embedding:
            raise ValueError(f"Profile embedding not ready yet for {user.user_id}")
        if not 1 <= limit <= config.MAX_MATCH_LIMIT:
            raise ValueError(f"limit must be between 1 and {config.MAX_MATCH_LIMIT}, got {limit}")

        if communities is None:
            communities = {}

        pool = self.eligible_candidates(user, candidates, exclude_user_ids)

        if skip_mismatched:
            dimension = len(user.embedding)
            kept = [c for c in pool if len(c.embedding) == dimension]
            if len(kept) != len(pool):
                logger.warning(
                    f"Skipped {len(pool) - len(kept)} candidates with embedding length != {dimension}"
                )
            pool = kept

        counts = self.shared_community_counts(user, pool, communities)

        try:
            scores = self.scorer.find_top_matches(user, pool, counts, limit)
        except DimensionMismatchError:
            logger.error(f"Embedding length mismatch while matching {user.user_id}")
            raise

        suggestions = [
            MatchSuggestion(score=score, primary_reason=primary_match_reason(score.breakdown))
            for score in scores
        ]

        logger.info(
            f"Generated {len(suggestions)} suggestions for {user.user_id} "
            f"from {len(pool)} eligible candidates"
        )
        return suggestions
