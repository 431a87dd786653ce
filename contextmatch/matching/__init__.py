"""Matching module for match scoring and suggestion generation."""

from contextmatch.matching.scorer import (
    MATCH_THRESHOLD,
    SIGNAL_REASONS,
    SIGNAL_WEIGHTS,
    DimensionMismatchError,
    MatchBreakdown,
    MatchScore,
    MatchScorer,
    calculate_graph_signals,
    calculate_match_score,
    cosine_similarity,
    find_top_matches,
    primary_match_reason,
)
from contextmatch.matching.matcher import CandidateMatcher, MatchSuggestion

__all__ = [
    "MATCH_THRESHOLD",
    "SIGNAL_REASONS",
    "SIGNAL_WEIGHTS",
    "DimensionMismatchError",
    "MatchBreakdown",
    "MatchScore",
    "MatchScorer",
    "calculate_graph_signals",
    "calculate_match_score",
    "cosine_similarity",
    "find_top_matches",
    "primary_match_reason",
    "CandidateMatcher",
    "MatchSuggestion",
]
