"""Candidate ranking into immutable Match records."""

from .ranker import Match, rank_matches, matches_to_frame

__all__ = ["Match", "rank_matches", "matches_to_frame"]
