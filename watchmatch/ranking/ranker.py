"""
Match ranking over a candidate pool.

For each candidate (excluding the requester): filter, score, apply the
minimum-score thresholds, then sort by score descending and keep the top N.
The sort is stable, so candidates with equal scores keep their pool order.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Any, List, Optional, Sequence

import pandas as pd

from ..clock import Clock, utc_now, isoformat
from ..filtering.filters import (
    MatchFilters,
    check_filters,
    effective_filters,
    validate_filters,
)
from ..ids import IdGenerator, uuid_id_generator
from ..profiles.schema import Profile
from ..scoring.factors import SharedItem
from ..scoring.scorer import PairwiseScorer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Match:
    """
    An immutable scored match.

    Attributes:
        id: Generated match id
        user1_id: Requesting user
        user2_id: Candidate user
        match_score: Score clamped to [0, 100]
        shared_content: Evidence both users have in common
        description: Generated explanation
        quiz_compatibility: Quiz factor contribution
        snack_compatibility: Snack factor contribution
        debate_compatibility: Debate factor contribution
        emotional_tone_compatibility: Emotional-tone factor contribution
        created_at: Creation timestamp
    """
    id: str
    user1_id: str
    user2_id: str
    match_score: float
    shared_content: List[SharedItem] = field(default_factory=list)
    description: str = ""
    quiz_compatibility: float = 0.0
    snack_compatibility: float = 0.0
    debate_compatibility: float = 0.0
    emotional_tone_compatibility: float = 0.0
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user1Id": self.user1_id,
            "user2Id": self.user2_id,
            "matchScore": self.match_score,
            "sharedContent": [item.to_dict() for item in self.shared_content],
            "matchDescription": self.description,
            "quizCompatibility": self.quiz_compatibility,
            "snackCompatibility": self.snack_compatibility,
            "debateCompatibility": self.debate_compatibility,
            "emotionalToneCompatibility": self.emotional_tone_compatibility,
            "createdAt": isoformat(self.created_at),
        }


def rank_matches(
    requester: Profile,
    pool: Sequence[Profile],
    limit: int = 10,
    filters: Optional[MatchFilters] = None,
    scorer: Optional[PairwiseScorer] = None,
    id_generator: Optional[IdGenerator] = None,
    clock: Clock = utc_now
) -> List[Match]:
    """
    Rank candidates for a requester.

    Args:
        requester: Profile matches are computed for
        pool: Candidate profiles in pool order
        limit: Maximum matches returned
        filters: Explicit filters; unset fields fall back to the requester's preferences
        scorer: Pairwise scorer (default: default weights)
        id_generator: Match id source (default: uuid-based)
        clock: Source of ``created_at``

    Returns:
        Matches sorted by score descending

    Raises:
        FilterValidationError: If the merged filters are malformed
    """
    merged = effective_filters(requester, filters)
    validate_filters(merged)

    scorer = scorer or PairwiseScorer()
    id_generator = id_generator or uuid_id_generator("match")

    rows = []
    rejected: Dict[str, int] = {}
    for position, candidate in enumerate(pool):
        if candidate.id == requester.id:
            continue

        failed_gate = check_filters(requester, candidate, merged)
        if failed_gate is not None:
            rejected[failed_gate] = rejected.get(failed_gate, 0) + 1
            continue

        result = scorer.score(requester, candidate)
        if result.score < merged.min_match_score:
            rejected["min_score"] = rejected.get("min_score", 0) + 1
            continue
        if requester.is_premium and result.score < merged.premium.min_score:
            rejected["premium_min_score"] = rejected.get("premium_min_score", 0) + 1
            continue

        rows.append({"position": position, "score": result.score, "result": result, "candidate": candidate})

    if not rows:
        logger.info(f"No matches for {requester.id} from {len(pool)} candidates (rejected: {rejected})")
        return []

    df = pd.DataFrame(rows)
    df = df.sort_values("score", ascending=False, kind="mergesort").head(limit)

    created_at = clock()
    matches = []
    for row in df.itertuples(index=False):
        result = row.result
        matches.append(Match(
            id=id_generator(),
            user1_id=requester.id,
            user2_id=row.candidate.id,
            match_score=result.score,
            shared_content=list(result.evidence),
            description=result.description,
            quiz_compatibility=result.sub_scores["quiz"],
            snack_compatibility=result.sub_scores["snack"],
            debate_compatibility=result.sub_scores["debate"],
            emotional_tone_compatibility=result.sub_scores["emotional_tone"],
            created_at=created_at,
        ))

    logger.info(
        f"Ranked {len(rows)} of {len(pool)} candidates for {requester.id}, "
        f"returning {len(matches)} (rejected: {rejected})"
    )
    return matches


def matches_to_frame(matches: Sequence[Match]) -> pd.DataFrame:
    """Tabulate matches for display or export."""
    return pd.DataFrame(
        [
            {
                "match_id": m.id,
                "user_id": m.user2_id,
                "score": m.match_score,
                "shared_items": len(m.shared_content),
                "description": m.description,
            }
            for m in matches
        ],
        columns=["match_id", "user_id", "score", "shared_items", "description"],
    )
