"""
Pairwise compatibility scorer.

Score Formula:
    score = min(max_score, base_score + sum(factor contributions))

Every factor in ``factors.CORE_FACTORS`` and ``factors.ENRICHMENT_FACTORS``
contributes independently. Enrichment factors run through a guard: an
exception is logged as a warning and that factor contributes 0.

The scorer never classifies or otherwise modifies the profiles it reads.
Archetype compatibility is only added when both profiles already carry an
archetype; use ``annotate_with_archetype`` beforehand to assign one.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional, Tuple

from ..archetypes.classifier import ArchetypeCompatibilityConfig
from ..clock import Clock, utc_now
from ..profiles.schema import Profile
from ..quiz.scoring import QuizScoringConfig
from ..reference import ReferenceData, default_reference
from .debate import DebateCompatibility
from .description import DescriptionThresholds, build_clauses, generate_description
from .factors import (
    CORE_FACTORS,
    ENRICHMENT_FACTORS,
    Factor,
    FactorContext,
    FactorResult,
    SharedItem,
)
from .weights import ScoringWeights

logger = logging.getLogger(__name__)

SUB_SCORE_FACTORS = {
    "quiz": "quiz",
    "snack": "snacks",
    "debate": "debate",
    "emotional_tone": "emotional_tone",
}


@dataclass
class PairScore:
    """
    Result of scoring one pair of profiles.

    Attributes:
        score: Final score in [base_score, max_score]
        evidence: Shared content and preferences, in factor order
        sub_scores: Quiz, snack, debate and emotional-tone contributions
        breakdown: Factor name -> contribution, for every evaluated factor
        description: Generated one-line explanation
        debate: Debate comparison details, None if not evaluated
        failed_factors: Enrichment factors that raised and contributed 0
    """
    score: float
    evidence: List[SharedItem] = field(default_factory=list)
    sub_scores: Dict[str, float] = field(default_factory=dict)
    breakdown: Dict[str, float] = field(default_factory=dict)
    description: str = ""
    debate: Optional[DebateCompatibility] = None
    failed_factors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "evidence": [item.to_dict() for item in self.evidence],
            "subScores": dict(self.sub_scores),
            "breakdown": dict(self.breakdown),
            "description": self.description,
            "debate": self.debate.to_dict() if self.debate else None,
            "failedFactors": list(self.failed_factors),
        }


class PairwiseScorer:
    """
    Scores pairs of profiles with fixed, configurable weights.

    Holds no per-pair state, so one instance may score many pairs
    concurrently.

    Attributes:
        weights: Scoring weights
        reference: Reference tables
        quiz_config: Quiz comparator constants
        archetype_config: Archetype compatibility figures
        thresholds: Description clause thresholds
        clock: Time source for activity windows
    """

    def __init__(
        self,
        weights: Optional[ScoringWeights] = None,
        reference: Optional[ReferenceData] = None,
        quiz_config: Optional[QuizScoringConfig] = None,
        archetype_config: Optional[ArchetypeCompatibilityConfig] = None,
        thresholds: Optional[DescriptionThresholds] = None,
        clock: Clock = utc_now
    ):
        self.weights = weights or ScoringWeights()
        self.reference = reference or default_reference()
        self.quiz_config = quiz_config or QuizScoringConfig()
        self.archetype_config = archetype_config or ArchetypeCompatibilityConfig()
        self.thresholds = thresholds or DescriptionThresholds()
        self.clock = clock

        issues = self.weights.validate()
        if issues:
            raise ValueError(f"Invalid scoring weights: {issues}")

    @classmethod
    def from_config(
        cls,
        config: Dict[str, Any],
        reference: Optional[ReferenceData] = None,
        clock: Clock = utc_now
    ) -> "PairwiseScorer":
        """Create from main config dictionary."""
        return cls(
            weights=ScoringWeights.from_config(config),
            reference=reference,
            quiz_config=QuizScoringConfig.from_config(config),
            archetype_config=ArchetypeCompatibilityConfig.from_config(config),
            thresholds=DescriptionThresholds.from_config(config),
            clock=clock,
        )

    def _guarded(
        self,
        name: str,
        factor: Factor,
        a: Profile,
        b: Profile,
        ctx: FactorContext
    ) -> Tuple[FactorResult, bool]:
        try:
            return factor(a, b, ctx), True
        except Exception as e:
            logger.warning(f"Factor {name} failed for ({a.id}, {b.id}), contributing 0: {e!r}")
            return FactorResult(), False

    def score(self, profile_a: Profile, profile_b: Profile) -> PairScore:
        """
        Score a pair of profiles.

        Args:
            profile_a: Requesting profile
            profile_b: Candidate profile

        Returns:
            PairScore with score, evidence, sub-scores, breakdown and description
        """
        ctx = FactorContext(
            weights=self.weights,
            reference=self.reference,
            now=self.clock(),
            quiz_config=self.quiz_config,
            archetype_config=self.archetype_config,
        )

        breakdown: Dict[str, float] = {}
        evidence: List[SharedItem] = []
        failed: List[str] = []

        for name, factor in CORE_FACTORS:
            result = factor(profile_a, profile_b, ctx)
            breakdown[name] = result.points
            evidence.extend(result.shared)

        for name, factor in ENRICHMENT_FACTORS:
            result, ok = self._guarded(name, factor, profile_a, profile_b, ctx)
            if not ok:
                failed.append(name)
            breakdown[name] = result.points
            evidence.extend(result.shared)

        total = self.weights.base_score + sum(breakdown.values())
        score = min(self.weights.max_score, total)

        logger.debug(
            f"Scored ({profile_a.id}, {profile_b.id}) = {score:.1f}; "
            + ", ".join(f"{k}={v:.1f}" for k, v in breakdown.items() if v)
        )

        analytics_a = analytics_b = None
        if "content_type" not in failed and breakdown.get("content_type"):
            analytics_a = ctx.swipe_analytics(profile_a)
            analytics_b = ctx.swipe_analytics(profile_b)

        clauses = build_clauses(
            profile_a,
            profile_b,
            breakdown,
            evidence,
            analytics_a=analytics_a,
            analytics_b=analytics_b,
            thresholds=self.thresholds,
            reference=self.reference,
        )

        return PairScore(
            score=score,
            evidence=evidence,
            sub_scores={key: breakdown.get(factor, 0.0) for key, factor in SUB_SCORE_FACTORS.items()},
            breakdown=breakdown,
            description=generate_description(score, clauses),
            debate=ctx.debate,
            failed_factors=failed,
        )


def score_pair(
    profile_a: Profile,
    profile_b: Profile,
    weights: Optional[ScoringWeights] = None,
    reference: Optional[ReferenceData] = None,
    clock: Clock = utc_now
) -> PairScore:
    """Score a pair with a one-off PairwiseScorer."""
    return PairwiseScorer(weights=weights, reference=reference, clock=clock).score(
        profile_a, profile_b
    )
