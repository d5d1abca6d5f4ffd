"""
Compatibility engine facade.

Bundles the configured components behind the operations collaborators call:

- score_pair(profile_a, profile_b)
- rank_matches(profile, pool, limit, filters)
- process_quiz_completion(user_id, answers)
- classify_archetype(profile)
- generate_pair_report(profile_a, profile_b)
- generate_group_report(profiles)

Every operation is a pure function of its inputs, the configuration and the
reference tables. Nothing is persisted.
"""

import logging
from typing import Dict, Any, Iterable, List, Optional, Sequence, Union

from .archetypes.classifier import (
    ArchetypeCompatibilityConfig,
    ArchetypeResult,
    annotate_with_archetype,
    archetype_compatibility,
    classify_archetype,
)
from .clock import Clock, utc_now
from .configs.loader import load_config, validate_config
from .filtering.filters import MatchFilters
from .ids import IdGenerator, uuid_id_generator
from .profiles.schema import Profile
from .quiz.attempt import QuizAttempt
from .quiz.scoring import QuizScoringConfig, process_quiz_completion
from .ranking.ranker import Match, rank_matches
from .reference import ReferenceData, load_reference_data, default_reference
from .reports.group_report import GroupCompatibilityReport, GroupReportError, generate_group_report
from .reports.pair_report import CompatibilityReport, generate_pair_report
from .scoring.scorer import PairScore, PairwiseScorer

logger = logging.getLogger(__name__)


class CompatibilityEngine:
    """
    Matching core configured from one config dictionary.

    Attributes:
        config: Configuration dictionary
        reference: Reference tables
        scorer: Pairwise scorer
        quiz_config: Quiz scoring constants
        archetype_config: Archetype compatibility figures
    """

    def __init__(
        self,
        config: Dict[str, Any],
        reference: Optional[ReferenceData] = None,
        match_id_generator: Optional[IdGenerator] = None,
        quiz_id_generator: Optional[IdGenerator] = None,
        clock: Clock = utc_now
    ):
        """
        Initialize the engine.

        Args:
            config: Configuration dictionary (see configs/default.yaml)
            reference: Reference tables (default: packaged tables)
            match_id_generator: Id source for Match records
            quiz_id_generator: Id source for QuizAttempt records
            clock: Time source for timestamps and activity windows

        Raises:
            ValueError: If the configuration is invalid
        """
        issues = validate_config(config)
        if issues:
            raise ValueError(f"Invalid configuration: {issues}")

        self.config = config
        self.reference = reference or default_reference()
        self.clock = clock
        self.match_id_generator = match_id_generator or uuid_id_generator("match")
        self.quiz_id_generator = quiz_id_generator or uuid_id_generator("quiz")
        self.quiz_config = QuizScoringConfig.from_config(config)
        self.archetype_config = ArchetypeCompatibilityConfig.from_config(config)
        self.scorer = PairwiseScorer.from_config(config, reference=self.reference, clock=clock)
        logger.info(
            f"Initialized CompatibilityEngine (base score {self.scorer.weights.base_score}, "
            f"{len(self.reference.viewing_archetypes)} viewing archetypes)"
        )

    def load_profile(self, record: Dict[str, Any]) -> Profile:
        """Normalize a raw profile record."""
        return Profile.from_dict(record, self.reference)

    def score_pair(self, profile_a: Profile, profile_b: Profile) -> PairScore:
        return self.scorer.score(profile_a, profile_b)

    def rank_matches(
        self,
        profile: Profile,
        pool: Sequence[Profile],
        limit: int = 10,
        filters: Optional[Union[MatchFilters, Dict[str, Any]]] = None
    ) -> List[Match]:
        """
        Rank candidates for a profile.

        Raises:
            FilterValidationError: If the filters are malformed
        """
        if isinstance(filters, dict):
            filters = MatchFilters.from_dict(filters)
        return rank_matches(
            profile,
            pool,
            limit=limit,
            filters=filters,
            scorer=self.scorer,
            id_generator=self.match_id_generator,
            clock=self.clock,
        )

    def process_quiz_completion(self, user_id: str, answers: Iterable[Dict[str, Any]]) -> QuizAttempt:
        return process_quiz_completion(
            user_id,
            answers,
            reference=self.reference,
            config=self.quiz_config,
            id_generator=self.quiz_id_generator,
            clock=self.clock,
        )

    def classify_archetype(self, profile: Profile) -> ArchetypeResult:
        return classify_archetype(profile, self.reference)

    def annotate_with_archetype(self, profile: Profile) -> Profile:
        return annotate_with_archetype(profile, self.reference)

    def archetype_compatibility(self, archetype_a: str, archetype_b: str) -> float:
        return archetype_compatibility(archetype_a, archetype_b, self.reference, self.archetype_config)

    def generate_pair_report(self, profile_a: Profile, profile_b: Profile) -> CompatibilityReport:
        return generate_pair_report(
            profile_a, profile_b, self.reference, self.quiz_config, clock=self.clock
        )

    def generate_group_report(
        self,
        profiles: Sequence[Profile]
    ) -> Union[GroupCompatibilityReport, GroupReportError]:
        return generate_group_report(profiles, self.quiz_config, clock=self.clock)


def create_engine(
    config_path: Optional[str] = None,
    reference_dir: Optional[str] = None,
    **kwargs
) -> CompatibilityEngine:
    """
    Factory function to create a CompatibilityEngine.

    Args:
        config_path: Path to a YAML config (default: packaged default.yaml)
        reference_dir: Directory of reference tables (default: packaged tables)
        **kwargs: Passed through to CompatibilityEngine

    Returns:
        Configured CompatibilityEngine instance
    """
    config = load_config(config_path)
    reference = load_reference_data(reference_dir) if reference_dir else None
    return CompatibilityEngine(config, reference=reference, **kwargs)
