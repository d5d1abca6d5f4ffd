"""
Debate prompt agreement.

Two users who answered the same debate prompts are compared by literal
agreement rate, then mapped through a sweet-spot curve that peaks between
60% and 80% agreement:

    60 <= r <= 80   90 + (r - 70) * 0.5
    50 <= r <  60   70 + (r - 50) * 2
    80 <  r <= 90   85 - (r - 80) * 0.5
         r <  50    50 + r
         r >  90    80
"""

import math
from dataclasses import dataclass
from typing import Dict, Any, List, Optional, Sequence

from ..profiles.schema import DebateAnswer
from ..reference import DebatePrompt, ReferenceData, default_reference


@dataclass
class DebateCompatibility:
    """
    Outcome of comparing two sets of debate answers.

    ``score`` is 0 when the users share no prompts.
    """
    score: int = 0
    agreements: int = 0
    disagreements: int = 0
    total: int = 0
    agreement_rate: int = 0
    interpretation: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "agreements": self.agreements,
            "disagreements": self.disagreements,
            "total": self.total,
            "agreementRate": self.agreement_rate,
            "interpretation": self.interpretation,
        }


def sweet_spot_score(agreement_rate: float) -> float:
    """Map an agreement rate (0-100) onto the sweet-spot curve."""
    r = agreement_rate
    if 60 <= r <= 80:
        return 90 + (r - 70) * 0.5
    if 50 <= r < 60:
        return 70 + (r - 50) * 2
    if 80 < r <= 90:
        return 85 - (r - 80) * 0.5
    if r < 50:
        return 50 + r
    return 80.0


def interpret_agreement(agreement_rate: float) -> str:
    if 60 <= agreement_rate <= 80:
        return "Perfect balance of shared views and healthy debates!"
    if agreement_rate >= 80:
        return "You think very alike."
    if agreement_rate >= 50:
        return "Some differences, with room for interesting discussions."
    if agreement_rate >= 30:
        return "Opposite views that could lead to exciting debates."
    return "Very different perspectives."


def calculate_debate_compatibility(
    answers_a: Sequence[DebateAnswer],
    answers_b: Sequence[DebateAnswer]
) -> DebateCompatibility:
    """
    Compare two users' debate answers over the prompts both answered.

    Args:
        answers_a: First user's answers
        answers_b: Second user's answers

    Returns:
        DebateCompatibility with counts, rounded rate and interpretation
    """
    lookup_b = {a.prompt_id: a.answer for a in answers_b}
    shared = [a for a in answers_a if a.prompt_id in lookup_b]
    if not shared:
        return DebateCompatibility(interpretation="No shared debate prompts yet.")

    agreements = sum(1 for a in shared if a.answer == lookup_b[a.prompt_id])
    total = len(shared)
    rate = agreements / total * 100

    return DebateCompatibility(
        score=int(math.floor(sweet_spot_score(rate) + 0.5)),
        agreements=agreements,
        disagreements=total - agreements,
        total=total,
        agreement_rate=int(math.floor(rate + 0.5)),
        interpretation=interpret_agreement(rate),
    )


def prompts_by_category(
    category: str,
    reference: Optional[ReferenceData] = None
) -> List[DebatePrompt]:
    """Debate prompts within ``category``."""
    reference = reference or default_reference()
    return reference.prompts_by_category(category)


def debate_categories(reference: Optional[ReferenceData] = None) -> List[str]:
    """Distinct prompt categories in declaration order."""
    reference = reference or default_reference()
    seen: List[str] = []
    for prompt in reference.debate_prompts.values():
        if prompt.category not in seen:
            seen.append(prompt.category)
    return seen
