"""
QuizAttempt record and its nested personality structures.

A QuizAttempt captures one completed run of the movie personality quiz:
the raw answers with their resolved point values, normalized category
scores (always clamped to [0, 100]) and the personality traits derived
from them.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Any, List, Optional

from ..clock import parse_timestamp, isoformat


@dataclass
class QuizAnswer:
    """A single answered question."""
    question_id: str
    selected_value: str
    points: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "questionId": self.question_id,
            "selectedValue": self.selected_value,
            "points": self.points,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "QuizAnswer":
        return cls(
            question_id=str(d.get("questionId", d.get("question_id", ""))),
            selected_value=str(d.get("selectedValue", d.get("selected_value", ""))),
            points=float(d.get("points", 0) or 0),
        )


@dataclass
class ArchetypeStrength:
    """A personality archetype matched by a quiz attempt."""
    type: str
    name: str
    description: str
    strength: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "name": self.name,
            "description": self.description,
            "strength": self.strength,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ArchetypeStrength":
        return cls(
            type=d["type"],
            name=d.get("name", d["type"]),
            description=d.get("description", ""),
            strength=float(d.get("strength", 0) or 0),
        )


@dataclass
class TraitLevel:
    """Score and qualitative level for one category."""
    score: float
    level: str


@dataclass
class DominantTrait:
    category: str
    name: str
    score: float


@dataclass
class PersonalityTraits:
    """
    Traits derived from category scores.

    Attributes:
        archetypes: Up to three archetypes, strongest first
        traits: Per-category score and level
        dominant_traits: Top categories by raw score
    """
    archetypes: List[ArchetypeStrength] = field(default_factory=list)
    traits: Dict[str, TraitLevel] = field(default_factory=dict)
    dominant_traits: List[DominantTrait] = field(default_factory=list)

    @property
    def archetype_types(self) -> List[str]:
        return [a.type for a in self.archetypes]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "archetypes": [a.to_dict() for a in self.archetypes],
            "traits": {
                k: {"score": v.score, "level": v.level} for k, v in self.traits.items()
            },
            "dominantTraits": [
                {"category": t.category, "name": t.name, "score": t.score}
                for t in self.dominant_traits
            ],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PersonalityTraits":
        archetypes = []
        for a in d.get("archetypes", []) or []:
            # Stored profiles sometimes carry bare archetype keys
            if isinstance(a, str):
                archetypes.append(ArchetypeStrength(type=a, name=a, description="", strength=0.0))
            else:
                archetypes.append(ArchetypeStrength.from_dict(a))
        traits = {
            k: TraitLevel(score=float(v.get("score", 0)), level=v.get("level", ""))
            for k, v in (d.get("traits", {}) or {}).items()
        }
        dominant = [
            DominantTrait(
                category=t["category"],
                name=t.get("name", t["category"]),
                score=float(t.get("score", 0)),
            )
            for t in d.get("dominantTraits", d.get("dominant_traits", [])) or []
        ]
        return cls(archetypes=archetypes, traits=traits, dominant_traits=dominant)


@dataclass
class QuizAttempt:
    """
    One completed quiz attempt.

    Attributes:
        id: Attempt identifier
        user_id: Owning user
        answers: Ordered answers with resolved point values
        category_scores: Category -> normalized score in [0, 100]
        personality_traits: Derived archetypes and trait levels
        compatibility_factors: Aggregated factors used for matching
        completed_at: Completion timestamp
        quiz_version: Question bank version the attempt was scored against
    """
    id: str
    user_id: str
    answers: List[QuizAnswer] = field(default_factory=list)
    category_scores: Dict[str, float] = field(default_factory=dict)
    personality_traits: PersonalityTraits = field(default_factory=PersonalityTraits)
    compatibility_factors: Dict[str, float] = field(default_factory=dict)
    completed_at: Optional[datetime] = None
    quiz_version: str = "v1"

    def get_answer(self, question_id: str) -> Optional[QuizAnswer]:
        for answer in self.answers:
            if answer.question_id == question_id:
                return answer
        return None

    def set_answer(self, question_id: str, selected_value: str, points: float) -> None:
        """Add an answer, replacing any earlier answer to the same question."""
        answer = QuizAnswer(question_id, selected_value, points)
        for i, existing in enumerate(self.answers):
            if existing.question_id == question_id:
                self.answers[i] = answer
                return
        self.answers.append(answer)

    def set_category_score(self, category: str, score: float) -> None:
        self.category_scores[category] = max(0.0, min(100.0, score))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "quizVersion": self.quiz_version,
            "answers": [a.to_dict() for a in self.answers],
            "categoryScores": dict(self.category_scores),
            "personalityTraits": self.personality_traits.to_dict(),
            "compatibilityFactors": dict(self.compatibility_factors),
            "completedAt": isoformat(self.completed_at),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "QuizAttempt":
        """Create from a stored record; category scores are re-clamped."""
        attempt = cls(
            id=str(d.get("id", "")),
            user_id=str(d.get("userId", d.get("user_id", ""))),
            answers=[QuizAnswer.from_dict(a) for a in d.get("answers", []) or []],
            personality_traits=PersonalityTraits.from_dict(
                d.get("personalityTraits", d.get("personality_traits", {})) or {}
            ),
            compatibility_factors=dict(
                d.get("compatibilityFactors", d.get("compatibility_factors", {})) or {}
            ),
            completed_at=parse_timestamp(d.get("completedAt", d.get("completed_at"))),
            quiz_version=d.get("quizVersion", d.get("quiz_version", "v1")),
        )
        scores = d.get("categoryScores", d.get("category_scores", {})) or {}
        for category, score in scores.items():
            attempt.set_category_score(category, float(score))
        return attempt
