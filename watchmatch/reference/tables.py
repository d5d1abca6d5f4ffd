"""
Static reference tables for the matching core.

This module loads the read-only lookup tables every component depends on:
the quiz question bank, both archetype catalogs, the debate prompt bank and
the TMDB genre groupings. Tables live as YAML files next to this module and
are parsed once into frozen dataclasses.

Nothing in here is mutated after loading; callers may share a single
ReferenceData instance across threads.
"""

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Tuple, FrozenSet

import yaml

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"


@dataclass(frozen=True)
class QuizOption:
    """One selectable answer with its point value."""
    value: str
    points: float


@dataclass(frozen=True)
class QuizQuestion:
    """
    A quiz question belonging to exactly one category.

    Attributes:
        id: Question identifier referenced by submitted answers
        category: Category key the question contributes to
        text: Question wording
        options: Ordered answer options
    """
    id: str
    category: str
    text: str
    options: Tuple[QuizOption, ...]

    @property
    def max_points(self) -> float:
        """Largest attainable point value for this question."""
        if not self.options:
            return 0.0
        return max(option.points for option in self.options)

    def points_for(self, value: str) -> Optional[float]:
        """Return the point value of an option, or None if unknown."""
        for option in self.options:
            if option.value == value:
                return option.points
        return None


@dataclass(frozen=True)
class PersonalityArchetype:
    """Quiz-derived archetype defined by its indicator categories."""
    type: str
    name: str
    description: str
    indicators: Tuple[str, ...]


@dataclass(frozen=True)
class ViewingArchetype:
    """Behaviour-derived archetype with its one-directional compatibility list."""
    type: str
    name: str
    description: str
    traits: Tuple[str, ...]
    compatibility: Tuple[str, ...]


@dataclass(frozen=True)
class DebatePrompt:
    """A debate prompt and the sides a user can pick."""
    id: str
    category: str
    prompt: str
    sides: Tuple[str, ...]


@dataclass(frozen=True)
class ReferenceData:
    """
    All static lookup tables consumed by the core.

    Dicts preserve declaration order from the YAML files; the archetype
    classifier relies on that order for tie-breaking.
    """
    quiz_categories: Dict[str, str]
    questions: Dict[str, QuizQuestion]
    trait_descriptions: Dict[str, str]
    challenge_descriptions: Dict[str, str]
    challenge_suggestions: Dict[str, Tuple[str, ...]]
    default_challenge_suggestions: Tuple[str, ...]
    personality_archetypes: Dict[str, PersonalityArchetype]
    complementary_pairs: Dict[str, Tuple[str, ...]]
    complementary_reasons: Dict[str, str]
    viewing_archetypes: Dict[str, ViewingArchetype]
    genre_archetypes: Dict[str, str]
    debate_prompts: Dict[str, DebatePrompt]
    genres: Dict[int, str]
    tv_genre_ids: FrozenSet[int]
    genre_categories: Dict[int, str] = field(default_factory=dict)
    emotional_tones: Dict[str, FrozenSet[str]] = field(default_factory=dict)

    def category_name(self, category: str) -> str:
        """Display name of a quiz category, falling back to its key."""
        return self.quiz_categories.get(category, category)

    def genre_id_for(self, name: str) -> Optional[int]:
        """Look up a TMDB genre id by case-insensitive name."""
        wanted = name.strip().lower()
        for genre_id, genre_name in self.genres.items():
            if genre_name.lower() == wanted:
                return genre_id
        return None

    def genre_category(self, genre_id: int) -> str:
        """Broad chart category for a genre id ("Other" if unmapped)."""
        return self.genre_categories.get(genre_id, "Other")

    def tone_for(self, genre_tag: str) -> Optional[str]:
        """Emotional tone bucket for a genre tag, or None."""
        tag = genre_tag.strip().lower()
        for tone, tags in self.emotional_tones.items():
            if tag in tags:
                return tone
        return None

    def prompts_by_category(self, category: str) -> List[DebatePrompt]:
        """All debate prompts within a category."""
        return [p for p in self.debate_prompts.values() if p.category == category]


def _read_yaml(filepath: Path) -> dict:
    if not filepath.exists():
        raise FileNotFoundError(f"Reference table not found: {filepath}")
    with open(filepath, "r") as f:
        content = yaml.safe_load(f)
    if content is None:
        raise ValueError(f"Reference table is empty: {filepath}")
    return content


def load_reference_data(data_dir: Optional[str] = None) -> ReferenceData:
    """
    Load every reference table from a directory of YAML files.

    Args:
        data_dir: Directory holding quiz.yaml, archetypes.yaml, genres.yaml
            and debate_prompts.yaml (default: the packaged tables)

    Returns:
        ReferenceData instance

    Raises:
        FileNotFoundError: If a table file is missing
        ValueError: If a table file is empty
    """
    base = Path(data_dir) if data_dir else DATA_DIR
    logger.info(f"Loading reference tables from {base}")

    quiz = _read_yaml(base / "quiz.yaml")
    archetypes = _read_yaml(base / "archetypes.yaml")
    genres = _read_yaml(base / "genres.yaml")
    debates = _read_yaml(base / "debate_prompts.yaml")

    questions = {}
    for q in quiz.get("questions", []):
        options = tuple(
            QuizOption(value=str(o["value"]), points=float(o["points"]))
            for o in q.get("options", [])
        )
        questions[q["id"]] = QuizQuestion(
            id=q["id"],
            category=q["category"],
            text=q.get("text", ""),
            options=options,
        )

    personality = {
        key: PersonalityArchetype(
            type=key,
            name=a["name"],
            description=a.get("description", ""),
            indicators=tuple(a.get("indicators", [])),
        )
        for key, a in archetypes.get("personality", {}).items()
    }

    viewing = {
        key: ViewingArchetype(
            type=key,
            name=a["name"],
            description=a.get("description", ""),
            traits=tuple(a.get("traits", [])),
            compatibility=tuple(a.get("compatibility", [])),
        )
        for key, a in archetypes.get("viewing", {}).items()
    }

    genre_table = {int(k): v for k, v in genres.get("genres", {}).items()}
    genre_categories = {}
    for category, ids in genres.get("genre_categories", {}).items():
        for genre_id in ids:
            genre_categories[int(genre_id)] = category

    prompts = {
        p["id"]: DebatePrompt(
            id=p["id"],
            category=p.get("category", ""),
            prompt=p["prompt"],
            sides=tuple(str(s) for s in p.get("sides", [])),
        )
        for p in debates.get("prompts", [])
    }

    reference = ReferenceData(
        quiz_categories=dict(quiz.get("categories", {})),
        questions=questions,
        trait_descriptions=dict(quiz.get("trait_descriptions", {})),
        challenge_descriptions=dict(quiz.get("challenge_descriptions", {})),
        challenge_suggestions={
            k: tuple(v) for k, v in quiz.get("challenge_suggestions", {}).items()
        },
        default_challenge_suggestions=tuple(quiz.get("default_challenge_suggestions", [])),
        personality_archetypes=personality,
        complementary_pairs={
            k: tuple(v) for k, v in archetypes.get("complementary_pairs", {}).items()
        },
        complementary_reasons=dict(archetypes.get("complementary_reasons", {})),
        viewing_archetypes=viewing,
        genre_archetypes=dict(archetypes.get("genre_archetypes", {})),
        debate_prompts=prompts,
        genres=genre_table,
        tv_genre_ids=frozenset(int(g) for g in genres.get("tv_genre_ids", [])),
        genre_categories=genre_categories,
        emotional_tones={
            tone: frozenset(t.lower() for t in tags)
            for tone, tags in genres.get("emotional_tones", {}).items()
        },
    )

    logger.info(
        f"Loaded {len(questions)} quiz questions, {len(personality)} personality "
        f"archetypes, {len(viewing)} viewing archetypes, {len(prompts)} debate prompts"
    )
    return reference


@lru_cache(maxsize=1)
def default_reference() -> ReferenceData:
    """Packaged reference tables, loaded once per process."""
    return load_reference_data()
