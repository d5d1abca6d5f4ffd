"""Read-only reference tables (quiz bank, archetypes, genres, debate prompts)."""

from .tables import (
    ReferenceData,
    QuizQuestion,
    QuizOption,
    PersonalityArchetype,
    ViewingArchetype,
    DebatePrompt,
    load_reference_data,
    default_reference,
)

__all__ = [
    "ReferenceData",
    "QuizQuestion",
    "QuizOption",
    "PersonalityArchetype",
    "ViewingArchetype",
    "DebatePrompt",
    "load_reference_data",
    "default_reference",
]
