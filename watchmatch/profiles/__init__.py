"""Typed profile records and boundary normalization."""

from .schema import (
    Profile,
    Preferences,
    AgeRange,
    Genre,
    StreamingService,
    WatchHistoryEntry,
    MovieRef,
    SwipeRecord,
    DebateAnswer,
    ProfileFormatError,
)

__all__ = [
    "Profile",
    "Preferences",
    "AgeRange",
    "Genre",
    "StreamingService",
    "WatchHistoryEntry",
    "MovieRef",
    "SwipeRecord",
    "DebateAnswer",
    "ProfileFormatError",
]
