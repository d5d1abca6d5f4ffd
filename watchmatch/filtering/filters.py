"""
Pre-scoring filter pipeline.

Gates, evaluated in order; a candidate must pass all of them:
1. Age range (inclusive; unknown candidate age fails while a range is active)
2. Gender preference (skipped when empty or containing "any")
3. Orientation preference (same pattern)
4. Location radius (>= 100 or unset: anywhere; > 50: same city or state;
   <= 50: same city)
5. Archetype preference (candidates without an archetype fail while active)
6. Premium filters, only when the requester is premium

Malformed filters raise FilterValidationError before any candidate is
examined.
"""

import logging
from dataclasses import dataclass, field, replace
from numbers import Real
from typing import Dict, Any, List, Optional, Tuple

from ..profiles.schema import Profile, AgeRange

logger = logging.getLogger(__name__)

ANYWHERE_RADIUS = 100
CITY_RADIUS = 50


class FilterValidationError(ValueError):
    """Raised when a filter object is malformed."""


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


@dataclass
class PremiumFilters:
    """
    Filters available to premium requesters.

    Attributes:
        genres: TMDB genre ids; candidate must prefer at least one
        binge_min: Lower bound on candidate binge count
        binge_max: Upper bound on candidate binge count
        services: Service names; candidate must have at least one
        decades: Decades (e.g. 1990); a candidate favorite must fall in one
        min_score: Minimum match score for premium results
    """
    genres: List[int] = field(default_factory=list)
    binge_min: Optional[Any] = None
    binge_max: Optional[Any] = None
    services: List[str] = field(default_factory=list)
    decades: List[int] = field(default_factory=list)
    min_score: Any = 0

    @property
    def binge_range_active(self) -> bool:
        return self.binge_min is not None or self.binge_max is not None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PremiumFilters":
        def pick(*keys, default=None):
            for key in keys:
                if key in d and d[key] is not None:
                    return d[key]
            return default

        return cls(
            genres=[int(g) for g in pick("premiumGenres", "genres", default=[])],
            binge_min=pick("premiumBingeMin", "bingeMin", "binge_min"),
            binge_max=pick("premiumBingeMax", "bingeMax", "binge_max"),
            services=[str(s) for s in pick("premiumServices", "services", default=[])],
            decades=[int(x) for x in pick("premiumDecades", "decades", default=[])],
            min_score=pick("premiumMinScore", "minScore", "min_score", default=0),
        )


@dataclass
class MatchFilters:
    """
    Hard constraints applied before scoring.

    Unset fields fall back to the requester's own preferences when merged
    with ``effective_filters``.
    """
    age_range: Optional[AgeRange] = None
    gender_preference: List[str] = field(default_factory=list)
    orientation_preference: List[str] = field(default_factory=list)
    location_radius: Optional[Any] = None
    archetypes: List[str] = field(default_factory=list)
    min_match_score: Any = 0
    premium: PremiumFilters = field(default_factory=PremiumFilters)

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> "MatchFilters":
        """Build from request parameters (camelCase or snake_case)."""
        d = d or {}
        age_range = None
        raw_range = d.get("ageRange", d.get("age_range"))
        if isinstance(raw_range, dict):
            age_range = AgeRange(raw_range.get("min"), raw_range.get("max"))
        elif "minAge" in d or "maxAge" in d:
            age_range = AgeRange(d.get("minAge"), d.get("maxAge"))
        elif raw_range is not None:
            raise FilterValidationError(f"ageRange must be an object, got {raw_range!r}")

        archetypes = d.get("archetypes", d.get("archetypePreference", []))
        if isinstance(archetypes, str):
            archetypes = [archetypes]

        premium_source = d.get("premium") if isinstance(d.get("premium"), dict) else d

        return cls(
            age_range=age_range,
            gender_preference=list(d.get("genderPreference", d.get("gender_preference", []))),
            orientation_preference=list(d.get(
                "sexualOrientationPreference",
                d.get("orientationPreference", d.get("orientation_preference", [])),
            )),
            location_radius=d.get("locationRadius", d.get("location_radius")),
            archetypes=list(archetypes or []),
            min_match_score=d.get("minMatchScore", d.get("min_match_score", 0)),
            premium=PremiumFilters.from_dict(premium_source),
        )


def effective_filters(requester: Profile, overrides: Optional[MatchFilters] = None) -> MatchFilters:
    """Merge explicit filters over the requester's own preferences."""
    overrides = overrides or MatchFilters()
    prefs = requester.preferences
    return replace(
        overrides,
        age_range=overrides.age_range if overrides.age_range is not None else prefs.age_range,
        gender_preference=overrides.gender_preference or list(prefs.gender_preference),
        orientation_preference=overrides.orientation_preference or list(prefs.orientation_preference),
        location_radius=overrides.location_radius
        if overrides.location_radius is not None else prefs.location_radius,
    )


def validate_filters(filters: MatchFilters) -> None:
    """
    Reject malformed filters.

    Raises:
        FilterValidationError: On non-numeric, negative or inverted ranges
    """
    if filters.age_range is not None:
        low, high = filters.age_range.min, filters.age_range.max
        if not _is_number(low) or not _is_number(high):
            raise FilterValidationError(f"Age range bounds must be numbers, got ({low!r}, {high!r})")
        if low < 0 or high < 0:
            raise FilterValidationError(f"Age range bounds must be non-negative, got ({low}, {high})")
        if low > high:
            raise FilterValidationError(f"Age range min {low} exceeds max {high}")

    radius = filters.location_radius
    if radius is not None:
        if not _is_number(radius):
            raise FilterValidationError(f"Location radius must be a number, got {radius!r}")
        if radius < 0:
            raise FilterValidationError(f"Location radius must be non-negative, got {radius}")

    if not _is_number(filters.min_match_score):
        raise FilterValidationError(f"Minimum match score must be a number, got {filters.min_match_score!r}")

    premium = filters.premium
    for name in ("binge_min", "binge_max"):
        value = getattr(premium, name)
        if value is not None and (not _is_number(value) or value < 0):
            raise FilterValidationError(f"Premium {name} must be a non-negative number, got {value!r}")
    if (premium.binge_min is not None and premium.binge_max is not None
            and premium.binge_min > premium.binge_max):
        raise FilterValidationError(
            f"Premium binge min {premium.binge_min} exceeds max {premium.binge_max}"
        )
    if not _is_number(premium.min_score):
        raise FilterValidationError(f"Premium minimum score must be a number, got {premium.min_score!r}")


def parse_location(location: str) -> Tuple[str, str]:
    """Split "City, State" into lowercase (city, state); missing parts are ''."""
    parts = [p.strip().lower() for p in (location or "").split(",")]
    city = parts[0] if parts else ""
    state = parts[1] if len(parts) > 1 else ""
    return city, state


def _preference_allows(preferences: List[str], value: str) -> bool:
    wanted = [p.lower() for p in preferences]
    if not wanted or "any" in wanted or not value:
        return True
    return value.lower() in wanted


def _passes_age(candidate: Profile, filters: MatchFilters) -> bool:
    if filters.age_range is None:
        return True
    if candidate.age is None:
        return False
    return filters.age_range.min <= candidate.age <= filters.age_range.max


def _passes_location(requester: Profile, candidate: Profile, radius: Optional[float]) -> bool:
    if radius is None or radius >= ANYWHERE_RADIUS:
        return True
    if not requester.location or not candidate.location:
        return True
    city_a, state_a = parse_location(requester.location)
    city_b, state_b = parse_location(candidate.location)
    same_city = bool(city_a) and city_a == city_b
    if radius <= CITY_RADIUS:
        return same_city
    same_state = bool(state_a) and state_a == state_b
    return same_city or same_state


def _passes_archetype(candidate: Profile, archetypes: List[str]) -> bool:
    wanted = [a.lower() for a in archetypes]
    if not wanted or "any" in wanted:
        return True
    if not candidate.archetype:
        return False
    return candidate.archetype.lower() in wanted


def _passes_premium(candidate: Profile, premium: PremiumFilters) -> bool:
    if premium.genres:
        if not set(premium.genres) & set(candidate.preferences.genre_ids):
            return False

    if premium.binge_range_active:
        binge = candidate.preferences.binge_count
        if binge is None:
            return False
        if premium.binge_min is not None and binge < premium.binge_min:
            return False
        if premium.binge_max is not None and binge > premium.binge_max:
            return False

    if premium.services:
        wanted = {s.lower() for s in premium.services}
        if not wanted & {s.name.lower() for s in candidate.streaming_services}:
            return False

    if premium.decades:
        decades = {
            m.release_year // 10 * 10
            for m in candidate.favorite_movies
            if m.release_year is not None
        }
        if not set(premium.decades) & decades:
            return False

    return True


def check_filters(requester: Profile, candidate: Profile, filters: MatchFilters) -> Optional[str]:
    """
    Run every gate and report the first one the candidate fails.

    ``filters`` must already be merged and validated.

    Returns:
        Name of the failing gate, or None if the candidate passes
    """
    if not _passes_age(candidate, filters):
        return "age"
    if not _preference_allows(filters.gender_preference, candidate.gender):
        return "gender"
    if not _preference_allows(filters.orientation_preference, candidate.sexual_orientation):
        return "orientation"
    if not _passes_location(requester, candidate, filters.location_radius):
        return "location"
    if not _passes_archetype(candidate, filters.archetypes):
        return "archetype"
    if requester.is_premium and not _passes_premium(candidate, filters.premium):
        return "premium"
    return None


def passes_filters(requester: Profile, candidate: Profile, filters: MatchFilters) -> bool:
    return check_filters(requester, candidate, filters) is None
