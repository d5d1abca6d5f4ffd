"""Hard-constraint filters applied to candidates before scoring."""

from .filters import (
    MatchFilters,
    PremiumFilters,
    FilterValidationError,
    effective_filters,
    validate_filters,
    parse_location,
    check_filters,
    passes_filters,
)

__all__ = [
    "MatchFilters",
    "PremiumFilters",
    "FilterValidationError",
    "effective_filters",
    "validate_filters",
    "parse_location",
    "check_filters",
    "passes_filters",
]
