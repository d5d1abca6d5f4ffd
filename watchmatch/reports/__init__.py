"""Qualitative compatibility reports for pairs and groups."""

from .pair_report import (
    CompatibilityReport,
    CategoryComparison,
    ArchetypeAnalysis,
    compatibility_level,
    analyze_archetypes,
    analyze_categories,
    profile_archetypes,
    generate_pair_report,
)
from .group_report import (
    GroupCompatibilityReport,
    GroupReportError,
    find_common_archetypes,
    generate_group_report,
)

__all__ = [
    "CompatibilityReport",
    "CategoryComparison",
    "ArchetypeAnalysis",
    "compatibility_level",
    "analyze_archetypes",
    "analyze_categories",
    "profile_archetypes",
    "generate_pair_report",
    "GroupCompatibilityReport",
    "GroupReportError",
    "find_common_archetypes",
    "generate_group_report",
]
