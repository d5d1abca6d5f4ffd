"""
Watch-party compatibility matching core.

Quiz scoring, viewing archetype classification, pairwise compatibility
scoring, candidate filtering and ranking, and compatibility reports.
"""

__version__ = "1.0.0"
