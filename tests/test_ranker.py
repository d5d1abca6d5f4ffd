"""Tests for match ranking."""
import pytest

from watchmatch.filtering import FilterValidationError, MatchFilters, PremiumFilters
from watchmatch.ids import SequentialIdGenerator
from watchmatch.profiles import AgeRange
from watchmatch.ranking import matches_to_frame, rank_matches

from profile_builder import NOW, ProfileBuilder


def _pool(requester_builder=None):
    requester = (requester_builder or ProfileBuilder("r"))
    requester = requester.with_favorite(1, "Heat").with_favorite(2, "Alien").with_favorite(3, "Jaws").build()
    c1 = ProfileBuilder("c1").with_age(25).with_favorite(1, "Heat").build()
    c2 = ProfileBuilder("c2").with_age(40).with_favorite(1, "Heat").with_favorite(2, "Alien").build()
    c3 = ProfileBuilder("c3").with_age(28).with_favorite(1, "Heat").build()
    c4 = ProfileBuilder("c4").with_age(30).build()
    return requester, [requester, c1, c2, c3, c4]


def _rank(scorer, requester, pool, **kwargs):
    return rank_matches(
        requester,
        pool,
        scorer=scorer,
        id_generator=SequentialIdGenerator("match"),
        clock=lambda: NOW,
        **kwargs
    )


def test_sorted_descending_with_stable_ties(scorer):
    requester, pool = _pool()
    matches = _rank(scorer, requester, pool)
    assert [m.user2_id for m in matches] == ["c2", "c1", "c3", "c4"]
    assert [m.match_score for m in matches] == [60, 35, 35, 10]


def test_requester_excluded(scorer):
    requester, pool = _pool()
    matches = _rank(scorer, requester, pool)
    assert all(m.user2_id != requester.id for m in matches)
    assert all(m.user1_id == requester.id for m in matches)


def test_limit(scorer):
    requester, pool = _pool()
    matches = _rank(scorer, requester, pool, limit=2)
    assert [m.user2_id for m in matches] == ["c2", "c1"]


def test_ids_and_timestamps_are_injected(scorer):
    requester, pool = _pool()
    matches = _rank(scorer, requester, pool)
    assert [m.id for m in matches] == ["match_1", "match_2", "match_3", "match_4"]
    assert all(m.created_at == NOW for m in matches)


def test_min_match_score(scorer):
    requester, pool = _pool()
    matches = _rank(scorer, requester, pool, filters=MatchFilters(min_match_score=30))
    assert [m.user2_id for m in matches] == ["c2", "c1", "c3"]


def test_requester_preferences_filter_pool(scorer):
    requester, pool = _pool(ProfileBuilder("r").with_age_range(20, 30))
    matches = _rank(scorer, requester, pool)
    assert [m.user2_id for m in matches] == ["c1", "c3", "c4"]


def test_premium_min_score_only_for_premium(scorer):
    filters = MatchFilters(premium=PremiumFilters(min_score=50))
    requester, pool = _pool()
    assert len(_rank(scorer, requester, pool, filters=filters)) == 4

    requester, pool = _pool(ProfileBuilder("r").premium())
    matches = _rank(scorer, requester, pool, filters=filters)
    assert [m.user2_id for m in matches] == ["c2"]


def test_malformed_filters_raise(scorer):
    requester, pool = _pool()
    with pytest.raises(FilterValidationError):
        _rank(scorer, requester, pool, filters=MatchFilters(age_range=AgeRange(30, 20)))


def test_empty_pool(scorer):
    requester = ProfileBuilder("r").build()
    assert _rank(scorer, requester, []) == []
    assert _rank(scorer, requester, [requester]) == []


def test_match_carries_evidence_and_sub_scores(scorer):
    requester, pool = _pool()
    top = _rank(scorer, requester, pool, limit=1)[0]
    assert [item.tmdb_id for item in top.shared_content] == [1, 2]
    assert top.description == "60% match — you both love Heat and Alien"
    assert top.quiz_compatibility == 0
    record = top.to_dict()
    assert record["user2Id"] == "c2"
    assert record["matchScore"] == 60
    assert record["matchDescription"] == top.description
    assert record["createdAt"] == NOW.isoformat()


def test_matches_to_frame(scorer):
    requester, pool = _pool()
    frame = matches_to_frame(_rank(scorer, requester, pool))
    assert list(frame.columns) == ["match_id", "user_id", "score", "shared_items", "description"]
    assert frame["user_id"].tolist() == ["c2", "c1", "c3", "c4"]
    assert matches_to_frame([]).empty
