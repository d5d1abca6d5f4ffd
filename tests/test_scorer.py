"""Tests for the pairwise compatibility scorer."""
import logging

import pytest

from watchmatch.scoring import PairwiseScorer, ScoringWeights
from watchmatch.scoring import factors

from profile_builder import ProfileBuilder


def _rich_pair():
    a = (
        ProfileBuilder("a")
        .with_services("Netflix", "Hulu", last_used_days_ago=3)
        .with_favorite(550, "Fight Club")
        .with_favorite(13, "Forrest Gump")
        .with_swipe(603, [28, 878], title="The Matrix")
        .with_swipe(680, [53, 80], title="Pulp Fiction")
        .with_swipe(1399, [10765, 18], content_type="tv")
        .with_watchlist(27205, "Inception")
        .with_history("Breaking Bad", genres=["Drama", "Crime"], episodes=4, hour=21)
        .with_history("The Office", genres=["Comedy"], episodes=2, hour=13, rewatch=True)
        .with_genres("Comedy", "Drama", "Thriller")
        .with_binge(4)
        .with_snacks("Popcorn", "Nachos")
        .with_video_chat("either")
        .with_debate({"debate_1": "Agree", "debate_2": "True", "debate_3": "Still Hilarious"})
        .build()
    )
    b = (
        ProfileBuilder("b")
        .with_services("netflix", "Max", last_used_days_ago=10)
        .with_favorite(550, "Fight Club")
        .with_swipe(603, [28, 878], title="The Matrix")
        .with_swipe(155, [18, 28, 80], title="The Dark Knight")
        .with_watchlist(27205, "Inception")
        .with_history("breaking  bad", genres=["Drama"], episodes=5, hour=22)
        .with_history("Parks and Recreation", genres=["Comedy"], episodes=3, hour=20)
        .with_genres("Drama", {"id": 53, "name": "Thriller"}, "Horror")
        .with_binge(5)
        .with_snacks("popcorn")
        .with_video_chat("zoom")
        .with_debate({"debate_1": "Agree", "debate_2": "False", "debate_3": "Still Hilarious"})
        .build()
    )
    return a, b


def test_empty_profiles_score_base(scorer):
    result = scorer.score(ProfileBuilder("a").build(), ProfileBuilder("b").build())
    assert result.score == 10
    assert result.evidence == []
    assert result.description == "10% match"


def test_shared_service_and_favorite_scores_45(scorer):
    a = ProfileBuilder("a").with_services("Netflix").with_favorite(550, "Fight Club").build()
    b = ProfileBuilder("b").with_services("Netflix").with_favorite(550, "Fight Club").build()
    result = scorer.score(a, b)
    assert result.score == 45
    assert result.breakdown["streaming_services"] == 10
    assert result.breakdown["favorite_movies"] == 25
    assert "Fight Club" in result.description
    assert result.description == "45% match — you both love Fight Club"


def test_score_is_bounded(scorer):
    a = ProfileBuilder("a")
    b = ProfileBuilder("b")
    for movie_id in range(1, 8):
        a.with_favorite(movie_id, f"Movie {movie_id}")
        b.with_favorite(movie_id, f"Movie {movie_id}")
    result = scorer.score(a.build(), b.build())
    assert result.score == 100


def test_rich_pair_is_symmetric_and_in_range(scorer):
    a, b = _rich_pair()
    forward = scorer.score(a, b)
    backward = scorer.score(b, a)
    assert 10 <= forward.score <= 100
    assert forward.score == pytest.approx(backward.score)


def test_rich_pair_breakdown(scorer):
    a, b = _rich_pair()
    result = scorer.score(a, b)
    breakdown = result.breakdown
    assert breakdown["streaming_services"] == 10
    assert breakdown["watch_history"] == 20
    assert breakdown["genres"] == 10
    assert breakdown["liked_movies"] == 30
    assert breakdown["watchlist"] == 15
    assert breakdown["binge_pattern"] == 12
    assert breakdown["video_chat"] == 5
    assert breakdown["snacks"] == 3
    assert breakdown["swipe_genres"] > 0
    assert breakdown["rewatch_tendency"] == 2
    assert breakdown["debate"] > 0
    assert result.debate.agreements == 2
    assert result.sub_scores["snack"] == 3
    assert set(result.sub_scores) == {"quiz", "snack", "debate", "emotional_tone"}
    kinds = {item.kind for item in result.evidence}
    assert {"service", "favorite", "liked", "watchlist", "genre", "watch_history", "snack"} <= kinds


def test_binge_tiers_need_both_counts(scorer):
    a = ProfileBuilder("a").with_binge(3).build()
    b = ProfileBuilder("b").build()
    assert scorer.score(a, b).breakdown["binge_pattern"] == 0


@pytest.mark.parametrize("count_b,points", [(4, 15), (5, 12), (6, 10), (7, 7), (9, 4), (20, 1)])
def test_binge_tiers(scorer, count_b, points):
    a = ProfileBuilder("a").with_binge(4).build()
    b = ProfileBuilder("b").with_binge(count_b).build()
    assert scorer.score(a, b).breakdown["binge_pattern"] == points


def test_tv_bonus_when_both_lean_tv(scorer):
    a = ProfileBuilder("a").with_swipe(1, [10765]).with_swipe(2, [18], content_type="tv").build()
    b = ProfileBuilder("b").with_swipe(3, [10759]).build()
    assert scorer.score(a, b).breakdown["tv_binge_bonus"] == 5


def test_archetype_only_counts_when_both_assigned(scorer):
    a = ProfileBuilder("a").with_archetype("critic").build()
    b = ProfileBuilder("b").build()
    assert scorer.score(a, b).breakdown["archetype"] == 0
    b = ProfileBuilder("b").with_archetype("critic").build()
    result = scorer.score(a, b)
    assert result.breakdown["archetype"] == pytest.approx(95 * 0.15)
    assert "you're both Critics" in result.description
    assert b.archetype == "critic"


def test_scorer_never_assigns_archetype(scorer):
    a = ProfileBuilder("a").with_binge(8).build()
    b = ProfileBuilder("b").with_binge(8).build()
    scorer.score(a, b)
    assert a.archetype is None and b.archetype is None


def test_snack_points_are_capped(scorer):
    snacks = ["Popcorn", "Nachos", "Candy", "Pretzels", "Chips"]
    a = ProfileBuilder("a").with_snacks(*snacks).build()
    b = ProfileBuilder("b").with_snacks(*snacks).build()
    assert scorer.score(a, b).breakdown["snacks"] == 10


def test_video_chat_requires_both(scorer):
    a = ProfileBuilder("a").with_video_chat("either").build()
    b = ProfileBuilder("b").build()
    assert scorer.score(a, b).breakdown["video_chat"] == 0


def test_active_service_usage(scorer):
    a = ProfileBuilder("a").with_services("Netflix", last_used_days_ago=2).build()
    b = ProfileBuilder("b").with_services("Netflix", last_used_days_ago=5).build()
    stale = ProfileBuilder("c").with_services("Netflix", last_used_days_ago=90).build()
    assert scorer.score(a, b).breakdown["active_services"] == 10
    assert scorer.score(a, stale).breakdown["active_services"] == 0


def test_quiz_contribution(scorer, make_attempt, max_answers):
    attempt_a = make_attempt("a", max_answers)
    attempt_b = make_attempt("b", max_answers)
    a = ProfileBuilder("a").with_quiz(attempt_a).build()
    b = ProfileBuilder("b").with_quiz(attempt_b).build()
    result = scorer.score(a, b)
    assert result.sub_scores["quiz"] == pytest.approx(15.0)
    assert "your movie personalities click" in result.description


def test_failing_enrichment_is_absorbed(scorer, monkeypatch, caplog):
    def broken(*args, **kwargs):
        raise RuntimeError("analytics unavailable")

    monkeypatch.setattr(factors, "analyze_swipe_preferences", broken)
    a = ProfileBuilder("a").with_services("Netflix").with_favorite(550, "Fight Club").with_swipe(1, []).build()
    b = ProfileBuilder("b").with_services("Netflix").with_favorite(550, "Fight Club").with_swipe(1, []).build()

    with caplog.at_level(logging.WARNING):
        result = scorer.score(a, b)

    # The shared like still counts; swipe analytics factors fall back to 0
    assert result.score == 10 + 10 + 25 + 30
    assert {"swipe_genres", "content_type", "tv_binge_bonus"} <= set(result.failed_factors)
    assert "analytics unavailable" in caplog.text


def test_custom_weights_are_used(clock):
    weights = ScoringWeights(base_score=5, shared_favorite=40)
    scorer = PairwiseScorer(weights=weights, clock=clock)
    a = ProfileBuilder("a").with_favorite(550).build()
    b = ProfileBuilder("b").with_favorite(550).build()
    assert scorer.score(a, b).score == 45


def test_invalid_weights_rejected(clock):
    with pytest.raises(ValueError):
        PairwiseScorer(weights=ScoringWeights(shared_like=-1), clock=clock)


def test_profiles_sharing_an_id_use_their_own_swipes(scorer):
    a = ProfileBuilder("u1").with_swipe(1, [10759], content_type="tv").build()
    same_id = ProfileBuilder("u1").with_swipe(2, [10749]).build()
    other_id = ProfileBuilder("u2").with_swipe(2, [10749]).build()

    shared = scorer.score(a, same_id)
    distinct = scorer.score(a, other_id)
    assert shared.breakdown == distinct.breakdown
    assert shared.score == distinct.score
    assert shared.breakdown["content_type"] == 0
    assert shared.breakdown["swipe_genres"] == 0
    assert shared.breakdown["tv_binge_bonus"] == 0


# Swipe content type

def _swipes(user_id, kinds):
    builder = ProfileBuilder(user_id)
    for i, kind in enumerate(kinds):
        builder.with_swipe(100 * len(user_id) + i, [18], content_type=kind)
    return builder


@pytest.mark.parametrize("kinds_a,kinds_b,points", [
    (["movie", "movie"], ["movie"], 10),
    (["tv", "tv"], ["tv"], 10),
    (["movie", "tv"], ["movie"], 5),
    (["movie"], ["tv"], 0),
])
def test_content_type_similarity(scorer, kinds_a, kinds_b, points):
    a = _swipes("a", kinds_a).build()
    b = _swipes("bb", kinds_b).build()
    assert scorer.score(a, b).breakdown["content_type"] == pytest.approx(points)


def test_content_type_needs_likes_on_both_sides(scorer):
    a = _swipes("a", ["movie"]).build()
    b = ProfileBuilder("b").with_swipe(7, [18], action="dislike").build()
    assert scorer.score(a, b).breakdown["content_type"] == 0


def test_content_type_note_in_description(scorer):
    tv_a = _swipes("a", ["tv", "tv"]).build()
    tv_b = _swipes("bb", ["tv"]).build()
    assert "you both lean toward TV shows" in scorer.score(tv_a, tv_b).description

    movie_a = _swipes("a", ["movie", "movie"]).build()
    movie_b = _swipes("bb", ["movie"]).build()
    assert "you both prefer movies" in scorer.score(movie_a, movie_b).description

    mixed = _swipes("a", ["movie", "tv"]).build()
    result = scorer.score(mixed, movie_b)
    assert result.breakdown["content_type"] == 5
    assert "movie and TV" not in result.description
    assert "prefer movies" not in result.description


# Watch-history factors

@pytest.mark.parametrize("hours_a,hours_b,points", [
    ([21], [19], 8),
    ([21], [9], 0),
    ([21, 9], [20], 4),
    ([23, 2], [1], 8),
])
def test_chronotype_similarity(scorer, hours_a, hours_b, points):
    a = ProfileBuilder("a")
    for i, hour in enumerate(hours_a):
        a.with_history(f"Show A{i}", hour=hour)
    b = ProfileBuilder("b")
    for i, hour in enumerate(hours_b):
        b.with_history(f"Show B{i}", hour=hour)
    assert scorer.score(a.build(), b.build()).breakdown["chronotype"] == pytest.approx(points)


def test_chronotype_needs_history_on_both_sides(scorer):
    a = ProfileBuilder("a").with_history("Dark", hour=22).build()
    b = ProfileBuilder("b").build()
    assert scorer.score(a, b).breakdown["chronotype"] == 0


@pytest.mark.parametrize("episodes_b,points", [(4, 10), (5, 10), (7, 7), (10, 4), (12, 1)])
def test_marathon_length_tiers(scorer, episodes_b, points):
    a = ProfileBuilder("a").with_history("Lost", episodes=2).with_history("Fargo", episodes=6).build()
    b = ProfileBuilder("b").with_history("Dark", episodes=episodes_b).build()
    assert scorer.score(a, b).breakdown["marathon_length"] == points


def test_marathon_length_needs_history_on_both_sides(scorer):
    a = ProfileBuilder("a").with_history("Lost", episodes=4).build()
    assert scorer.score(a, ProfileBuilder("b").build()).breakdown["marathon_length"] == 0


@pytest.mark.parametrize("genres_b,points", [
    (["Drama"], 10),
    (["Drama", "Comedy", "Crime", "Horror", "Western"], 5),
    (["Drama", "Comedy", "Crime", "Horror", "Western", "War", "Music", "History"], 0),
])
def test_genre_diversity_buckets(scorer, genres_b, points):
    a = ProfileBuilder("a").with_history("Fargo", genres=["Drama", "Crime"]).build()
    b = ProfileBuilder("b").with_history("Mixed bag", genres=genres_b).build()
    assert scorer.score(a, b).breakdown["genre_diversity"] == points


def test_genre_diversity_needs_tagged_history(scorer):
    a = ProfileBuilder("a").with_history("Fargo", genres=["Drama"]).build()
    b = ProfileBuilder("b").with_history("Untagged").build()
    assert scorer.score(a, b).breakdown["genre_diversity"] == 0


def _watchlist(user_id, size):
    builder = ProfileBuilder(user_id)
    for i in range(size):
        builder.with_watchlist(1000 * len(user_id) + i)
    return builder.build()


@pytest.mark.parametrize("size_a,size_b,points", [
    (11, 12, 6),
    (3, 2, 6),
    (10, 11, 2),
    (11, 3, 2),
    (4, 0, 0),
])
def test_watchlist_style(scorer, size_a, size_b, points):
    a = _watchlist("a", size_a)
    b = _watchlist("bb", size_b)
    assert scorer.score(a, b).breakdown["watchlist_style"] == points


def _recent_history(user_id, count, days=2):
    builder = ProfileBuilder(user_id)
    for i in range(count):
        builder.with_history(f"Episode {i}", watched_days_ago=days)
    return builder


@pytest.mark.parametrize("builder_b,points", [
    (_recent_history("b", 1, days=5), 12),
    (_recent_history("b", 8), 8),
    (_recent_history("b", 1, days=60), 8),
    (_recent_history("b", 20), 4),
])
def test_viewing_frequency_tiers(scorer, builder_b, points):
    a = _recent_history("a", 1).build()
    assert scorer.score(a, builder_b.build()).breakdown["viewing_frequency"] == pytest.approx(points)


def test_viewing_frequency_needs_history_on_both_sides(scorer):
    a = _recent_history("a", 3).build()
    assert scorer.score(a, ProfileBuilder("b").build()).breakdown["viewing_frequency"] == 0


# Emotional tone

@pytest.mark.parametrize("genres_b,points", [
    (["Comedy"], 10),
    (["Horror"], 5),
    (["Comedy", "Horror"], 6.25),
])
def test_emotional_tone_alignment(scorer, genres_b, points):
    a = ProfileBuilder("a").with_genres("Comedy").build()
    b = ProfileBuilder("b").with_genres(*genres_b).build()
    result = scorer.score(a, b)
    assert result.breakdown["emotional_tone"] == pytest.approx(points)
    assert result.sub_scores["emotional_tone"] == pytest.approx(points)


def test_emotional_tone_needs_tagged_genres(scorer):
    a = ProfileBuilder("a").with_genres("Comedy").build()
    assert scorer.score(a, ProfileBuilder("b").build()).breakdown["emotional_tone"] == 0
