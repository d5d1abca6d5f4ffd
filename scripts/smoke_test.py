"""
Smoke test for the matching core.

This script validates that:
1. The packaged config and reference tables load and validate
2. Quiz answers score into attempts and personality traits
3. A synthetic profile pool scores and ranks without errors
4. Pair and group reports build for quiz-complete users

Usage:
    python scripts/smoke_test.py [--pool-size 200] [--seed 42]
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import argparse
import logging
import numpy as np
import pandas as pd

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

SERVICES = ["Netflix", "Hulu", "Max", "Disney+", "Prime Video", "Apple TV+"]
SNACKS = ["Popcorn", "Nachos", "Candy", "Pretzels", "Chips", "Ice Cream"]
LOCATIONS = ["Austin, TX", "Dallas, TX", "Boston, MA", "Denver, CO", "Seattle, WA"]
VIDEO_CHAT = ["facetime", "zoom", "either", None]


def synthetic_record(user_id: str, rng: np.random.RandomState, reference) -> dict:
    """Random but well-formed profile record."""
    genre_ids = sorted(reference.genres)
    genre_names = [reference.genres[g] for g in genre_ids]
    movie_ids = np.arange(100, 160)

    swipes = []
    for movie_id in rng.choice(movie_ids, size=rng.randint(0, 25), replace=False):
        swipes.append({
            "tmdbId": int(movie_id),
            "genreIds": [int(g) for g in rng.choice(genre_ids, size=rng.randint(1, 4), replace=False)],
            "action": str(rng.choice(["like", "superlike", "dislike"], p=[0.5, 0.1, 0.4])),
            "contentType": str(rng.choice(["movie", "tv"])),
            "swipedAt": f"2024-05-{rng.randint(1, 29):02d}T{rng.randint(0, 24):02d}:00:00Z",
        })

    history = []
    for i in range(rng.randint(0, 15)):
        history.append({
            "title": f"Title {rng.randint(0, 40)}",
            "genres": [str(g) for g in rng.choice(genre_names, size=rng.randint(1, 3), replace=False)],
            "episodesWatched": int(rng.randint(1, 10)),
            "watchedAt": f"2024-05-{rng.randint(1, 29):02d}T{rng.randint(0, 24):02d}:00:00Z",
            "rewatch": bool(rng.rand() < 0.2),
        })

    prompt_ids = list(reference.debate_prompts)
    debate = [
        {"promptId": p, "answer": str(rng.choice(reference.debate_prompts[p].sides))}
        for p in rng.choice(prompt_ids, size=rng.randint(0, len(prompt_ids)), replace=False)
    ]

    return {
        "id": user_id,
        "username": user_id,
        "age": int(rng.randint(18, 60)),
        "location": str(rng.choice(LOCATIONS)),
        "streamingServices": [
            {"name": str(s), "lastUsedAt": f"2024-05-{rng.randint(1, 29):02d}T12:00:00Z"}
            for s in rng.choice(SERVICES, size=rng.randint(0, 4), replace=False)
        ],
        "favoriteMovies": [
            {"tmdbId": int(m), "releaseYear": int(rng.randint(1970, 2024))}
            for m in rng.choice(movie_ids, size=rng.randint(0, 6), replace=False)
        ],
        "swipedMovies": swipes,
        "watchlist": [{"tmdbId": int(m)} for m in rng.choice(movie_ids, size=rng.randint(0, 12), replace=False)],
        "watchHistory": history,
        "preferences": {
            "genres": [str(g) for g in rng.choice(genre_names, size=rng.randint(0, 5), replace=False)],
            "bingeWatchCount": int(rng.randint(0, 10)) if rng.rand() < 0.8 else None,
        },
        "debateAnswers": debate,
        "favoriteSnacks": [str(s) for s in rng.choice(SNACKS, size=rng.randint(0, 4), replace=False)],
        "videoChatPreference": VIDEO_CHAT[rng.randint(0, len(VIDEO_CHAT))],
        "isPremium": bool(rng.rand() < 0.3),
    }


def random_answers(rng: np.random.RandomState, reference) -> list:
    return [
        {"questionId": q.id, "selectedValue": str(rng.choice([o.value for o in q.options]))}
        for q in reference.questions.values()
    ]


def run_smoke_test(pool_size: int = 200, seed: int = 42):
    """Run smoke tests on the matching core."""

    logger.info("=" * 60)
    logger.info("SMOKE TEST: Matching Core")
    logger.info("=" * 60)

    # Import modules
    from watchmatch.configs import load_config, validate_config
    from watchmatch.engine import CompatibilityEngine
    from watchmatch.ids import SequentialIdGenerator
    from watchmatch.ranking import matches_to_frame

    results = {"config": {}, "quiz": {}, "ranking": {}, "reports": {}}
    rng = np.random.RandomState(seed)

    # =========================================================================
    # Config and reference tables
    # =========================================================================
    logger.info("\n" + "=" * 60)
    logger.info("TEST 1: Config and Reference Tables")
    logger.info("=" * 60)

    try:
        config = load_config()
        issues = validate_config(config)
        if issues:
            raise ValueError(f"config issues: {issues}")
        engine = CompatibilityEngine(
            config,
            match_id_generator=SequentialIdGenerator("match"),
            quiz_id_generator=SequentialIdGenerator("quiz"),
        )
        reference = engine.reference
        logger.info(f"  Quiz questions: {len(reference.questions)}")
        logger.info(f"  Personality archetypes: {len(reference.personality_archetypes)}")
        logger.info(f"  Viewing archetypes: {len(reference.viewing_archetypes)}")
        logger.info(f"  Debate prompts: {len(reference.debate_prompts)}")
        results["config"]["status"] = "PASSED"
    except Exception as e:
        logger.error(f"  CONFIG TEST FAILED: {e}")
        results["config"]["status"] = f"FAILED - {e}"
        import traceback
        traceback.print_exc()
        return 1

    # =========================================================================
    # Quiz processing
    # =========================================================================
    logger.info("\n" + "=" * 60)
    logger.info("TEST 2: Quiz Processing")
    logger.info("=" * 60)

    records = [synthetic_record(f"user_{i}", rng, reference) for i in range(pool_size)]

    try:
        archetype_counts = {}
        for record in records[: pool_size // 2]:
            attempt = engine.process_quiz_completion(record["id"], random_answers(rng, reference))
            record["quizAttempts"] = [attempt.to_dict()]
            record["personalityProfile"] = attempt.personality_traits.to_dict()
            for archetype_type in attempt.personality_traits.archetype_types:
                archetype_counts[archetype_type] = archetype_counts.get(archetype_type, 0) + 1
        logger.info(f"  Attempts scored: {pool_size // 2}")
        logger.info(f"  Archetype counts: {archetype_counts}")
        results["quiz"]["status"] = "PASSED"
    except Exception as e:
        logger.error(f"  QUIZ TEST FAILED: {e}")
        results["quiz"]["status"] = f"FAILED - {e}"
        import traceback
        traceback.print_exc()

    # =========================================================================
    # Scoring and ranking
    # =========================================================================
    logger.info("\n" + "=" * 60)
    logger.info("TEST 3: Scoring and Ranking")
    logger.info("=" * 60)

    try:
        profiles = [engine.annotate_with_archetype(engine.load_profile(r)) for r in records]

        requester = profiles[0]
        scores = np.array([engine.score_pair(requester, p).score for p in profiles[1:]])
        logger.info(
            f"  Score range: [{scores.min():.1f}, {scores.max():.1f}], "
            f"mean {scores.mean():.1f}"
        )
        if scores.min() < 0 or scores.max() > 100:
            raise ValueError("score outside [0, 100]")

        # Symmetry spot check
        for other in profiles[1:20]:
            forward = engine.score_pair(requester, other).score
            backward = engine.score_pair(other, requester).score
            if abs(forward - backward) > 1e-9:
                raise ValueError(f"asymmetric score for {other.id}: {forward} vs {backward}")

        matches = engine.rank_matches(requester, profiles, limit=10)
        frame = matches_to_frame(matches)
        logger.info(f"  Top matches for {requester.id}:\n{frame.to_string(index=False)}")

        ranked = pd.Series([m.match_score for m in matches])
        if not ranked.is_monotonic_decreasing:
            raise ValueError("matches not sorted by score")

        filtered = engine.rank_matches(requester, profiles, limit=10, filters={"ageRange": {"min": 25, "max": 35}})
        logger.info(f"  With age filter 25-35: {len(filtered)} matches")

        results["ranking"]["status"] = "PASSED"
    except Exception as e:
        logger.error(f"  RANKING TEST FAILED: {e}")
        results["ranking"]["status"] = f"FAILED - {e}"
        import traceback
        traceback.print_exc()

    # =========================================================================
    # Reports
    # =========================================================================
    logger.info("\n" + "=" * 60)
    logger.info("TEST 4: Pair and Group Reports")
    logger.info("=" * 60)

    try:
        quiz_users = [p for p in profiles if p.has_quiz_data()]
        report = engine.generate_pair_report(quiz_users[0], quiz_users[1])
        logger.info(f"  Pair report: {report.overall_compatibility} - {report.summary}")

        group = engine.generate_group_report(quiz_users[:5])
        logger.info(f"  Group report: {group.overall_compatibility} - {group.summary}")
        results["reports"]["status"] = "PASSED"
    except Exception as e:
        logger.error(f"  REPORT TEST FAILED: {e}")
        results["reports"]["status"] = f"FAILED - {e}"
        import traceback
        traceback.print_exc()

    # =========================================================================
    # Summary
    # =========================================================================
    logger.info("\n" + "=" * 60)
    logger.info("SMOKE TEST SUMMARY")
    logger.info("=" * 60)

    all_passed = True
    for stage, result in results.items():
        status = result.get("status", "NOT RUN")
        logger.info(f"  {stage.upper()}: {status}")
        if status != "PASSED":
            all_passed = False

    if all_passed:
        logger.info("\n  ALL TESTS PASSED")
        return 0
    else:
        logger.error("\n  SOME TESTS FAILED")
        return 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Smoke test the matching core")
    parser.add_argument("--pool-size", type=int, default=200, help="Synthetic profiles to generate")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    args = parser.parse_args()
    sys.exit(run_smoke_test(args.pool_size, args.seed))
