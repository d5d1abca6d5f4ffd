"""Tests for the engine facade and the command-line runner."""
import json
import sys

import pytest

from watchmatch.engine import CompatibilityEngine, create_engine
from watchmatch.filtering import FilterValidationError
from watchmatch.ids import SequentialIdGenerator
from watchmatch.configs import load_config
from watchmatch import run

from profile_builder import NOW, ProfileBuilder


@pytest.fixture
def engine(clock):
    return create_engine(
        match_id_generator=SequentialIdGenerator("match"),
        quiz_id_generator=SequentialIdGenerator("quiz"),
        clock=clock,
    )


def _records():
    return [
        ProfileBuilder("u1").with_age(30).with_favorite(550, "Fight Club").with_binge(4).build_record(),
        ProfileBuilder("u2").with_age(31).with_favorite(550, "Fight Club").with_binge(4).build_record(),
        ProfileBuilder("u3").with_age(45).with_binge(9).build_record(),
    ]


def test_invalid_config_rejected():
    config = load_config()
    del config["scoring"]
    with pytest.raises(ValueError):
        CompatibilityEngine(config)


def test_score_and_rank(engine):
    profiles = [engine.load_profile(r) for r in _records()]
    result = engine.score_pair(profiles[0], profiles[1])
    assert result.score == 10 + 25 + 15

    matches = engine.rank_matches(profiles[0], profiles, limit=5)
    assert [m.user2_id for m in matches] == ["u2", "u3"]
    assert matches[0].id == "match_1"
    assert matches[0].created_at == NOW


def test_rank_accepts_filter_dict(engine):
    profiles = [engine.load_profile(r) for r in _records()]
    matches = engine.rank_matches(profiles[0], profiles, filters={"ageRange": {"min": 25, "max": 35}})
    assert [m.user2_id for m in matches] == ["u2"]
    with pytest.raises(FilterValidationError):
        engine.rank_matches(profiles[0], profiles, filters={"locationRadius": -5})


def test_quiz_and_archetypes(engine, max_answers):
    attempt = engine.process_quiz_completion("u1", max_answers)
    assert attempt.id == "quiz_1"
    assert attempt.completed_at == NOW

    profile = engine.load_profile(_records()[2])
    result = engine.classify_archetype(profile)
    assert result.primary.type == "marathon_viewer"
    annotated = engine.annotate_with_archetype(profile)
    assert annotated.archetype == "marathon_viewer" and profile.archetype is None
    assert engine.archetype_compatibility("critic", "critic") == 95


def test_reports(engine, max_answers):
    a = engine.load_profile(ProfileBuilder("a").with_quiz(engine.process_quiz_completion("a", max_answers)).build_record())
    b = engine.load_profile(ProfileBuilder("b").with_quiz(engine.process_quiz_completion("b", max_answers)).build_record())
    assert engine.generate_pair_report(a, b).overall_compatibility == 100
    assert engine.generate_group_report([a, b]).overall_compatibility == 100


def test_run_matching_writes_results(tmp_path):
    profiles_path = tmp_path / "profiles.json"
    profiles_path.write_text(json.dumps(_records()))
    output_path = tmp_path / "out" / "matches.json"

    results = run.run_matching(str(profiles_path), "u1", limit=1, output_path=str(output_path))
    assert [m["user2Id"] for m in results["matches"]] == ["u2"]
    assert results["report"] is None
    with open(output_path) as f:
        assert json.load(f)["matches"][0]["matchScore"] == 50


def test_run_matching_with_report(tmp_path):
    profiles_path = tmp_path / "profiles.json"
    profiles_path.write_text(json.dumps(_records()))
    results = run.run_matching(str(profiles_path), "u1", with_report=True)
    assert results["report"]["users"]["user2"]["id"] == "u2"
    assert results["report"]["overallCompatibility"] == 0


def test_main_exit_codes(tmp_path, monkeypatch):
    profiles_path = tmp_path / "profiles.json"
    profiles_path.write_text(json.dumps(_records()))

    monkeypatch.setattr(sys, "argv", ["run", "--profiles", str(profiles_path), "--user", "u1"])
    assert run.main() == 0

    monkeypatch.setattr(sys, "argv", ["run", "--profiles", str(profiles_path), "--user", "nobody"])
    assert run.main() == 1

    monkeypatch.setattr(sys, "argv", [
        "run", "--profiles", str(profiles_path), "--user", "u1", "--filters", '{"locationRadius": -1}',
    ])
    assert run.main() == 1
