"""Tests for configuration loading and the weights built from it."""
import pytest
import yaml

from watchmatch.archetypes.classifier import ArchetypeCompatibilityConfig
from watchmatch.configs import DEFAULT_CONFIG_PATH, get_config_value, load_config, validate_config
from watchmatch.quiz.scoring import QuizScoringConfig
from watchmatch.scoring import ScoringWeights


@pytest.fixture
def config():
    return load_config()


def test_default_config_is_valid(config):
    assert validate_config(config) == []


def test_default_config_matches_code_defaults(config):
    assert ScoringWeights.from_config(config) == ScoringWeights()
    assert QuizScoringConfig.from_config(config) == QuizScoringConfig()
    assert ArchetypeCompatibilityConfig.from_config(config) == ArchetypeCompatibilityConfig()


def test_get_config_value(config):
    assert get_config_value(config, "scoring.per_item.shared_like") == 30
    assert get_config_value(config, "scoring.per_item.missing", default=7) == 7
    assert get_config_value(config, "global.active_window_days") == 30


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


def test_empty_file_raises(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    with pytest.raises(ValueError):
        load_config(str(path))


def test_validate_reports_problems(config):
    config["quiz"]["answer_weight"] = 0.6
    config["scoring"]["per_item"]["shared_like"] = -1
    config["scoring"]["quiz_share"] = 1.5
    del config["description"]
    issues = validate_config(config)
    assert len(issues) == 4
    assert "Missing required section: description" in issues


def test_overrides_flow_into_weights(tmp_path):
    with open(DEFAULT_CONFIG_PATH) as f:
        raw = yaml.safe_load(f)
    raw["scoring"]["per_item"]["shared_favorite"] = 40
    raw["scoring"]["binge"]["tiers"] = [[0, 20], [2, 10]]
    raw["global"]["active_window_days"] = 14
    path = tmp_path / "custom.yaml"
    path.write_text(yaml.safe_dump(raw))

    weights = ScoringWeights.from_config(load_config(str(path)))
    assert weights.shared_favorite == 40
    assert weights.binge_tiers == [(0.0, 20.0), (2.0, 10.0)]
    assert weights.active_window_days == 14


def test_weights_validation():
    assert ScoringWeights().validate() == []
    assert ScoringWeights(base_score=120).validate()
    assert ScoringWeights(debate_share=2).validate()
    assert ScoringWeights(binge_tiers=[(3, 7), (1, 12)]).validate()


def test_weights_from_flat_dict():
    weights = ScoringWeights.from_dict({"shared_like": 20, "marathon_tiers": [[1, 5]], "unknown": 1})
    assert weights.shared_like == 20
    assert weights.marathon_tiers == [(1.0, 5.0)]
