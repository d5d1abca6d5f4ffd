"""
Configuration loading and validation.

This module handles loading of YAML configuration files and
validates that all required fields are present.
"""

import logging
from pathlib import Path
from typing import Dict, Any, List, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "default.yaml"


def load_config(filepath: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        filepath: Path to the YAML configuration file (default: packaged
            default.yaml)

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
    """
    path = Path(filepath) if filepath else DEFAULT_CONFIG_PATH
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    logger.info(f"Loading configuration from {path}")
    with open(path, "r") as f:
        config = yaml.safe_load(f)

    if config is None:
        raise ValueError(f"Configuration file is empty: {path}")

    return config


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration and return list of warnings/errors.

    Args:
        config: Configuration dictionary

    Returns:
        List of warning/error messages (empty if valid)
    """
    issues = []

    required_sections = ["global", "quiz", "archetypes", "scoring", "description"]
    for section in required_sections:
        if section not in config:
            issues.append(f"Missing required section: {section}")

    # Quiz comparator weights sum to 1
    if "quiz" in config:
        quiz = config["quiz"]
        total = (
            quiz.get("category_weight", 0.4)
            + quiz.get("archetype_weight", 0.3)
            + quiz.get("answer_weight", 0.3)
        )
        if abs(total - 1.0) > 0.01:
            issues.append(f"Quiz comparator weights don't sum to 1: {total}")

        threshold = quiz.get("archetype_threshold", 65)
        if not 0 <= threshold <= 100:
            issues.append(f"quiz.archetype_threshold must be in [0, 100], got {threshold}")

    if "scoring" in config:
        scoring = config["scoring"]
        if scoring.get("base_score", 10) < 0:
            issues.append("scoring.base_score must be non-negative")
        for name, weight in scoring.get("per_item", {}).items():
            if weight < 0:
                issues.append(f"scoring.per_item.{name} must be non-negative, got {weight}")
        for share in ("quiz_share", "archetype_share", "debate_share"):
            value = scoring.get(share, 0.0)
            if not 0 <= value <= 1:
                issues.append(f"scoring.{share} must be in [0, 1], got {value}")

    if "global" in config:
        window = config["global"].get("active_window_days", 30)
        if window <= 0:
            issues.append(f"global.active_window_days must be positive, got {window}")

    return issues


def get_config_value(config: Dict[str, Any], path: str, default: Any = None) -> Any:
    """
    Get a nested configuration value using dot notation.

    Args:
        config: Configuration dictionary
        path: Dot-separated path (e.g., "scoring.per_item.shared_like")
        default: Default value if path doesn't exist

    Returns:
        Configuration value or default
    """
    keys = path.split(".")
    value = config
    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default
    return value
