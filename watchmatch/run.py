"""
Command-line runner for the matching core.

Ranks a JSON pool of profiles for one user and optionally writes the
matches and a pair report for the top match to a JSON file.

Usage:
    python -m watchmatch.run --profiles profiles.json --user u1 --limit 5

The profiles file holds a JSON list of profile records (camelCase or
snake_case keys).
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, Any, List, Optional

from .configs.loader import load_config
from .engine import CompatibilityEngine
from .filtering.filters import FilterValidationError
from .profiles.schema import Profile, ProfileFormatError
from .ranking.ranker import matches_to_frame

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def setup_logging(log_level: str) -> None:
    """Configure logging level from config."""
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.getLogger().setLevel(level)


def load_profiles(path: str, engine: CompatibilityEngine) -> List[Profile]:
    """Read and normalize a JSON list of profile records."""
    with open(path, "r") as f:
        records = json.load(f)
    if not isinstance(records, list):
        raise ValueError(f"Expected a JSON list of profiles in {path}")
    profiles = [engine.load_profile(r) for r in records]
    logger.info(f"Loaded {len(profiles)} profiles from {path}")
    return profiles


def run_matching(
    profiles_path: str,
    user_id: str,
    limit: int = 10,
    config_path: Optional[str] = None,
    filters: Optional[Dict[str, Any]] = None,
    with_report: bool = False,
    output_path: Optional[str] = None
) -> Dict[str, Any]:
    """
    Rank matches for one user of a profile pool.

    Args:
        profiles_path: JSON file with the profile pool
        user_id: Id of the requesting user
        limit: Maximum matches returned
        config_path: Config YAML (default: packaged default.yaml)
        filters: Explicit match filters
        with_report: Also build a pair report for the top match
        output_path: If provided, write the results as JSON

    Returns:
        Dictionary with the matches and the optional report
    """
    config = load_config(config_path)
    setup_logging(config.get("global", {}).get("log_level", "INFO"))

    engine = CompatibilityEngine(config)
    profiles = load_profiles(profiles_path, engine)

    by_id = {p.id: p for p in profiles}
    if user_id not in by_id:
        raise KeyError(f"User {user_id!r} not found in {profiles_path}")
    requester = by_id[user_id]

    matches = engine.rank_matches(requester, profiles, limit=limit, filters=filters)
    results: Dict[str, Any] = {
        "userId": user_id,
        "matches": [m.to_dict() for m in matches],
        "report": None,
    }

    if matches:
        logger.info("\n" + matches_to_frame(matches).to_string(index=False))

    if with_report and matches:
        report = engine.generate_pair_report(requester, by_id[matches[0].user2_id])
        results["report"] = report.to_dict()
        logger.info(f"Report summary: {report.summary}")

    if output_path:
        out = Path(output_path)
        out.parent.mkdir(parents=True, exist_ok=True)
        with open(out, "w") as f:
            json.dump(results, f, indent=2)
        logger.info(f"Saved results to {out}")

    return results


def main():
    """Main entry point for the matching runner."""
    parser = argparse.ArgumentParser(
        description="Rank compatibility matches for a user"
    )
    parser.add_argument(
        "--profiles",
        type=str,
        required=True,
        help="Path to a JSON list of profiles"
    )
    parser.add_argument(
        "--user",
        type=str,
        required=True,
        help="Id of the user to rank matches for"
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=10,
        help="Maximum number of matches"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to configuration file (default: packaged defaults)"
    )
    parser.add_argument(
        "--filters",
        type=str,
        default=None,
        help="Match filters as a JSON object, e.g. '{\"ageRange\": {\"min\": 25, \"max\": 35}}'"
    )
    parser.add_argument(
        "--report",
        action="store_true",
        help="Also generate a pair report for the top match"
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Write results to this JSON file"
    )

    args = parser.parse_args()

    try:
        filters = json.loads(args.filters) if args.filters else None
        run_matching(
            args.profiles,
            args.user,
            limit=args.limit,
            config_path=args.config,
            filters=filters,
            with_report=args.report,
            output_path=args.output,
        )
        return 0
    except (FilterValidationError, ProfileFormatError, KeyError, ValueError) as e:
        logger.error(f"Matching failed: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Matching failed with error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
