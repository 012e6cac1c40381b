"""Main orchestrator script.

Score one or more LeetCode users and write a Markdown scorecard:

    python main.py alice bob -o report.md

Each user is fetched and scored fresh on every run.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv

from etl import pipeline, report

# Load environment variables from .env if present (safe-no-op if file missing)
load_dotenv()

# ---------------------------------------------------------------------------
# Logging setup (controlled by LS_LOGLEVEL, default INFO)
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=os.getenv("LS_LOGLEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger(__name__)


def orchestrate(usernames: List[str], output: str) -> List[pipeline.ScoredProfile]:
    """Score every user in *usernames* and write the report to *output*."""
    logger.info("Scoring %d user(s)", len(usernames))

    profiles = [pipeline.score_profile(name) for name in usernames]

    for p in profiles:
        b = p.result.breakdown
        logger.info(
            "%s: %d %s (solve %d, topics %d, contest %d, consistency %d, advanced %d)",
            p.username, p.result.total_score, p.result.rank.value,
            b.problem_solving, b.topic_coverage, b.contest_performance, b.consistency, b.advanced_topics,
        )

    report.write_markdown_report(profiles, output)
    logger.info("Report written → %s", output)
    return profiles


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Score LeetCode profiles on a 0-1000 scale.")
    parser.add_argument("usernames", nargs="+", help="LeetCode usernames to score")
    parser.add_argument(
        "-o", "--output",
        default=os.getenv("LS_REPORT", "report.md"),
        help="Markdown report path (default: %(default)s)",
    )
    args = parser.parse_args(argv)

    orchestrate(args.usernames, args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
