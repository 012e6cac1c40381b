"""Scoring module: reduce a user's profile to a 0–1000 value score.

The total is the sum of five independent components:

============================  =======  ======================================
Component                     Range    Driver
============================  =======  ======================================
Problem solving               0–400    difficulty-weighted solves, log scaled
Topic coverage                0–200    share of tags with 5+ solves × balance
Contest performance           0–200    percentile and rating blend
Consistency                   0–100    active days in 90 days + streak
Advanced topics               0–100    share of advanced tags with 5+ solves
============================  =======  ======================================

Every function here is pure: no I/O and no shared state.  None of them raise
on degenerate input (empty topic list, zero participants, zero solves); the
affected component is simply 0.
"""

from __future__ import annotations

import math
from typing import Iterable

from etl.models import Rank, ScoreBreakdown, ScoreInput, ScoreResult, TopicStat
from etl.utils import clamp, round_half_up, standard_deviation

MAX_RAW_SOLVE_SCORE = 10000  # raw weighted solves that map to the full 400
MAX_CONTEST_RATING = 3500
CONSISTENCY_WINDOW_DAYS = 90
NO_CONTEST_BASELINE = 0.3  # share of the contest component given to non-participants
MIN_SOLVED_PER_TOPIC = 5

DIFFICULTY_WEIGHTS = {"easy": 1, "medium": 3, "hard": 7}

# Tags counted by the advanced-topics component.  Fixed list, matched by
# exact tag name; not derived from the upstream "advanced" bucket.
ADVANCED_TOPICS = frozenset([
    "Dynamic Programming",
    "Graph",
    "Trie",
    "Union Find",
    "Segment Tree",
    "Binary Indexed Tree",
    "Topological Sort",
    "Suffix Array",
    "Strongly Connected Component",
    "Bipartite Graph",
    "Minimum Spanning Tree",
    "Eulerian Circuit",
])

# (inclusive lower bound, rank), highest first
RANK_THRESHOLDS = (
    (851, Rank.MASTER),
    (701, Rank.EXPERT),
    (501, Rank.ADVANCED),
    (301, Rank.INTERMEDIATE),
)


def is_advanced_topic(name: str) -> bool:
    return name in ADVANCED_TOPICS


def calculate_problem_solving_score(easy: int, medium: int, hard: int) -> float:
    """Difficulty-weighted solve count, log-compressed into 0–400."""
    raw = (
        easy * DIFFICULTY_WEIGHTS["easy"]
        + medium * DIFFICULTY_WEIGHTS["medium"]
        + hard * DIFFICULTY_WEIGHTS["hard"]
    )
    if raw <= 0:
        return 0.0
    score = 400 * math.log(1 + raw) / math.log(1 + MAX_RAW_SOLVE_SCORE)
    return clamp(score, 0, 400)


def calculate_topic_coverage_score(topics: Iterable[TopicStat]) -> float:
    """Breadth across tags, damped by how lopsided the per-tag counts are.

    ``balance = clamp(1 - std / max, 0.6, 1)``; the 0.6 floor keeps a single
    deep specialisation from wiping the component out.
    """
    counts = [t.problems_solved for t in topics]
    if not counts:
        return 0.0

    covered = sum(1 for c in counts if c >= MIN_SOLVED_PER_TOPIC)
    coverage_ratio = covered / len(counts)

    max_dev = max(counts) or 1
    balance = clamp(1 - standard_deviation(counts) / max_dev, 0.6, 1)

    return 200 * coverage_ratio * balance


def calculate_contest_performance_score(
    rating: float,
    global_ranking: int,
    total_participants: int,
    participated: bool,
) -> float:
    """Blend of percentile rank (60%) and normalised rating (40%), 0–200."""
    if not participated:
        return NO_CONTEST_BASELINE * 200

    if total_participants > 0:
        percentile = (total_participants - global_ranking) / total_participants
    else:
        percentile = 0.0
    normalized_rating = clamp(rating / MAX_CONTEST_RATING, 0, 1)

    return clamp(200 * (0.6 * percentile + 0.4 * normalized_rating), 0, 200)


def calculate_consistency_score(active_days_last_90: int, current_streak_days: int) -> float:
    # 60 for activity every day of the window, 5 per streak week up to 40
    active_days_score = active_days_last_90 / CONSISTENCY_WINDOW_DAYS * 60
    streak_score = min(current_streak_days / 7 * 5, 40)
    return min(100, active_days_score + streak_score)


def calculate_advanced_topics_score(topics: Iterable[TopicStat]) -> float:
    advanced = [t for t in topics if t.is_advanced]
    if not advanced:
        return 0.0
    qualified = sum(1 for t in advanced if t.problems_solved >= MIN_SOLVED_PER_TOPIC)
    return qualified / len(advanced) * 100


def rank_for(total_score: int) -> Rank:
    """Map a rounded total score onto its rank tier."""
    for lower, rank in RANK_THRESHOLDS:
        if total_score >= lower:
            return rank
    return Rank.BEGINNER


def calculate_user_score(data: ScoreInput) -> ScoreResult:
    """Score a fully assembled :class:`ScoreInput`.

    The total is rounded from the sum of the *unrounded* components, so it
    can differ by one from the sum of the rounded breakdown.
    """
    solved = data.problems_solved
    contest = data.contest
    activity = data.activity

    problem_solving = calculate_problem_solving_score(solved.easy, solved.medium, solved.hard)
    topic_coverage = calculate_topic_coverage_score(data.topics)
    contest_performance = calculate_contest_performance_score(
        contest.rating, contest.global_ranking, contest.total_participants, contest.participated
    )
    consistency = calculate_consistency_score(
        activity.active_days_last_90, activity.current_streak_days
    )
    advanced_topics = calculate_advanced_topics_score(data.topics)

    total = clamp(
        problem_solving + topic_coverage + contest_performance + consistency + advanced_topics,
        0,
        1000,
    )
    total_score = round_half_up(total)

    return ScoreResult(
        total_score=total_score,
        breakdown=ScoreBreakdown(
            problem_solving=round_half_up(problem_solving),
            topic_coverage=round_half_up(topic_coverage),
            contest_performance=round_half_up(contest_performance),
            consistency=round_half_up(consistency),
            advanced_topics=round_half_up(advanced_topics),
        ),
        rank=rank_for(total_score),
    )


__all__ = [
    "ADVANCED_TOPICS",
    "is_advanced_topic",
    "calculate_problem_solving_score",
    "calculate_topic_coverage_score",
    "calculate_contest_performance_score",
    "calculate_consistency_score",
    "calculate_advanced_topics_score",
    "rank_for",
    "calculate_user_score",
]
