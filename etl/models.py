"""Typed records flowing between the ingest layer and the scorer.

All of these are transient: built per request, rendered or returned, then
dropped.  Frozen dataclasses keep the scorer honest about being a pure
function of its input.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple


class Rank(str, Enum):
    """Five-tier label derived from the rounded total score."""

    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"
    EXPERT = "Expert"
    MASTER = "Master"


@dataclass(frozen=True)
class YearlyActivity:
    """One calendar year of activity as returned by a single fetch."""

    year: int
    total_active_days: int
    streak: int
    active_years: Tuple[int, ...]
    submission_calendar: str  # raw JSON string of {epoch-seconds: count}


@dataclass
class AggregatedActivity:
    """All fetched years merged into one activity profile."""

    total_active_days: int = 0
    streak: int = 0
    active_years: List[int] = field(default_factory=list)
    submission_calendar: Dict[int, int] = field(default_factory=dict)


@dataclass(frozen=True)
class TopicStat:
    name: str
    problems_solved: int
    is_advanced: bool = False


@dataclass(frozen=True)
class ProblemsSolved:
    easy: int = 0
    medium: int = 0
    hard: int = 0


@dataclass(frozen=True)
class ContestFacts:
    rating: float = 0.0
    global_ranking: int = 0
    total_participants: int = 0
    participated: bool = False


@dataclass(frozen=True)
class ActivityFacts:
    active_days_last_90: int = 0
    current_streak_days: int = 0


@dataclass(frozen=True)
class ScoreInput:
    """Everything the scorer needs, assembled by the caller."""

    problems_solved: ProblemsSolved = field(default_factory=ProblemsSolved)
    topics: Tuple[TopicStat, ...] = ()
    contest: ContestFacts = field(default_factory=ContestFacts)
    activity: ActivityFacts = field(default_factory=ActivityFacts)


@dataclass(frozen=True)
class ScoreBreakdown:
    problem_solving: int = 0
    topic_coverage: int = 0
    contest_performance: int = 0
    consistency: int = 0
    advanced_topics: int = 0


@dataclass(frozen=True)
class ScoreResult:
    total_score: int = 0
    breakdown: ScoreBreakdown = field(default_factory=ScoreBreakdown)
    rank: Rank = Rank.BEGINNER


ZERO_SCORE = ScoreResult()


__all__ = [
    "Rank",
    "YearlyActivity",
    "AggregatedActivity",
    "TopicStat",
    "ProblemsSolved",
    "ContestFacts",
    "ActivityFacts",
    "ScoreInput",
    "ScoreBreakdown",
    "ScoreResult",
    "ZERO_SCORE",
]
