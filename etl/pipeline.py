"""Per-user scoring pipeline: fetch, assemble, score.

``compute_score`` fires the four upstream reads concurrently (problem
stats, tag stats, contest stats, merged activity), joins them, then hands
an assembled :class:`ScoreInput` to the pure scorer.  It never raises: any
failed read is logged and the canonical zero result comes back instead.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional

from etl import activity as activity_mod
from etl import scoring
from etl.models import (
    ActivityFacts,
    AggregatedActivity,
    ContestFacts,
    ProblemsSolved,
    ScoreInput,
    ScoreResult,
    TopicStat,
    ZERO_SCORE,
)
from ingest import leetcode
from ingest.leetcode import FetchError, FetchOk, FetchResult

logger = logging.getLogger(__name__)

ACTIVITY_WINDOW_DAYS = 90
SKILL_BUCKETS = ("fundamental", "intermediate", "advanced")


@dataclass(frozen=True)
class Sources:
    """The upstream reads ``compute_score`` depends on (swappable in tests)."""

    problem_stats: Callable[[str], FetchResult] = leetcode.fetch_problem_stats
    topic_stats: Callable[[str], FetchResult] = leetcode.fetch_topic_stats
    contest_stats: Callable[[str], FetchResult] = leetcode.fetch_contest_stats
    yearly_activity: Callable[[str, int], FetchResult] = leetcode.fetch_yearly_activity


@dataclass(frozen=True)
class ScoredProfile:
    """A score plus the raw facts it came from (used by reports/comparison)."""

    username: str
    result: ScoreResult
    inputs: Optional[ScoreInput] = None
    activity: Optional[AggregatedActivity] = None
    error: Optional[str] = None


def flatten_topics(skills: Mapping[str, List[Dict[str, Any]]]) -> List[TopicStat]:
    """Flatten the three skill buckets into one list of :class:`TopicStat`.

    ``is_advanced`` comes from :data:`etl.scoring.ADVANCED_TOPICS`, not from
    the bucket a tag arrived in.
    """
    topics: List[TopicStat] = []
    for bucket in SKILL_BUCKETS:
        for tag in skills.get(bucket, []):
            name = tag.get("tagName", "")
            topics.append(TopicStat(
                name=name,
                problems_solved=int(tag.get("problemsSolved") or 0),
                is_advanced=scoring.is_advanced_topic(name),
            ))
    return topics


def build_score_input(
    stats: Mapping[str, Any],
    skills: Mapping[str, List[Dict[str, Any]]],
    contest: Mapping[str, Any],
    activity: AggregatedActivity,
    now: Optional[float] = None,
) -> ScoreInput:
    """Assemble a :class:`ScoreInput` from the raw upstream payloads."""
    reference = now if now is not None else time.time()
    active_last_90 = activity_mod.active_days_in_window(
        activity.submission_calendar, ACTIVITY_WINDOW_DAYS, reference
    )

    return ScoreInput(
        problems_solved=ProblemsSolved(
            easy=int(stats.get("easySolved") or 0),
            medium=int(stats.get("mediumSolved") or 0),
            hard=int(stats.get("hardSolved") or 0),
        ),
        topics=tuple(flatten_topics(skills)),
        contest=ContestFacts(
            rating=float(contest.get("contestRating") or 0),
            global_ranking=int(contest.get("contestGlobalRanking") or 0),
            total_participants=int(contest.get("totalParticipants") or 0),
            participated=int(contest.get("contestAttend") or 0) > 0,
        ),
        activity=ActivityFacts(
            active_days_last_90=active_last_90,
            current_streak_days=activity.streak or 0,
        ),
    )


def score_profile(
    username: str,
    sources: Optional[Sources] = None,
    now: Optional[float] = None,
) -> ScoredProfile:
    """Fetch and score *username*, keeping the intermediate facts."""
    sources = sources or Sources()
    reference = now if now is not None else time.time()
    today = datetime.fromtimestamp(reference).date()

    with ThreadPoolExecutor(max_workers=min(activity_mod.MAX_WORKERS, 4)) as pool:
        f_stats = pool.submit(sources.problem_stats, username)
        f_skills = pool.submit(sources.topic_stats, username)
        f_contest = pool.submit(sources.contest_stats, username)
        f_activity = pool.submit(
            activity_mod.aggregate_activity, username, sources.yearly_activity, today
        )
        futures = {"stats": f_stats, "skills": f_skills, "contest": f_contest, "activity": f_activity}

        results: Dict[str, Any] = {}
        for name, fut in futures.items():
            try:
                results[name] = fut.result()
            except Exception as exc:  # noqa: BLE001
                logger.exception("Fetching %s for %s raised", name, username)
                results[name] = FetchError("transport", str(exc))

    agg = results.pop("activity")
    if isinstance(agg, FetchError):
        return _zero(username, agg)

    payloads: Dict[str, Any] = {}
    for name, res in results.items():
        if isinstance(res, FetchOk):
            payloads[name] = res.value
        else:
            return _zero(username, res)

    try:
        data = build_score_input(payloads["stats"], payloads["skills"], payloads["contest"], agg, reference)
    except (TypeError, ValueError, AttributeError) as exc:
        logger.warning("Malformed payload for %s: %s", username, exc)
        return _zero(username, FetchError("malformed", f"Malformed payload: {exc}"))

    result = scoring.calculate_user_score(data)
    logger.info("Scored %s: %d (%s)", username, result.total_score, result.rank.value)
    return ScoredProfile(username=username, result=result, inputs=data, activity=agg)


def _zero(username: str, err: FetchError) -> ScoredProfile:
    logger.error("Error calculating user score for %s: %s", username, err.user_message)
    return ScoredProfile(username=username, result=ZERO_SCORE, error=err.user_message)


def compute_score(
    username: str,
    sources: Optional[Sources] = None,
    now: Optional[float] = None,
) -> ScoreResult:
    """Return the :class:`ScoreResult` for *username* (zero result on any failure)."""
    return score_profile(username, sources, now).result


__all__ = ["Sources", "ScoredProfile", "flatten_topics", "build_score_input", "score_profile", "compute_score"]
