"""Head-to-head verdict between two scored profiles."""

from dataclasses import dataclass, field
from typing import List

from etl.pipeline import ScoredProfile

STREAK_MARGIN = 5
RATING_GAP_FOR_SPEED_TIP = 200


@dataclass
class Verdict:
    winner: str
    loser: str
    winning_points: List[str] = field(default_factory=list)
    improvement_points: List[str] = field(default_factory=list)


def _facts(profile: ScoredProfile):
    data = profile.inputs
    if data is None:
        return 0.0, 0, 0
    return data.contest.rating, data.problems_solved.hard, data.activity.current_streak_days


def compare_profiles(a: ScoredProfile, b: ScoredProfile) -> Verdict:
    """Pick a winner by contest rating (ties go to *a*) and explain why."""

    a_rating = _facts(a)[0]
    b_rating = _facts(b)[0]
    winner, loser = (a, b) if a_rating >= b_rating else (b, a)

    w_rating, w_hard, w_streak = _facts(winner)
    l_rating, l_hard, l_streak = _facts(loser)

    verdict = Verdict(winner=winner.username, loser=loser.username)
    wins = verdict.winning_points
    tips = verdict.improvement_points

    if w_rating > l_rating:
        wins.append(f"Higher contest rating (+{round(w_rating - l_rating)})")
    if w_hard > l_hard:
        wins.append(f"Superior grasp of Hard problems ({w_hard} solved)")
    if w_streak > l_streak + STREAK_MARGIN:
        wins.append(f"Higher consistency with {w_streak} day streak")
    if winner.result.total_score > loser.result.total_score:
        wins.append(
            f"Higher overall score ({winner.result.total_score} vs {loser.result.total_score})"
        )
    if not wins:
        wins.append("Better overall performance metrics")

    if l_hard < w_hard:
        tips.append(f"Focus on Hard problems ({w_hard - l_hard} behind).")
    if abs(w_rating - l_rating) > RATING_GAP_FOR_SPEED_TIP:
        tips.append("Prioritize speed on Medium problems to gain a rank advantage.")
    if loser.result.breakdown.consistency < winner.result.breakdown.consistency:
        tips.append("Build a daily practice streak to lift consistency.")
    if not tips:
        tips.append("Keep solving consistently to close the gap.")

    return verdict


__all__ = ["Verdict", "compare_profiles"]
