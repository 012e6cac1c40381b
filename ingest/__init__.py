from .leetcode import (
    fetch_contest_stats,
    fetch_problem_stats,
    fetch_topic_stats,
    fetch_yearly_activity,
)

__all__ = [
    "fetch_contest_stats",
    "fetch_problem_stats",
    "fetch_topic_stats",
    "fetch_yearly_activity",
]
