import pytest

from etl import scoring
from etl.models import (
    ActivityFacts,
    ContestFacts,
    ProblemsSolved,
    Rank,
    ScoreInput,
    TopicStat,
)


def _topic(name, solved):
    return TopicStat(name=name, problems_solved=solved, is_advanced=scoring.is_advanced_topic(name))


def test_problem_solving_zero():
    assert scoring.calculate_problem_solving_score(0, 0, 0) == 0


def test_problem_solving_reaches_cap_at_max_raw():
    assert scoring.calculate_problem_solving_score(10000, 0, 0) == pytest.approx(400)
    assert scoring.calculate_problem_solving_score(10**6, 10**6, 10**6) == 400


def test_problem_solving_monotonic_in_each_difficulty():
    base = scoring.calculate_problem_solving_score(20, 20, 20)
    assert scoring.calculate_problem_solving_score(21, 20, 20) >= base
    assert scoring.calculate_problem_solving_score(20, 21, 20) >= base
    assert scoring.calculate_problem_solving_score(20, 20, 21) >= base
    # a hard solve is worth more than a medium, which beats an easy
    assert (
        scoring.calculate_problem_solving_score(0, 0, 1)
        > scoring.calculate_problem_solving_score(0, 1, 0)
        > scoring.calculate_problem_solving_score(1, 0, 0)
    )


def test_topic_coverage_empty():
    assert scoring.calculate_topic_coverage_score([]) == 0


def test_topic_coverage_single_covered_topic_is_full():
    assert scoring.calculate_topic_coverage_score([_topic("Array", 5)]) == 200


def test_topic_coverage_balance_floor():
    # coverage 1/2; std 5 / max 10 -> 0.5, floored to 0.6
    score = scoring.calculate_topic_coverage_score([_topic("Array", 10), _topic("String", 0)])
    assert score == pytest.approx(60)


def test_topic_coverage_all_zero_does_not_divide_by_zero():
    assert scoring.calculate_topic_coverage_score([_topic("Array", 0), _topic("String", 0)]) == 0


def test_contest_non_participant_gets_baseline():
    assert scoring.calculate_contest_performance_score(3000, 1, 30000, False) == 60
    assert scoring.calculate_contest_performance_score(0, 0, 0, False) == 60


def test_contest_top_rank_and_rating():
    assert scoring.calculate_contest_performance_score(3500, 0, 100, True) == pytest.approx(200)


def test_contest_zero_participants_uses_rating_only():
    assert scoring.calculate_contest_performance_score(1750, 10, 0, True) == pytest.approx(40)


def test_contest_clamped_at_zero():
    assert scoring.calculate_contest_performance_score(0, 200, 100, True) == 0


def test_consistency_caps_at_100():
    assert scoring.calculate_consistency_score(90, 70) == 100


def test_consistency_partial():
    assert scoring.calculate_consistency_score(45, 14) == pytest.approx(40)
    assert scoring.calculate_consistency_score(0, 0) == 0


def test_advanced_topics_ignores_non_advanced():
    topics = [_topic("Array", 500), _topic("String", 300)]
    assert scoring.calculate_advanced_topics_score(topics) == 0


def test_advanced_topics_ratio():
    topics = [_topic("Graph", 5), _topic("Trie", 4), _topic("Array", 50)]
    assert scoring.calculate_advanced_topics_score(topics) == pytest.approx(50)


def test_advanced_topic_list_is_exact_match():
    assert scoring.is_advanced_topic("Dynamic Programming")
    assert not scoring.is_advanced_topic("dynamic programming")
    assert not scoring.is_advanced_topic("Backtracking")
    assert len(scoring.ADVANCED_TOPICS) == 12


@pytest.mark.parametrize(
    "total, rank",
    [
        (0, Rank.BEGINNER),
        (300, Rank.BEGINNER),
        (301, Rank.INTERMEDIATE),
        (500, Rank.INTERMEDIATE),
        (501, Rank.ADVANCED),
        (700, Rank.ADVANCED),
        (701, Rank.EXPERT),
        (850, Rank.EXPERT),
        (851, Rank.MASTER),
        (1000, Rank.MASTER),
    ],
)
def test_rank_boundaries(total, rank):
    assert scoring.rank_for(total) is rank


def test_user_score_breakdown():
    data = ScoreInput(
        problems_solved=ProblemsSolved(0, 0, 0),
        topics=(_topic("Graph", 5),),
        contest=ContestFacts(participated=False),
        activity=ActivityFacts(active_days_last_90=45, current_streak_days=14),
    )
    result = scoring.calculate_user_score(data)

    assert result.total_score == 400
    assert result.rank is Rank.INTERMEDIATE
    b = result.breakdown
    assert (b.problem_solving, b.topic_coverage, b.contest_performance, b.consistency, b.advanced_topics) == (
        0, 200, 60, 40, 100,
    )


def test_total_is_rounded_from_unrounded_components():
    # consistency 0.667 and contest 0.8 each round to 1, but the total is round(1.467) == 1
    data = ScoreInput(
        contest=ContestFacts(rating=35, global_ranking=0, total_participants=0, participated=True),
        activity=ActivityFacts(active_days_last_90=1, current_streak_days=0),
    )
    result = scoring.calculate_user_score(data)

    assert result.breakdown.consistency == 1
    assert result.breakdown.contest_performance == 1
    assert result.total_score == 1


def test_total_within_bounds_for_maximal_input():
    topics = tuple(_topic(name, 100) for name in sorted(scoring.ADVANCED_TOPICS))
    data = ScoreInput(
        problems_solved=ProblemsSolved(5000, 5000, 5000),
        topics=topics,
        contest=ContestFacts(rating=4000, global_ranking=1, total_participants=30000, participated=True),
        activity=ActivityFacts(active_days_last_90=90, current_streak_days=400),
    )
    result = scoring.calculate_user_score(data)
    assert 0 <= result.total_score <= 1000
    assert result.rank is Rank.MASTER


def test_empty_input_scores_only_contest_baseline():
    result = scoring.calculate_user_score(ScoreInput())
    assert result.total_score == 60
    assert result.rank is Rank.BEGINNER
