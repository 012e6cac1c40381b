"""Report module: writes Markdown reports summarising scored users."""

from pathlib import Path
from typing import List, Sequence, Union

from etl.comparison import compare_profiles
from etl.pipeline import ScoredProfile

BREAKDOWN_LABELS = (
    ("problem_solving", "Problem solving", 400),
    ("topic_coverage", "Topic coverage", 200),
    ("contest_performance", "Contest performance", 200),
    ("consistency", "Consistency", 100),
    ("advanced_topics", "Advanced topics", 100),
)


def render_markdown_report(profiles: Sequence[ScoredProfile]) -> str:
    """Render *profiles*, ranked by total score, as Markdown."""
    lines: List[str] = ["# LeetCode Scorecard", ""]

    failed = [p.username for p in profiles if p.error]
    if failed:
        lines.append(
            f"> Note: data could not be fetched for {', '.join(failed)}; "
            "those users are shown with a zero score."
        )
        lines.append("")

    ranked = sorted(profiles, key=lambda p: p.result.total_score, reverse=True)
    for pos, profile in enumerate(ranked, start=1):
        res = profile.result
        lines.append(f"## {pos}. {profile.username} — {res.total_score} ({res.rank.value})")
        for attr, label, cap in BREAKDOWN_LABELS:
            lines.append(f"- {label}: {getattr(res.breakdown, attr)}/{cap}")
        lines.append("")

    if len(profiles) == 2:
        verdict = compare_profiles(profiles[0], profiles[1])
        lines.append(f"## Verdict: {verdict.winner} beats {verdict.loser}")
        lines.extend(f"  • {p}" for p in verdict.winning_points)
        lines.append("")
        lines.append(f"### How {verdict.loser} can catch up")
        lines.extend(f"  • {p}" for p in verdict.improvement_points)
        lines.append("")

    return "\n".join(lines)


def write_markdown_report(profiles: Sequence[ScoredProfile], output_path: Union[str, Path] = "report.md") -> None:
    """Write the Markdown report for *profiles* to *output_path*.

    Parameters
    ----------
    profiles : Sequence[ScoredProfile]
        Scored users, in any order.
    output_path : Union[str, Path], optional
        Destination file path, by default "report.md".
    """
    Path(output_path).write_text(render_markdown_report(profiles), encoding="utf-8")


__all__ = ["render_markdown_report", "write_markdown_report"]
