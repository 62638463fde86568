from __future__ import annotations

"""Result formatting: console summary, share text and JSON export."""

import json
from pathlib import Path

from ..session.timer import format_clock
from .scoring import ResultReport


def format_summary(report: ResultReport) -> str:
    """Return a human-readable summary of a result report."""
    lines = [
        f"Score: {report.score}/{report.max_score}  ({report.percentage}%)",
        f"Accuracy: {report.accuracy}%  Percentile: {report.percentile:.1f}",
        f"Correct: {report.correct}  Wrong: {report.incorrect}  Skipped: {report.unattempted}",
        f"Time: {format_clock(report.total_time_seconds)}  (avg {report.avg_time_per_attempt}s per attempt)",
        f"Verdict: {report.verdict.title} - {report.verdict.message}",
    ]
    for b in report.by_subject:
        if b.total == 0:
            continue
        lines.append(f"{b.subject.value}: {b.correct}/{b.total} correct, {b.accuracy}% accuracy")
    return "\n".join(lines)


def share_text(report: ResultReport) -> str:
    return (
        f"JEE Genius Result\nScore: {report.score}/{report.max_score}\n"
        f"Accuracy: {report.accuracy}%\nPercentile: {report.percentile:.1f}%ile\n\n"
        "Try it now! #JEEGenius"
    )


def write_report(report: ResultReport, path: str) -> None:
    """Write the report as JSON to path."""
    p = Path(path)
    with p.open("w", encoding="utf-8") as f:
        json.dump(report.to_json(), f, indent=2)
