"""Console formatting for tuning results.

Plotting is out of scope; these helpers render reports as plain text
for the CLI and for logs.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from tunekit.search.base import TuningReport
from tunekit.utils.measures import orientation_sign


def format_metrics_table(metrics: Dict[str, float], title: str = "Metrics") -> str:
    """Format a measurements dictionary as a simple ASCII table.

    Args:
        metrics: Measure name → scalar value mapping.
        title: Table title printed as the header line.

    Returns:
        Multi-line string suitable for ``print()``.
    """
    if not metrics:
        return f"{title}: (no metrics)"

    name_width = max(len(k) for k in metrics)
    lines = [title, "-" * (name_width + 14)]
    for name, value in metrics.items():
        lines.append(f"  {name:<{name_width}}  {value:>10.6f}")
    return "\n".join(lines)


def best_measurements(report: TuningReport) -> Dict[str, float]:
    """Measure name → value for the best entry of *report*."""
    entry = report.best_history_entry
    return {
        getattr(m, "name", repr(m)): float(v)
        for m, v in zip(entry["measure"], entry["measurement"])
    }


def format_report(report: TuningReport, top: Optional[int] = 10) -> str:
    """Summary of a tuning run: best model, its measurements, leaderboard.

    Args:
        report: Report produced by a fitted :class:`TunedModel`.
        top: Number of leaderboard rows (``None`` for all).
    """
    frame = report.to_frame()
    measures = report.best_history_entry["measure"]
    if measures and getattr(measures[0], "name", None) in frame:
        frame = frame.sort_values(
            measures[0].name, ascending=orientation_sign(measures[0]) > 0, kind="stable"
        )
    if top is not None:
        frame = frame.head(top)

    lines = [
        f"Best model: {report.best_model!r}",
        f"Evaluated: {report.n_evaluated}",
        "",
        format_metrics_table(best_measurements(report), title="Best measurements"),
        "",
        frame.to_string(index=False) if len(frame) else "(empty history)",
    ]
    return "\n".join(lines)


def summary_lines(summary: Dict[str, Any]) -> str:
    """Scalar strategy summary fields as ``key: value`` lines."""
    return "\n".join(
        f"  {k}: {v}" for k, v in summary.items() if isinstance(v, (int, float, str))
    )
