"""Console formatting helpers."""

from tunekit.viz.tables import format_metrics_table, format_report

__all__ = ["format_metrics_table", "format_report"]
