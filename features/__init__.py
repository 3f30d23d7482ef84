"""Presentation helpers shared by the calculator tabs."""

from .breakdown import (
    breakdown_csv_bytes,
    configuration_summary,
    cost_breakdown_figure,
    result_breakdown_dataframe,
)
from .formatting import format_carbon, format_kw, format_kwh, format_rate, format_usd

__all__ = [
    "breakdown_csv_bytes",
    "configuration_summary",
    "cost_breakdown_figure",
    "format_carbon",
    "format_kw",
    "format_kwh",
    "format_rate",
    "format_usd",
    "result_breakdown_dataframe",
]
