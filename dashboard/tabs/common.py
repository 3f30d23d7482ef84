"""Shared rendering helpers for the calculator tabs."""

from __future__ import annotations

from typing import Any, Optional

import pandas as pd

from features import (
    breakdown_csv_bytes,
    configuration_summary,
    cost_breakdown_figure,
    result_breakdown_dataframe,
)
from services.cost_engine import CalculationResult
from services.errors import InvalidInputError, UnknownCatalogKeyError

from ..tab_registry import DashboardActions, DashboardState


def run_calculator(
    state: DashboardState, actions: DashboardActions, calculator: str, **overrides: Any
) -> Optional[CalculationResult]:
    """Recompute ``calculator`` from the current widget values.

    Lookup and range errors are shown inline and ``None`` is returned so the
    other tabs keep rendering.
    """

    try:
        return actions.recompute(state.manager, state.session_state, calculator, **overrides)
    except (InvalidInputError, UnknownCatalogKeyError) as exc:
        state.st.error(str(exc))
        return None


def _display_value(value: float, unit: str, actions: DashboardActions) -> str:
    if unit.startswith("USD"):
        suffix = unit[3:]
        decimals = 6 if abs(value) < 0.01 and value != 0 else 2
        return actions.format_usd(value, decimals=decimals) + suffix
    if unit == "kWh":
        return actions.format_kwh(value)
    if unit == "kg CO2e":
        return actions.format_carbon(value)
    return f"{value:,.4f} {unit}"


def render_breakdown(
    state: DashboardState,
    actions: DashboardActions,
    result: CalculationResult,
    *,
    heading: str,
    csv_name: str,
    key: str,
) -> None:
    """Breakdown table, configuration summary, chart and CSV download for ``result``."""

    st = state.st
    calculator_input = state.manager.session(key).input

    df = result_breakdown_dataframe(result)
    display = pd.DataFrame(
        {
            "Component": df["Component"],
            "Value": [_display_value(float(v), u, actions) for v, u in zip(df["Value"], df["Unit"])],
        }
    )

    col_left, col_right = st.columns(2)
    with col_left:
        st.markdown(f"#### {heading}")
        st.dataframe(display, width="stretch", hide_index=True)
    with col_right:
        st.markdown("#### Configuration Summary")
        summary = configuration_summary(calculator_input, result, state.catalogs)
        st.dataframe(pd.DataFrame(summary), width="stretch", hide_index=True)

    st.plotly_chart(cost_breakdown_figure(result), width="stretch", key=f"{key}_breakdown_chart")

    st.download_button(
        "Download CSV",
        breakdown_csv_bytes(result),
        file_name=csv_name,
        mime="text/csv",
        key=f"{key}_download",
    )


__all__ = ["render_breakdown", "run_calculator"]
