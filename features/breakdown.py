"""Tabular and chart views of calculator results."""

from __future__ import annotations

from typing import Any, Dict, List

import pandas as pd
import plotly.graph_objects as go

from catalog import Catalogs
from services.cost_engine import (
    CalculationResult,
    HardwareCostResult,
    OperationsCostResult,
    TokenCostResult,
)
from services.inputs import (
    CalculationInput,
    EnergySource,
    HardwareCostInput,
    OperationsCostInput,
    TokenCostInput,
)

from .formatting import format_kw, format_rate


def _hardware_rows(result: HardwareCostResult) -> List[Dict[str, Any]]:
    return [
        {"Component": "GPU Cost", "Value": result.gpu_cost, "Unit": "USD", "Cost": True},
        {"Component": "Server Cost", "Value": result.server_cost, "Unit": "USD", "Cost": True},
        {"Component": "Infrastructure Cost", "Value": result.infrastructure_cost, "Unit": "USD", "Cost": True},
        {"Component": "Annual Maintenance", "Value": result.maintenance_cost, "Unit": "USD/yr", "Cost": True},
        {"Component": "Annual Depreciation", "Value": result.depreciation_cost, "Unit": "USD/yr", "Cost": True},
        {"Component": "Total Annual Cost", "Value": result.total, "Unit": "USD", "Cost": False},
    ]


def _token_rows(result: TokenCostResult) -> List[Dict[str, Any]]:
    return [
        {"Component": "Energy Consumption", "Value": result.energy_consumption_kwh, "Unit": "kWh", "Cost": False},
        {"Component": "Electricity Cost", "Value": result.electricity_cost, "Unit": "USD", "Cost": True},
        {"Component": "Carbon Footprint", "Value": result.carbon_footprint_kg, "Unit": "kg CO2e", "Cost": False},
        {"Component": "Cost per 1K tokens", "Value": result.cost_per_1k_tokens, "Unit": "USD", "Cost": False},
        {"Component": "Cost per 1M tokens", "Value": result.cost_per_1m_tokens, "Unit": "USD", "Cost": False},
    ]


def _operations_rows(result: OperationsCostResult) -> List[Dict[str, Any]]:
    return [
        {"Component": "Daily Power Cost", "Value": result.daily_power_cost, "Unit": "USD", "Cost": False},
        {"Component": "Monthly Power Cost", "Value": result.monthly_power_cost, "Unit": "USD", "Cost": False},
        {"Component": "Annual Power Cost", "Value": result.annual_power_cost, "Unit": "USD", "Cost": True},
        {"Component": "Annual Cooling Cost", "Value": result.cooling_cost, "Unit": "USD", "Cost": True},
        {
            "Component": "Operational Overhead",
            "Value": result.total_operational_cost - result.annual_power_cost - result.cooling_cost,
            "Unit": "USD",
            "Cost": True,
        },
        {"Component": "Total Operational Cost", "Value": result.total_operational_cost, "Unit": "USD", "Cost": False},
        {"Component": "Annual Carbon Footprint", "Value": result.carbon_footprint_kg, "Unit": "kg CO2e", "Cost": False},
    ]


def result_breakdown_dataframe(result: CalculationResult) -> pd.DataFrame:
    """Return one row per reported figure.

    The ``Cost`` column flags the rows that are additive components of the
    calculator's headline total, which is what the breakdown chart plots.
    """

    if isinstance(result, HardwareCostResult):
        rows = _hardware_rows(result)
    elif isinstance(result, TokenCostResult):
        rows = _token_rows(result)
    elif isinstance(result, OperationsCostResult):
        rows = _operations_rows(result)
    else:
        raise TypeError(f"Unsupported calculator result: {type(result).__name__}")
    return pd.DataFrame(rows, columns=["Component", "Value", "Unit", "Cost"])


def configuration_summary(
    record: CalculationInput, result: CalculationResult, catalogs: Catalogs
) -> List[Dict[str, str]]:
    """Readable description of the selected configuration."""

    if isinstance(record, HardwareCostInput) and isinstance(result, HardwareCostResult):
        return [
            {"Field": "GPU Model", "Value": catalogs.hardware[record.gpu_id].display_name},
            {"Field": "Total Power Draw", "Value": format_kw(result.total_power_draw_kw)},
            {"Field": "Server Config", "Value": catalogs.servers[record.server_id].display_name},
            {"Field": "Deployment", "Value": catalogs.deployments[record.deployment_id].display_name},
            {"Field": "Racks", "Value": str(result.racks_needed)},
            {"Field": "Utilization multiplier", "Value": f"{result.utilization_multiplier:.2f}×"},
        ]
    if isinstance(record, TokenCostInput) and isinstance(result, TokenCostResult):
        if record.energy_source is EnergySource.GPU:
            source = f"{catalogs.hardware[record.gpu_id].display_name} (GPU-derived)"
        else:
            source = catalogs.models[record.model_id].display_name
        return [
            {"Field": "Energy source", "Value": source},
            {"Field": "kWh per token", "Value": f"{result.kwh_per_token:.6f}"},
            {"Field": "kWh per token (facility)", "Value": f"{result.total_kwh_per_token:.6f}"},
            {"Field": "Region", "Value": catalogs.regions[record.region_id].display_name},
            {"Field": "Electricity Rate", "Value": format_rate(result.electricity_rate)},
            {"Field": "PUE Factor", "Value": f"{result.pue}×"},
        ]
    if isinstance(record, OperationsCostInput) and isinstance(result, OperationsCostResult):
        deployment = catalogs.deployments[record.deployment_id]
        return [
            {"Field": "Hardware", "Value": catalogs.hardware[record.hardware_id].display_name},
            {"Field": "Nominal Power", "Value": format_kw(result.nominal_power_kw)},
            {"Field": "Actual Power", "Value": format_kw(result.actual_power_kw)},
            {"Field": "Facility Power (with PUE)", "Value": format_kw(result.total_power_kw)},
            {"Field": "Deployment", "Value": deployment.display_name},
            {
                "Field": "Electricity Rate",
                "Value": f"{format_rate(result.electricity_rate)} ({deployment.rate_class.value})",
            },
        ]
    raise TypeError(
        f"Input {type(record).__name__} does not match result {type(result).__name__}"
    )


def cost_breakdown_figure(result: CalculationResult, *, title: str = "") -> go.Figure:
    """Horizontal bar chart of the additive cost components of ``result``."""

    df = result_breakdown_dataframe(result)
    costs = df[df["Cost"]]
    fig = go.Figure(
        go.Bar(
            x=costs["Value"].tolist(),
            y=costs["Component"].tolist(),
            orientation="h",
            text=[f"${value:,.2f}" for value in costs["Value"]],
            textposition="auto",
        )
    )
    fig.update_layout(
        title=title or None,
        xaxis_title="USD",
        yaxis=dict(autorange="reversed"),
        height=320,
        margin=dict(l=10, r=10, t=40 if title else 10, b=10),
    )
    return fig


def breakdown_csv_bytes(result: CalculationResult) -> bytes:
    df = result_breakdown_dataframe(result).drop(columns=["Cost"])
    return df.to_csv(index=False).encode("utf-8")


__all__ = [
    "breakdown_csv_bytes",
    "configuration_summary",
    "cost_breakdown_figure",
    "result_breakdown_dataframe",
]
