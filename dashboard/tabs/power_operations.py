from __future__ import annotations

from features import format_kw, format_rate
from services.cost_engine import OperationsCostResult

from ..tab_registry import DashboardActions, DashboardState, register_tab
from .common import render_breakdown, run_calculator


@register_tab("operations", "Power & Operations")
def render(state: DashboardState, actions: DashboardActions) -> None:
    st = state.st
    catalogs = state.catalogs

    hardware = catalogs.hardware
    regions = catalogs.regions
    deployments = catalogs.deployments

    st.subheader("AI Power & Operations Cost Calculator")
    st.caption("Power consumption and operational costs for AI deployments at scale.")

    c0, c1, c2 = st.columns(3)
    c0.selectbox(
        "Hardware Type",
        hardware.ids(),
        format_func=lambda k: f"{hardware[k].display_name} ({hardware[k].power_watts:g}W)",
        key="ops_hardware_id",
    )
    c1.number_input("Number of Nodes", min_value=1, max_value=10_000, step=1, key="ops_node_count")
    c2.number_input("Utilization Rate (%)", min_value=1.0, max_value=100.0, step=1.0, key="ops_utilization_percent")

    c3, c4, c5 = st.columns(3)
    c3.selectbox(
        "Region",
        regions.ids(),
        format_func=lambda k: (
            f"{regions[k].display_name} (Comm: {format_rate(regions[k].commercial_rate_usd_per_kwh)}, "
            f"Ind: {format_rate(regions[k].industrial_rate_usd_per_kwh)})"
        ),
        key="ops_region_id",
    )
    c4.selectbox(
        "Deployment Type",
        deployments.ids(),
        format_func=lambda k: f"{deployments[k].display_name} (PUE {deployments[k].default_pue:g})",
        key="ops_deployment_id",
    )
    c5.number_input("Operational Days/Year", min_value=1, max_value=365, step=1, key="ops_operational_days")

    c6, c7 = st.columns(2)
    use_default_pue = c6.checkbox("Use deployment default PUE", key="ops_use_default_pue")
    c7.number_input(
        "Custom PUE",
        min_value=1.0,
        max_value=3.0,
        step=0.1,
        disabled=use_default_pue,
        key="ops_pue",
    )

    overrides = {"pue": None} if use_default_pue else {}
    result = run_calculator(state, actions, "operations", **overrides)
    if not isinstance(result, OperationsCostResult):
        return

    st.divider()
    m0, m1, m2, m3 = st.columns(4)
    m0.metric("Facility Power", format_kw(result.total_power_kw, decimals=2))
    m1.metric("Daily Power Cost", actions.format_usd(result.daily_power_cost))
    m2.metric("Total Operational Cost", actions.format_usd(result.total_operational_cost))
    m3.metric("Annual Carbon", actions.format_carbon(result.carbon_footprint_kg))

    render_breakdown(
        state,
        actions,
        result,
        heading="Power & Cost Analysis",
        csv_name="power_operations_costs.csv",
        key="operations",
    )
