from __future__ import annotations

from services.cost_engine import HardwareCostResult

from ..tab_registry import DashboardActions, DashboardState, register_tab
from .common import render_breakdown, run_calculator


@register_tab("hardware", "Hardware Costs")
def render(state: DashboardState, actions: DashboardActions) -> None:
    st = state.st
    catalogs = state.catalogs

    gpus = catalogs.hardware.where(lambda hw: hw.price_usd is not None)
    servers = catalogs.servers
    deployments = catalogs.deployments.where(lambda dep: dep.provider_managed or dep.rack is not None)

    st.subheader("AI Hardware Cost Calculator")
    st.caption(
        "Total cost of AI hardware including GPUs, servers, infrastructure, maintenance and depreciation."
    )

    c0, c1, c2 = st.columns(3)
    c0.selectbox(
        "GPU Type",
        gpus.ids(),
        format_func=lambda k: f"{gpus[k].display_name} (~${gpus[k].price_usd / 1000:,.1f}K)",
        key="hw_gpu_id",
    )
    c1.number_input("Number of GPUs", min_value=1, max_value=1000, step=1, key="hw_gpu_count")
    c2.selectbox(
        "Server Configuration",
        servers.ids(),
        format_func=lambda k: f"{servers[k].display_name} (${servers[k].base_cost_usd:,.0f})",
        key="hw_server_id",
    )

    c3, c4, c5 = st.columns(3)
    c3.selectbox(
        "Deployment Type",
        deployments.ids(),
        format_func=lambda k: deployments[k].display_name,
        key="hw_deployment_id",
    )
    c4.number_input("Depreciation Period (Years)", min_value=1, max_value=10, step=1, key="hw_depreciation_years")
    c5.number_input(
        "Utilization (%)",
        min_value=1.0,
        max_value=100.0,
        step=1.0,
        help="Below 30% utilization the annual depreciation is scaled by 100 / utilization.",
        key="hw_utilization_percent",
    )

    result = run_calculator(state, actions, "hardware")
    if not isinstance(result, HardwareCostResult):
        return

    st.divider()
    m0, m1, m2 = st.columns(3)
    m0.metric("Total Annual Cost", actions.format_usd(result.total))
    m1.metric("Capital (GPU + Server + Infra)", actions.format_usd(
        result.gpu_cost + result.server_cost + result.infrastructure_cost
    ))
    m2.metric("Utilization multiplier", f"{result.utilization_multiplier:.2f}×")

    render_breakdown(
        state,
        actions,
        result,
        heading="Cost Breakdown",
        csv_name="hardware_costs.csv",
        key="hardware",
    )
