from __future__ import annotations

from catalog import RateClass
from features import format_rate
from services.cost_engine import TokenCostResult
from services.inputs import EnergySource

from ..tab_registry import DashboardActions, DashboardState, register_tab
from .common import render_breakdown, run_calculator

_SOURCE_LABELS = {
    EnergySource.MODEL.value: "Model benchmark",
    EnergySource.GPU.value: "GPU power / throughput",
}


@register_tab("tokens", "Token Electricity")
def render(state: DashboardState, actions: DashboardActions) -> None:
    st = state.st
    session_state = state.session_state
    catalogs = state.catalogs

    models = catalogs.models
    gpus = catalogs.hardware.where(lambda hw: hw.tokens_per_second is not None)
    regions = catalogs.regions
    deployments = catalogs.deployments

    st.subheader("Token to Electricity Cost Calculator")
    st.caption("Energy consumption and electricity cost of AI token generation.")

    st.radio(
        "Energy per token from",
        list(_SOURCE_LABELS),
        format_func=lambda k: _SOURCE_LABELS[k],
        horizontal=True,
        key="tok_energy_source",
    )
    gpu_mode = session_state.get("tok_energy_source") == EnergySource.GPU.value

    c0, c1, c2 = st.columns(3)
    c0.selectbox(
        "Model Type",
        models.ids(),
        format_func=lambda k: f"{models[k].display_name} ({models[k].kwh_per_token:g} kWh/token)",
        disabled=gpu_mode,
        key="tok_model_id",
    )
    c1.selectbox(
        "GPU Type (for GPU-derived energy)",
        gpus.ids(),
        format_func=lambda k: f"{gpus[k].display_name} ({gpus[k].power_watts:g}W, {gpus[k].tokens_per_second:g} tok/s)",
        disabled=not gpu_mode,
        key="tok_gpu_id",
    )
    # Label with the tariff the selected deployment is billed at.
    deployment = deployments.get(session_state.get("tok_deployment_id", ""))
    rate_class = deployment.rate_class if deployment is not None else RateClass.COMMERCIAL
    c2.selectbox(
        "Region",
        regions.ids(),
        format_func=lambda k: f"{regions[k].display_name} ({format_rate(regions[k].rate_for(rate_class))})",
        key="tok_region_id",
    )

    c3, c4, c5 = st.columns(3)
    c3.number_input("Number of Tokens", min_value=1, max_value=1_000_000_000_000, step=100_000, key="tok_tokens")
    c4.selectbox(
        "Deployment Type",
        deployments.ids(),
        format_func=lambda k: deployments[k].display_name,
        key="tok_deployment_id",
    )
    use_default_pue = c5.checkbox("Use deployment default PUE", key="tok_use_default_pue")
    c5.number_input(
        "PUE (Power Usage Effectiveness)",
        min_value=1.0,
        max_value=3.0,
        step=0.1,
        disabled=use_default_pue,
        key="tok_pue",
    )

    overrides = {"pue": None} if use_default_pue else {}
    result = run_calculator(state, actions, "tokens", **overrides)
    if not isinstance(result, TokenCostResult):
        return

    st.divider()
    m0, m1, m2 = st.columns(3)
    m0.metric("Electricity Cost", actions.format_usd(result.electricity_cost, decimals=4))
    m1.metric("Energy Consumption", actions.format_kwh(result.energy_consumption_kwh))
    m2.metric("Cost per 1M tokens", actions.format_usd(result.cost_per_1m_tokens, decimals=4))

    render_breakdown(
        state,
        actions,
        result,
        heading="Energy & Cost Analysis",
        csv_name="token_electricity_costs.csv",
        key="tokens",
    )
