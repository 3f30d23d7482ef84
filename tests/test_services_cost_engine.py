import pathlib
import sys
from dataclasses import replace

import pytest

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))

from catalog import load_catalogs
from services import cost_engine
from services.cost_engine import (
    HardwareCostResult,
    OperationsCostResult,
    TokenCostResult,
    compute,
    compute_hardware_costs,
    compute_operations_costs,
    compute_token_costs,
    utilization_multiplier,
)
from services.errors import DegenerateArithmeticError, InvalidInputError, UnknownCatalogKeyError
from services.inputs import EnergySource, HardwareCostInput, OperationsCostInput, TokenCostInput


@pytest.fixture(scope="module")
def catalogs():
    return load_catalogs()


# --- power & operations ---------------------------------------------------


def test_operations_reference_scenario(catalogs):
    record = OperationsCostInput(
        hardware_id="h100",
        node_count=8,
        utilization_percent=61,
        region_id="us",
        deployment_id="cloud",
        pue=1.1,
        operational_days=365,
    )
    result = compute_operations_costs(record, catalogs)

    assert result.actual_power_per_node_w == pytest.approx(427.0)
    assert result.total_power_kw == pytest.approx(8 * 427 / 1000 * 1.1)
    assert result.daily_energy_kwh == pytest.approx(90.1824)
    assert result.daily_power_cost == pytest.approx(13.52736)
    assert result.electricity_rate == 0.15


def test_operations_unit_consistency(catalogs):
    result = compute_operations_costs(OperationsCostInput(operational_days=200), catalogs)

    assert result.monthly_power_cost == pytest.approx(result.daily_power_cost * 30.44, rel=1e-6)
    assert result.annual_power_cost == result.daily_power_cost * 200
    assert result.cooling_cost == result.daily_cooling_cost * 200
    assert result.annual_energy_kwh == pytest.approx(result.daily_energy_kwh * 200)


def test_operations_cooling_is_additive_and_overhead_applies(catalogs):
    result = compute_operations_costs(OperationsCostInput(), catalogs)

    # us cooling multiplier 0.3, cloud overhead 10%
    assert result.cooling_cost == pytest.approx(result.annual_power_cost * 0.3)
    expected = (result.annual_power_cost + result.cooling_cost) * 1.10
    assert result.total_operational_cost == pytest.approx(expected)
    assert result.carbon_footprint_kg == pytest.approx(result.annual_energy_kwh * 0.5)


def test_operations_full_utilization_matches_nominal_power(catalogs):
    result = compute_operations_costs(OperationsCostInput(utilization_percent=100, node_count=3), catalogs)

    assert result.actual_power_per_node_w == 700.0
    assert result.actual_power_kw == pytest.approx(result.nominal_power_kw)


def test_operations_industrial_rate_for_colocation(catalogs):
    result = compute_operations_costs(
        OperationsCostInput(region_id="eu", deployment_id="colo", pue=1.3), catalogs
    )

    assert result.electricity_rate == 0.22


def test_operations_default_pue_when_unset(catalogs):
    result = compute_operations_costs(OperationsCostInput(deployment_id="onprem", pue=None), catalogs)

    assert result.pue == 1.5
    assert result.total_power_kw == pytest.approx(result.actual_power_kw * 1.5)


def test_operations_costs_increase_with_utilization_and_nodes(catalogs):
    base = OperationsCostInput()
    low = compute_operations_costs(replace(base, utilization_percent=40), catalogs)
    high = compute_operations_costs(replace(base, utilization_percent=41), catalogs)
    more_nodes = compute_operations_costs(replace(base, utilization_percent=40, node_count=9), catalogs)

    assert high.daily_power_cost > low.daily_power_cost
    assert high.cooling_cost > low.cooling_cost
    assert high.total_operational_cost > low.total_operational_cost
    assert more_nodes.total_operational_cost > low.total_operational_cost


# --- token electricity ----------------------------------------------------


def test_token_reference_scenario(catalogs):
    record = TokenCostInput(
        model_id="gpt-4", region_id="us", deployment_id="cloud", pue=1.1, tokens=1_000_000
    )
    result = compute_token_costs(record, catalogs)

    assert result.total_kwh_per_token == pytest.approx(0.000187)
    assert result.energy_consumption_kwh == pytest.approx(187.0)
    assert result.electricity_cost == pytest.approx(28.05)
    assert result.cost_per_1m_tokens == pytest.approx(28.05)
    assert result.cost_per_1k_tokens == pytest.approx(0.02805)


def test_token_per_unit_costs_ignore_volume(catalogs):
    small = compute_token_costs(TokenCostInput(tokens=10), catalogs)
    large = compute_token_costs(TokenCostInput(tokens=10_000_000), catalogs)

    assert small.cost_per_1k_tokens == large.cost_per_1k_tokens
    assert small.cost_per_1m_tokens == large.cost_per_1m_tokens
    assert large.electricity_cost == pytest.approx(small.electricity_cost * 1_000_000)


def test_token_gpu_derived_energy(catalogs):
    record = TokenCostInput(
        energy_source=EnergySource.GPU, gpu_id="h100", deployment_id="onprem", pue=1.5, tokens=1000
    )
    result = compute_token_costs(record, catalogs)

    assert result.kwh_per_token == pytest.approx(0.7 / 2800)
    assert result.total_kwh_per_token == pytest.approx(0.7 / 2800 / 0.8 * 1.5)
    assert result.carbon_footprint_kg == pytest.approx(result.energy_consumption_kwh * 0.5)


def test_token_gpu_without_throughput_is_rejected(catalogs):
    record = TokenCostInput(energy_source=EnergySource.GPU, gpu_id="l40s")

    with pytest.raises(InvalidInputError):
        compute_token_costs(record, catalogs)


# --- hardware acquisition -------------------------------------------------


def test_hardware_reference_scenario(catalogs):
    record = HardwareCostInput(
        gpu_id="h100",
        gpu_count=8,
        server_id="custom",
        deployment_id="onprem",
        depreciation_years=3,
        utilization_percent=40,
    )
    result = compute_hardware_costs(record, catalogs)

    assert result.gpu_cost == 224_000
    assert result.server_cost == 15_000
    assert result.infrastructure_cost == 115_000
    assert result.utilization_multiplier == 1.0
    assert result.depreciation_cost == pytest.approx((224_000 + 15_000 + 115_000) / 3)
    assert result.maintenance_cost == pytest.approx(0.12 * 239_000)
    assert result.total == pytest.approx(
        result.gpu_cost
        + result.server_cost
        + result.infrastructure_cost
        + result.maintenance_cost
        + result.depreciation_cost
    )
    assert result.total_power_draw_kw == pytest.approx(5.6)


def test_hardware_preconfigured_server_includes_gpus(catalogs):
    bundled = compute_hardware_costs(HardwareCostInput(server_id="lambda-h100", gpu_count=8), catalogs)
    extra = compute_hardware_costs(HardwareCostInput(server_id="lambda-h100", gpu_count=10), catalogs)

    assert bundled.gpu_cost == 0
    assert bundled.additional_gpus == 0
    assert extra.additional_gpus == 2
    assert extra.gpu_cost == 2 * 28_000


def test_hardware_racks_and_cloud_infrastructure(catalogs):
    onprem = compute_hardware_costs(HardwareCostInput(gpu_count=9), catalogs)
    cloud = compute_hardware_costs(HardwareCostInput(gpu_count=9, deployment_id="cloud"), catalogs)

    assert onprem.racks_needed == 2
    assert onprem.infrastructure_cost == 2 * 115_000
    assert cloud.infrastructure_cost == 0.0


def test_hardware_low_utilization_penalty(catalogs):
    normal = compute_hardware_costs(HardwareCostInput(utilization_percent=30), catalogs)
    low = compute_hardware_costs(HardwareCostInput(utilization_percent=20), catalogs)

    assert normal.utilization_multiplier == 1.0
    assert low.utilization_multiplier == pytest.approx(5.0)
    assert low.depreciation_cost == pytest.approx(normal.depreciation_cost * 5.0)


def test_utilization_multiplier_never_divides_by_zero():
    assert utilization_multiplier(0) == 100.0
    assert utilization_multiplier(-5) == 100.0
    assert utilization_multiplier(100) == 1.0


def test_hardware_total_increases_with_gpu_count(catalogs):
    totals = [
        compute_hardware_costs(HardwareCostInput(gpu_count=count), catalogs).total
        for count in (1, 2, 8, 9, 64)
    ]

    assert totals == sorted(totals)
    assert len(set(totals)) == len(totals)


def test_hardware_zero_depreciation_years_is_degenerate(catalogs):
    with pytest.raises(DegenerateArithmeticError):
        compute_hardware_costs(HardwareCostInput(depreciation_years=0), catalogs)


def test_hardware_rejects_unpriced_gpu_and_unpriced_deployment(catalogs):
    with pytest.raises(InvalidInputError):
        compute_hardware_costs(HardwareCostInput(gpu_id="tpu-v4"), catalogs)
    with pytest.raises(InvalidInputError):
        compute_hardware_costs(HardwareCostInput(deployment_id="edge"), catalogs)


# --- dispatch -------------------------------------------------------------


def test_compute_dispatches_by_input_type(catalogs):
    assert isinstance(compute(HardwareCostInput(), catalogs), HardwareCostResult)
    assert isinstance(compute(TokenCostInput(), catalogs), TokenCostResult)
    assert isinstance(compute(OperationsCostInput(), catalogs), OperationsCostResult)

    with pytest.raises(TypeError):
        compute(object(), catalogs)  # type: ignore[arg-type]


def test_compute_is_deterministic(catalogs):
    for record in (HardwareCostInput(), TokenCostInput(), OperationsCostInput()):
        assert compute(record, catalogs) == compute(record, catalogs)


def test_compute_uses_packaged_catalogs_by_default():
    assert compute(TokenCostInput()) == compute(TokenCostInput(), load_catalogs())


@pytest.mark.parametrize(
    "record",
    [
        HardwareCostInput(gpu_id="b200"),
        HardwareCostInput(server_id="dell"),
        TokenCostInput(model_id="gpt-5"),
        TokenCostInput(region_id="mars"),
        OperationsCostInput(deployment_id="basement"),
    ],
)
def test_unknown_catalog_keys_fail_loudly(catalogs, record):
    with pytest.raises(UnknownCatalogKeyError):
        compute(record, catalogs)


def test_constants_match_reference_values():
    assert cost_engine.GPUS_PER_RACK == 8
    assert cost_engine.MAINTENANCE_RATE == 0.12
    assert cost_engine.AVERAGE_DAYS_PER_MONTH == 30.44
