"""Cost and energy formulas for the three calculators.

Every function here is pure: the result depends only on the input record and
the (immutable) catalogs, and is rebuilt wholesale on each call.  Catalog
lookups go through :class:`catalog.CatalogTable`, so an unknown id raises
:class:`~services.errors.UnknownCatalogKeyError` instead of yielding ``None``.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Union, overload

from catalog import Catalogs, DeploymentProfile, HardwareProfile, load_catalogs

from .errors import DegenerateArithmeticError, InvalidInputError
from .inputs import (
    CalculationInput,
    EnergySource,
    HardwareCostInput,
    OperationsCostInput,
    TokenCostInput,
)

logger = logging.getLogger(__name__)

GPUS_PER_RACK = 8
MAINTENANCE_RATE = 0.12
LOW_UTILIZATION_THRESHOLD_PERCENT = 30.0
MIN_UTILIZATION_PERCENT = 1.0
HOURS_PER_DAY = 24.0
AVERAGE_DAYS_PER_MONTH = 30.44


@dataclass(frozen=True)
class HardwareCostResult:
    """Acquisition cost breakdown in USD.

    ``maintenance_cost`` and ``depreciation_cost`` are annual figures; the
    remaining components are one-off capital costs.
    """

    gpu_cost: float
    server_cost: float
    infrastructure_cost: float
    maintenance_cost: float
    depreciation_cost: float
    total: float
    additional_gpus: int
    racks_needed: int
    utilization_multiplier: float
    total_power_draw_kw: float


@dataclass(frozen=True)
class TokenCostResult:
    kwh_per_token: float
    total_kwh_per_token: float
    energy_consumption_kwh: float
    electricity_cost: float
    carbon_footprint_kg: float
    cost_per_1k_tokens: float
    cost_per_1m_tokens: float
    electricity_rate: float
    pue: float


@dataclass(frozen=True)
class OperationsCostResult:
    """Power and operations breakdown; costs in USD, energy in kWh, carbon in kg CO2e."""

    actual_power_per_node_w: float
    nominal_power_kw: float
    actual_power_kw: float
    total_power_kw: float
    electricity_rate: float
    pue: float
    daily_energy_kwh: float
    daily_power_cost: float
    monthly_power_cost: float
    annual_power_cost: float
    daily_cooling_cost: float
    cooling_cost: float
    total_operational_cost: float
    annual_energy_kwh: float
    carbon_footprint_kg: float


CalculationResult = Union[HardwareCostResult, TokenCostResult, OperationsCostResult]


def utilization_multiplier(utilization_percent: float) -> float:
    """Depreciation penalty for under-used hardware.

    Below 30 % utilization the annual depreciation is scaled by
    ``100 / utilization``.  Utilization is floored at 1 % so that zero never
    reaches the division.
    """

    utilization = max(MIN_UTILIZATION_PERCENT, float(utilization_percent))
    if utilization < LOW_UTILIZATION_THRESHOLD_PERCENT:
        return 100.0 / utilization
    return 1.0


def racks_needed(gpu_count: int) -> int:
    return int(math.ceil(max(0, int(gpu_count)) / float(GPUS_PER_RACK)))


def _require_price(gpu: HardwareProfile) -> float:
    if gpu.price_usd is None:
        raise InvalidInputError(f"Hardware '{gpu.id}' has no list price and cannot be costed")
    return float(gpu.price_usd)


def _infrastructure_cost(deployment: DeploymentProfile, racks: int) -> float:
    if deployment.provider_managed:
        return 0.0
    if deployment.rack is None:
        raise InvalidInputError(f"Deployment '{deployment.id}' has no rack infrastructure pricing")
    return deployment.rack.per_rack_total * racks


def _resolve_pue(pue: Optional[float], deployment: DeploymentProfile) -> float:
    return float(deployment.default_pue if pue is None else pue)


def compute_hardware_costs(
    record: HardwareCostInput, catalogs: Optional[Catalogs] = None
) -> HardwareCostResult:
    """Acquisition, maintenance and depreciation cost of a GPU deployment."""

    catalogs = catalogs or load_catalogs()
    gpu = catalogs.hardware[record.gpu_id]
    server = catalogs.servers[record.server_id]
    deployment = catalogs.deployments[record.deployment_id]

    if record.depreciation_years <= 0:
        raise DegenerateArithmeticError(
            f"depreciation_years must be positive, got {record.depreciation_years!r}"
        )

    gpu_count = int(record.gpu_count)
    # Pre-configured servers already ship with their GPUs.
    additional_gpus = max(0, gpu_count - int(server.gpus_included))
    gpu_cost = _require_price(gpu) * additional_gpus
    server_cost = float(server.base_cost_usd)

    racks = racks_needed(gpu_count)
    infrastructure_cost = _infrastructure_cost(deployment, racks)

    hardware_cost = gpu_cost + server_cost
    maintenance_cost = hardware_cost * MAINTENANCE_RATE

    multiplier = utilization_multiplier(record.utilization_percent)
    annual_depreciation = (hardware_cost + infrastructure_cost) / float(record.depreciation_years)
    depreciation_cost = annual_depreciation * multiplier

    total = gpu_cost + server_cost + infrastructure_cost + maintenance_cost + depreciation_cost

    logger.debug(
        "hardware costs gpu=%s x%d server=%s deployment=%s -> total=%.2f",
        gpu.id,
        gpu_count,
        server.id,
        deployment.id,
        total,
    )
    return HardwareCostResult(
        gpu_cost=gpu_cost,
        server_cost=server_cost,
        infrastructure_cost=infrastructure_cost,
        maintenance_cost=maintenance_cost,
        depreciation_cost=depreciation_cost,
        total=total,
        additional_gpus=additional_gpus,
        racks_needed=racks,
        utilization_multiplier=multiplier,
        total_power_draw_kw=gpu.power_kw * gpu_count,
    )


def base_kwh_per_token(record: TokenCostInput, catalogs: Catalogs) -> float:
    """Energy per token before deployment efficiency and PUE are applied."""

    if record.energy_source is EnergySource.GPU:
        gpu = catalogs.hardware[record.gpu_id]
        if not gpu.tokens_per_second:
            raise InvalidInputError(f"Hardware '{gpu.id}' has no tokens/s figure for GPU-derived energy")
        return gpu.power_kw / float(gpu.tokens_per_second)
    return float(catalogs.models[record.model_id].kwh_per_token)


def compute_token_costs(record: TokenCostInput, catalogs: Optional[Catalogs] = None) -> TokenCostResult:
    """Energy, electricity cost and carbon of generating ``record.tokens`` tokens."""

    catalogs = catalogs or load_catalogs()
    region = catalogs.regions[record.region_id]
    deployment = catalogs.deployments[record.deployment_id]

    kwh_per_token = base_kwh_per_token(record, catalogs)
    pue = _resolve_pue(record.pue, deployment)
    total_kwh_per_token = kwh_per_token / deployment.efficiency_factor * pue

    rate = region.rate_for(deployment.rate_class)
    energy = total_kwh_per_token * record.tokens

    result = TokenCostResult(
        kwh_per_token=kwh_per_token,
        total_kwh_per_token=total_kwh_per_token,
        energy_consumption_kwh=energy,
        electricity_cost=energy * rate,
        carbon_footprint_kg=energy * region.carbon_intensity_kg_per_kwh,
        cost_per_1k_tokens=total_kwh_per_token * 1_000 * rate,
        cost_per_1m_tokens=total_kwh_per_token * 1_000_000 * rate,
        electricity_rate=rate,
        pue=pue,
    )
    logger.debug(
        "token costs source=%s tokens=%d region=%s -> %.4f kWh, $%.4f",
        record.energy_source.value,
        record.tokens,
        region.id,
        result.energy_consumption_kwh,
        result.electricity_cost,
    )
    return result


def compute_operations_costs(
    record: OperationsCostInput, catalogs: Optional[Catalogs] = None
) -> OperationsCostResult:
    """Facility power draw and the running cost of a fleet of accelerators."""

    catalogs = catalogs or load_catalogs()
    hardware = catalogs.hardware[record.hardware_id]
    region = catalogs.regions[record.region_id]
    deployment = catalogs.deployments[record.deployment_id]

    pue = _resolve_pue(record.pue, deployment)
    nodes = int(record.node_count)
    days = record.operational_days

    actual_power_per_node = hardware.power_watts * (record.utilization_percent / 100.0)
    actual_power_kw = actual_power_per_node * nodes / 1000.0
    total_power_kw = actual_power_kw * pue

    rate = region.rate_for(deployment.rate_class)

    daily_energy_kwh = total_power_kw * HOURS_PER_DAY
    daily_power_cost = daily_energy_kwh * rate

    # Cooling is billed as an additional draw on top of facility power.
    daily_cooling_cost = total_power_kw * region.cooling_multiplier * HOURS_PER_DAY * rate
    cooling_cost = daily_cooling_cost * days

    annual_power_cost = daily_power_cost * days
    total_operational_cost = (annual_power_cost + cooling_cost) * (1.0 + deployment.overhead_fraction)

    annual_energy_kwh = daily_energy_kwh * days

    logger.debug(
        "operations costs hw=%s nodes=%d util=%.1f%% region=%s deployment=%s -> %.3f kW",
        hardware.id,
        nodes,
        record.utilization_percent,
        region.id,
        deployment.id,
        total_power_kw,
    )
    return OperationsCostResult(
        actual_power_per_node_w=actual_power_per_node,
        nominal_power_kw=hardware.power_kw * nodes,
        actual_power_kw=actual_power_kw,
        total_power_kw=total_power_kw,
        electricity_rate=rate,
        pue=pue,
        daily_energy_kwh=daily_energy_kwh,
        daily_power_cost=daily_power_cost,
        monthly_power_cost=daily_power_cost * AVERAGE_DAYS_PER_MONTH,
        annual_power_cost=annual_power_cost,
        daily_cooling_cost=daily_cooling_cost,
        cooling_cost=cooling_cost,
        total_operational_cost=total_operational_cost,
        annual_energy_kwh=annual_energy_kwh,
        carbon_footprint_kg=annual_energy_kwh * region.carbon_intensity_kg_per_kwh,
    )


@overload
def compute(record: HardwareCostInput, catalogs: Optional[Catalogs] = ...) -> HardwareCostResult: ...
@overload
def compute(record: TokenCostInput, catalogs: Optional[Catalogs] = ...) -> TokenCostResult: ...
@overload
def compute(record: OperationsCostInput, catalogs: Optional[Catalogs] = ...) -> OperationsCostResult: ...


def compute(record: CalculationInput, catalogs: Optional[Catalogs] = None) -> CalculationResult:
    """Dispatch ``record`` to the formula matching its calculator."""

    if isinstance(record, HardwareCostInput):
        return compute_hardware_costs(record, catalogs)
    if isinstance(record, TokenCostInput):
        return compute_token_costs(record, catalogs)
    if isinstance(record, OperationsCostInput):
        return compute_operations_costs(record, catalogs)
    raise TypeError(f"Unsupported calculator input: {type(record).__name__}")


__all__ = [
    "AVERAGE_DAYS_PER_MONTH",
    "CalculationResult",
    "GPUS_PER_RACK",
    "HardwareCostResult",
    "MAINTENANCE_RATE",
    "OperationsCostResult",
    "TokenCostResult",
    "base_kwh_per_token",
    "compute",
    "compute_hardware_costs",
    "compute_operations_costs",
    "compute_token_costs",
    "racks_needed",
    "utilization_multiplier",
]
