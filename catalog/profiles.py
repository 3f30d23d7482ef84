"""Immutable reference records stored in the built-in catalogs."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class RateClass(str, Enum):
    """Electricity tariff a deployment is billed at."""

    COMMERCIAL = "commercial"
    INDUSTRIAL = "industrial"


@dataclass(frozen=True)
class HardwareProfile:
    """Accelerator power draw plus optional list price and decode throughput."""

    id: str
    display_name: str
    power_watts: float
    price_usd: Optional[float] = None
    tokens_per_second: Optional[float] = None

    @property
    def power_kw(self) -> float:
        return self.power_watts / 1000.0


@dataclass(frozen=True)
class RegionProfile:
    id: str
    display_name: str
    commercial_rate_usd_per_kwh: float
    industrial_rate_usd_per_kwh: float
    carbon_intensity_kg_per_kwh: float
    cooling_multiplier: float

    def rate_for(self, rate_class: RateClass) -> float:
        """Return the $/kWh tariff matching ``rate_class``."""

        if rate_class is RateClass.INDUSTRIAL:
            return self.industrial_rate_usd_per_kwh
        return self.commercial_rate_usd_per_kwh


@dataclass(frozen=True)
class RackInfrastructure:
    """One-off per-rack build-out costs in USD."""

    rack_cost: float = 0.0
    cooling_cost: float = 0.0
    networking_cost: float = 0.0
    power_cost: float = 0.0

    @property
    def per_rack_total(self) -> float:
        return self.rack_cost + self.cooling_cost + self.networking_cost + self.power_cost


@dataclass(frozen=True)
class DeploymentProfile:
    """Facility characteristics of a hosting option.

    ``provider_managed`` deployments (hyperscaler cloud) carry no rack
    infrastructure cost.  ``rack`` is ``None`` when no build-out pricing is
    known for the deployment.
    """

    id: str
    display_name: str
    default_pue: float
    rate_class: RateClass
    overhead_fraction: float
    efficiency_factor: float
    provider_managed: bool = False
    rack: Optional[RackInfrastructure] = None


@dataclass(frozen=True)
class ServerProfile:
    id: str
    display_name: str
    base_cost_usd: float
    gpus_included: int = 0


@dataclass(frozen=True)
class ModelProfile:
    """Benchmark energy cost of generating one output token."""

    id: str
    display_name: str
    kwh_per_token: float


__all__ = [
    "DeploymentProfile",
    "HardwareProfile",
    "ModelProfile",
    "RackInfrastructure",
    "RateClass",
    "RegionProfile",
    "ServerProfile",
]
