"""Calculator input records and their declared valid ranges.

Range enforcement lives here, at the input boundary: :func:`clamp_input`
coerces every numeric field into range (what the dashboard does after each
widget change) while :func:`validate_input` rejects out-of-range values with
:class:`~services.errors.InvalidInputError`.  The cost engine itself assumes
its input already passed through one of the two.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Type, TypeVar, Union

import numpy as np

from .errors import InvalidInputError


class EnergySource(str, Enum):
    """Where the token calculator takes its per-token energy from."""

    MODEL = "model"
    GPU = "gpu"


@dataclass(frozen=True)
class FieldRange:
    minimum: float
    maximum: float
    integer: bool = False
    unit: str = ""

    def clamp(self, value: float) -> Union[int, float]:
        bounded = float(np.clip(float(value), self.minimum, self.maximum))
        if self.integer:
            return int(round(bounded))
        return bounded

    def contains(self, value: float) -> bool:
        return self.minimum <= float(value) <= self.maximum


@dataclass(frozen=True)
class HardwareCostInput:
    """Hardware acquisition calculator input."""

    gpu_id: str = "h100"
    gpu_count: int = 8
    server_id: str = "custom"
    deployment_id: str = "onprem"
    depreciation_years: int = 3
    utilization_percent: float = 40.0


@dataclass(frozen=True)
class TokenCostInput:
    """Token electricity calculator input.

    ``pue`` of ``None`` means "use the deployment's default PUE".
    """

    energy_source: EnergySource = EnergySource.MODEL
    model_id: str = "gpt-4"
    gpu_id: str = "h100"
    region_id: str = "us"
    deployment_id: str = "cloud"
    pue: Optional[float] = 1.1
    tokens: int = 1_000_000


@dataclass(frozen=True)
class OperationsCostInput:
    """Power & operations calculator input.

    ``pue`` of ``None`` means "use the deployment's default PUE".
    """

    hardware_id: str = "h100"
    node_count: int = 8
    utilization_percent: float = 61.0
    region_id: str = "us"
    deployment_id: str = "cloud"
    pue: Optional[float] = 1.1
    operational_days: int = 365


CalculationInput = Union[HardwareCostInput, TokenCostInput, OperationsCostInput]

InputT = TypeVar("InputT", HardwareCostInput, TokenCostInput, OperationsCostInput)


_PUE_RANGE = FieldRange(1.0, 3.0)
_UTILIZATION_RANGE = FieldRange(1.0, 100.0, unit="%")

INPUT_RANGES: Dict[type, Dict[str, FieldRange]] = {
    HardwareCostInput: {
        "gpu_count": FieldRange(1, 1000, integer=True),
        "depreciation_years": FieldRange(1, 10, integer=True, unit="years"),
        "utilization_percent": _UTILIZATION_RANGE,
    },
    TokenCostInput: {
        "pue": _PUE_RANGE,
        "tokens": FieldRange(1, 1_000_000_000_000, integer=True, unit="tokens"),
    },
    OperationsCostInput: {
        "node_count": FieldRange(1, 10_000, integer=True),
        "utilization_percent": _UTILIZATION_RANGE,
        "pue": _PUE_RANGE,
        "operational_days": FieldRange(1, 365, integer=True, unit="days"),
    },
}


def ranges_for(input_type: type) -> Dict[str, FieldRange]:
    """Return the declared ranges of ``input_type``'s numeric fields."""

    try:
        return INPUT_RANGES[input_type]
    except KeyError:
        raise TypeError(f"{input_type.__name__} is not a calculator input type") from None


def _numeric(name: str, value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"'{name}' must be numeric, got {value!r}") from exc
    if not math.isfinite(number):
        raise InvalidInputError(f"'{name}' must be finite, got {value!r}")
    return number


def clamp_input(record: InputT) -> InputT:
    """Return a copy of ``record`` with every ranged field forced into range.

    ``None`` PUE values are left alone so they keep meaning "deployment default".
    """

    changes: Dict[str, Any] = {}
    for name, field_range in ranges_for(type(record)).items():
        value = getattr(record, name)
        if value is None:
            continue
        clamped = field_range.clamp(_numeric(name, value))
        if clamped != value or type(clamped) is not type(value):
            changes[name] = clamped
    return replace(record, **changes) if changes else record


def validate_input(record: InputT) -> InputT:
    """Return ``record`` unchanged, raising :class:`InvalidInputError` on any out-of-range field."""

    for name, field_range in ranges_for(type(record)).items():
        value = getattr(record, name)
        if value is None:
            continue
        number = _numeric(name, value)
        if not field_range.contains(number):
            raise InvalidInputError(
                f"'{name}'={value!r} is outside [{field_range.minimum:g}, {field_range.maximum:g}]"
            )
    return record


def input_from_mapping(
    input_type: Type[InputT], mapping: Mapping[str, Any], *, prefix: str = ""
) -> InputT:
    """Build ``input_type`` from ``mapping`` keys named ``prefix + field``.

    Missing keys fall back to the dataclass defaults, so a partially populated
    session store still yields a complete record.
    """

    payload: Dict[str, Any] = {}
    for f in fields(input_type):
        key = f"{prefix}{f.name}"
        if key in mapping:
            payload[f.name] = mapping[key]
    if "energy_source" in payload:
        try:
            payload["energy_source"] = EnergySource(payload["energy_source"])
        except ValueError as exc:
            raise InvalidInputError(f"Unknown energy source {payload['energy_source']!r}") from exc
    return input_type(**payload)


__all__ = [
    "CalculationInput",
    "EnergySource",
    "FieldRange",
    "HardwareCostInput",
    "INPUT_RANGES",
    "OperationsCostInput",
    "TokenCostInput",
    "clamp_input",
    "input_from_mapping",
    "ranges_for",
    "validate_input",
]
