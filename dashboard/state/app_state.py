"""Application state management helpers.

Each calculator keeps one input record and the result computed from it.  The
input starts from documented defaults, is mutated one field at a time, and
every mutation is followed by a full recomputation of the result; there is no
partially updated result at any point.  Session keys are flat and prefixed
(``hw_gpu_count``, ``tok_tokens``, ``ops_pue`` ...) so they can double as
Streamlit widget keys.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, Generic, Mapping, MutableMapping, Optional, Tuple, TypeVar

from catalog import Catalogs
from services.cost_engine import CalculationResult, compute
from services.inputs import (
    HardwareCostInput,
    OperationsCostInput,
    TokenCostInput,
    clamp_input,
    input_from_mapping,
)

InputT = TypeVar("InputT", HardwareCostInput, TokenCostInput, OperationsCostInput)

CALCULATOR_PREFIXES: Dict[str, Tuple[type, str]] = {
    "hardware": (HardwareCostInput, "hw_"),
    "tokens": (TokenCostInput, "tok_"),
    "operations": (OperationsCostInput, "ops_"),
}


def _session_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


class CalculatorSession(Generic[InputT]):
    """Current input/result pair of a single calculator."""

    def __init__(self, initial: InputT, catalogs: Optional[Catalogs] = None) -> None:
        self._catalogs = catalogs
        self._input: InputT = clamp_input(initial)
        self._result: CalculationResult = compute(self._input, catalogs)
        self._field_names = {f.name for f in fields(type(initial))}

    @property
    def input(self) -> InputT:
        return self._input

    @property
    def result(self) -> CalculationResult:
        return self._result

    def update(self, updates: Mapping[str, Any]) -> CalculationResult:
        """Assign input fields, clamp them into range and recompute the result."""

        unknown = sorted(set(updates) - self._field_names)
        if unknown:
            raise KeyError(f"{type(self._input).__name__} has no fields: {', '.join(unknown)}")
        changes = dict(updates)
        if "energy_source" in changes:
            changes["energy_source"] = input_from_mapping(
                TokenCostInput, {"energy_source": changes["energy_source"]}
            ).energy_source
        candidate = clamp_input(replace(self._input, **changes))
        # Compute before assigning so a failed lookup leaves the previous pair intact.
        result = compute(candidate, self._catalogs)
        self._input, self._result = candidate, result
        return result


@dataclass
class AppState:
    """Inputs of every calculator in the suite.

    The defaults are the values each calculator opens with.
    """

    hardware: HardwareCostInput = field(default_factory=HardwareCostInput)
    tokens: TokenCostInput = field(default_factory=TokenCostInput)
    operations: OperationsCostInput = field(default_factory=OperationsCostInput)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "AppState":
        """Create an instance from flat session keys, defaulting the missing ones."""

        payload: Dict[str, Any] = {
            name: input_from_mapping(input_type, mapping, prefix=prefix)
            for name, (input_type, prefix) in CALCULATOR_PREFIXES.items()
        }
        return cls(**payload)

    def to_mapping(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for name, (input_type, prefix) in CALCULATOR_PREFIXES.items():
            record = getattr(self, name)
            for f in fields(input_type):
                data[f"{prefix}{f.name}"] = _session_value(getattr(record, f.name))
        return data


class AppStateManager:
    """One :class:`CalculatorSession` per calculator, keyed by calculator name."""

    def __init__(self, initial: AppState | None = None, catalogs: Optional[Catalogs] = None) -> None:
        state = initial or AppState()
        self._sessions: Dict[str, CalculatorSession[Any]] = {
            name: CalculatorSession(getattr(state, name), catalogs) for name in CALCULATOR_PREFIXES
        }

    @property
    def state(self) -> AppState:
        return AppState(
            hardware=self._sessions["hardware"].input,
            tokens=self._sessions["tokens"].input,
            operations=self._sessions["operations"].input,
        )

    def session(self, name: str) -> CalculatorSession[Any]:
        try:
            return self._sessions[name]
        except KeyError:
            raise KeyError(f"Unknown calculator '{name}'") from None


APP_STATE_DEFAULTS: Dict[str, Any] = AppState().to_mapping()


def ensure_session_state_defaults(
    store: MutableMapping[str, Any], catalogs: Optional[Catalogs] = None
) -> AppStateManager:
    """Populate ``store`` with defaults where keys are missing.

    The returned manager is initialised from ``store`` (clamped into range) so
    that tests can inspect and mutate the state deterministically.
    """

    for key, value in APP_STATE_DEFAULTS.items():
        store.setdefault(key, value)
    return AppStateManager(AppState.from_mapping(store), catalogs)


__all__ = [
    "APP_STATE_DEFAULTS",
    "AppState",
    "AppStateManager",
    "CALCULATOR_PREFIXES",
    "CalculatorSession",
    "ensure_session_state_defaults",
]
