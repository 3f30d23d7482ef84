"""Write helpers that push widget values into an :class:`~dashboard.state.app_state.AppStateManager`.

Every write to a calculator's fields triggers a full recomputation of that
calculator's result.
"""
from __future__ import annotations

from dataclasses import fields
from typing import Any, Dict, Mapping

from dashboard.state.app_state import CALCULATOR_PREFIXES, AppStateManager
from services.cost_engine import CalculationResult


def sync_calculator_from_session(
    manager: AppStateManager,
    session_state: Mapping[str, Any],
    calculator: str,
    **overrides: Any,
) -> CalculationResult:
    """Copy ``calculator``'s prefixed widget values into the manager and recompute.

    ``overrides`` take precedence over the widget values, e.g. ``pue=None``
    when the user asks for the deployment's default PUE.
    """

    input_type, prefix = CALCULATOR_PREFIXES[calculator]
    updates: Dict[str, Any] = {}
    for f in fields(input_type):
        key = f"{prefix}{f.name}"
        if key in session_state:
            updates[f.name] = session_state[key]
    updates.update(overrides)
    return manager.session(calculator).update(updates)


__all__ = ["sync_calculator_from_session"]
