"""Registration helpers for the calculator tabs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ._paths import ensure_repo_root_on_path

ensure_repo_root_on_path()

from catalog import Catalogs  # noqa: E402
from dashboard.state.app_state import AppStateManager  # noqa: E402
from services.cost_engine import CalculationResult  # noqa: E402


@dataclass
class DashboardState:
    """Mutable data that tabs rely on for rendering."""

    st: Any
    session_state: Any
    manager: AppStateManager
    catalogs: Catalogs


@dataclass
class DashboardActions:
    format_usd: Callable[..., str]
    format_kwh: Callable[..., str]
    format_carbon: Callable[..., str]
    recompute: Callable[..., CalculationResult]


@dataclass
class _TabDefinition:
    name: str
    title: str
    render: Callable[[DashboardState, DashboardActions], None]


_registry: Dict[str, _TabDefinition] = {}


def register_tab(
    name: str, title: str
) -> Callable[[Callable[[DashboardState, DashboardActions], None]], Callable[[DashboardState, DashboardActions], None]]:
    """Decorator used by tab modules to register themselves."""

    def decorator(
        func: Callable[[DashboardState, DashboardActions], None]
    ) -> Callable[[DashboardState, DashboardActions], None]:
        if name in _registry:
            raise ValueError(f"Tab '{name}' already registered")
        _registry[name] = _TabDefinition(name=name, title=title, render=func)
        return func

    return decorator


def get_registered_tabs() -> List[_TabDefinition]:
    """Return registered tab definitions in registration order."""

    return list(_registry.values())


def render_tab_group(
    state: DashboardState,
    actions: DashboardActions,
    *,
    tabs: Optional[Sequence[_TabDefinition]] = None,
    tab_widgets: Optional[Sequence[Any]] = None,
) -> Tuple[Sequence[Any], List[_TabDefinition]]:
    """Render calculator tabs inside the provided Streamlit containers.

    Args:
        state: Shared dashboard state passed to every tab.
        actions: Common helper callbacks used during rendering.
        tabs: Optional explicit ordering of tab definitions. When omitted,
            all registered tabs are used.
        tab_widgets: Optional sequence of Streamlit containers returned by
            ``st.tabs`` (or compatible API). When omitted, ``state.st`` is
            used to create a new tab bar for the selected tab titles.

    Returns:
        A tuple ``(containers, definitions)`` of the containers rendered into
        and the resolved tab definitions in render order.
    """

    resolved_tabs = list(tabs) if tabs is not None else get_registered_tabs()
    if not resolved_tabs:
        return tuple(), []

    if tab_widgets is None:
        titles = [tab.title for tab in resolved_tabs]
        tab_widgets = state.st.tabs(titles)

    for widget, tab in zip(tab_widgets, resolved_tabs):
        with widget:
            tab.render(state, actions)

    return tab_widgets, resolved_tabs


# Import built-in tabs so they register on module import.
from .tabs import hardware_costs  # noqa: E402,F401
from .tabs import token_electricity  # noqa: E402,F401
from .tabs import power_operations  # noqa: E402,F401


__all__ = [
    "DashboardActions",
    "DashboardState",
    "get_registered_tabs",
    "register_tab",
    "render_tab_group",
]
