"""Shared bootstrap helpers for the calculator suite."""

from __future__ import annotations

import logging
import os

import streamlit as st

from ._paths import ensure_repo_root_on_path

ensure_repo_root_on_path()

from actions.state_updates import sync_calculator_from_session  # noqa: E402
from catalog import Catalogs, load_catalogs  # noqa: E402
from dashboard.state.app_state import ensure_session_state_defaults  # noqa: E402
from features import format_carbon, format_kwh, format_usd  # noqa: E402
from services.errors import CatalogFormatError  # noqa: E402

from .components.header import render_header  # noqa: E402
from .tab_registry import DashboardActions, DashboardState  # noqa: E402

LOG_LEVEL_ENV = "AI_COST_LOG_LEVEL"


def configure_logging() -> None:
    """Set the root log level from ``AI_COST_LOG_LEVEL`` (default ``WARNING``)."""

    level_name = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _catalog_counts(catalogs: Catalogs) -> dict[str, int]:
    return {
        "Hardware profiles": len(catalogs.hardware),
        "Regions": len(catalogs.regions),
        "Deployments": len(catalogs.deployments),
        "Servers": len(catalogs.servers),
        "Models": len(catalogs.models),
    }


def bootstrap(
    page_title: str,
    *,
    header_title: str | None = None,
    header_description: str | None = None,
    help_title: str | None = None,
    help_markdown: str | None = None,
    help_expanded: bool = False,
) -> tuple[DashboardState, DashboardActions]:
    """Initialise shared layout, returning the state/action context.

    Args:
        page_title: Title used for ``st.set_page_config``.
        header_title: Optional override for the visible page header.
        header_description: Caption text rendered under the header title.
        help_title: Label for the collapsible help panel.
        help_markdown: Markdown body shown inside the help panel; skipped when empty.
        help_expanded: Whether the help panel should be expanded by default.
    """

    st.set_page_config(page_title=page_title, layout="wide")

    try:
        catalogs = load_catalogs()
    except (CatalogFormatError, OSError) as exc:
        st.error(f"Failed to load reference catalogs: {exc}")
        st.stop()

    manager = ensure_session_state_defaults(st.session_state, catalogs)

    render_header(
        header_title or page_title,
        description=header_description,
        catalog_counts=_catalog_counts(catalogs),
        help_title=help_title,
        help_markdown=help_markdown,
        help_expanded=help_expanded,
    )

    state = DashboardState(st=st, session_state=st.session_state, manager=manager, catalogs=catalogs)
    actions = DashboardActions(
        format_usd=format_usd,
        format_kwh=format_kwh,
        format_carbon=format_carbon,
        recompute=sync_calculator_from_session,
    )

    return state, actions


__all__ = [
    "DashboardActions",
    "DashboardState",
    "bootstrap",
    "configure_logging",
]
