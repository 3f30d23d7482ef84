import pathlib
import sys
from unittest.mock import MagicMock

import pytest

pytest.importorskip("pandas")
pytest.importorskip("plotly")

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))

from actions.state_updates import sync_calculator_from_session
from catalog import load_catalogs
from dashboard.state.app_state import ensure_session_state_defaults
from dashboard.tab_registry import (
    DashboardActions,
    DashboardState,
    _TabDefinition,
    get_registered_tabs,
    register_tab,
    render_tab_group,
)
from features import format_carbon, format_kwh, format_usd


def _fake_streamlit():
    st = MagicMock()
    st.created_columns = []

    def columns(layout):
        cols = [MagicMock() for _ in range(layout if isinstance(layout, int) else len(layout))]
        st.created_columns.extend(cols)
        return cols

    st.columns.side_effect = columns
    st.tabs.side_effect = lambda titles: [MagicMock() for _ in titles]
    return st


def _context(session_state=None):
    session_state = {} if session_state is None else session_state
    catalogs = load_catalogs()
    manager = ensure_session_state_defaults(session_state, catalogs)
    st = _fake_streamlit()
    state = DashboardState(st=st, session_state=session_state, manager=manager, catalogs=catalogs)
    actions = DashboardActions(
        format_usd=format_usd,
        format_kwh=format_kwh,
        format_carbon=format_carbon,
        recompute=sync_calculator_from_session,
    )
    return state, actions


def test_builtin_tabs_register_in_order():
    names = [tab.name for tab in get_registered_tabs()]

    assert names == ["hardware", "tokens", "operations"]


def test_register_tab_rejects_duplicates():
    with pytest.raises(ValueError, match="already registered"):
        register_tab("hardware", "Again")(lambda state, actions: None)


def test_render_tab_group_uses_explicit_definitions():
    state, actions = _context()
    seen = []
    definitions = [
        _TabDefinition(name="a", title="A", render=lambda s, a: seen.append("a")),
        _TabDefinition(name="b", title="B", render=lambda s, a: seen.append("b")),
    ]

    widgets, rendered = render_tab_group(state, actions, tabs=definitions)

    state.st.tabs.assert_called_once_with(["A", "B"])
    assert len(widgets) == 2
    assert rendered == definitions
    assert seen == ["a", "b"]


def test_render_tab_group_with_no_tabs():
    state, actions = _context()

    assert render_tab_group(state, actions, tabs=[]) == ((), [])


def test_builtin_tabs_render_every_calculator():
    state, actions = _context()

    render_tab_group(state, actions)

    state.st.error.assert_not_called()
    assert state.st.plotly_chart.call_count == 3
    assert state.st.download_button.call_count == 3
    for call in state.st.plotly_chart.call_args_list + state.st.dataframe.call_args_list:
        assert call.kwargs["width"] == "stretch"
        assert "use_container_width" not in call.kwargs
    file_names = sorted(call.kwargs["file_name"] for call in state.st.download_button.call_args_list)
    assert file_names == [
        "hardware_costs.csv",
        "power_operations_costs.csv",
        "token_electricity_costs.csv",
    ]


def test_lookup_errors_render_inline_and_keep_other_tabs():
    state, actions = _context()
    state.session_state["ops_hardware_id"] = "b200"

    render_tab_group(state, actions)

    state.st.error.assert_called_once()
    assert "b200" in state.st.error.call_args.args[0]
    assert state.st.download_button.call_count == 2


def _selectbox_kwargs(st, key):
    for col in st.created_columns:
        for call in col.selectbox.call_args_list:
            if call.kwargs.get("key") == key:
                return call.kwargs
    raise AssertionError(f"no selectbox keyed {key!r}")


def test_token_region_label_follows_deployment_rate_class():
    state, actions = _context()
    state.session_state["tok_deployment_id"] = "colo"
    state.session_state["tok_region_id"] = "eu"

    render_tab_group(state, actions)

    label = _selectbox_kwargs(state.st, "tok_region_id")["format_func"]
    assert label("eu") == "Europe ($0.22/kWh)"
    assert state.manager.session("tokens").result.electricity_rate == 0.22


def test_token_region_label_uses_commercial_rate_for_cloud():
    state, actions = _context()

    render_tab_group(state, actions)

    label = _selectbox_kwargs(state.st, "tok_region_id")["format_func"]
    assert label("eu") == "Europe ($0.32/kWh)"


def test_operations_region_label_lists_both_tariffs():
    state, actions = _context()

    render_tab_group(state, actions)

    label = _selectbox_kwargs(state.st, "ops_region_id")["format_func"]
    assert label("india") == "India (Comm: $0.09/kWh, Ind: $0.07/kWh)"
