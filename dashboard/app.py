"""Streamlit entry point for the AI cost calculator suite."""

from __future__ import annotations

if __package__ is None or __package__ == "":
    import sys
    from pathlib import Path

    sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from dashboard._paths import ensure_repo_root_on_path

ensure_repo_root_on_path()

from dashboard.app_context import bootstrap, configure_logging  # noqa: E402
from dashboard.tab_registry import render_tab_group  # noqa: E402

_HELP_MARKDOWN = """
- **Hardware Costs**: total cost of AI hardware including GPUs, servers,
  infrastructure, maintenance, and depreciation based on current market prices.
- **Token Electricity**: energy consumption and electricity cost of generating
  AI tokens for different models and deployment scenarios.
- **Power & Operations**: power consumption and operational cost of running AI
  systems at scale with regional pricing variations.

Every figure is recomputed from scratch after each change to an input.
"""


def main() -> None:
    """Render the calculator suite with one tab per calculator."""

    configure_logging()
    state, actions = bootstrap(
        "AI Cost Calculator Suite",
        header_description="Cost analysis tools for AI hardware, token generation, and operations.",
        help_title="Calculator Information",
        help_markdown=_HELP_MARKDOWN,
    )
    render_tab_group(state, actions)


if __name__ == "__main__":
    main()


__all__ = ["main"]
