"""Page header for the calculator suite."""

from __future__ import annotations

from typing import Mapping, Optional

import streamlit as st


def render_header(
    title: str,
    *,
    description: Optional[str] = None,
    catalog_counts: Optional[Mapping[str, int]] = None,
    help_title: Optional[str] = None,
    help_markdown: Optional[str] = None,
    help_expanded: bool = False,
) -> None:
    """Render the title block shared by every calculator tab.

    Args:
        title: The main heading for the page.
        description: Optional caption providing additional context.
        catalog_counts: Optional ``label -> number of profiles`` mapping of the
            loaded reference catalogs, shown as a row of metrics.
        help_title: Optional label for the collapsible help panel.
        help_markdown: Optional Markdown body shown inside the help panel.
        help_expanded: Whether the help panel is expanded by default.
    """

    st.title(title)
    if description:
        st.caption(description)

    if catalog_counts:
        for col, (label, count) in zip(st.columns(len(catalog_counts)), catalog_counts.items()):
            col.metric(label, f"{int(count):,d}")

    if help_markdown:
        with st.expander(help_title or "Calculator Information", expanded=help_expanded):
            st.markdown(help_markdown)


__all__ = ["render_header"]
