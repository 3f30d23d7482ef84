"""Component namespace for the dashboard app."""

from .header import render_header

__all__ = ["render_header"]
