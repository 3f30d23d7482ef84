"""Write helpers for the calculator session state."""
