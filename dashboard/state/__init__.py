"""Session state for the calculator suite."""
