"""Calculator tabs; each module registers itself with :mod:`dashboard.tab_registry`."""
