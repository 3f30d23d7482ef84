"""Pure cost calculations shared by the dashboard and tests.

Submodules are imported explicitly (``services.cost_engine``,
``services.inputs``, ``services.errors``) so that :mod:`catalog` can depend on
:mod:`services.errors` without an import cycle.
"""
