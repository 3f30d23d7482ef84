"""Exception types raised by the catalog and cost engine."""

from __future__ import annotations

from typing import Iterable


class InvalidInputError(ValueError):
    """A numeric input lies outside its declared range or a profile lacks a required field."""


class UnknownCatalogKeyError(KeyError):
    """A configuration references an id that is not present in a catalog table."""

    def __init__(self, table: str, key: str, known: Iterable[str] = ()) -> None:
        self.table = table
        self.key = key
        self.known = tuple(known)
        super().__init__(key)

    def __str__(self) -> str:
        known = ", ".join(self.known) or "-"
        return f"Unknown {self.table} id '{self.key}' (known: {known})"


class DegenerateArithmeticError(ArithmeticError):
    """A zero denominator that no policy resolves."""


class CatalogFormatError(ValueError):
    """The catalog configuration file is malformed."""


__all__ = [
    "CatalogFormatError",
    "DegenerateArithmeticError",
    "InvalidInputError",
    "UnknownCatalogKeyError",
]
