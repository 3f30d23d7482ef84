"""Registry utilities for loading the built-in reference catalogs."""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
import json
import logging
import os
from importlib import resources
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, Mapping, Optional, TypeVar, Union

from services.errors import CatalogFormatError, UnknownCatalogKeyError

from .profiles import (
    DeploymentProfile,
    HardwareProfile,
    ModelProfile,
    RackInfrastructure,
    RateClass,
    RegionProfile,
    ServerProfile,
)

logger = logging.getLogger(__name__)

_CATALOG_FILENAME = "catalogs.json"
CATALOG_PATH_ENV = "AI_COST_CATALOG"

T = TypeVar("T")


class CatalogTable(Mapping[str, T]):
    """Read-only, ordered id -> profile table.

    Lookups by an unknown id raise :class:`UnknownCatalogKeyError` naming the
    table and the ids it does know, instead of returning ``None``.
    """

    def __init__(self, name: str, entries: Iterable[tuple[str, T]]) -> None:
        self.name = name
        self._entries: "OrderedDict[str, T]" = OrderedDict(entries)

    def __getitem__(self, key: str) -> T:
        try:
            return self._entries[key]
        except KeyError:
            raise UnknownCatalogKeyError(self.name, key, self._entries.keys()) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"CatalogTable({self.name!r}, ids={list(self._entries)!r})"

    def ids(self) -> list[str]:
        return list(self._entries)

    def where(self, predicate: Callable[[T], bool]) -> "CatalogTable[T]":
        """Return a sub-table holding the profiles for which ``predicate`` is true."""

        return CatalogTable(
            self.name, ((key, value) for key, value in self._entries.items() if predicate(value))
        )


@dataclass(frozen=True)
class Catalogs:
    """Every reference table the cost engine reads."""

    hardware: CatalogTable[HardwareProfile]
    regions: CatalogTable[RegionProfile]
    deployments: CatalogTable[DeploymentProfile]
    servers: CatalogTable[ServerProfile]
    models: CatalogTable[ModelProfile]


def _coerce_float(value: object, field_name: str, entry_id: str, *, optional: bool = False) -> Optional[float]:
    if value is None:
        if optional:
            return None
        raise CatalogFormatError(f"Field '{field_name}' is required for catalog entry '{entry_id}'.")
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise CatalogFormatError(
            f"Field '{field_name}' in catalog entry '{entry_id}' must be numeric, got {value!r}."
        ) from exc


def _entry_id(entry: Mapping[str, Any], section: str) -> str:
    entry_id = entry.get("id")
    if not isinstance(entry_id, str) or not entry_id:
        raise CatalogFormatError(f"Each '{section}' entry requires a string 'id'.")
    return entry_id


def _hardware(entry: Mapping[str, Any]) -> HardwareProfile:
    entry_id = _entry_id(entry, "hardware")
    tokens_per_second = _coerce_float(entry.get("tokens_per_second"), "tokens_per_second", entry_id, optional=True)
    if tokens_per_second is not None and tokens_per_second <= 0:
        raise CatalogFormatError(f"Hardware '{entry_id}' must report a positive tokens_per_second.")
    return HardwareProfile(
        id=entry_id,
        display_name=str(entry.get("display_name", entry_id)),
        power_watts=float(_coerce_float(entry.get("power_watts"), "power_watts", entry_id)),
        price_usd=_coerce_float(entry.get("price_usd"), "price_usd", entry_id, optional=True),
        tokens_per_second=tokens_per_second,
    )


def _region(entry: Mapping[str, Any]) -> RegionProfile:
    entry_id = _entry_id(entry, "regions")
    return RegionProfile(
        id=entry_id,
        display_name=str(entry.get("display_name", entry_id)),
        commercial_rate_usd_per_kwh=float(
            _coerce_float(entry.get("commercial_rate_usd_per_kwh"), "commercial_rate_usd_per_kwh", entry_id)
        ),
        industrial_rate_usd_per_kwh=float(
            _coerce_float(entry.get("industrial_rate_usd_per_kwh"), "industrial_rate_usd_per_kwh", entry_id)
        ),
        carbon_intensity_kg_per_kwh=float(
            _coerce_float(entry.get("carbon_intensity_kg_per_kwh"), "carbon_intensity_kg_per_kwh", entry_id)
        ),
        cooling_multiplier=float(_coerce_float(entry.get("cooling_multiplier"), "cooling_multiplier", entry_id)),
    )


def _deployment(entry: Mapping[str, Any]) -> DeploymentProfile:
    entry_id = _entry_id(entry, "deployments")
    try:
        rate_class = RateClass(str(entry.get("rate_class", RateClass.COMMERCIAL.value)))
    except ValueError as exc:
        raise CatalogFormatError(
            f"Deployment '{entry_id}' has unknown rate_class {entry.get('rate_class')!r}."
        ) from exc

    rack_obj = entry.get("rack")
    rack: Optional[RackInfrastructure] = None
    if rack_obj is not None:
        if not isinstance(rack_obj, Mapping):
            raise CatalogFormatError(f"Deployment '{entry_id}' must provide 'rack' as a mapping.")
        rack = RackInfrastructure(
            **{
                key: float(_coerce_float(rack_obj.get(key, 0.0), key, entry_id))
                for key in ("rack_cost", "cooling_cost", "networking_cost", "power_cost")
            }
        )

    efficiency = float(_coerce_float(entry.get("efficiency_factor", 1.0), "efficiency_factor", entry_id))
    if efficiency <= 0:
        raise CatalogFormatError(f"Deployment '{entry_id}' must have a positive efficiency_factor.")

    return DeploymentProfile(
        id=entry_id,
        display_name=str(entry.get("display_name", entry_id)),
        default_pue=float(_coerce_float(entry.get("default_pue"), "default_pue", entry_id)),
        rate_class=rate_class,
        overhead_fraction=float(_coerce_float(entry.get("overhead_fraction", 0.0), "overhead_fraction", entry_id)),
        efficiency_factor=efficiency,
        provider_managed=bool(entry.get("provider_managed", False)),
        rack=rack,
    )


def _server(entry: Mapping[str, Any]) -> ServerProfile:
    entry_id = _entry_id(entry, "servers")
    return ServerProfile(
        id=entry_id,
        display_name=str(entry.get("display_name", entry_id)),
        base_cost_usd=float(_coerce_float(entry.get("base_cost_usd"), "base_cost_usd", entry_id)),
        gpus_included=int(_coerce_float(entry.get("gpus_included", 0), "gpus_included", entry_id)),
    )


def _model(entry: Mapping[str, Any]) -> ModelProfile:
    entry_id = _entry_id(entry, "models")
    return ModelProfile(
        id=entry_id,
        display_name=str(entry.get("display_name", entry_id)),
        kwh_per_token=float(_coerce_float(entry.get("kwh_per_token"), "kwh_per_token", entry_id)),
    )


_SECTIONS: Dict[str, Callable[[Mapping[str, Any]], Any]] = {
    "hardware": _hardware,
    "regions": _region,
    "deployments": _deployment,
    "servers": _server,
    "models": _model,
}


def _build_table(name: str, raw_entries: object) -> CatalogTable[Any]:
    if not isinstance(raw_entries, list):
        raise CatalogFormatError(f"Catalog section '{name}' must be a list of objects.")
    builder = _SECTIONS[name]
    table: "OrderedDict[str, Any]" = OrderedDict()
    for entry in raw_entries:
        if not isinstance(entry, Mapping):
            raise CatalogFormatError(f"Catalog section '{name}' must contain objects, got {entry!r}.")
        profile = builder(entry)
        if profile.id in table:
            raise CatalogFormatError(f"Duplicate id '{profile.id}' in catalog section '{name}'.")
        table[profile.id] = profile
    if not table:
        raise CatalogFormatError(f"Catalog section '{name}' is empty.")
    return CatalogTable(name, table.items())


def catalogs_from_mapping(payload: Mapping[str, Any]) -> Catalogs:
    """Build :class:`Catalogs` from an already decoded JSON document."""

    if not isinstance(payload, Mapping):
        raise CatalogFormatError("Catalog configuration must be a JSON object keyed by section.")
    missing = [name for name in _SECTIONS if name not in payload]
    if missing:
        raise CatalogFormatError("Catalog configuration is missing sections: " + ", ".join(missing))
    tables = {name: _build_table(name, payload[name]) for name in _SECTIONS}
    return Catalogs(**tables)


def _read_catalog_text(path: Union[str, Path, None]) -> str:
    if path is not None:
        return Path(path).read_text(encoding="utf-8")
    package_files = resources.files(__package__)
    return package_files.joinpath(_CATALOG_FILENAME).read_text(encoding="utf-8")


_CATALOG_CACHE: Dict[str, Catalogs] = {}


def load_catalogs(path: Union[str, Path, None] = None) -> Catalogs:
    """Return the reference catalogs, loading them on first use.

    ``path`` (or the ``AI_COST_CATALOG`` environment variable) selects an
    alternate JSON file; by default the packaged ``catalogs.json`` is used.
    """

    if path is None:
        path = os.environ.get(CATALOG_PATH_ENV) or None
    cache_key = str(Path(path).resolve()) if path is not None else ""
    cached = _CATALOG_CACHE.get(cache_key)
    if cached is not None:
        return cached

    raw_text = _read_catalog_text(path)
    try:
        loaded = json.loads(raw_text)
    except json.JSONDecodeError as exc:
        raise CatalogFormatError(f"Catalog file is not valid JSON: {exc}") from exc

    catalogs = catalogs_from_mapping(loaded)
    logger.info(
        "Loaded catalogs from %s: %d hardware, %d regions, %d deployments, %d servers, %d models",
        path or _CATALOG_FILENAME,
        len(catalogs.hardware),
        len(catalogs.regions),
        len(catalogs.deployments),
        len(catalogs.servers),
        len(catalogs.models),
    )
    _CATALOG_CACHE[cache_key] = catalogs
    return catalogs


def clear_catalog_cache() -> None:
    _CATALOG_CACHE.clear()


__all__ = [
    "CATALOG_PATH_ENV",
    "CatalogTable",
    "Catalogs",
    "catalogs_from_mapping",
    "clear_catalog_cache",
    "load_catalogs",
]
