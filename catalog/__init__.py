"""Built-in reference catalogs for hardware, regions, deployments, servers and models."""

from .profiles import (
    DeploymentProfile,
    HardwareProfile,
    ModelProfile,
    RackInfrastructure,
    RateClass,
    RegionProfile,
    ServerProfile,
)
from .registry import (
    CATALOG_PATH_ENV,
    CatalogTable,
    Catalogs,
    catalogs_from_mapping,
    clear_catalog_cache,
    load_catalogs,
)

__all__ = [
    "CATALOG_PATH_ENV",
    "CatalogTable",
    "Catalogs",
    "DeploymentProfile",
    "HardwareProfile",
    "ModelProfile",
    "RackInfrastructure",
    "RateClass",
    "RegionProfile",
    "ServerProfile",
    "catalogs_from_mapping",
    "clear_catalog_cache",
    "load_catalogs",
]
