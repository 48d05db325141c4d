from pnp_card_extractor.db.cache import (
    CACHE_FRESHNESS_SEC,
    DiskTier,
    LayeredCache,
    cache_id,
)
from pnp_card_extractor.db.disk_entry import DiskEntry, entry_path
from pnp_card_extractor.db.netrunnerdb import (
    DEFAULT_HOST,
    GET_ROUTES,
    LIST_ROUTES,
    CatalogSource,
    FetchStatus,
    NetrunnerdbClient,
    SourceResponse,
)

__all__ = [
    "CACHE_FRESHNESS_SEC",
    "DEFAULT_HOST",
    "GET_ROUTES",
    "LIST_ROUTES",
    "CatalogSource",
    "DiskEntry",
    "DiskTier",
    "FetchStatus",
    "LayeredCache",
    "NetrunnerdbClient",
    "SourceResponse",
    "cache_id",
    "entry_path",
]
