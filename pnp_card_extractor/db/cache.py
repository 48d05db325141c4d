"""
Layered catalog cache.

Lookups go through up to three tiers:

1. Memory: parsed results, kept for the lifetime of the cache object.
2. Disk (optional): raw responses, reused for CACHE_FRESHNESS_SEC and then
   revalidated with a conditional request.
3. Source (optional): the NetrunnerDB API. Without it the cache runs
   offline and only serves what is already on disk.
"""

import json
import logging
import time
from collections.abc import Callable
from pathlib import Path, PurePosixPath
from typing import Any

from pnp_card_extractor.db.disk_entry import DiskEntry, entry_path
from pnp_card_extractor.db.netrunnerdb import (
    GET_ROUTES,
    LIST_ROUTES,
    CatalogSource,
    FetchStatus,
    SourceResponse,
)
from pnp_card_extractor.models.catalog import CatalogRecord, wrap
from pnp_card_extractor.models.errors import (
    CacheError,
    MalformedPayloadError,
    NotFoundError,
    SourceError,
)

logger = logging.getLogger(__name__)

CACHE_FRESHNESS_SEC = 24 * 60 * 60


def cache_id(route: str, *params: object) -> PurePosixPath:
    """Build the hierarchical key for a route and its parameters."""
    key = PurePosixPath(route)
    for param in params:
        key = key / str(param)
    return key


class DiskTier:
    """
    File-backed cache tier rooted at one directory.

    The directory is created lazily on first write.
    """

    def __init__(
        self,
        root: Path,
        freshness_sec: float = CACHE_FRESHNESS_SEC,
    ) -> None:
        self.root = Path(root)
        self.freshness_sec = freshness_sec

    def fetch(self, key: PurePosixPath) -> DiskEntry | None:
        return DiskEntry.fetch(self.root, key)

    def new_entry(self, key: PurePosixPath) -> DiskEntry:
        return DiskEntry(entry_path(self.root, key))


class LayeredCache:
    """
    Memory over disk over source.

    `list(route)` returns every record of a list route; `get(route, id)`
    returns one record of a get route. Both raise NotFoundError when no
    successful data exists for the key.
    """

    def __init__(
        self,
        source: CatalogSource | None = None,
        disk: DiskTier | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.source = source
        self.disk = disk
        self._clock = clock
        self._memory: dict[PurePosixPath, Any] = {}

    def __enter__(self) -> "LayeredCache":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Release the source's HTTP connections."""
        if self.source is not None:
            self.source.close()

    @property
    def offline(self) -> bool:
        return self.source is None

    def list(self, route: str) -> list[CatalogRecord]:
        """
        Fetch every record of a list route ("cards", "packs", ...).

        Raises:
            ValueError: If the route is not a list route
            NotFoundError: If no successful data exists
            SourceError: If the API can't be reached and nothing is cached
        """
        if route not in LIST_ROUTES:
            raise ValueError(f"Unknown list route: {route}")
        data = self._unpack(self._call(route), route)
        return data if isinstance(data, list) else [data]

    def get(self, route: str, item_id: str) -> CatalogRecord:
        """
        Fetch one record of a get route ("pack", "cycle", ...).

        Raises:
            ValueError: If the route is not a get route
            NotFoundError: If no successful data exists
            SourceError: If the API can't be reached and nothing is cached
        """
        if route not in GET_ROUTES:
            raise ValueError(f"Unknown get route: {route}")
        data = self._unpack(self._call(route, item_id), route, item_id)
        if isinstance(data, list):
            if not data:
                raise NotFoundError(f"Could not get '{cache_id(route, item_id)}' from database.")
            data = data[0]
        return data

    def find(self, route: str, code: str | None) -> CatalogRecord | None:
        """Return the record of a list route whose "code" matches, if any."""
        if code is None:
            return None
        return next((record for record in self.list(route) if record.get("code") == code), None)

    # -------------------------------------------------------------------------
    # Memory tier
    # -------------------------------------------------------------------------

    def _call(self, route: str, *params: str) -> Any:
        key = cache_id(route, *params)
        if key in self._memory:
            logger.debug("Memory cache hit: %s", key)
            return self._memory[key]

        logger.debug("Memory cache miss: %s", key)
        raw = self._fetch_raw(route, params, key)
        if raw is None:
            return None

        parsed = self._parse(raw, key)
        self._memory[key] = parsed
        return parsed

    def _parse(self, raw: bytes | str, key: PurePosixPath) -> Any:
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedPayloadError(f"Could not decode '{key}': {e}") from e

    def _unpack(self, data: Any, route: str, *params: str) -> Any:
        if not isinstance(data, dict) or not data.get("success"):
            raise NotFoundError(f"Could not get '{cache_id(route, *params)}' from database.")
        return wrap(data.get("data"))

    # -------------------------------------------------------------------------
    # Disk and source tiers
    # -------------------------------------------------------------------------

    def _fetch_raw(self, route: str, params: tuple[str, ...], key: PurePosixPath) -> bytes | None:
        if self.disk is None:
            return self._fetch_uncached(route, params, key)

        entry = self.disk.fetch(key)
        logger.debug("Disk cache %s: %s", "hit" if entry else "miss", key)

        if self.source is None:
            return entry.read() if entry else None
        return self._refresh_entry(self.disk, self.source, route, params, key, entry)

    def _fetch_uncached(
        self, route: str, params: tuple[str, ...], key: PurePosixPath
    ) -> bytes | None:
        if self.source is None:
            return None
        response = self.source.fetch(route, *params)
        return self._response_body(response, key)

    def _refresh_entry(
        self,
        disk: DiskTier,
        source: CatalogSource,
        route: str,
        params: tuple[str, ...],
        key: PurePosixPath,
        entry: DiskEntry | None,
    ) -> bytes:
        now = self._clock()

        if entry is not None and not entry.older_than(disk.freshness_sec, now):
            logger.debug("Disk cache fresh: %s", key)
            return entry.read()

        try:
            response = source.fetch(
                route, *params, modified_since=entry.modified_at if entry else None
            )
        except SourceError as e:
            if entry is None:
                raise
            logger.warning("Using stale cache for %s: %s", key, e)
            return entry.read()

        if response.status is FetchStatus.NOT_MODIFIED and entry is not None:
            logger.info("Cache up-to-date: %s", key)
            try:
                return entry.touch(now)
            except CacheError as e:
                logger.error("Couldn't refresh cache entry '%s': %s", key, e)
                return entry.read()

        self._response_body(response, key)
        return self._store(disk, key, response, entry, now)

    def _store(
        self,
        disk: DiskTier,
        key: PurePosixPath,
        response: SourceResponse,
        entry: DiskEntry | None,
        now: float,
    ) -> bytes:
        target = entry or disk.new_entry(key)
        try:
            return target.store(response.body, response.last_modified, now)
        except CacheError as e:
            logger.error("Couldn't store response '%s': %s", key, e)
            return response.body

    def _response_body(self, response: SourceResponse, key: PurePosixPath) -> bytes:
        if response.status is FetchStatus.NOT_FOUND:
            raise NotFoundError(f"Could not get '{key}' from database.")
        if response.status is FetchStatus.NOT_MODIFIED:
            # Only possible if a hint was sent without a cached copy to fall back on
            raise NotFoundError(f"Unexpected 'not modified' response for '{key}'.")
        return response.body
