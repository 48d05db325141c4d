"""
Refresh the on-disk catalog cache.

Fetches every NetrunnerDB list route through the disk cache, so later runs
can work with --offline. Stale entries are revalidated; fresh ones are left
alone.

Usage:
    python -m pnp_card_extractor.jobs.refresh_catalog
"""

import argparse
import logging
import sys

from pnp_card_extractor.config import Settings, build_catalog
from pnp_card_extractor.db.cache import LayeredCache
from pnp_card_extractor.db.netrunnerdb import LIST_ROUTES
from pnp_card_extractor.jobs.logging_setup import add_logging_arguments, configure_logging
from pnp_card_extractor.models.errors import DatabaseError

logger = logging.getLogger(__name__)


def refresh_catalog(catalog: LayeredCache, routes: list[str] | None = None) -> dict[str, int]:
    """
    Load each list route through the cache.

    Continues past individual failures.

    Args:
        catalog: Cache to refresh
        routes: Routes to load. If None, loads every list route.

    Returns:
        Dict mapping route to number of records; failed routes are absent
    """
    if routes is None:
        routes = sorted(LIST_ROUTES)

    results: dict[str, int] = {}
    for route in routes:
        if route not in LIST_ROUTES:
            logger.warning("Skipping unknown route: %s", route)
            continue
        try:
            results[route] = len(catalog.list(route))
        except DatabaseError as e:
            logger.error("Error refreshing %s: %s", route, e)
            continue
        logger.info("Cached %d %s", results[route], route)

    logger.info("Catalog refresh complete. Routes cached: %d", len(results))
    return results


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Refresh the NetrunnerDB disk cache")
    parser.add_argument(
        "routes",
        nargs="*",
        help=f"Routes to refresh (default: all of {', '.join(sorted(LIST_ROUTES))})",
    )
    add_logging_arguments(parser)
    args = parser.parse_args(argv)
    configure_logging(args)

    settings = Settings()
    if settings.offline or settings.disable_cache:
        logger.error("Refreshing needs both the API and the disk cache enabled")
        return 2

    with build_catalog(settings) as catalog:
        results = refresh_catalog(catalog, args.routes or None)
    return 0 if results else 1


if __name__ == "__main__":
    sys.exit(main())
