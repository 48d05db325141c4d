"""
List NetrunnerDB card packs.

Prints every pack code with its cycle and release date, so the right
--pack-code can be picked for an extraction run.

Usage:
    python -m pnp_card_extractor.jobs.list_card_packs [--offline]
"""

import argparse
import logging
import sys

from pnp_card_extractor.config import Settings, build_catalog
from pnp_card_extractor.db.cache import LayeredCache
from pnp_card_extractor.jobs.logging_setup import add_logging_arguments, configure_logging
from pnp_card_extractor.models.catalog import CatalogRecord
from pnp_card_extractor.models.errors import DatabaseError

logger = logging.getLogger(__name__)


def group_packs_by_cycle(
    cycles: list[CatalogRecord], packs: list[CatalogRecord]
) -> dict[str, list[CatalogRecord]]:
    """Map each cycle code to its packs, sorted by position."""
    return {
        cycle["code"]: sorted(
            (pack for pack in packs if pack.get("cycle_code") == cycle["code"]),
            key=lambda pack: pack["position"],
        )
        for cycle in cycles
    }


def format_card_packs(catalog: LayeredCache) -> list[str]:
    """
    Format one line per pack.

    Cycles with a single pack (big boxes, deluxe expansions) print just the
    pack; other cycles print "cycle: pack" for each pack.

    Raises:
        DatabaseError: If cycles or packs can't be loaded
    """
    cycles = catalog.list("cycles")
    packs = catalog.list("packs")
    if not packs:
        return []

    width = max(len(pack["code"]) for pack in packs)
    cycle_packs = group_packs_by_cycle(cycles, packs)
    lines: list[str] = []

    for cycle in cycles:
        members = cycle_packs[cycle["code"]]
        if len(members) == 1:
            pack = members[0]
            lines.append(
                f"{pack['code']:>{width}}  {pack['name']} ({pack.get('date_release')})"
            )
            continue
        for pack in members:
            lines.append(
                f"{pack['code']:>{width}}  {cycle['name']}: {pack['name']} "
                f"({pack.get('date_release')})"
            )

    return lines


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Print the available card packs and their codes")
    parser.add_argument("--offline", action="store_true", help="Do not use the NetrunnerDB API")
    parser.add_argument("--no-disk-cache", action="store_true", help="Do not use the disk cache")
    add_logging_arguments(parser)
    args = parser.parse_args(argv)
    configure_logging(args)

    settings = Settings()
    if args.offline:
        settings.offline = True
    if args.no_disk_cache:
        settings.disable_cache = True
    try:
        with build_catalog(settings) as catalog:
            lines = format_card_packs(catalog)
    except DatabaseError as e:
        logger.error("Could not list card packs: %s", e)
        return 1

    for line in lines:
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
