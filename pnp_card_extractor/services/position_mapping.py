"""
Document order to catalog position mapping.

Ideally the Nth card image in a PDF is card N of the pack, but:

- Some PDFs start or end with extra, non-playing cards (covers, rules).
- Some PDFs contain several variants of the same card.
- Some PDFs are deliberately out of order, e.g. identities first.

The custom card order is a number list (see select_numbers) of cycle
positions, one per image between the leading and trailing extra cards.
Repeating a number marks a variant.
"""

import re
from collections.abc import Sequence
from functools import cached_property

from pnp_card_extractor.db.cache import LayeredCache
from pnp_card_extractor.models.catalog import CatalogRecord
from pnp_card_extractor.models.errors import OutOfRangeError
from pnp_card_extractor.models.options import ExtractionOptions
from pnp_card_extractor.models.position import (
    EXTRA_CARD,
    CardPosition,
    MappedPosition,
    PackBounds,
)
from pnp_card_extractor.services.select_numbers import NumberSpec, RangeSet

# Upper bound for card orders when no pack is configured
DEFAULT_MAX_POSITION = 999

# Booster packs reuse their cycle's card numbers instead of extending them
BOOSTER_PACK = re.compile(r"booster pack", re.IGNORECASE)


def compute_pack_bounds(
    pack: CatalogRecord | None,
    packs: Sequence[CatalogRecord] = (),
    max_position: int = DEFAULT_MAX_POSITION,
) -> PackBounds:
    """
    Compute the cycle positions covered by a pack.

    Args:
        pack: The configured pack, or None
        packs: Every pack in the catalog
        max_position: Upper bound used when no pack is configured

    Returns:
        PackBounds(first, last). The first position is 1 for the first pack
        of a cycle, otherwise one past the combined size of every earlier
        non-booster pack of the same cycle.
    """
    if pack is None:
        return PackBounds(1, max_position)

    first = 1
    if pack["position"] != 1:
        earlier = [
            other
            for other in packs
            if other["cycle_code"] == pack["cycle_code"]
            and other["position"] < pack["position"]
            and not BOOSTER_PACK.search(other.get("name") or "")
        ]
        first = sum(other["size"] for other in earlier) + 1

    return PackBounds(first, first + pack["size"] - 1)


class PositionMapper:
    """
    Maps 1-based document positions to catalog positions.

    The mapping is a pure function of document position for a given
    configuration.
    """

    def __init__(
        self,
        card_order: NumberSpec = "-",
        *,
        bounds: PackBounds = PackBounds(1, DEFAULT_MAX_POSITION),
        extra_start: int = 0,
        extra_end: int = 0,
    ) -> None:
        if extra_start < 0 or extra_end < 0:
            raise ValueError("Extra card counts must not be negative")
        self.bounds = bounds
        self.extra_start = extra_start
        self.extra_end = extra_end
        self.order = RangeSet.parse(card_order, minimum=bounds.first, maximum=bounds.last)

    @property
    def max_position(self) -> int:
        """Number of images the configuration accounts for."""
        return self.extra_start + len(self.order) + self.extra_end

    def resolve(self, doc_pos: int) -> MappedPosition:
        """
        Map a document position.

        Returns:
            CardPosition, or EXTRA_CARD for a leading or trailing extra card

        Raises:
            OutOfRangeError: If doc_pos is outside 1..max_position
        """
        if doc_pos < 1 or doc_pos > self.max_position:
            raise OutOfRangeError(
                f"Card position {doc_pos} is outside of the expected range "
                f"1-{self.max_position}"
            )

        if self._is_extra(doc_pos):
            return EXTRA_CARD

        cycle_pos = self.order[doc_pos - self.extra_start - 1]
        return CardPosition(cycle_pos, cycle_pos - self.bounds.first + 1)

    def variant_pack_positions(self) -> set[int]:
        """Every catalog position that the card order lists more than once."""
        return set(self._variants)

    def _is_extra(self, doc_pos: int) -> bool:
        return doc_pos <= self.extra_start or doc_pos > self.extra_start + len(self.order)

    @cached_property
    def _variants(self) -> tuple[int, ...]:
        return tuple(self.order.duplicates())


def build_position_mapper(
    catalog: LayeredCache | None,
    options: ExtractionOptions,
) -> PositionMapper:
    """
    Build the mapper for a run, looking up pack boundaries in the catalog.

    Raises:
        NotFoundError: If the configured pack is unknown
        RangeError: If the card order doesn't fit the pack
    """
    bounds = PackBounds(1, DEFAULT_MAX_POSITION)
    if options.pack_code and catalog is not None:
        pack = catalog.get("pack", options.pack_code)
        bounds = compute_pack_bounds(pack, catalog.list("packs"))

    return PositionMapper(
        options.card_order,
        bounds=bounds,
        extra_start=options.extra_start,
        extra_end=options.extra_end,
    )
