"""
Card metadata merging.

Joins the card at each document position with its pack, cycle, faction,
side and type, plus variant counters, into one flat mapping that filename
templates and PNG text chunks can read.
"""

import bisect
import logging
from collections.abc import Iterator
from functools import cached_property
from typing import Any

from pnp_card_extractor.db.cache import LayeredCache
from pnp_card_extractor.models.catalog import CatalogRecord, unwrap
from pnp_card_extractor.models.errors import PositionNotFoundError
from pnp_card_extractor.models.position import EXTRA_CARD
from pnp_card_extractor.services.position_mapping import PositionMapper

logger = logging.getLogger(__name__)


def _compact(values: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


class MetadataMerger(Iterator[dict[str, Any]]):
    """
    Produces merged metadata for each image, in document order.

    Each call to next() handles the next document position, starting at
    `next_position`. Variant counters live on this instance, so one merger
    serves exactly one run.
    """

    def __init__(
        self,
        catalog: LayeredCache | None,
        mapper: PositionMapper,
        pack_code: str | None = None,
        next_position: int = 1,
    ) -> None:
        self.catalog = catalog
        self.mapper = mapper
        self.pack_code = pack_code
        self.next_position = next_position
        self.variants: dict[int, int] = dict.fromkeys(
            sorted(mapper.variant_pack_positions()), 0
        )

    def __iter__(self) -> "MetadataMerger":
        return self

    def __next__(self) -> dict[str, Any]:
        doc_pos = self.next_position
        self.next_position += 1

        if not self.pack_code or self.catalog is None:
            return {"position": doc_pos}

        mapped = self.mapper.resolve(doc_pos)
        if mapped is EXTRA_CARD:
            logger.debug("Position %d is an extra card", doc_pos)
            return _compact({"is_extra": True, "cycle": self._cycle_dict, "pack": self._pack_dict})

        card = self._find_card(doc_pos, mapped.cycle_position)
        return self._build_metadata(card)

    def for_image(self, page_number: int, card_number: int) -> dict[str, Any]:
        """Next mapping, with the image's page and card numbers added."""
        metadata = next(self)
        metadata["page_number"] = page_number
        metadata["card_number"] = card_number
        return metadata

    def _find_card(self, doc_pos: int, cycle_pos: int) -> CatalogRecord:
        """The first card at or after cycle_pos; numbering gaps resolve forward."""
        cards = self._cards
        idx = bisect.bisect_left(cards, cycle_pos, key=lambda card: card["position"])
        if idx == len(cards):
            raise PositionNotFoundError(
                f"Could not find card (doc_pos={doc_pos}, position={cycle_pos}) "
                "in pack metadata"
            )
        return cards[idx]

    def _build_metadata(self, card: CatalogRecord) -> dict[str, Any]:
        metadata = dict(card.to_dict())
        metadata.update(self._associated_metadata(card))
        metadata.update(self._variant_metadata(card))
        return _compact(metadata)

    def _associated_metadata(self, card: CatalogRecord) -> dict[str, Any]:
        catalog = self._db
        return _compact(
            {
                "cycle": self._cycle_dict,
                "faction": unwrap(catalog.find("factions", card.get("faction_code"))),
                "pack": self._pack_dict,
                "side": unwrap(catalog.find("sides", card.get("side_code"))),
                "type": unwrap(catalog.find("types", card.get("type_code"))),
            }
        )

    def _variant_metadata(self, card: CatalogRecord) -> dict[str, Any]:
        position = card["position"]
        if position not in self.variants:
            return {}

        self.variants[position] += 1
        return {"is_variant": True, "variant_position": self.variants[position]}

    @property
    def _db(self) -> LayeredCache:
        if self.catalog is None:
            raise ValueError("No catalog configured")
        return self.catalog

    @cached_property
    def _cards(self) -> list[CatalogRecord]:
        return sorted(
            (card for card in self._db.list("cards") if card.get("pack_code") == self.pack_code),
            key=lambda card: card["position"],
        )

    @cached_property
    def _pack(self) -> CatalogRecord | None:
        return self._db.find("packs", self.pack_code)

    @cached_property
    def _cycle(self) -> CatalogRecord | None:
        if self._pack is None:
            return None
        return self._db.get("cycle", self._pack["cycle_code"])

    @property
    def _pack_dict(self) -> dict[str, Any] | None:
        return unwrap(self._pack)

    @property
    def _cycle_dict(self) -> dict[str, Any] | None:
        return unwrap(self._cycle)
