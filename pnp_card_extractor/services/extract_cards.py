"""
Card extraction pipeline.

Walks the selected pages in order and writes every card image on them.
Images must arrive in document order: the metadata merger assigns catalog
positions by counting them.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from pnp_card_extractor.db.cache import LayeredCache
from pnp_card_extractor.models.errors import DatabaseError
from pnp_card_extractor.models.options import ExtractionOptions
from pnp_card_extractor.services.merge_metadata import MetadataMerger
from pnp_card_extractor.services.position_mapping import build_position_mapper
from pnp_card_extractor.services.select_numbers import RangeSet
from pnp_card_extractor.services.write_images import CardImage, ImageWriter

logger = logging.getLogger(__name__)


@dataclass
class ExtractionSummary:
    """Outcome of an extraction run."""

    written: list[Path] = field(default_factory=list)
    skipped: int = 0
    failed: dict[str, str] = field(default_factory=dict)
    """Maps "page N card M" to the error message."""

    @property
    def total(self) -> int:
        return len(self.written) + self.skipped + len(self.failed)


def select_pages(spec: str, page_count: int) -> RangeSet:
    """
    Choose pages to extract.

    Raises:
        RangeError: If the spec names pages outside 1..page_count
    """
    return RangeSet.parse(spec, maximum=page_count, unique=True)


def extract_cards(
    pages: Sequence[Sequence[CardImage]],
    options: ExtractionOptions,
    writer: ImageWriter,
) -> ExtractionSummary:
    """
    Write every card image on the selected pages.

    Args:
        pages: Card images per page, pages and images in document order
        options: Run options (page selection)
        writer: Writer bound to this run's metadata merger

    Returns:
        ExtractionSummary of written, skipped and failed images

    Raises:
        RangeError: If the page selection is invalid
        OutOfRangeError: If an image maps to no configured position
        PositionNotFoundError: If the pack metadata lacks a mapped card
    """
    selected = select_pages(options.pages, len(pages))
    summary = ExtractionSummary()

    for page_number in sorted(selected):
        images = pages[page_number - 1]
        logger.info("Extracting cards from Page %d of %d...", page_number, len(pages))

        for card_number, image in enumerate(images, start=1):
            logger.debug("  -> %dx%d image", image.width, image.height)
            try:
                path = writer.write(image, page_number, card_number)
            except DatabaseError as e:
                label = f"page {page_number} card {card_number}"
                logger.error("Could not resolve metadata for %s: %s", label, e)
                summary.failed[label] = str(e)
                continue

            if path is None:
                summary.skipped += 1
            else:
                summary.written.append(path)

        logger.info("Extracted %d card(s) from Page %d.", len(images), page_number)

    return summary


def build_writer(catalog: LayeredCache | None, options: ExtractionOptions) -> ImageWriter:
    """
    Wire up the mapper, merger and writer for one run.

    Pack lookups happen here, so configuration errors surface before any
    image is processed.

    Raises:
        NotFoundError: If the configured pack is unknown
        RangeError: If the card order doesn't fit the pack
    """
    mapper = build_position_mapper(catalog, options)
    merger = MetadataMerger(catalog, mapper, options.pack_code)
    return ImageWriter(options, merger)
