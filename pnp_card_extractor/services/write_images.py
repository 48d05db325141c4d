"""
Card image writer.

Names each extracted image from its merged metadata and hands it, with a
flat set of PNG text entries, to the image handle for saving.
"""

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Protocol

from pnp_card_extractor.models.catalog import lookup_path
from pnp_card_extractor.models.options import FALLBACK_TEMPLATE, ExtractionOptions
from pnp_card_extractor.services.filename_template import FilenameTemplate
from pnp_card_extractor.services.merge_metadata import MetadataMerger

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "netrunner:"
DEFAULT_METADATA: tuple[str, ...] = (
    "code",
    "cost",
    "deck_limit",
    "faction_cost",
    "flavor",
    "illustrator",
    "position",
    "quantity",
    "stripped_text",
    "stripped_title",
    "text",
    "title",
    "uniqueness",
    "is_variant",
    "variant_position",
    "page_number",
    "card_number",
    "cycle.code",
    "cycle.name",
    "faction.code",
    "faction.color",
    "faction.name",
    "pack.code",
    "pack.name",
    "pack.date_release",
    "pack.size",
    "side.code",
    "side.name",
    "type.code",
    "type.name",
    "type.is_subtype",
)


class CardImage(Protocol):
    """An extracted card image, as produced by the PDF slicer."""

    width: int
    height: int

    def save(self, path: Path, text: Mapping[str, str]) -> None: ...


def build_text_metadata(
    metadata: Mapping[str, Any],
    keys: Sequence[str] = DEFAULT_METADATA,
    prefix: str = DEFAULT_PREFIX,
) -> dict[str, str]:
    """Flatten the selected metadata keys into prefixed PNG text entries."""
    text: dict[str, str] = {}
    for key in keys:
        value = lookup_path(metadata, key)
        if value is None:
            continue
        text[prefix + key] = str(value)
    return text


class ImageWriter:
    """Writes card images for one run."""

    def __init__(
        self,
        options: ExtractionOptions,
        merger: MetadataMerger,
        metadata_keys: Sequence[str] = DEFAULT_METADATA,
        metadata_prefix: str = DEFAULT_PREFIX,
    ) -> None:
        self.options = options
        self.merger = merger
        self.metadata_keys = metadata_keys
        self.metadata_prefix = metadata_prefix
        self.card_template = FilenameTemplate(
            options.filename_template if options.pack_code else FALLBACK_TEMPLATE
        )
        self.extra_template = FilenameTemplate(options.extra_template)

    def card_path(self, metadata: Mapping[str, Any]) -> Path:
        template = self.extra_template if metadata.get("is_extra") else self.card_template
        return Path(self.options.directory) / template.render(metadata)

    def write(self, image: CardImage, page_number: int, card_number: int) -> Path | None:
        """
        Write one image.

        Returns:
            Path written, or None if an existing file was skipped
        """
        metadata = self.merger.for_image(page_number, card_number)
        path = self.card_path(metadata)

        if path.exists():
            if not self.options.force:
                logger.warning("Skipping existing file: %s", path)
                return None
            logger.warning("Will replace existing file: %s", path)

        logger.info("Writing page %d card %d to %s", page_number, card_number, path)
        path.parent.mkdir(parents=True, exist_ok=True)
        text = build_text_metadata(metadata, self.metadata_keys, self.metadata_prefix)
        for key, value in text.items():
            logger.debug("  -> %s: %s", key, value)
        image.save(path, text)
        return path
