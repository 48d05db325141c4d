"""
Card extractor services.

Number selection, position mapping, metadata merging and image writing.
"""

from pnp_card_extractor.services.extract_cards import (
    ExtractionSummary,
    build_writer,
    extract_cards,
    select_pages,
)
from pnp_card_extractor.services.filename_template import FilenameTemplate
from pnp_card_extractor.services.merge_metadata import MetadataMerger
from pnp_card_extractor.services.position_mapping import (
    DEFAULT_MAX_POSITION,
    PositionMapper,
    build_position_mapper,
    compute_pack_bounds,
)
from pnp_card_extractor.services.select_numbers import RangeSet
from pnp_card_extractor.services.write_images import (
    DEFAULT_METADATA,
    DEFAULT_PREFIX,
    CardImage,
    ImageWriter,
    build_text_metadata,
)

__all__ = [
    "DEFAULT_MAX_POSITION",
    "DEFAULT_METADATA",
    "DEFAULT_PREFIX",
    "CardImage",
    "ExtractionSummary",
    "FilenameTemplate",
    "ImageWriter",
    "MetadataMerger",
    "PositionMapper",
    "RangeSet",
    "build_position_mapper",
    "build_text_metadata",
    "build_writer",
    "compute_pack_bounds",
    "extract_cards",
    "select_pages",
]
