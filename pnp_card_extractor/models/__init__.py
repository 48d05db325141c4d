from pnp_card_extractor.models.catalog import CatalogRecord, lookup_path, unwrap, wrap
from pnp_card_extractor.models.errors import (
    CacheError,
    DatabaseError,
    ExtractorError,
    LastModifiedMissing,
    MalformedPayloadError,
    NotFoundError,
    OptionsError,
    OutOfRangeError,
    PositionNotFoundError,
    RangeError,
    SourceError,
    WriteError,
)
from pnp_card_extractor.models.options import (
    DEFAULT_CARD_TEMPLATE,
    DEFAULT_EXTRA_TEMPLATE,
    FALLBACK_TEMPLATE,
    ExtractionOptions,
    build_options,
)
from pnp_card_extractor.models.position import (
    EXTRA_CARD,
    CardPosition,
    ExtraCard,
    MappedPosition,
    PackBounds,
)

__all__ = [
    "DEFAULT_CARD_TEMPLATE",
    "DEFAULT_EXTRA_TEMPLATE",
    "EXTRA_CARD",
    "FALLBACK_TEMPLATE",
    "CacheError",
    "CardPosition",
    "CatalogRecord",
    "DatabaseError",
    "ExtraCard",
    "ExtractionOptions",
    "ExtractorError",
    "LastModifiedMissing",
    "MalformedPayloadError",
    "MappedPosition",
    "NotFoundError",
    "OptionsError",
    "OutOfRangeError",
    "PackBounds",
    "PositionNotFoundError",
    "RangeError",
    "SourceError",
    "WriteError",
    "build_options",
    "lookup_path",
    "unwrap",
    "wrap",
]
