"""
Per-run extraction options.

These mirror the extractor's command-line switches. Defaults select every card
in the pack, skip the first (cover) page, and name files after cycle, pack and
card title.
"""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pnp_card_extractor.models.errors import OptionsError

DEFAULT_CARD_TEMPLATE = "/".join(
    [
        "{cycle.position} {cycle.name}",
        "{pack.position} {pack.name}",
        '{code}{is_variant ? "-"}{is_variant ? variant_position} {stripped_title}.png',
    ]
)

DEFAULT_EXTRA_TEMPLATE = "/".join(
    [
        "{cycle.position} {cycle.name}",
        "{pack.position} {pack.name}",
        "extra-cards",
        "Page {page_number} Card {card_number}.png",
    ]
)

# Used when no pack is configured, so no catalog metadata exists
FALLBACK_TEMPLATE = "Page {page_number}/Card {card_number}.png"


class ExtractionOptions(BaseModel):
    """Options for a single extraction run."""

    model_config = ConfigDict(frozen=True)

    pack_code: str | None = None
    card_order: str = "-"
    pages: str = "2-"
    extra_start: int = Field(default=0, ge=0)
    extra_end: int = Field(default=0, ge=0)
    filename_template: str = DEFAULT_CARD_TEMPLATE
    extra_template: str = DEFAULT_EXTRA_TEMPLATE
    directory: Path = Path(".")
    force: bool = False


def build_options(**values: Any) -> ExtractionOptions:
    """
    Build ExtractionOptions, reporting invalid values as OptionsError.

    Raises:
        OptionsError: If any value fails validation
    """
    try:
        return ExtractionOptions(**values)
    except ValidationError as e:
        raise OptionsError(f"Invalid extraction options: {e}") from e
