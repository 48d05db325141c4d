from enum import Enum
from typing import Literal, NamedTuple


class ExtraCard(Enum):
    """Marker for an extracted image with no catalog counterpart."""

    MARKER = "extra"


EXTRA_CARD = ExtraCard.MARKER


class CardPosition(NamedTuple):
    """
    Catalog location of one extracted image.

    Attributes:
        cycle_position: Card number within its cycle (NetrunnerDB "position")
        pack_position: Card number within its pack, starting at 1
    """

    cycle_position: int
    pack_position: int


class PackBounds(NamedTuple):
    """First and last cycle positions covered by a pack, inclusive."""

    first: int
    last: int

    @property
    def size(self) -> int:
        return self.last - self.first + 1


MappedPosition = CardPosition | Literal[ExtraCard.MARKER]
