"""
Number list selection.

Parses a compact syntax for choosing numbers, used for page selection and for
custom card orders:

- A comma-or-space separated list of integers or ranges.
- A range is a dash-separated pair of integers, inclusive on both ends.
- Either side of a range may be left out. A missing left side means the
  minimum allowed number, a missing right side the maximum.

Examples:

    "-3, 7, 10-20, 50-"
    "1 2 3 4"
    "10-"
    "-20"
    "-"

Every token is validated before anything is expanded, so a typo never
contributes a partial range.
"""

import re
from collections.abc import Iterable, Iterator, Sequence
from typing import overload

from pnp_card_extractor.models.errors import RangeError

STRING_DELIM = re.compile(r"[\s,]+")
STRING_RANGE = re.compile(r"^(\d*)-(\d*)$")
SINGLE_NUMBER = re.compile(r"^\d+$")

NumberSpec = str | int | range | None | Sequence["NumberSpec"]


def _range_to_str(start: int, stop: int) -> str:
    return f"{start}-{stop}"


class RangeSet(Sequence[int]):
    """
    An ordered (or de-duplicated) collection of bounded integers.

    With unique=False, duplicates and written order are kept exactly, which
    card orders rely on: repetition marks a variant and order marks where the
    card sits in the document.
    """

    def __init__(self, numbers: Iterable[int], *, minimum: int, maximum: int, unique: bool):
        self.minimum = minimum
        self.maximum = maximum
        self.unique = unique
        entries = list(numbers)
        self._entries: tuple[int, ...] = (
            tuple(dict.fromkeys(entries)) if unique else tuple(entries)
        )

    @classmethod
    def parse(
        cls,
        spec: NumberSpec,
        *,
        minimum: int = 1,
        maximum: int,
        unique: bool = False,
    ) -> "RangeSet":
        """
        Parse a number specification.

        Args:
            spec: A string in the syntax above, an int, a range, None,
                or a list of those
            minimum: Smallest allowed number
            maximum: Largest allowed number
            unique: Collapse duplicates

        Returns:
            RangeSet of the selected numbers

        Raises:
            RangeError: If any token is malformed or out of bounds
        """
        if minimum > maximum:
            raise RangeError(f"Invalid bounds {_range_to_str(minimum, maximum)}")

        parser = _SpecParser(minimum, maximum)
        ranges = parser.validate(spec)
        numbers = (n for start, stop in ranges for n in range(start, stop + 1))
        return cls(numbers, minimum=minimum, maximum=maximum, unique=unique)

    @overload
    def __getitem__(self, index: int) -> int: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[int]: ...

    def __getitem__(self, index: int | slice) -> int | Sequence[int]:
        return self._entries[index]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[int]:
        return iter(self._entries)

    def __contains__(self, value: object) -> bool:
        return value in self._entries

    def __eq__(self, other: object) -> bool:
        if isinstance(other, RangeSet):
            return self._entries == other._entries
        if isinstance(other, (list, tuple)):
            return list(self._entries) == list(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._entries)

    def __repr__(self) -> str:
        return (
            f"RangeSet({list(self._entries)!r}, minimum={self.minimum}, "
            f"maximum={self.maximum}, unique={self.unique})"
        )

    def duplicates(self) -> list[int]:
        """Numbers listed more than once, in the order they first repeat."""
        seen: set[int] = set()
        repeated: dict[int, None] = {}
        for number in self._entries:
            if number in seen:
                repeated[number] = None
            seen.add(number)
        return list(repeated)


class _SpecParser:
    """Turns a spec into validated (start, stop) pairs."""

    def __init__(self, minimum: int, maximum: int):
        self.minimum = minimum
        self.maximum = maximum

    def validate(self, spec: NumberSpec) -> list[tuple[int, int]]:
        if spec is None:
            return [(self.minimum, self.maximum)]
        if isinstance(spec, bool):
            raise RangeError(f"Unexpected number spec ({type(spec).__name__}): {spec}")
        if isinstance(spec, int):
            return [self._validate_single(spec, str(spec))]
        if isinstance(spec, range):
            return [self._validate_range(spec)]
        if isinstance(spec, str):
            return self._validate_string(spec)
        if isinstance(spec, (list, tuple)):
            if not spec:
                return [(self.minimum, self.maximum)]
            pairs: list[tuple[int, int]] = []
            for part in spec:
                pairs.extend(self.validate(part))
            return pairs
        raise RangeError(f"Unexpected number spec ({type(spec).__name__}): {spec}")

    def _validate_string(self, text: str) -> list[tuple[int, int]]:
        tokens = [t for t in STRING_DELIM.split(text.strip()) if t]
        if not tokens:
            return [(self.minimum, self.maximum)]
        return [self._validate_token(token) for token in tokens]

    def _validate_token(self, token: str) -> tuple[int, int]:
        if SINGLE_NUMBER.match(token):
            return self._validate_single(int(token), token)

        match = STRING_RANGE.match(token)
        if not match:
            raise RangeError(f"'{token}' is not a valid number or range", token=token)

        start = int(match.group(1)) if match.group(1) else self.minimum
        stop = int(match.group(2)) if match.group(2) else self.maximum
        if start > stop:
            raise RangeError(f"'{token}' has its bounds reversed", token=token)
        self._check_bounds(start, token)
        self._check_bounds(stop, token)
        return (start, stop)

    def _validate_single(self, number: int, token: str) -> tuple[int, int]:
        self._check_bounds(number, token)
        return (number, number)

    def _validate_range(self, value: range) -> tuple[int, int]:
        token = _range_to_str(value.start, value.stop - 1)
        if value.step != 1 or len(value) == 0:
            raise RangeError(f"{value!r} is not an ascending range", token=token)
        self._check_bounds(value[0], token)
        self._check_bounds(value[-1], token)
        return (value[0], value[-1])

    def _check_bounds(self, number: int, token: str) -> None:
        if self.minimum <= number <= self.maximum:
            return
        valid = _range_to_str(self.minimum, self.maximum)
        raise RangeError(f"'{token}' is not in range {valid}", token=token)
