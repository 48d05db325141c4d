"""
Catalog record wrapper.

NetrunnerDB entities (cards, packs, cycles, factions, sides, types) have no
fixed schema here. A CatalogRecord wraps the decoded JSON object and supports
item access, dotted-path lookup and conversion back to plain data.
"""

from collections.abc import Iterator, Mapping
from typing import Any


def wrap(value: Any) -> Any:
    """Wrap mappings as CatalogRecords and lists element-wise."""
    if isinstance(value, CatalogRecord):
        return value
    if isinstance(value, Mapping):
        return CatalogRecord(value)
    if isinstance(value, list):
        return [wrap(item) for item in value]
    return value


def unwrap(value: Any) -> Any:
    """Convert CatalogRecords (possibly nested in lists) to plain dicts."""
    if isinstance(value, CatalogRecord):
        return value.to_dict()
    if isinstance(value, list):
        return [unwrap(item) for item in value]
    return value


def lookup_path(data: Any, path: str, default: Any = None) -> Any:
    """
    Follow a dotted path ("pack.code") through nested mappings.

    Args:
        data: A mapping, CatalogRecord, or anything else
        path: Dot-separated keys
        default: Returned when any step is missing

    Returns:
        The value at the path, or default.
    """
    current = data
    for key in path.split("."):
        if isinstance(current, CatalogRecord):
            current = current.to_dict()
        if not isinstance(current, Mapping) or key not in current:
            return default
        current = current[key]
    return current


class CatalogRecord(Mapping[str, Any]):
    """A read-only, dotted-path addressable view over one API entity."""

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any]):
        self._data = dict(data)

    def __getitem__(self, key: str) -> Any:
        return wrap(self._data[key])

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        code = self._data.get("code")
        return f"CatalogRecord(code={code!r})" if code else f"CatalogRecord({self._data!r})"

    def lookup(self, path: str, default: Any = None) -> Any:
        """Dotted-path lookup; nested mappings come back wrapped."""
        return wrap(lookup_path(self._data, path, default))

    def to_dict(self) -> dict[str, Any]:
        """Return the underlying plain data."""
        return self._data
