import json
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import pytest

from pnp_card_extractor.db.cache import LayeredCache
from pnp_card_extractor.db.netrunnerdb import FetchStatus, SourceResponse

LAST_MODIFIED = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


def api_payload(data: Any) -> dict[str, Any]:
    """Wrap data the way NetrunnerDB does."""
    return {"success": True, "data": data if isinstance(data, list) else [data]}


class FakeSource:
    """
    In-memory stand-in for the NetrunnerDB client.

    Responses are keyed by "route" or "route/id". Values may be JSON data,
    a SourceResponse, or an exception to raise. Missing keys are 404s.
    """

    def __init__(self, responses: dict[str, Any], last_modified: datetime | None = LAST_MODIFIED):
        self.responses = responses
        self.last_modified = last_modified
        self.calls: list[tuple[str, str | None, datetime | None]] = []
        self.closed = False

    def fetch(
        self,
        route: str,
        item_id: str | None = None,
        *,
        modified_since: datetime | None = None,
    ) -> SourceResponse:
        self.calls.append((route, item_id, modified_since))
        key = route if item_id is None else f"{route}/{item_id}"
        value = self.responses.get(key)
        if value is None:
            return SourceResponse(status=FetchStatus.NOT_FOUND)
        if isinstance(value, Exception):
            raise value
        if isinstance(value, SourceResponse):
            return value
        body = value if isinstance(value, bytes) else json.dumps(value).encode()
        return SourceResponse(status=FetchStatus.OK, body=body, last_modified=self.last_modified)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def cycles() -> list[dict[str, Any]]:
    return [
        {"code": "genesis", "name": "Genesis", "position": 2, "size": 4},
        {"code": "creation-and-control", "name": "Creation and Control", "position": 3, "size": 1},
    ]


@pytest.fixture
def packs() -> list[dict[str, Any]]:
    return [
        {
            "code": "wla",
            "cycle_code": "genesis",
            "name": "What Lies Ahead",
            "position": 1,
            "size": 20,
            "date_release": "2012-12-14",
        },
        {
            "code": "ta",
            "cycle_code": "genesis",
            "name": "Trace Amount",
            "position": 2,
            "size": 20,
            "date_release": "2013-01-04",
        },
        {
            "code": "gbp",
            "cycle_code": "genesis",
            "name": "Genesis Booster Pack",
            "position": 3,
            "size": 5,
            "date_release": "2013-01-20",
        },
        {
            "code": "ce",
            "cycle_code": "genesis",
            "name": "Cyber Exodus",
            "position": 4,
            "size": 20,
            "date_release": "2013-02-01",
        },
        {
            "code": "cac",
            "cycle_code": "creation-and-control",
            "name": "Creation and Control",
            "position": 1,
            "size": 3,
            "date_release": "2013-05-03",
        },
    ]


@pytest.fixture
def cards() -> list[dict[str, Any]]:
    # Listed out of order on purpose; the merger sorts by position
    return [
        {
            "code": "03003",
            "pack_code": "cac",
            "position": 3,
            "title": "Director Haas' Pet Project",
            "stripped_title": "Director Haas' Pet Project",
            "faction_code": "haas-bioroid",
            "side_code": "corp",
            "type_code": "agenda",
            "illustrator": None,
        },
        {
            "code": "03001",
            "pack_code": "cac",
            "position": 1,
            "title": "Cerebral Imaging: Infinite Frontiers",
            "stripped_title": "Cerebral Imaging: Infinite Frontiers",
            "faction_code": "haas-bioroid",
            "side_code": "corp",
            "type_code": "identity",
        },
        {
            "code": "03002",
            "pack_code": "cac",
            "position": 2,
            "title": "Next Design: Guarding the Net",
            "stripped_title": "Next Design: Guarding the Net",
            "faction_code": "haas-bioroid",
            "side_code": "corp",
            "type_code": "identity",
        },
        {
            "code": "02021",
            "pack_code": "ta",
            "position": 21,
            "title": "Sneakdoor Beta",
            "stripped_title": "Sneakdoor Beta",
            "faction_code": "criminal",
            "side_code": "runner",
            "type_code": "program",
        },
    ]


@pytest.fixture
def api_responses(
    cycles: list[dict[str, Any]],
    packs: list[dict[str, Any]],
    cards: list[dict[str, Any]],
) -> dict[str, Any]:
    """Every route the merger and mapper touch."""
    responses: dict[str, Any] = {
        "cycles": api_payload(cycles),
        "packs": api_payload(packs),
        "cards": api_payload(cards),
        "factions": api_payload(
            [
                {"code": "haas-bioroid", "name": "Haas-Bioroid", "color": "8f4fe8"},
                {"code": "criminal", "name": "Criminal", "color": "4169e1"},
            ]
        ),
        "sides": api_payload(
            [{"code": "corp", "name": "Corp"}, {"code": "runner", "name": "Runner"}]
        ),
        "types": api_payload(
            [
                {"code": "identity", "name": "Identity", "is_subtype": False},
                {"code": "agenda", "name": "Agenda", "is_subtype": False},
                {"code": "program", "name": "Program", "is_subtype": False},
            ]
        ),
    }
    for cycle in cycles:
        responses[f"cycle/{cycle['code']}"] = api_payload(cycle)
    for pack in packs:
        responses[f"pack/{pack['code']}"] = api_payload(pack)
    return responses


@pytest.fixture
def make_source(api_responses: dict[str, Any]) -> Callable[..., FakeSource]:
    """Factory for fake sources; defaults to the sample catalog."""

    def factory(
        responses: dict[str, Any] | None = None,
        last_modified: datetime | None = LAST_MODIFIED,
    ) -> FakeSource:
        return FakeSource(api_responses if responses is None else responses, last_modified)

    return factory


@pytest.fixture
def fake_source(make_source: Callable[..., FakeSource]) -> FakeSource:
    return make_source()


@pytest.fixture
def catalog(fake_source: FakeSource) -> LayeredCache:
    """Memory-only cache over the sample catalog."""
    return LayeredCache(source=fake_source)
