"""
NetrunnerDB public API client.

API docs: https://netrunnerdb.com/api/doc

Requests are conditional when a previous Last-Modified timestamp is known:
304 means the cached copy is still current, 404 means the entity does not
exist. Any other failure is a transport error.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from email.utils import format_datetime, parsedate_to_datetime
from enum import Enum
from typing import Protocol

import httpx

from pnp_card_extractor.models.errors import SourceError

logger = logging.getLogger(__name__)

DEFAULT_HOST = "https://netrunnerdb.com/api/2.0/public/"
USER_AGENT = "pnp-card-extractor/1.0"

LIST_ROUTES = frozenset({"cards", "cycles", "factions", "packs", "sides", "types"})
GET_ROUTES = frozenset({"card", "cycle", "faction", "pack", "side", "type"})


class FetchStatus(Enum):
    OK = "ok"
    NOT_MODIFIED = "not_modified"
    NOT_FOUND = "not_found"


@dataclass(frozen=True, slots=True)
class SourceResponse:
    """
    Outcome of one catalog request.

    Attributes:
        status: OK, NOT_MODIFIED or NOT_FOUND
        body: Raw response body (empty unless OK)
        last_modified: Parsed Last-Modified header, if present and valid
    """

    status: FetchStatus
    body: bytes = b""
    last_modified: datetime | None = None


class CatalogSource(Protocol):
    """Anything that can fetch catalog routes."""

    def fetch(
        self,
        route: str,
        item_id: str | None = None,
        *,
        modified_since: datetime | None = None,
    ) -> SourceResponse: ...

    def close(self) -> None: ...


def parse_http_date(value: str | None) -> datetime | None:
    """Parse an RFC 2822 HTTP date, returning None if absent or invalid."""
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def format_http_date(value: datetime) -> str:
    """Format a datetime for an If-Modified-Since header."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return format_datetime(value.astimezone(UTC), usegmt=True)


def build_route_url(host: str, route: str, item_id: str | None = None) -> str:
    """
    Build the URL for a catalog route.

    Raises:
        ValueError: If the route is unknown, or an id is missing/unexpected
    """
    if route in LIST_ROUTES:
        if item_id is not None:
            raise ValueError(f"Route '{route}' does not take an id")
        path = route
    elif route in GET_ROUTES:
        if item_id is None:
            raise ValueError(f"Route '{route}' requires an id")
        path = f"{route}/{item_id}"
    else:
        raise ValueError(f"Unknown route: {route}")

    return f"{host.rstrip('/')}/{path}"


class NetrunnerdbClient:
    """
    Synchronous NetrunnerDB client.

    Pass an httpx.Client for connection reuse; otherwise one is created
    and owned by this instance.
    """

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        client: httpx.Client | None = None,
        timeout: float = 30.0,
        user_agent: str = USER_AGENT,
    ) -> None:
        self.host = host
        self._owns_client = client is None
        self._client = client or httpx.Client(
            headers={"User-Agent": user_agent},
            follow_redirects=True,
            timeout=timeout,
        )

    def __enter__(self) -> "NetrunnerdbClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def fetch(
        self,
        route: str,
        item_id: str | None = None,
        *,
        modified_since: datetime | None = None,
    ) -> SourceResponse:
        """
        Fetch a list or get route.

        Args:
            route: One of LIST_ROUTES or GET_ROUTES
            item_id: Entity code, for get routes
            modified_since: Only return content changed after this time

        Returns:
            SourceResponse with OK, NOT_MODIFIED or NOT_FOUND status

        Raises:
            ValueError: If the route is unknown
            SourceError: On network errors or unexpected HTTP statuses
        """
        url = build_route_url(self.host, route, item_id)
        headers: dict[str, str] = {}
        if modified_since is not None:
            headers["If-Modified-Since"] = format_http_date(modified_since)
            logger.info("GET %s (modified_since: %s)", url, headers["If-Modified-Since"])
        else:
            logger.info("GET %s", url)

        try:
            response = self._client.get(url, headers=headers)
        except httpx.RequestError as e:
            raise SourceError(f"Failed to fetch {url}: {e}") from e

        logger.debug(" -> %d %s", response.status_code, response.reason_phrase)

        if response.status_code == httpx.codes.NOT_MODIFIED:
            return SourceResponse(status=FetchStatus.NOT_MODIFIED)
        if response.status_code == httpx.codes.NOT_FOUND:
            return SourceResponse(status=FetchStatus.NOT_FOUND)

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SourceError(
                f"Failed to fetch {url}: HTTP {e.response.status_code}"
            ) from e

        return SourceResponse(
            status=FetchStatus.OK,
            body=response.content,
            last_modified=parse_http_date(response.headers.get("last-modified")),
        )
