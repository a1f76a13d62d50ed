"""
Base provider types.

Defines the provider-neutral record every league adapter produces, and the
endpoint descriptors the paginated fetcher walks. Providers own their
pagination style and the courtesy delay between page requests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from ..core.http import ExternalAPIError
from ..core.models import StatLine
from ..core.types import StatCategory


class MalformedResponseError(ExternalAPIError):
    """Provider answered 2xx but the body lacks the expected structure."""

    def __init__(self, message: str):
        super().__init__(message, code="MALFORMED_RESPONSE", status_code=502)


# =============================================================================
# Records
# =============================================================================


@dataclass
class PlayerStatRecord:
    """
    One provider stat line for one player on one team for one season.

    Attributes:
        player_id: Provider player identifier (string form); empty when missing
        player_name: Display name as sent by the provider
        season: Season year the line belongs to
        category: Stat category the line fills
        stats: Typed stat line for the league/category
        team: Team label (abbreviation or club name)
        team_id: Team identifier in our teams table, when known
        record_id: Provider-internal record id; higher means fetched/created later
        is_aggregate: True for multi-team combined lines (e.g. "2TM")
        profile: Biographical extras (nationality, photo, ...)
    """

    player_id: str
    player_name: str
    season: int
    category: StatCategory
    stats: StatLine
    team: Optional[str] = None
    team_id: Optional[str] = None
    record_id: Optional[int] = None
    position: Optional[str] = None
    age: Optional[int] = None
    is_aggregate: bool = False
    profile: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        # Ensure player_id is always a string
        self.player_id = str(self.player_id) if self.player_id is not None else ""

    @property
    def games(self) -> int:
        return self.stats.game_count


# =============================================================================
# Endpoints
# =============================================================================


class Pagination(str, Enum):
    """How an endpoint spreads its records across requests."""

    none = "none"
    pages = "pages"  # numbered pages with a total-page hint in the first body
    cursor = "cursor"  # opaque cursor returned with each page


@dataclass(frozen=True)
class PageDelay:
    """
    Mandatory pause between page requests.

    Alternates: ``base`` after odd pages, ``even_page`` (when set) after even
    pages.
    """

    base: float = 0.0
    even_page: Optional[float] = None

    def for_page(self, page: int) -> float:
        if self.even_page is not None and page % 2 == 0:
            return self.even_page
        return self.base


@dataclass(frozen=True)
class Endpoint:
    """Description of a provider listing endpoint."""

    path: str
    records_key: Optional[str] = None  # None: the body itself is the array
    pagination: Pagination = Pagination.none
    page_param: str = "page"
    total_pages_path: tuple[str, ...] = ("paging", "total")
    cursor_param: str = "cursor"
    next_cursor_path: tuple[str, ...] = ("meta", "next_cursor")
    delay: PageDelay = field(default_factory=PageDelay)


def dig(body: Any, path: tuple[str, ...]) -> Any:
    """Follow a key path through nested dicts, returning None on any gap."""
    current = body
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def extract_records(body: Any, endpoint: Endpoint) -> list[dict[str, Any]]:
    """
    Pull the record array out of a response body.

    Raises:
        MalformedResponseError: If the array is missing or not a list
    """
    records = body if endpoint.records_key is None else dig(body, (endpoint.records_key,))
    if not isinstance(records, list):
        where = endpoint.records_key or "body"
        raise MalformedResponseError(f"{endpoint.path}: expected an array at '{where}'")
    return records
