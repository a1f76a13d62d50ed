"""
Paginated remote fetcher.

Walks a provider listing endpoint page by page (or cursor by cursor),
pausing between requests as the provider requires. A failure after the
first page ends the walk but keeps what was already collected.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from ..core.http import BaseApiClient, ExternalAPIError
from ..providers.base import Endpoint, Pagination, dig, extract_records

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    """
    Result of walking one endpoint.

    Attributes:
        records: Raw provider rows from every page that succeeded, in order
        pages_fetched: Number of pages that succeeded
        total_pages: Page-count hint from the first response (None for cursors)
        partial: True when a later page failed and the walk stopped early
        errors: Messages for the failures that stopped the walk
    """

    records: list[dict[str, Any]] = field(default_factory=list)
    pages_fetched: int = 0
    total_pages: Optional[int] = None
    partial: bool = False
    errors: list[str] = field(default_factory=list)


def _total_pages(body: Any, endpoint: Endpoint) -> int:
    hint = dig(body, endpoint.total_pages_path)
    try:
        total = int(hint)
    except (TypeError, ValueError):
        return 1
    return max(total, 1)


class PaginatedFetcher:
    """Collects every record of an endpoint through one provider client."""

    def __init__(self, client: BaseApiClient):
        self.client = client

    async def fetch_all(
        self,
        endpoint: Endpoint,
        params: Optional[dict[str, Any]] = None,
    ) -> FetchResult:
        """
        Fetch all pages of ``endpoint``.

        Raises:
            ExternalAPIError: If the first page fails (transport or malformed body)
        """
        base_params = dict(params or {})

        if endpoint.pagination == Pagination.cursor:
            return await self._fetch_cursor(endpoint, base_params)

        page = 1
        first_params = dict(base_params)
        if endpoint.pagination == Pagination.pages:
            first_params[endpoint.page_param] = page

        body = await self.client.get_json(endpoint.path, first_params)
        result = FetchResult(records=list(extract_records(body, endpoint)), pages_fetched=1)

        if endpoint.pagination == Pagination.none:
            result.total_pages = 1
            return result

        result.total_pages = _total_pages(body, endpoint)

        while page < result.total_pages:
            await asyncio.sleep(endpoint.delay.for_page(page))
            page += 1
            try:
                body = await self.client.get_json(
                    endpoint.path, {**base_params, endpoint.page_param: page}
                )
                records = extract_records(body, endpoint)
            except ExternalAPIError as e:
                self._stop_early(result, endpoint, page, e)
                break
            result.records.extend(records)
            result.pages_fetched += 1

        return result

    async def _fetch_cursor(self, endpoint: Endpoint, params: dict[str, Any]) -> FetchResult:
        body = await self.client.get_json(endpoint.path, dict(params))
        result = FetchResult(records=list(extract_records(body, endpoint)), pages_fetched=1)

        page = 1
        cursor = dig(body, endpoint.next_cursor_path)
        while cursor:
            await asyncio.sleep(endpoint.delay.for_page(page))
            page += 1
            try:
                body = await self.client.get_json(
                    endpoint.path, {**params, endpoint.cursor_param: cursor}
                )
                records = extract_records(body, endpoint)
            except ExternalAPIError as e:
                self._stop_early(result, endpoint, page, e)
                break
            result.records.extend(records)
            result.pages_fetched += 1
            cursor = dig(body, endpoint.next_cursor_path)

        return result

    @staticmethod
    def _stop_early(result: FetchResult, endpoint: Endpoint, page: int, error: Exception) -> None:
        message = f"{endpoint.path} page {page}: {error}"
        logger.warning(
            "Stopping pagination of %s at page %d, keeping %d records from %d page(s): %s",
            endpoint.path, page, len(result.records), result.pages_fetched, error,
        )
        result.partial = True
        result.errors.append(message)
