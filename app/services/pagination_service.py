"""Page assembly for ranked cursor pagination.

Per request: decode cursor -> compute rank offset -> fetch page_size + 1
ranked rows -> trim the sentinel row -> mint the next cursor -> envelope.
Nothing is shared between requests.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any
from uuid import UUID

from app.core.errors import PaginationInvariantError, StoreUnavailableError, ValidationError
from app.core.logging import LoggerMixin
from app.domain.models.user import CursorFilter
from app.persistence.base import Cursor, is_blank, offset_from, resolve_cursor
from app.persistence.ranked_query import RankedRow
from app.schemas.pagination import ResultPage

type RowFetcher[T, F] = Callable[[int, int, F], Awaitable[list[RankedRow[T]]]]


class PageAssembler[T, F: CursorFilter](LoggerMixin):
    """Builds ``ResultPage`` envelopes on top of a ranked row fetcher.

    Args:
        fetch_rows: ``(start_index, page_size, filter) -> ranked rows``; must
            return at most ``page_size + 1`` rows with rank > start_index.
        identity: extracts the unique id of a row, used as the cursor anchor.
        query_timeout: seconds before the fetch is abandoned (None = no limit).
    """

    def __init__(
        self,
        fetch_rows: RowFetcher[T, F],
        identity: Callable[[T], UUID],
        query_timeout: float | None = None,
    ):
        self._fetch_rows = fetch_rows
        self._identity = identity
        self._query_timeout = query_timeout

    async def get_page(
        self,
        cursor: str | None,
        is_next: bool,
        current_filter: F,
        page_size: int,
    ) -> ResultPage[T]:
        if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size < 1:
            raise ValidationError(
                "Page size must be a positive integer", details={"page_size": page_size}
            )
        if current_filter is None:
            raise ValidationError("A filter context is required")
        if is_blank(cursor) and not is_next:
            raise ValidationError("Backward navigation requires a cursor")

        resolved = resolve_cursor(cursor, current_filter)
        offset = offset_from(resolved, page_size, is_next)

        rows = await self._fetch(offset, page_size, current_filter)
        self._check_ranks(rows, offset)

        has_more = len(rows) > page_size
        next_cursor: str | None = None
        if has_more:
            if len(rows) != page_size + 1:
                self.logger.error(
                    "sentinel_accounting_mismatch",
                    page_size=page_size,
                    rows=len(rows),
                    offset=offset,
                )
                raise PaginationInvariantError(
                    "Ranked query returned more rows than the sentinel allows",
                    details={"page_size": page_size, "rows": len(rows)},
                )
            sentinel = rows[-1]
            next_cursor = Cursor(
                last_id=self._identity(sentinel.row),
                entity=current_filter,
                position=offset,
            ).encode()
            rows = rows[:-1]

        self.logger.debug(
            "page_assembled",
            cursor_state=resolved.state.value,
            offset=offset,
            items=len(rows),
            has_more=has_more,
        )
        return ResultPage(
            items=[r.row for r in rows],
            cursor=next_cursor,
            has_previous=offset > 0,
            has_more=has_more,
        )

    async def _fetch(self, offset: int, page_size: int, current_filter: F) -> list[RankedRow[T]]:
        try:
            async with asyncio.timeout(self._query_timeout):
                return await self._fetch_rows(offset, page_size, current_filter)
        except TimeoutError as e:
            raise StoreUnavailableError(
                "Backing store query timed out",
                details={"timeout_seconds": self._query_timeout},
            ) from e

    def _check_ranks(self, rows: list[RankedRow[Any]], offset: int) -> None:
        previous = offset
        for row in rows:
            if row.rank <= previous:
                self.logger.error("rank_order_violation", offset=offset, rank=row.rank)
                raise PaginationInvariantError(
                    "Ranked rows are not strictly increasing past the offset",
                    details={"offset": offset, "rank": row.rank, "previous": previous},
                )
            previous = row.rank
