"""User repository using SQLAlchemy 2.0 async.

Table: cursor_pagination.users

Column identifiers are PascalCase and must be quoted ("Surname", not surname).
They are only ever taken from USERS_TABLE below.
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.models.user import UserFilter, UserSort
from app.persistence.ranked_query import (
    OrderColumn,
    RankedRow,
    RankedTable,
    build_ranked_query,
    fetch_ranked,
)

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA = "cursor_pagination"

USERS_TABLE = RankedTable(
    schema=DEFAULT_SCHEMA,
    name="users",
    columns={
        "id": "Id",
        "name": "Name",
        "surname": "Surname",
        "email": "Email",
        "address": "Address",
    },
    key="id",
)

# Projection returned to clients; address is stored but never listed
USER_ITEM_COLUMNS = ("id", "name", "surname", "email")

USER_ORDERS: dict[UserSort, tuple[OrderColumn, ...]] = {
    UserSort.SURNAME_DESC: (OrderColumn("surname", False), OrderColumn("name", True)),
    UserSort.NAME_ASC: (OrderColumn("name", True), OrderColumn("surname", True)),
}


class UserRepository:
    """Repository for cursor_pagination.users ranked reads."""

    def __init__(self, session: AsyncSession, table: RankedTable = USERS_TABLE):
        self.session = session
        self.table = table

    async def list_ranked(
        self,
        start_index: int,
        page_size: int,
        user_filter: UserFilter,
    ) -> list[RankedRow[dict[str, Any]]]:
        """Fetch up to ``page_size + 1`` users ranked after ``start_index``."""
        filters = {"name": user_filter.name} if user_filter.name is not None else None
        query = build_ranked_query(
            self.table,
            USER_ITEM_COLUMNS,
            USER_ORDERS[user_filter.sort],
            start_index=start_index,
            page_size=page_size,
            filters=filters,
        )
        rows = await fetch_ranked(self.session, query)
        logger.debug(
            "Ranked users fetched",
            extra={"start_index": start_index, "page_size": page_size, "rows": len(rows)},
        )
        return rows
