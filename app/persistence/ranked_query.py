"""Ranked (ROW_NUMBER) window queries over whitelisted columns.

Only identifiers registered in a ``RankedTable`` ever reach SQL text.
Callers name columns by attribute; the registry maps each attribute to its
quoted SQL identifier. Values (filters, offset, limit) are always bound
parameters.

Generated shape::

    SELECT ranked."Id" AS "id", ..., ranked.row_rank
    FROM (
        SELECT "Id", ...,
               ROW_NUMBER() OVER (ORDER BY "Surname" DESC, "Name" ASC, "Id" ASC) AS row_rank
        FROM "cursor_pagination"."users"
        WHERE "Name" = :filter_0
    ) AS ranked
    WHERE ranked.row_rank > :start_index
    ORDER BY ranked.row_rank
    LIMIT :row_limit
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, NamedTuple

from sqlalchemy import TextClause, text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ColumnValidationError, StoreUnavailableError, ValidationError

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

RANK_COLUMN = "row_rank"


def _check_identifier(value: str, what: str) -> str:
    if not isinstance(value, str) or not _IDENTIFIER.match(value):
        raise ColumnValidationError(f"Invalid {what} identifier: {value!r}")
    return value


class OrderColumn(NamedTuple):
    column: str
    ascending: bool = True


@dataclass(frozen=True)
class RankedRow[T]:
    """A row paired with its 1-based rank under the query's order."""

    rank: int
    row: T


@dataclass(frozen=True)
class RankedTable:
    """Whitelist of the columns one entity shape exposes to ranked queries.

    ``columns`` maps attribute names to SQL column identifiers; ``key`` is the
    attribute of a unique column, used to make any order total.
    """

    schema: str
    name: str
    columns: Mapping[str, str]
    key: str

    def __post_init__(self) -> None:
        _check_identifier(self.schema, "schema")
        _check_identifier(self.name, "table")
        if not self.columns:
            raise ColumnValidationError(f"Table {self.name} registers no columns")
        for attribute, column in self.columns.items():
            _check_identifier(attribute, "attribute")
            _check_identifier(column, "column")
        if self.key not in self.columns:
            raise ColumnValidationError(f"Key {self.key!r} is not a column of {self.name}")
        object.__setattr__(self, "columns", MappingProxyType(dict(self.columns)))

    @property
    def qualified_name(self) -> str:
        return f'"{self.schema}"."{self.name}"'

    def in_schema(self, schema: str) -> RankedTable:
        """Same whitelist, different schema."""
        return replace(self, schema=schema, columns=dict(self.columns))

    def quoted(self, attribute: str) -> str:
        return f'"{self.columns[attribute]}"'

    def validate_columns(self, attributes: Iterable[str], purpose: str) -> None:
        invalid = [a for a in attributes if a not in self.columns]
        if invalid:
            raise ColumnValidationError(
                f"The following {purpose} columns are not valid for {self.name}: "
                f"{', '.join(map(str, invalid))}",
                details={"invalid_columns": invalid, "allowed": sorted(self.columns)},
            )


@dataclass(frozen=True)
class RankedQuery:
    statement: TextClause
    columns: tuple[str, ...]
    start_index: int
    page_size: int
    params: Mapping[str, Any] = field(default_factory=dict)


def total_order(table: RankedTable, order_columns: Sequence[OrderColumn]) -> tuple[OrderColumn, ...]:
    """Append the table's unique key when the order does not already contain it."""
    order = tuple(OrderColumn(*oc) for oc in order_columns)
    if any(oc.column == table.key for oc in order):
        return order
    return (*order, OrderColumn(table.key, True))


def build_ranked_query(
    table: RankedTable,
    columns_to_return: Iterable[str],
    order_columns: Sequence[OrderColumn | tuple[str, bool]],
    start_index: int = 0,
    page_size: int = 10,
    filters: Mapping[str, Any] | None = None,
) -> RankedQuery:
    """Build a ranked window query fetching ``page_size + 1`` rows after ``start_index``.

    The extra row is the sentinel that tells the caller another page exists;
    it is not stripped here.

    Raises:
        ColumnValidationError: empty selection/order, unknown or duplicate column.
        ValidationError: negative start index or non-positive page size.
    """
    columns = list(dict.fromkeys(columns_to_return or ()))
    order = [OrderColumn(*oc) for oc in (order_columns or ())]
    filters = dict(filters or {})

    if not order:
        raise ColumnValidationError("At least one column must be provided for ordering.")
    if not columns:
        raise ColumnValidationError("At least one column must be provided for selection.")

    table.validate_columns(columns, "selection")
    table.validate_columns([oc.column for oc in order], "order")
    table.validate_columns(filters, "filter")

    order_names = [oc.column for oc in order]
    if len(set(order_names)) != len(order_names):
        raise ColumnValidationError(
            "Order columns must be unique", details={"order_columns": order_names}
        )

    if isinstance(start_index, bool) or not isinstance(start_index, int) or start_index < 0:
        raise ValidationError(
            "Start index must be a non-negative integer", details={"start_index": start_index}
        )
    if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size < 1:
        raise ValidationError(
            "Page size must be a positive integer", details={"page_size": page_size}
        )

    # The sentinel row's identity mints the next cursor, so the key is always returned
    if table.key not in columns:
        columns.insert(0, table.key)

    order = list(total_order(table, order))

    inner_columns = ", ".join(table.quoted(c) for c in columns)
    outer_columns = ", ".join(f'ranked.{table.quoted(c)} AS "{c}"' for c in columns)
    order_clause = ", ".join(
        f"{table.quoted(oc.column)} {'ASC' if oc.ascending else 'DESC'}" for oc in order
    )

    params: dict[str, Any] = {"start_index": start_index, "row_limit": page_size + 1}
    predicates = []
    for i, (attribute, value) in enumerate(filters.items()):
        if value is None:
            predicates.append(f"{table.quoted(attribute)} IS NULL")
        else:
            predicates.append(f"{table.quoted(attribute)} = :filter_{i}")
            params[f"filter_{i}"] = value
    where_clause = f"WHERE {' AND '.join(predicates)}" if predicates else ""

    sql = f"""
        SELECT {outer_columns}, ranked.{RANK_COLUMN}
        FROM (
            SELECT {inner_columns},
                   ROW_NUMBER() OVER (ORDER BY {order_clause}) AS {RANK_COLUMN}
            FROM {table.qualified_name}
            {where_clause}
        ) AS ranked
        WHERE ranked.{RANK_COLUMN} > :start_index
        ORDER BY ranked.{RANK_COLUMN}
        LIMIT :row_limit
    """

    return RankedQuery(
        statement=text(sql).bindparams(**params),
        columns=tuple(columns),
        start_index=start_index,
        page_size=page_size,
        params=MappingProxyType(params),
    )


async def fetch_ranked(session: AsyncSession, query: RankedQuery) -> list[RankedRow[dict[str, Any]]]:
    """Execute a ranked query and return rows in rank order."""
    try:
        result = await session.execute(query.statement)
    except DBAPIError as e:
        raise StoreUnavailableError(
            "Backing store query failed",
            details={"error": type(e.orig or e).__name__},
        ) from e

    return [
        RankedRow(rank=int(mapping[RANK_COLUMN]), row={c: mapping[c] for c in query.columns})
        for mapping in result.mappings().all()
    ]
