"""Cursor pagination response envelope."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ResultPage[T](BaseModel):
    """One page of results.

    Serialized with camelCase keys: items, cursor, hasPrevious, hasMore.
    ``cursor`` is the token for the next page and is null on the last page.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    items: list[T]
    cursor: str | None = None
    has_previous: bool
    has_more: bool
