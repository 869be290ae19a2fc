"""User models and the filter context embedded in user cursors."""

from enum import Enum
from typing import ClassVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class UserSort(str, Enum):
    SURNAME_DESC = "surname_desc"
    NAME_ASC = "name_asc"


class User(BaseModel):
    """A row of the users table."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    name: str = Field(max_length=100)
    surname: str = Field(max_length=200)
    email: str = Field(max_length=1000)
    address: str | None = Field(default=None, max_length=300)


class CursorFilter(BaseModel):
    """Base class for filter contexts embedded in cursor tokens.

    Subclasses are frozen and reject unknown fields, so the generated
    ``__eq__`` is a full field-by-field comparison and decoding a payload
    minted for another shape fails instead of silently succeeding.
    ``kind`` is the wire discriminant written next to the payload.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: ClassVar[str]


class UserFilter(CursorFilter):
    """Filter context for the users listing."""

    kind: ClassVar[str] = "users"

    name: str | None = Field(default=None, max_length=100)
    sort: UserSort = UserSort.SURNAME_DESC
