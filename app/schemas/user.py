"""User listing schemas."""

from uuid import UUID

from pydantic import BaseModel


class UserResponse(BaseModel):
    """A user as returned by the listing endpoint."""

    id: UUID
    name: str
    surname: str
    email: str
