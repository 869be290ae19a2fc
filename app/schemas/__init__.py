"""Schemas package for request/response models."""

from app.schemas.pagination import ResultPage
from app.schemas.user import UserResponse

__all__ = [
    "ResultPage",
    "UserResponse",
]
