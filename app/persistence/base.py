"""Cursor tokens and rank offsets for ranked (ROW_NUMBER) pagination.

Token format: unpadded base64url of compact UTF-8 JSON

    {"Version": 1, "Kind": "<filter kind>", "LastId": "<uuid>",
     "Entity": {<filter context>}, "Position": <int>}

``Position`` is the rank offset of the page that minted the token, i.e. the
rank of the row just before that page's first row. ``0`` is the start of the
sequence. ``LastId`` is the sentinel row seen when the token was minted; it
is an anchor only, the seek itself is always by rank.

Changing the payload shape is a breaking wire change: bump
``CURSOR_VERSION`` and old tokens decode to "no cursor".
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any
from uuid import UUID

from app.core.errors import ValidationError
from app.domain.models.user import CursorFilter

logger = logging.getLogger(__name__)

CURSOR_VERSION = 1

# Ranks are bound against a 32-bit range; anything larger is not a real position
MAX_POSITION = 2**31 - 1

_TOKEN_ALPHABET = re.compile(r"^[A-Za-z0-9_-]*\Z")


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_blank(token: str | None) -> bool:
    """True for a missing, empty or whitespace-only cursor token."""
    return token is None or not token.strip()


@dataclass(frozen=True)
class Cursor[F: CursorFilter]:
    """Immutable pointer into a ranked sequence."""

    last_id: UUID
    entity: F
    position: int

    def __post_init__(self) -> None:
        if not _is_int(self.position) or not 0 <= self.position <= MAX_POSITION:
            raise ValueError(
                f"Cursor position must be in [0, {MAX_POSITION}], got {self.position!r}"
            )

    def encode(self) -> str:
        """Encode cursor to an unpadded base64url string."""
        payload = {
            "Version": CURSOR_VERSION,
            "Kind": self.entity.kind,
            "LastId": str(self.last_id),
            "Entity": self.entity.model_dump(mode="json"),
            "Position": self.position,
        }
        data = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
        return base64.urlsafe_b64encode(data.encode("utf-8")).decode("ascii").rstrip("=")

    @classmethod
    def decode[G: CursorFilter](cls, token: str | None, filter_type: type[G]) -> Cursor[G] | None:
        """Decode a token minted for ``filter_type``. Returns None for anything invalid."""
        if is_blank(token):
            return None

        stripped = token.strip().rstrip("=")
        if not _TOKEN_ALPHABET.match(stripped):
            return None
        padded = stripped + "=" * (-len(stripped) % 4)
        try:
            raw = base64.b64decode(padded, altchars=b"-_", validate=True)
            payload = json.loads(raw.decode("utf-8"))
        except (ValueError, binascii.Error, RecursionError):
            return None

        if not isinstance(payload, dict):
            return None

        version = payload.get("Version")
        if not _is_int(version) or version != CURSOR_VERSION:
            return None
        if payload.get("Kind") != filter_type.kind:
            return None

        position = payload.get("Position")
        last_id = payload.get("LastId")
        entity = payload.get("Entity")
        if not _is_int(position) or not 0 <= position <= MAX_POSITION:
            return None
        if not isinstance(last_id, str) or not isinstance(entity, dict):
            return None

        try:
            return cls(
                last_id=UUID(last_id),
                entity=filter_type.model_validate(entity),
                position=position,
            )
        except ValueError:
            # pydantic's ValidationError is a ValueError too
            return None


def encode_cursor(last_id: UUID, entity: CursorFilter, position: int) -> str:
    """Encode a (last_id, filter context, position) triple into a token."""
    return Cursor(last_id=last_id, entity=entity, position=position).encode()


def decode_cursor[G: CursorFilter](token: str | None, filter_type: type[G]) -> Cursor[G] | None:
    """Decode a token; never raises."""
    return Cursor.decode(token, filter_type)


class CursorState(str, Enum):
    NO_CURSOR = "no_cursor"
    STALE_CURSOR = "stale_cursor"
    VALID_CURSOR = "valid_cursor"


@dataclass(frozen=True)
class ResolvedCursor[F: CursorFilter]:
    state: CursorState
    cursor: Cursor[F] | None = None


def _require_page_size(page_size: int) -> None:
    if not _is_int(page_size) or page_size < 1:
        raise ValidationError(
            "Page size must be a positive integer",
            details={"page_size": page_size},
        )


def resolve_cursor[F: CursorFilter](token: str | None, current_filter: F) -> ResolvedCursor[F]:
    """Decode ``token`` and check it was minted under ``current_filter``.

    A cursor whose embedded filter differs in any field from the current one
    is stale and must not be honored.
    """
    if current_filter is None:
        raise ValidationError("A filter context is required")

    if is_blank(token):
        return ResolvedCursor(CursorState.NO_CURSOR)

    cursor = Cursor.decode(token, type(current_filter))
    if cursor is None:
        logger.info("Ignoring malformed cursor", extra={"kind": current_filter.kind})
        return ResolvedCursor(CursorState.NO_CURSOR)

    if cursor.entity != current_filter:
        logger.info(
            "Ignoring stale cursor minted under a different filter",
            extra={"kind": current_filter.kind, "position": cursor.position},
        )
        return ResolvedCursor(CursorState.STALE_CURSOR)

    return ResolvedCursor(CursorState.VALID_CURSOR, cursor)


def offset_from(resolved: ResolvedCursor[Any], page_size: int, is_next: bool) -> int:
    """Rank offset of the requested page; anything but a valid cursor restarts at 0."""
    _require_page_size(page_size)
    if resolved.state is not CursorState.VALID_CURSOR or resolved.cursor is None:
        return 0

    last_index = resolved.cursor.position
    if is_next:
        if last_index + page_size > MAX_POSITION:
            logger.info(
                "Ignoring cursor past the last rankable position",
                extra={"position": last_index, "page_size": page_size},
            )
            return 0
        return last_index + page_size
    return max(0, last_index - page_size)


def compute_offset(
    cursor_token: str | None,
    page_size: int,
    is_next: bool,
    current_filter: CursorFilter,
) -> int:
    """Compute the rank offset for the next query. Pure apart from logging."""
    _require_page_size(page_size)
    return offset_from(resolve_cursor(cursor_token, current_filter), page_size, is_next)
