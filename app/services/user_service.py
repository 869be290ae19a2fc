"""User listing service: ranked cursor pagination over the users table."""

from operator import itemgetter
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, get_settings
from app.domain.models.user import UserFilter
from app.persistence.user_repository import USERS_TABLE, UserRepository
from app.schemas.pagination import ResultPage
from app.services.pagination_service import PageAssembler


class UserService:
    """Service for paged user listings."""

    def __init__(self, session: AsyncSession, settings: Settings | None = None):
        self.session = session
        self.settings = settings or get_settings()
        self.repository = UserRepository(
            session, table=USERS_TABLE.in_schema(self.settings.database.schema_name)
        )
        self.assembler: PageAssembler[dict[str, Any], UserFilter] = PageAssembler(
            fetch_rows=self.repository.list_ranked,
            identity=itemgetter("id"),
            query_timeout=self.settings.pagination.query_timeout_seconds,
        )

    async def get_users_page(
        self,
        cursor: str | None,
        is_next: bool = True,
        user_filter: UserFilter | None = None,
        page_size: int | None = None,
    ) -> ResultPage[dict[str, Any]]:
        """Get one page of users."""
        return await self.assembler.get_page(
            cursor=cursor,
            is_next=is_next,
            current_filter=user_filter if user_filter is not None else UserFilter(),
            page_size=(
                page_size if page_size is not None else self.settings.pagination.default_page_size
            ),
        )
