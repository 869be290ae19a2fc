"""API routes for cursor-paginated user listings."""

from fastapi import APIRouter, Query

from app.core.dependencies import SettingsDep, UserServiceDep
from app.core.errors import NotFoundError, ValidationError
from app.domain.models.user import UserFilter, UserSort
from app.schemas.pagination import ResultPage
from app.schemas.user import UserResponse

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=ResultPage[UserResponse])
async def list_users(
    user_service: UserServiceDep,
    settings: SettingsDep,
    cursor: str | None = Query(None, description="Opaque cursor from a previous page"),
    is_next: bool = Query(True, alias="isNext", description="false to page backward"),
    name: str | None = Query(None, max_length=100, description="Only users with this name"),
    sort: UserSort = Query(UserSort.SURNAME_DESC),
    page_size: int | None = Query(None, alias="pageSize", ge=1),
):
    """Get one page of users.

    - Omit `cursor` for the first page; pass the returned `cursor` to continue
    - Use `isNext=false` with a cursor to step back one page
    - A cursor minted under a different `name`/`sort` restarts from the first page
    - Returns 404 when the page is empty
    """
    size = page_size or settings.pagination.default_page_size
    if size > settings.pagination.max_page_size:
        raise ValidationError(
            f"pageSize must be at most {settings.pagination.max_page_size}",
            details={"page_size": size},
        )

    page = await user_service.get_users_page(
        cursor=cursor,
        is_next=is_next,
        user_filter=UserFilter(name=name, sort=sort),
        page_size=size,
    )
    if not page.items:
        raise NotFoundError("No more results", details={"has_previous": page.has_previous})
    return page
