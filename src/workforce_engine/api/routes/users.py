"""User account API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from workforce_engine.api.dependencies import CurrentPrincipal, DbSession
from workforce_engine.api.schemas import (
    ErrorResponse,
    RoleName,
    UserCreate,
    UserListResponse,
    UserResponse,
    UserUpdate,
)
from workforce_engine.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get(
    "",
    response_model=UserListResponse,
    responses={403: {"model": ErrorResponse}},
)
async def list_users(
    db: DbSession,
    principal: CurrentPrincipal,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100)] = 10,
    search: str | None = None,
    role: RoleName | None = None,
) -> UserListResponse:
    users, total = await UserService(db).list_users(
        principal, search=search, role=role, page=page, page_size=page_size
    )
    return UserListResponse(
        items=[UserResponse.model_validate(u) for u in users],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def create_user(
    db: DbSession,
    principal: CurrentPrincipal,
    payload: UserCreate,
) -> UserResponse:
    user = await UserService(db).create_user(principal, **payload.model_dump())
    return UserResponse.model_validate(user)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_user(
    db: DbSession,
    principal: CurrentPrincipal,
    user_id: Annotated[UUID, Path()],
) -> UserResponse:
    user = await UserService(db).get_user(principal, user_id)
    return UserResponse.model_validate(user)


@router.put(
    "/{user_id}",
    response_model=UserResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_user(
    db: DbSession,
    principal: CurrentPrincipal,
    user_id: Annotated[UUID, Path()],
    payload: UserUpdate,
) -> UserResponse:
    user = await UserService(db).update_user(principal, user_id, payload.model_dump(exclude_unset=True))
    return UserResponse.model_validate(user)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_user(
    db: DbSession,
    principal: CurrentPrincipal,
    user_id: Annotated[UUID, Path()],
) -> None:
    await UserService(db).delete_user(principal, user_id)


@router.put(
    "/{user_id}/toggle-status",
    response_model=UserResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def toggle_user_status(
    db: DbSession,
    principal: CurrentPrincipal,
    user_id: Annotated[UUID, Path()],
) -> UserResponse:
    user = await UserService(db).toggle_status(principal, user_id)
    return UserResponse.model_validate(user)
