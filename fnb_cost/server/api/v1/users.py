"""
User Administration Endpoints.

CRUD for application users plus password reset, account locking and
per-role listings. Every mutation is recorded in the audit trail.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from fnb_cost.core.logging_config import get_logger
from fnb_cost.core.models.domain import UserRole
from fnb_cost.core.models.io.users import (
    PasswordReset,
    UserCreate,
    UserRead,
    UserStatistics,
    UserUpdate,
)
from fnb_cost.server.services.deps import CurrentUserDep, UserServiceDep, enforce_sensitive_rate_limit

logger = get_logger(__name__)

router = APIRouter(tags=["users"])


@router.get(
    "",
    response_model=List[UserRead],
    summary="List Users",
    description="List users with optional role, active-state and free-text filters.",
    response_description="Users ordered by creation time.",
    responses={403: {"description": "Missing users.read permission"}},
)
async def list_users(
    users: UserServiceDep,
    role: Optional[UserRole] = Query(None, description="Filter by role"),
    is_active: Optional[bool] = Query(None, description="Filter by active state"),
    search: Optional[str] = Query(None, description="Match name or email"),
    limit: Optional[int] = Query(None, ge=1, le=500),
    offset: Optional[int] = Query(None, ge=0),
) -> List[UserRead]:
    return await users.list_users(role=role, is_active=is_active, search=search, limit=limit, offset=offset)


@router.get(
    "/me",
    response_model=UserRead,
    summary="Get Current User",
    description="Return the user identified by the request's bearer token.",
    response_description="The calling user.",
)
async def get_me(user: CurrentUserDep) -> UserRead:
    return UserRead.model_validate(user)


@router.get(
    "/statistics",
    response_model=UserStatistics,
    summary="User Statistics",
    description="Total, active and inactive user counts plus the count per role.",
    response_description="User counts.",
)
async def user_statistics(users: UserServiceDep) -> UserStatistics:
    return await users.statistics()


@router.get(
    "/by-role/{role}",
    response_model=List[UserRead],
    summary="List Users by Role",
    description="List every user holding the given role.",
    response_description="Users with the role.",
)
async def list_users_by_role(role: UserRole, users: UserServiceDep) -> List[UserRead]:
    return await users.list_by_role(role)


@router.post(
    "",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create User",
    description="Create a user. Assigning a role other than user, or explicit permissions, needs the matching management permission.",
    response_description="The created user.",
    responses={403: {"description": "Missing permission"}, 409: {"description": "Email already in use"}},
)
async def create_user(data: UserCreate, users: UserServiceDep) -> UserRead:
    return await users.create_user(data)


@router.get(
    "/{user_id}",
    response_model=UserRead,
    summary="Get User",
    description="Retrieve one user. Users can always read their own record.",
    response_description="The user.",
    responses={404: {"description": "User not found"}},
)
async def get_user(user_id: int, users: UserServiceDep) -> UserRead:
    return await users.get_user(user_id)


@router.patch(
    "/{user_id}",
    response_model=UserRead,
    summary="Update User",
    description="Update profile fields, role, permissions or active state of a user.",
    response_description="The updated user.",
    responses={404: {"description": "User not found"}, 409: {"description": "Email already in use"}},
)
async def update_user(user_id: int, data: UserUpdate, users: UserServiceDep) -> UserRead:
    return await users.update_user(user_id, data)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete User",
    description="Delete a user. Users cannot delete themselves.",
    responses={404: {"description": "User not found"}},
)
async def delete_user(user_id: int, users: UserServiceDep) -> None:
    await users.delete_user(user_id)


@router.post(
    "/{user_id}/reset-password",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Reset Password",
    description="Replace a user's password. Super admins only; attempts are rate limited per caller.",
    responses={404: {"description": "User not found"}, 429: {"description": "Too many resets in the window"}},
    dependencies=[Depends(enforce_sensitive_rate_limit)],
)
async def reset_password(user_id: int, data: PasswordReset, users: UserServiceDep) -> None:
    await users.reset_password(user_id, data.new_password)


@router.post(
    "/{user_id}/lock",
    response_model=UserRead,
    summary="Lock User",
    description="Deactivate a user account.",
    response_description="The locked user.",
)
async def lock_user(user_id: int, users: UserServiceDep) -> UserRead:
    return await users.set_active(user_id, False)


@router.post(
    "/{user_id}/unlock",
    response_model=UserRead,
    summary="Unlock User",
    description="Reactivate a user account.",
    response_description="The unlocked user.",
)
async def unlock_user(user_id: int, users: UserServiceDep) -> UserRead:
    return await users.set_active(user_id, True)
