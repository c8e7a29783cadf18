"""
User administration service.

Covers CRUD, password reset, lock/unlock and statistics for users, plus the
credential check used by the login endpoint. Every mutation is audited with
its before and after values; password hashes never reach the audit trail.
"""

from __future__ import annotations

from typing import List, Optional

from fnb_cost.core.database.base import utc_now
from fnb_cost.core.database.entities import User
from fnb_cost.core.database.repositories import SqlRepoBundle
from fnb_cost.core.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationFailedError,
)
from fnb_cost.core.logging_config import get_logger
from fnb_cost.core.models.domain import UserRole, is_valid_permission
from fnb_cost.core.models.io.users import (
    LoginRequest,
    LoginResponse,
    UserCreate,
    UserRead,
    UserStatistics,
    UserUpdate,
)
from fnb_cost.server.core.config import settings

from .access import AccessControl
from .audit import AuditService, snapshot
from .passwords import MIN_PASSWORD_LENGTH, hash_password, verify_password
from .tokens import create_access_token

logger = get_logger(__name__)

RESOURCE = "user"


def _check_permissions(permissions: List[str]) -> None:
    unknown = [p for p in permissions if not is_valid_permission(p)]
    if unknown:
        raise ValidationFailedError(f"Unknown permissions: {', '.join(unknown)}", details={"unknown": unknown})


class UserService:
    """User administration for one calling user."""

    def __init__(self, repos: SqlRepoBundle, user: User, audit: AuditService) -> None:
        self.repos = repos
        self.user = user
        self.access = AccessControl(repos, user)
        self.audit = audit

    async def _get(self, user_id: int) -> User:
        target = await self.repos.users.get_by_id(user_id)
        if target is None:
            raise NotFoundError("User", user_id)
        return target

    async def list_users(
        self,
        *,
        role: Optional[UserRole] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[UserRead]:
        self.access.require("users.read")
        users = await self.repos.users.search(
            role=role.value if role else None,
            is_active=is_active,
            search_term=search,
            limit=limit,
            offset=offset,
        )
        return [UserRead.model_validate(u) for u in users]

    async def list_by_role(self, role: UserRole) -> List[UserRead]:
        return await self.list_users(role=role)

    async def get_user(self, user_id: int) -> UserRead:
        """Users may always read themselves; anyone else needs ``users.read``."""
        if user_id != self.user.id:
            self.access.require("users.read")
        return UserRead.model_validate(await self._get(user_id))

    async def create_user(self, data: UserCreate) -> UserRead:
        """Create a user.

        Raises:
            PermissionDeniedError: Missing ``users.create``, or ``users.roles.manage``
                for any role other than ``user``
            ConflictError: The email is already registered
        """
        self.access.require("users.create")
        if data.role != UserRole.user:
            self.access.require("users.roles.manage")
        if data.permissions:
            self.access.require("users.permissions.manage")
            _check_permissions(data.permissions)
        if await self.repos.users.get_by_email(data.email):
            raise ConflictError(f"Email {data.email} is already registered")

        created = await self.repos.users.create(
            User(
                name=data.name,
                email=data.email.lower(),
                password_hash=hash_password(data.password) if data.password else None,
                role=data.role.value,
                is_active=data.is_active,
                department=data.department,
                phone_number=data.phone_number,
                permissions=list(data.permissions),
            )
        )
        logger.info(f"User {self.user.id} created user {created.id} with role {created.role}")
        await self.audit.log_data_change("CREATE", RESOURCE, created.id, after=created)
        return UserRead.model_validate(created)

    async def update_user(self, user_id: int, data: UserUpdate) -> UserRead:
        self.access.require("users.update")
        target = await self._get(user_id)
        changes = data.model_dump(exclude_unset=True)

        if "role" in changes and changes["role"] is not None and changes["role"].value != target.role:
            self.access.require("users.roles.manage")
            changes["role"] = changes["role"].value
        elif "role" in changes:
            changes.pop("role")
        if changes.get("permissions") is not None:
            self.access.require("users.permissions.manage")
            _check_permissions(changes["permissions"])
        if changes.get("email") and changes["email"].lower() != target.email.lower():
            if await self.repos.users.get_by_email(changes["email"]):
                raise ConflictError(f"Email {changes['email']} is already registered")
            changes["email"] = changes["email"].lower()

        before = snapshot(target)
        for key, value in changes.items():
            # Only the free-text profile fields may be cleared
            if value is None and key not in ("name", "department", "phone_number"):
                continue
            setattr(target, key, value)
        updated = await self.repos.users.update(target)
        await self.audit.log_data_change("UPDATE", RESOURCE, updated.id, before=before, after=updated)
        return UserRead.model_validate(updated)

    async def delete_user(self, user_id: int) -> None:
        self.access.require("users.delete")
        if user_id == self.user.id:
            raise ValidationFailedError("Users cannot delete their own account")
        target = await self._get(user_id)
        before = snapshot(target)
        await self.repos.users.delete(user_id)
        logger.info(f"User {self.user.id} deleted user {user_id}")
        await self.audit.log_data_change("DELETE", RESOURCE, user_id, before=before)

    async def reset_password(self, user_id: int, new_password: str) -> None:
        """Set a new password for any account. Super admins only, since the target may be another admin."""
        self.access.require_super_admin()
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationFailedError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        target = await self._get(user_id)
        target.password_hash = hash_password(new_password)
        await self.repos.users.update(target)
        await self.audit.log("PASSWORD_RESET", RESOURCE, resource_id=user_id, details={"reset_by": self.user.id})

    async def set_active(self, user_id: int, is_active: bool) -> UserRead:
        """Lock (``is_active=False``) or unlock a user."""
        self.access.require("users.update")
        if user_id == self.user.id and not is_active:
            raise ValidationFailedError("Users cannot lock their own account")
        target = await self._get(user_id)
        before = snapshot(target)
        target.is_active = is_active
        updated = await self.repos.users.update(target)
        action = "UNLOCK_USER" if is_active else "LOCK_USER"
        logger.info(f"User {self.user.id} {action} {user_id}")
        await self.audit.log_data_change(action, RESOURCE, user_id, before=before, after=updated)
        return UserRead.model_validate(updated)

    async def statistics(self) -> UserStatistics:
        self.access.require("users.read")
        total = await self.repos.users.count()
        active = await self.repos.users.count({"is_active": True})
        return UserStatistics(
            total_users=total,
            active_users=active,
            inactive_users=total - active,
            users_by_role=await self.repos.users.count_by_role(),
        )


class AuthService:
    """Credential checks. Every attempt is audited for the security views."""

    def __init__(self, repos: SqlRepoBundle, audit: AuditService) -> None:
        self.repos = repos
        self.audit = audit

    async def login(self, credentials: LoginRequest) -> LoginResponse:
        """Verify an email and password and issue a bearer token.

        Raises:
            AuthenticationError: Unknown email, wrong password or inactive account
        """
        user = await self.repos.users.get_by_email(credentials.email)
        if user is None:
            await self.audit.log_auth_action("FAILED_LOGIN", None, {"email": credentials.email, "reason": "unknown_user"})
            raise AuthenticationError("Invalid email or password")
        if not verify_password(credentials.password, user.password_hash):
            await self.audit.log_auth_action("FAILED_LOGIN", user.id, {"reason": "invalid_password"})
            raise AuthenticationError("Invalid email or password")
        if not user.is_active:
            await self.audit.log_auth_action("FAILED_LOGIN", user.id, {"reason": "inactive"})
            raise AuthenticationError("Account is disabled")

        user.last_login_at = utc_now()
        user = await self.repos.users.update(user)
        await self.audit.log_auth_action("LOGIN", user.id)
        logger.info(f"User {user.id} logged in")
        return LoginResponse(
            access_token=create_access_token(user),
            expires_in=settings.auth.jwt_expiry_minutes * 60,
            user=UserRead.model_validate(user),
        )
