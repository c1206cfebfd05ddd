"""User account service. Admin only."""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from workforce_engine.database import commit_or_conflict
from workforce_engine.errors import ConflictError, NotFoundError, ValidationError, null_field_errors
from workforce_engine.models import USER_ROLES, Employee, UserAccount
from workforce_engine.security import hash_password
from workforce_engine.services.access_policy import AccessPolicy, Action, Principal, Role

logger = logging.getLogger(__name__)

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6

DUPLICATE_MESSAGE = "Username or email already exists"


def _check_fields(values: dict[str, Any]) -> dict[str, Any]:
    errors = null_field_errors(values, ("username", "email", "password", "role", "is_active"))
    if errors:
        raise ValidationError(errors)
    cleaned = dict(values)
    if "username" in values:
        username = (values["username"] or "").strip()
        if len(username) < MIN_USERNAME_LENGTH:
            errors.append(
                {"field": "username", "message": f"Username must be at least {MIN_USERNAME_LENGTH} characters"}
            )
        cleaned["username"] = username
    if "email" in values:
        email = (values["email"] or "").strip().lower()
        if "@" not in email:
            errors.append({"field": "email", "message": "Please enter a valid email"})
        cleaned["email"] = email
    if "password" in values and len(values["password"] or "") < MIN_PASSWORD_LENGTH:
        errors.append(
            {"field": "password", "message": f"Password must be at least {MIN_PASSWORD_LENGTH} characters"}
        )
    if "role" in values and values["role"] not in USER_ROLES:
        errors.append({"field": "role", "message": "Invalid role"})
    if errors:
        raise ValidationError(errors)
    return cleaned


class UserService:
    """Service for login accounts.

    An employee-role account must point at an existing employee, and no
    employee may be linked to more than one account.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _load(self, user_id: UUID) -> UserAccount:
        user = await self.session.get(UserAccount, user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    async def _check_unique(self, username: str | None, email: str | None, exclude: UUID | None = None) -> None:
        clauses = []
        if username:
            clauses.append(UserAccount.username == username)
        if email:
            clauses.append(UserAccount.email == email)
        if not clauses:
            return
        query = select(UserAccount.user_id).where(or_(*clauses))
        if exclude is not None:
            query = query.where(UserAccount.user_id != exclude)
        if await self.session.scalar(query) is not None:
            raise ConflictError(DUPLICATE_MESSAGE)

    async def _check_link(self, employee_id: UUID | None, exclude: UUID | None = None) -> None:
        if employee_id is None:
            raise ValidationError(
                "Employee-role accounts must be linked to an employee", field="linked_employee_id"
            )
        if await self.session.get(Employee, employee_id) is None:
            raise NotFoundError("Employee", employee_id)
        query = select(UserAccount.user_id).where(UserAccount.linked_employee_id == employee_id)
        if exclude is not None:
            query = query.where(UserAccount.user_id != exclude)
        if await self.session.scalar(query) is not None:
            raise ConflictError("Employee is already linked to another user")

    async def list_users(
        self,
        principal: Principal,
        search: str | None = None,
        role: str | None = None,
        page: int = 1,
        page_size: int = 10,
    ) -> tuple[list[UserAccount], int]:
        AccessPolicy.enforce(principal, Action.MANAGE_USERS)

        query = select(UserAccount)
        if search:
            pattern = f"%{search}%"
            query = query.where(or_(UserAccount.username.ilike(pattern), UserAccount.email.ilike(pattern)))
        if role:
            query = query.where(UserAccount.role == role)

        count_query = select(func.count()).select_from(query.subquery())
        total = await self.session.scalar(count_query) or 0

        query = query.order_by(UserAccount.created_at.desc())
        query = query.offset((page - 1) * page_size).limit(page_size)

        result = await self.session.execute(query)
        return list(result.scalars().all()), total

    async def get_user(self, principal: Principal, user_id: UUID) -> UserAccount:
        AccessPolicy.enforce(principal, Action.MANAGE_USERS)
        return await self._load(user_id)

    async def create_user(
        self,
        principal: Principal,
        *,
        username: str,
        email: str,
        password: str,
        role: str = "employee",
        linked_employee_id: UUID | None = None,
    ) -> UserAccount:
        AccessPolicy.enforce(principal, Action.MANAGE_USERS)
        values = _check_fields({"username": username, "email": email, "password": password, "role": role})

        await self._check_unique(values["username"], values["email"])
        if role == Role.EMPLOYEE.value:
            await self._check_link(linked_employee_id)
        else:
            linked_employee_id = None

        user = UserAccount(
            username=values["username"],
            email=values["email"],
            password_hash=hash_password(password),
            role=role,
            linked_employee_id=linked_employee_id,
            is_active=True,
        )
        self.session.add(user)
        await commit_or_conflict(self.session, DUPLICATE_MESSAGE)

        logger.info("User created: id=%s role=%s by=%s", user.user_id, role, principal.user_id)
        return user

    async def update_user(
        self,
        principal: Principal,
        user_id: UUID,
        changes: dict[str, Any],
    ) -> UserAccount:
        """Update an account. A new password is re-hashed; leaving the employee role drops the link."""
        AccessPolicy.enforce(principal, Action.MANAGE_USERS)
        user = await self._load(user_id)

        allowed = ("username", "email", "password", "role", "linked_employee_id", "is_active")
        changes = _check_fields({k: v for k, v in changes.items() if k in allowed})

        await self._check_unique(
            changes.get("username") if changes.get("username") != user.username else None,
            changes.get("email") if changes.get("email") != user.email else None,
            exclude=user_id,
        )

        role = changes.get("role", user.role)
        if role == Role.EMPLOYEE.value:
            linked = changes.get("linked_employee_id", user.linked_employee_id)
            if linked != user.linked_employee_id or role != user.role:
                await self._check_link(linked, exclude=user_id)
            changes["linked_employee_id"] = linked
        else:
            changes["linked_employee_id"] = None

        password = changes.pop("password", None)
        if password:
            user.password_hash = hash_password(password)
        for field, value in changes.items():
            setattr(user, field, value)
        await commit_or_conflict(self.session, DUPLICATE_MESSAGE)

        logger.info("User updated: id=%s by=%s", user_id, principal.user_id)
        return user

    async def delete_user(self, principal: Principal, user_id: UUID) -> None:
        """Delete an account. Admins cannot delete themselves or the last admin."""
        AccessPolicy.enforce(principal, Action.MANAGE_USERS)
        user = await self._load(user_id)

        if user.user_id == principal.user_id:
            raise ValidationError("Cannot delete your own account")
        if user.role == Role.ADMIN.value:
            admins = await self.session.scalar(
                select(func.count()).select_from(UserAccount).where(UserAccount.role == Role.ADMIN.value)
            )
            if (admins or 0) <= 1:
                raise ValidationError("Cannot delete the last admin user")

        await self.session.delete(user)
        await commit_or_conflict(self.session, "User still owns records and cannot be deleted")

        logger.info("User deleted: id=%s by=%s", user_id, principal.user_id)

    async def toggle_status(self, principal: Principal, user_id: UUID) -> UserAccount:
        AccessPolicy.enforce(principal, Action.MANAGE_USERS)
        user = await self._load(user_id)
        if user.user_id == principal.user_id:
            raise ValidationError("Cannot change your own account status")

        user.is_active = not user.is_active
        await self.session.commit()

        logger.info("User %s: id=%s", "activated" if user.is_active else "deactivated", user_id)
        return user
