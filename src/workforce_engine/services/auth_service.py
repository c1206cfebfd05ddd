"""Authentication: login, token resolution and password reset.

Two reset paths exist: a single-use token requested by email address, and an
employee self-service path that checks employee code and date of birth.
"""

from __future__ import annotations

import logging
import secrets
from datetime import date, timedelta
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from workforce_engine.config import get_settings
from workforce_engine.errors import AuthenticationError, NotFoundError, ValidationError
from workforce_engine.models import Employee, PasswordResetToken, UserAccount
from workforce_engine.models.base import utcnow
from workforce_engine.security import create_access_token, decode_access_token, hash_password, verify_password
from workforce_engine.services.access_policy import Principal, Role

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

_INVALID_CREDENTIALS = "Invalid credentials"
_IDENTITY_NOT_VERIFIED = "Employee ID or date of birth does not match"
_INVALID_RESET_TOKEN = "Invalid or expired reset token"


def principal_for_user(user: UserAccount) -> Principal:
    return Principal(
        user_id=user.user_id,
        role=Role(user.role),
        linked_employee_id=user.linked_employee_id,
    )


class AuthService:
    """Service for credentials and tokens."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def authenticate(self, identifier: str, password: str) -> tuple[UserAccount, str]:
        """Check a username-or-email and password; returns the account and a fresh token."""
        identifier = identifier.strip()
        user = await self.session.scalar(
            select(UserAccount).where(
                or_(UserAccount.username == identifier, UserAccount.email == identifier.lower())
            )
        )
        if user is None or not verify_password(password, user.password_hash):
            logger.warning("Login failed: identifier=%s", identifier)
            raise AuthenticationError(_INVALID_CREDENTIALS)
        if not user.is_active:
            logger.warning("Login refused for inactive account: user=%s", user.user_id)
            raise AuthenticationError("Account is inactive")

        user.last_login_at = utcnow()
        await self.session.commit()

        token = create_access_token({"sub": str(user.user_id), "role": user.role})
        logger.info("Login: user=%s role=%s", user.user_id, user.role)
        return user, token

    async def user_for_token(self, token: str) -> UserAccount:
        """Resolve a bearer token to an active account."""
        payload = decode_access_token(token)
        try:
            user_id = UUID(payload["sub"])
        except ValueError:
            raise AuthenticationError("Could not validate credentials")

        user = await self.session.get(UserAccount, user_id)
        if user is None or not user.is_active:
            raise AuthenticationError("Could not validate credentials")
        return user

    async def principal_for_token(self, token: str) -> Principal:
        return principal_for_user(await self.user_for_token(token))

    async def _employee_account(self, employee_code: str, date_of_birth: date) -> UserAccount:
        employee = await self.session.scalar(
            select(Employee).where(
                Employee.employee_code == employee_code.strip().upper(),
                Employee.status == "active",
            )
        )
        if employee is None or employee.date_of_birth is None or employee.date_of_birth != date_of_birth:
            raise AuthenticationError(_IDENTITY_NOT_VERIFIED)

        user = await self.session.scalar(
            select(UserAccount).where(UserAccount.linked_employee_id == employee.employee_id)
        )
        if user is None:
            raise NotFoundError("User account for employee", employee.employee_id)
        return user

    async def verify_employee_identity(self, employee_code: str, date_of_birth: date) -> UserAccount:
        """Check employee code and date of birth before a self-service reset."""
        return await self._employee_account(employee_code, date_of_birth)

    async def reset_employee_password(
        self,
        employee_code: str,
        date_of_birth: date,
        new_password: str,
    ) -> None:
        if len(new_password or "") < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters", field="new_password"
            )
        user = await self._employee_account(employee_code, date_of_birth)
        user.password_hash = hash_password(new_password)
        await self.session.commit()

        logger.info("Employee password reset: user=%s", user.user_id)

    # ------------------------------------------------------------------
    # Token-based password reset
    # ------------------------------------------------------------------

    async def request_reset(
        self,
        email: str,
        expires_in: timedelta | None = None,
    ) -> PasswordResetToken | None:
        """Issue a reset token for the account with ``email``.

        Returns None when no account matches so callers can answer the same
        way whether or not the address is known.
        """
        email = (email or "").strip().lower()
        if "@" not in email:
            raise ValidationError("Please provide a valid email", field="email")

        user = await self.session.scalar(select(UserAccount).where(UserAccount.email == email))
        if user is None:
            logger.info("Password reset requested for unknown email")
            return None
        if not user.is_active:
            raise ValidationError("Account is deactivated. Please contact administrator.", field="email")

        if expires_in is None:
            expires_in = timedelta(minutes=get_settings().password_reset_token_expire_minutes)
        reset = PasswordResetToken(
            user_id=user.user_id,
            token=secrets.token_hex(32),
            expires_at=utcnow() + expires_in,
            used=False,
        )
        self.session.add(reset)
        await self.session.commit()

        logger.info("Password reset token issued: user=%s expires=%s", user.user_id, reset.expires_at)
        return reset

    async def _valid_reset(self, token: str) -> tuple[PasswordResetToken, UserAccount]:
        reset = await self.session.scalar(
            select(PasswordResetToken).where(
                PasswordResetToken.token == token,
                PasswordResetToken.used.is_(False),
                PasswordResetToken.expires_at > utcnow(),
            )
        )
        user = await self.session.get(UserAccount, reset.user_id) if reset is not None else None
        if reset is None or user is None:
            raise ValidationError(_INVALID_RESET_TOKEN, field="token")
        return reset, user

    async def verify_reset_token(self, token: str) -> UserAccount:
        """Account behind an unused, unexpired token."""
        _, user = await self._valid_reset(token)
        return user

    async def reset_with_token(self, token: str, new_password: str) -> None:
        """Set a new password and burn the token."""
        if len(new_password or "") < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters", field="new_password"
            )
        reset, user = await self._valid_reset(token)
        user.password_hash = hash_password(new_password)
        reset.used = True
        await self.session.commit()

        logger.info("Password reset with token: user=%s", user.user_id)
