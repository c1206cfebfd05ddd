"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from workforce_engine.config import Settings, get_settings
from workforce_engine.database import get_session
from workforce_engine.errors import AuthenticationError
from workforce_engine.models import UserAccount
from workforce_engine.services.access_policy import Principal
from workforce_engine.services.auth_service import AuthService, principal_for_user

bearer_scheme = HTTPBearer(auto_error=False)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    async with get_session() as session:
        yield session


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


async def get_current_user(
    db: DbSession,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> UserAccount:
    """Resolve the bearer token to an active account."""
    if credentials is None:
        raise AuthenticationError()
    return await AuthService(db).user_for_token(credentials.credentials)


CurrentUser = Annotated[UserAccount, Depends(get_current_user)]


async def get_current_principal(user: CurrentUser) -> Principal:
    return principal_for_user(user)


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
