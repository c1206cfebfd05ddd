"""Authentication endpoints."""

from fastapi import APIRouter, status

from workforce_engine.api.dependencies import CurrentUser, DbSession
from workforce_engine.api.schemas import (
    EmployeeIdentityRequest,
    EmployeeIdentityResponse,
    EmployeePasswordResetRequest,
    ErrorResponse,
    LoginRequest,
    MessageResponse,
    PasswordResetRequest,
    PasswordResetRequestResponse,
    PasswordResetTokenRequest,
    PasswordResetTokenResponse,
    PasswordResetWithTokenRequest,
    ResetAccount,
    TokenResponse,
    UserResponse,
)
from workforce_engine.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={401: {"model": ErrorResponse}},
)
async def login(db: DbSession, payload: LoginRequest) -> TokenResponse:
    """Exchange username (or email) and password for a bearer token."""
    user, token = await AuthService(db).authenticate(payload.username, payload.password)
    return TokenResponse(access_token=token, user=UserResponse.model_validate(user))


@router.get(
    "/me",
    response_model=UserResponse,
    responses={401: {"model": ErrorResponse}},
)
async def me(user: CurrentUser) -> UserResponse:
    """The account behind the bearer token."""
    return UserResponse.model_validate(user)


@router.post(
    "/employee-password-reset/verify",
    response_model=EmployeeIdentityResponse,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def verify_employee_identity(
    db: DbSession,
    payload: EmployeeIdentityRequest,
) -> EmployeeIdentityResponse:
    user = await AuthService(db).verify_employee_identity(payload.employee_code, payload.date_of_birth)
    return EmployeeIdentityResponse(verified=True, username=user.username)


@router.post(
    "/employee-password-reset/reset",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
async def reset_employee_password(
    db: DbSession,
    payload: EmployeePasswordResetRequest,
) -> MessageResponse:
    await AuthService(db).reset_employee_password(
        payload.employee_code, payload.date_of_birth, payload.new_password
    )
    return MessageResponse(message="Password reset successfully")


# ============================================================================
# Token-based password reset
# ============================================================================


@router.post(
    "/password-reset/request",
    response_model=PasswordResetRequestResponse,
    responses={400: {"model": ErrorResponse}},
)
async def request_password_reset(
    db: DbSession,
    payload: PasswordResetRequest,
) -> PasswordResetRequestResponse:
    """Issue a single-use reset token. Unknown emails get a generic message and no token."""
    reset = await AuthService(db).request_reset(payload.email)
    if reset is None:
        return PasswordResetRequestResponse(
            message="If an account with that email exists, a password reset token has been issued."
        )
    return PasswordResetRequestResponse(
        message="Password reset token has been issued.",
        reset_token=reset.token,
        expires_at=reset.expires_at,
    )


@router.post(
    "/password-reset/verify",
    response_model=PasswordResetTokenResponse,
    responses={400: {"model": ErrorResponse}},
)
async def verify_password_reset_token(
    db: DbSession,
    payload: PasswordResetTokenRequest,
) -> PasswordResetTokenResponse:
    user = await AuthService(db).verify_reset_token(payload.token)
    return PasswordResetTokenResponse(valid=True, user=ResetAccount.model_validate(user))


@router.post(
    "/password-reset/reset",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}},
)
async def reset_password_with_token(
    db: DbSession,
    payload: PasswordResetWithTokenRequest,
) -> MessageResponse:
    await AuthService(db).reset_with_token(payload.token, payload.new_password)
    return MessageResponse(message="Password has been reset successfully")
