"""Authentication API endpoints."""

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from authcore.config import Settings, get_settings
from authcore.database import get_db
from authcore.dependencies import CurrentUser, clear_auth_cookie, get_current_user, set_auth_cookie
from authcore.errors import AuthError, ErrorKind
from authcore.rate_limit import limiter
from authcore.schemas.auth import (
    AccountResponse,
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    LoginRequest,
    ProfileResponse,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
    UpdateDetailsRequest,
    UpdatePasswordRequest,
)
from authcore.services.auth import AuthResult, get_auth_service
from authcore.services.email_service import EmailService, get_email_service
from authcore.services.jwt import JWTService, get_jwt_service

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])


def _raise_for(result: AuthResult) -> None:
    if not result.success:
        raise AuthError(result.kind or ErrorKind.INTERNAL, result.error or "Request failed")


def _token_response(
    result: AuthResult, response: Response, settings: Settings, jwt_service: JWTService
) -> TokenResponse:
    """Issue a fresh token for the result's account and set it as a cookie too."""
    token = jwt_service.create_token(result.user.id)  # type: ignore[union-attr]
    set_auth_cookie(response, token, settings)
    return TokenResponse(token=token, user=AccountResponse.model_validate(result.user))


@router.post("/register", response_model=TokenResponse, status_code=201)
@limiter.limit("5/minute")
def register(
    request: Request,
    response: Response,
    body: RegisterRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    jwt_service: JWTService = Depends(get_jwt_service),
) -> TokenResponse:
    """Register a new user account."""
    result = get_auth_service().register(db, body.email, body.password, body.name)
    _raise_for(result)
    return _token_response(result, response, settings, jwt_service)


@router.post("/login", response_model=TokenResponse)
@limiter.limit("10/minute")
def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    jwt_service: JWTService = Depends(get_jwt_service),
) -> TokenResponse:
    """Authenticate and receive a JWT token."""
    result = get_auth_service().authenticate(db, body.email, body.password)
    _raise_for(result)
    return _token_response(result, response, settings, jwt_service)


@router.get("/logout")
def logout(response: Response, settings: Settings = Depends(get_settings)) -> dict:
    """Clear the auth cookie. Tokens are stateless, so the client must drop its copy."""
    clear_auth_cookie(response, settings)
    return {"success": True, "user": {}}


@router.get("/me", response_model=ProfileResponse)
def get_me(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)) -> ProfileResponse:
    """Return the current user's profile."""
    account = get_auth_service().get_account(db, user.id)
    if not account:
        raise AuthError(ErrorKind.NOT_FOUND, "No user found")
    return ProfileResponse(user=AccountResponse.model_validate(account))


@router.put("/update-details", response_model=TokenResponse)
def update_details(
    response: Response,
    body: UpdateDetailsRequest,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    jwt_service: JWTService = Depends(get_jwt_service),
) -> TokenResponse:
    """Update name and/or email of the current user."""
    result = get_auth_service().update_details(db, user.id, name=body.name, email=body.email)
    _raise_for(result)
    return _token_response(result, response, settings, jwt_service)


@router.put("/update-password", response_model=TokenResponse)
def update_password(
    response: Response,
    body: UpdatePasswordRequest,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    jwt_service: JWTService = Depends(get_jwt_service),
) -> TokenResponse:
    """Change the current user's password."""
    result = get_auth_service().update_password(db, user.id, body.current_password, body.new_password)
    _raise_for(result)
    return _token_response(result, response, settings, jwt_service)


@router.post("/forgot-password", response_model=ForgotPasswordResponse)
@limiter.limit("3/minute")
def forgot_password(
    request: Request,
    body: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    email_service: EmailService = Depends(get_email_service),
) -> ForgotPasswordResponse:
    """Email a password reset link."""
    # Links use the configured origin; the request's Host header is client controlled
    reset_url_base = f"{settings.PUBLIC_BASE_URL.rstrip('/')}{router.prefix}/reset-password"
    result = get_auth_service().forgot_password(db, body.email, reset_url_base, email_service)
    _raise_for(result)
    return ForgotPasswordResponse(email=result.user.email, message="Email sent")  # type: ignore[union-attr]


@router.put("/reset-password/{token}", response_model=TokenResponse)
@limiter.limit("5/minute")
def reset_password(
    request: Request,
    response: Response,
    token: str,
    body: ResetPasswordRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    jwt_service: JWTService = Depends(get_jwt_service),
) -> TokenResponse:
    """Reset password using a valid token. Returns JWT for auto-login."""
    result = get_auth_service().reset_password(db, token, body.new_password)
    _raise_for(result)
    return _token_response(result, response, settings, jwt_service)
