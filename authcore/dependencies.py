"""Authentication dependencies for FastAPI routes."""

from collections.abc import Callable
from dataclasses import dataclass

from fastapi import Depends, Request, Response
from sqlalchemy.orm import Session

from authcore.config import Settings, get_settings
from authcore.database import get_db
from authcore.errors import AuthError, ErrorKind
from authcore.models.user import User
from authcore.services.jwt import JWTService, get_jwt_service

NOT_AUTHORIZED = "Not authorized to access this route"


@dataclass(frozen=True)
class CurrentUser:
    """Authenticated identity for the current request."""

    id: str
    email: str
    role: str


def extract_token(request: Request, cookie_name: str) -> str | None:
    """Bearer token from the Authorization header, else from the auth cookie."""
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
        if token:
            return token
    return request.cookies.get(cookie_name) or None


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    jwt_service: JWTService = Depends(get_jwt_service),
) -> CurrentUser:
    """Resolve the request's token to a live account. Raises 401 if anything is off.

    The account is re-read on every request so deleted accounts lose access
    immediately and role changes apply without re-login.
    """
    token = extract_token(request, settings.AUTH_COOKIE_NAME)
    if not token:
        raise AuthError(ErrorKind.UNAUTHENTICATED, NOT_AUTHORIZED)

    account_id = jwt_service.verify_token(token)
    if not account_id:
        raise AuthError(ErrorKind.UNAUTHENTICATED, NOT_AUTHORIZED)

    user = db.get(User, account_id)
    if not user:
        raise AuthError(ErrorKind.UNAUTHENTICATED, NOT_AUTHORIZED)

    return CurrentUser(id=user.id, email=user.email, role=user.role)


def require_roles(*roles: str) -> Callable[..., CurrentUser]:
    """Build a dependency that only lets the given roles through."""
    allowed = {str(getattr(role, "value", role)) for role in roles}

    def checker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in allowed:
            raise AuthError(ErrorKind.FORBIDDEN, f"User role {user.role} is not authorized to access this route")
        return user

    return checker


def set_auth_cookie(response: Response, token: str, settings: Settings) -> None:
    """Set the authentication cookie."""
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
        max_age=settings.cookie_max_age,
    )


def clear_auth_cookie(response: Response, settings: Settings) -> None:
    """Clear the authentication cookie."""
    response.delete_cookie(
        key=settings.AUTH_COOKIE_NAME,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )
