"""User account API endpoints."""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from authcore.config import Settings, get_settings
from authcore.database import get_db
from authcore.dependencies import CurrentUser, clear_auth_cookie, get_current_user, require_roles
from authcore.errors import AuthError, ErrorKind
from authcore.models.user import Role
from authcore.schemas.auth import AccountListResponse, AccountResponse
from authcore.services.auth import get_auth_service

router = APIRouter(prefix="/api/v1/users", tags=["Users"])

require_admin = require_roles(Role.ADMIN)


@router.delete("/me", status_code=204)
def delete_me(
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> Response:
    """Delete the current user's account."""
    if not get_auth_service().delete_account(db, user.id):
        raise AuthError(ErrorKind.NOT_FOUND, "User not found")
    response = Response(status_code=204)
    clear_auth_cookie(response, settings)
    return response


@router.get("/", response_model=AccountListResponse)
def list_users(
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> AccountListResponse:
    """List all accounts. Admin only."""
    accounts = get_auth_service().list_accounts(db)
    return AccountListResponse(
        items=[AccountResponse.model_validate(a) for a in accounts],
        total=len(accounts),
    )


@router.get("/{account_id}", response_model=AccountResponse)
def get_user(
    account_id: str,
    admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
) -> AccountResponse:
    """Get a single account by ID. Admin only."""
    account = get_auth_service().get_account(db, account_id)
    if not account:
        raise AuthError(ErrorKind.NOT_FOUND, "User not found")
    return AccountResponse.model_validate(account)
