"""Password reset token lifecycle.

An account has a reset pending exactly when both ``password_reset_token`` and
``password_reset_expires_at`` are set. Only the SHA-256 digest of the raw token
is stored; the raw token goes out by email and is never persisted.
"""

import hashlib
import logging
import secrets
from datetime import timedelta

from sqlalchemy import update
from sqlalchemy.orm import Session

from authcore.config import Settings, get_settings
from authcore.database import utcnow
from authcore.models.user import User

logger = logging.getLogger("authcore")

RESET_TOKEN_BYTES = 32


def digest_reset_token(raw_token: str) -> str:
    """Deterministic digest of a raw reset token."""
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def normalize_email(email: str) -> str:
    return email.strip().lower()


class ResetTokenManager:
    """Issues, consumes and clears password reset tokens."""

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self.expire_minutes = settings.RESET_TOKEN_EXPIRE_MINUTES

    def request_reset(self, db: Session, email: str) -> tuple[User, str] | None:
        """Start a reset for the account with this email.

        Returns the account and the raw token, or None when no account matches.
        Any earlier pending token for the account is replaced.
        """
        user = db.query(User).filter(User.email == normalize_email(email)).first()
        if not user:
            return None

        raw_token = secrets.token_hex(RESET_TOKEN_BYTES)
        user.password_reset_token = digest_reset_token(raw_token)
        user.password_reset_expires_at = utcnow() + timedelta(minutes=self.expire_minutes)
        db.commit()

        logger.info("Password reset requested for account %s", user.id)
        return user, raw_token

    def consume_reset(self, db: Session, raw_token: str, new_password_hash: str) -> User | None:
        """Swap in a new password hash if the token matches an unexpired reset.

        The match, the password write and the clearing of both reset fields
        happen in one UPDATE, so a token can be consumed at most once. Unknown,
        already used and expired tokens all return None.
        """
        now = utcnow()
        stmt = (
            update(User)
            .where(
                User.password_reset_token == digest_reset_token(raw_token),
                User.password_reset_expires_at > now,
            )
            .values(
                password_hash=new_password_hash,
                password_reset_token=None,
                password_reset_expires_at=None,
                modified_at=now,
            )
            .returning(User.id)
            .execution_options(synchronize_session=False)
        )
        account_id = db.execute(stmt).scalar_one_or_none()
        db.commit()
        if account_id is None:
            return None

        logger.info("Password reset completed for account %s", account_id)
        return db.get(User, account_id)

    def clear_reset(self, db: Session, account_id: str) -> None:
        """Drop any pending reset for the account."""
        db.execute(
            update(User)
            .where(User.id == account_id)
            .values(password_reset_token=None, password_reset_expires_at=None)
            .execution_options(synchronize_session=False)
        )
        db.commit()


_reset_token_manager: ResetTokenManager | None = None


def get_reset_token_manager() -> ResetTokenManager:
    """Get singleton reset token manager instance."""
    global _reset_token_manager
    if _reset_token_manager is None:
        _reset_token_manager = ResetTokenManager(get_settings())
    return _reset_token_manager
