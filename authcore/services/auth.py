"""Authentication service."""

import logging
import re
import uuid
from dataclasses import dataclass

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from authcore.config import Settings, get_settings
from authcore.database import utcnow
from authcore.errors import DeliveryError, ErrorKind
from authcore.models.user import Role, User
from authcore.services.email_service import EmailService
from authcore.services.password import dummy_hash, hash_password, verify_password
from authcore.services.reset_token import ResetTokenManager, get_reset_token_manager, normalize_email

logger = logging.getLogger("authcore")

EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")
MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_BYTES = 72  # bcrypt input limit
MIN_NAME_LENGTH = 2

_DIALECT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


def is_valid_name(name: str) -> bool:
    return len(name) >= MIN_NAME_LENGTH


def is_strong_password(password: str) -> bool:
    return len(password) >= MIN_PASSWORD_LENGTH and len(password.encode("utf-8")) <= MAX_PASSWORD_BYTES


@dataclass
class AuthResult:
    """Result of an auth operation. On failure ``kind`` says which error to report."""

    success: bool
    error: str | None = None
    kind: ErrorKind | None = None
    user: User | None = None


def _failure(kind: ErrorKind, error: str) -> AuthResult:
    return AuthResult(success=False, error=error, kind=kind)


INVALID_CREDENTIALS = "The credentials you provided are incorrect"
PASSWORD_POLICY = f"Password must be at least {MIN_PASSWORD_LENGTH} characters (and at most {MAX_PASSWORD_BYTES} bytes)"


class AuthService:
    """Handles registration, login, profile changes and password resets."""

    def __init__(self, settings: Settings | None = None, reset_tokens: ResetTokenManager | None = None) -> None:
        settings = settings or get_settings()
        self.bcrypt_rounds = settings.BCRYPT_ROUNDS
        self.reset_tokens = reset_tokens or ResetTokenManager(settings)

    def register(self, db: Session, email: str, password: str, name: str | None = None) -> AuthResult:
        """Register a new account. Duplicate emails (any case) fail with EMAIL_TAKEN."""
        if not email or not password:
            return _failure(ErrorKind.VALIDATION, "Some values are missing")
        if name is not None and not is_valid_name(name.strip()):
            return _failure(ErrorKind.VALIDATION, "Please enter a valid name")
        if not is_valid_email(email.strip()):
            return _failure(ErrorKind.VALIDATION, "Please enter a valid email address")
        if not is_strong_password(password):
            return _failure(ErrorKind.VALIDATION, PASSWORD_POLICY)

        now = utcnow()
        insert = _DIALECT_INSERTS[db.get_bind().dialect.name]
        table = User.__table__
        stmt = (
            insert(table)
            .values(
                id=str(uuid.uuid4()),
                name=name.strip() if name is not None else None,
                email=normalize_email(email),
                password_hash=hash_password(password, self.bcrypt_rounds),
                role=Role.USER.value,
                created_at=now,
                modified_at=now,
            )
            .on_conflict_do_nothing(index_elements=["email"])
            .returning(table.c.id)
        )
        account_id = db.execute(stmt).scalar_one_or_none()
        db.commit()

        # ON CONFLICT DO NOTHING returns no row for an existing email
        if account_id is None:
            return _failure(ErrorKind.EMAIL_TAKEN, "Cannot register with this email")

        logger.info("Registered account %s", account_id)
        return AuthResult(success=True, user=db.get(User, account_id))

    def authenticate(self, db: Session, email: str, password: str) -> AuthResult:
        """Authenticate by email and password.

        Unknown email and wrong password produce the same result.
        """
        if not email or not password:
            return _failure(ErrorKind.VALIDATION, "Please provide email and password")
        if not is_valid_email(email.strip()):
            return _failure(ErrorKind.VALIDATION, "Please provide a valid email address")

        user = db.query(User).filter(User.email == normalize_email(email)).first()
        if not user:
            # Unknown emails still pay for one bcrypt check
            verify_password(password, dummy_hash(self.bcrypt_rounds))
            return _failure(ErrorKind.INVALID_CREDENTIALS, INVALID_CREDENTIALS)
        if not verify_password(password, user.password_hash):
            return _failure(ErrorKind.INVALID_CREDENTIALS, INVALID_CREDENTIALS)

        return AuthResult(success=True, user=user)

    def get_account(self, db: Session, account_id: str) -> User | None:
        return db.get(User, account_id)

    def list_accounts(self, db: Session) -> list[User]:
        return db.query(User).order_by(User.created_at).all()

    def update_details(
        self, db: Session, account_id: str, name: str | None = None, email: str | None = None
    ) -> AuthResult:
        """Change name and/or email. Omitted fields keep their current value."""
        user = db.get(User, account_id)
        if not user:
            return _failure(ErrorKind.NOT_FOUND, "No user found")

        new_name = name.strip() if name is not None else user.name
        new_email = normalize_email(email) if email is not None else user.email

        if new_name is not None and not is_valid_name(new_name):
            return _failure(ErrorKind.VALIDATION, "Invalid name")
        if not is_valid_email(new_email):
            return _failure(ErrorKind.VALIDATION, "Invalid email")

        user.name = new_name
        user.email = new_email
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            return _failure(ErrorKind.EMAIL_TAKEN, "Cannot use this email")

        db.refresh(user)
        logger.info("Updated details for account %s", account_id)
        return AuthResult(success=True, user=user)

    def update_password(self, db: Session, account_id: str, current_password: str, new_password: str) -> AuthResult:
        """Change the password after checking the current one."""
        user = db.get(User, account_id)
        if not user:
            return _failure(ErrorKind.NOT_FOUND, "No user found")

        if not verify_password(current_password, user.password_hash):
            return _failure(ErrorKind.INVALID_CREDENTIALS, "Password is incorrect")

        if not is_strong_password(new_password):
            return _failure(ErrorKind.VALIDATION, PASSWORD_POLICY)

        user.password_hash = hash_password(new_password, self.bcrypt_rounds)
        db.commit()
        db.refresh(user)

        logger.info("Password changed for account %s", account_id)
        return AuthResult(success=True, user=user)

    def forgot_password(self, db: Session, email: str, reset_url_base: str, email_service: EmailService) -> AuthResult:
        """Issue a reset token and email the reset link.

        If the email cannot be sent the pending reset is cleared again, so no
        undelivered token stays valid.
        """
        if not email or not is_valid_email(email.strip()):
            return _failure(ErrorKind.VALIDATION, "Please provide a valid email")

        pending = self.reset_tokens.request_reset(db, email)
        if pending is None:
            return _failure(ErrorKind.EMAIL_NOT_FOUND, "There is no user with this email address")

        user, raw_token = pending
        account_id, recipient = user.id, user.email
        reset_url = f"{reset_url_base}/{raw_token}"
        message = (
            f"Forgot your password? Submit a request with your new password to: {reset_url}\n"
            "If you didn't forget your password, please ignore this email!"
        )

        try:
            email_service.send(recipient, "Password reset token", message)
        except DeliveryError:
            self.reset_tokens.clear_reset(db, account_id)
            logger.warning("Rolled back password reset for account %s after delivery failure", account_id)
            return _failure(ErrorKind.DELIVERY_FAILED, "Email could not be sent")

        return AuthResult(success=True, user=db.get(User, account_id))

    def reset_password(self, db: Session, token: str, new_password: str) -> AuthResult:
        """Set a new password using a reset token. Each token works once."""
        if not is_strong_password(new_password):
            return _failure(ErrorKind.VALIDATION, PASSWORD_POLICY)

        user = self.reset_tokens.consume_reset(db, token, hash_password(new_password, self.bcrypt_rounds))
        if not user:
            return _failure(ErrorKind.INVALID_OR_EXPIRED, "Invalid or expired token")

        return AuthResult(success=True, user=user)

    def delete_account(self, db: Session, account_id: str) -> bool:
        """Delete an account. Returns False if it did not exist."""
        user = db.get(User, account_id)
        if not user:
            return False
        db.delete(user)
        db.commit()
        logger.info("Deleted account %s", account_id)
        return True


_auth_service: AuthService | None = None


def get_auth_service() -> AuthService:
    """Get singleton auth service instance."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService(get_settings(), get_reset_token_manager())
    return _auth_service
