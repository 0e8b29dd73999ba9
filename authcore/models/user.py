"""User account model."""

import enum

from sqlalchemy import Column, DateTime, String

from authcore.database import Base, utcnow


class Role(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


class User(Base):
    """Registered account.

    ``password_reset_token`` holds the SHA-256 digest of the emailed reset
    token, never the token itself. It and ``password_reset_expires_at`` are
    set and cleared together.
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True)
    name = Column(String(256), nullable=True)
    email = Column(String(256), unique=True, nullable=False, index=True)
    password_hash = Column(String(256), nullable=False)
    role = Column(String(32), nullable=False, default=Role.USER.value)
    password_reset_token = Column(String(64), nullable=True, index=True)
    password_reset_expires_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    modified_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
