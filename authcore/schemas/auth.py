"""Pydantic schemas for authentication endpoints."""

from datetime import datetime

from pydantic import BaseModel


class LoginRequest(BaseModel):
    email: str
    password: str


class RegisterRequest(BaseModel):
    email: str
    password: str
    name: str | None = None


class UpdateDetailsRequest(BaseModel):
    name: str | None = None
    email: str | None = None


class UpdatePasswordRequest(BaseModel):
    current_password: str
    new_password: str


class ForgotPasswordRequest(BaseModel):
    email: str


class ResetPasswordRequest(BaseModel):
    new_password: str


class AccountResponse(BaseModel):
    """Account as exposed over the API. Password and reset digests are never included."""

    id: str
    name: str | None
    email: str
    role: str
    created_at: datetime
    modified_at: datetime

    model_config = {"from_attributes": True}


class AccountListResponse(BaseModel):
    items: list[AccountResponse]
    total: int


class TokenResponse(BaseModel):
    success: bool = True
    token: str
    user: AccountResponse


class ProfileResponse(BaseModel):
    success: bool = True
    user: AccountResponse


class ForgotPasswordResponse(BaseModel):
    success: bool = True
    email: str
    message: str
