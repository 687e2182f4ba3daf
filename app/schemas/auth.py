"""Pydantic schemas for authentication endpoints."""

from datetime import datetime

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, Field, field_validator

BCRYPT_MAX_PASSWORD_BYTES = 72


class LoginRequest(BaseModel):
    email: str
    password: str


class RegisterRequest(BaseModel):
    email: str
    password: str = Field(min_length=6)
    language_code: str = Field(min_length=2, max_length=16)

    @field_validator("email")
    @classmethod
    def email_is_valid(cls, value: str) -> str:
        # Checked only; the address is stored exactly as typed so login matches it.
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError as e:
            raise ValueError(str(e)) from e
        return value

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes")
        return value


class RegisterResponse(BaseModel):
    message: str
    email: str


class LoginUser(BaseModel):
    email: str


class LoginResponse(BaseModel):
    token: str
    user: LoginUser


class ActivationResponse(BaseModel):
    message: str


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    is_active: bool
    first_name: str | None = None
    last_name: str | None = None
    age: int | None = None
    height: float | None = None
    weight: float | None = None
    gender: str | None = None
    language: str | None = None
    activity_level: str | None = None
    created_at: datetime
    updated_at: datetime
