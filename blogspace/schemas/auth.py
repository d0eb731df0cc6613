"""Pydantic schemas for authentication endpoints."""

from typing import Annotated

from pydantic import AfterValidator, BaseModel, EmailStr, Field, StringConstraints

# bcrypt refuses anything longer than 72 bytes
BCRYPT_MAX_BYTES = 72


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes when UTF-8 encoded")
    return value


Password = Annotated[str, Field(min_length=8), AfterValidator(_check_password_bytes)]
LoginPassword = Annotated[str, Field(min_length=1), AfterValidator(_check_password_bytes)]
Username = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=100)]


class LoginRequest(BaseModel):
    email: EmailStr
    password: LoginPassword


class RegisterRequest(BaseModel):
    username: Username
    email: EmailStr
    password: Password


class TokenResponse(BaseModel):
    id: int
    username: str
    email: str
    is_admin: bool
    token: str


class TokenVerifyResponse(BaseModel):
    valid: bool
    user_id: int
    is_admin: bool


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    email: EmailStr
    code: str = Field(min_length=1, max_length=64)
    new_password: Password


class UpdatePasswordRequest(BaseModel):
    current_password: LoginPassword
    new_password: Password


class MessageResponse(BaseModel):
    message: str
