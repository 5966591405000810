from __future__ import annotations

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

MIN_PASSWORD_LENGTH = 6
MIN_NAME_LENGTH = 2


def safe_return_to(target: str | None) -> str:
    """Only same-site paths are allowed as a post-login destination."""
    target = (target or "").strip()
    if not target.startswith("/") or target.startswith("//"):
        return "/"
    return target


class UserOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str | None = None
    name: str
    email: str
    avatar_url: str | None = Field(default=None, alias="avatarUrl")


class LoginRequest(BaseModel):
    client_id: str
    email: EmailStr
    password: str
    next: str = "/"

    @field_validator("password")
    @classmethod
    def _password_length(cls, value: str) -> str:
        if len(value) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return value


class SignupRequest(LoginRequest):
    name: str

    @field_validator("name")
    @classmethod
    def _name_length(cls, value: str) -> str:
        value = value.strip()
        if len(value) < MIN_NAME_LENGTH:
            raise ValueError(f"Please enter your name (min {MIN_NAME_LENGTH} characters)")
        return value


class LogoutRequest(BaseModel):
    client_id: str


class AuthResponse(BaseModel):
    user: UserOut
    redirect_to: str
