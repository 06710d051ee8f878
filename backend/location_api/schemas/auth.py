"""Authentication schemas."""
from pydantic import BaseModel, EmailStr, Field


class SignInRequest(BaseModel):
    """Email/password sign-in request.

    Fields are optional so that missing values surface as a 400 from the
    route instead of a validation error.
    """

    email: str | None = None
    password: str | None = None


class SignUpRequest(BaseModel):
    """Self-service sign-up request (only honored when sign-up is enabled)."""

    email: EmailStr
    password: str = Field(..., min_length=8)
    name: str | None = Field(None, max_length=255)


class AccountPublic(BaseModel):
    """Public view of an account. Never carries the password digest."""

    id: str
    email: str
    display_name: str | None = Field(None, serialization_alias="name")


class SignInResponse(BaseModel):
    success: bool = True
    user: AccountPublic


class SessionResponse(BaseModel):
    user: AccountPublic | None = None


class SuccessResponse(BaseModel):
    success: bool = True
