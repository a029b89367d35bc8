"""Authentication and profile schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class UserSignup(BaseModel):
    """User registration request."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr = Field(..., max_length=255)
    phone: str | None = Field(None, max_length=50)
    gender: str | None = Field(None, max_length=50)
    password: str = Field(..., min_length=1, max_length=128)


class UserLogin(BaseModel):
    """User login request."""

    email: str = Field(..., max_length=255)
    password: str = Field(..., max_length=128)


class ForgotPasswordRequest(BaseModel):
    """Password reset request."""

    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(..., max_length=255)
    new_password: str = Field(..., alias="newPassword", min_length=1, max_length=128)


class ProfileUpdate(BaseModel):
    """Profile update. Only fields present in the request are changed."""

    name: str | None = Field(None, min_length=1, max_length=255)
    phone: str | None = Field(None, max_length=50)
    gender: str | None = Field(None, max_length=50)

    @field_validator("name")
    @classmethod
    def name_not_null(cls, value: str | None) -> str:
        if value is None:
            raise ValueError("name cannot be empty")
        return value


class UserResponse(BaseModel):
    """User information response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    phone: str | None
    gender: str | None
    created_at: datetime


class AuthResponse(BaseModel):
    """Authentication response with user info and bearer token."""

    user: UserResponse
    token: str


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str
