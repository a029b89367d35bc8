"""Pydantic schemas for API requests and responses."""

from src.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    MessageResponse,
    ProfileUpdate,
    UserLogin,
    UserResponse,
    UserSignup,
)
from src.schemas.journal import ImageUrlAction, JournalCreate, JournalResponse, JournalUpdate

__all__ = [
    "UserSignup",
    "UserLogin",
    "ForgotPasswordRequest",
    "ProfileUpdate",
    "UserResponse",
    "AuthResponse",
    "MessageResponse",
    "JournalCreate",
    "JournalUpdate",
    "JournalResponse",
    "ImageUrlAction",
]
