"""Authentication and account API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from src.api.dependencies import get_auth_service, get_current_identity
from src.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    MessageResponse,
    ProfileUpdate,
    UserLogin,
    UserResponse,
    UserSignup,
)
from src.services.auth import AuthService, Identity

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    user_data: UserSignup,
    service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Register a new user."""
    user, token = service.sign_up(user_data)
    return AuthResponse(user=UserResponse.model_validate(user), token=token)


@router.post("/login", response_model=AuthResponse)
async def login(
    credentials: UserLogin,
    service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Login with email and password."""
    user, token = service.login(credentials.email, credentials.password)
    return AuthResponse(user=UserResponse.model_validate(user), token=token)


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    request_data: ForgotPasswordRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Set a new password for the account registered under an email."""
    service.forgot_password(request_data.email, request_data.new_password)
    return MessageResponse(message="Password updated successfully")


@router.get("/profile", response_model=UserResponse)
async def get_profile(
    identity: Annotated[Identity, Depends(get_current_identity)],
    service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Get the current user's profile."""
    return service.get_profile(identity.id)


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    profile_data: ProfileUpdate,
    identity: Annotated[Identity, Depends(get_current_identity)],
    service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Update name, phone or gender of the current user."""
    return service.update_profile(identity.id, profile_data)


@router.delete("/account", response_model=MessageResponse)
async def delete_account(
    identity: Annotated[Identity, Depends(get_current_identity)],
    service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Delete the current user and all of their journals."""
    service.delete_account(identity.id)
    return MessageResponse(message="Account deleted successfully")
