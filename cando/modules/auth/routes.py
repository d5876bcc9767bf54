from fastapi import APIRouter, Depends
from cando.database.supabase_client import get_user_supabase
from cando.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse,
    ForgotPasswordRequest, ResetPasswordRequest, RefreshRequest
)
from cando.modules.auth.service import AuthService
from cando.core.dependencies import (
    get_auth_service, get_current_token, get_current_user_id, is_platform_admin, get_access_cache
)
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user"""
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/refresh", response_model=TokenResponse)
async def refresh(
    refresh_data: RefreshRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Exchange a refresh token for a new session"""
    return service.refresh(refresh_data.refresh_token)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.get("/me")
async def get_current_user(
    current_user: Dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_user_supabase),
    cache: Dict = Depends(get_access_cache)
):
    """Get current authenticated user and whether they are a platform admin."""
    return {**current_user, "is_admin": is_platform_admin(supabase, cache)}


@router.post("/forgot-password", status_code=200)
async def forgot_password(
    request: ForgotPasswordRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Send a password reset link"""
    return {"message": service.send_password_reset(request.email)}


@router.post("/reset-password", status_code=200)
async def reset_password(
    request: ResetPasswordRequest,
    current_user: Dict = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service)
):
    """Set a new password using the recovery session's token"""
    service.update_password(current_user["id"], request.password)
    return {"message": "Password updated successfully"}
