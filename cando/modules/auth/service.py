import hashlib
import logging
import time
from supabase import Client
from cando.modules.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, RegisterResponse
from cando.config.settings import settings
from fastapi import HTTPException
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500

PASSWORD_RESET_MESSAGE = "If an account exists for this email, a password reset link has been sent."


def _token_cache_key(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def _session_response(auth_response, fallback_email: str) -> TokenResponse:
    session = auth_response.session
    return TokenResponse(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        token_type="bearer",
        expires_in=getattr(session, "expires_in", None),
        user_id=auth_response.user.id,
        email=auth_response.user.email or fallback_email
    )


class AuthService:
    def __init__(self, supabase: Client, service_supabase: Optional[Client] = None):
        self.supabase = supabase
        self.service_supabase = service_supabase or supabase

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Register a new user; Supabase sends the confirmation mail"""
        try:
            user_metadata = {}
            if register_data.full_name:
                user_metadata["full_name"] = register_data.full_name

            auth_response = self.supabase.auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {
                    "data": user_metadata,
                    "email_redirect_to": f"{settings.frontend_url}/auth/callback"
                }
            })

            if not auth_response.user:
                raise HTTPException(status_code=400, detail="Failed to register user")

            return RegisterResponse(
                user_id=auth_response.user.id,
                email=auth_response.user.email or register_data.email,
                message="Check your email to confirm your account"
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise HTTPException(status_code=400, detail="User already exists")
            logger.error(f"Registration failed: {error_message}")
            raise HTTPException(status_code=500, detail=f"Registration failed: {error_message}")

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Authenticate user using Supabase Auth"""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })

            if not auth_response.user or not auth_response.session:
                raise HTTPException(status_code=401, detail="Invalid credentials")

            return _session_response(auth_response, login_data.email)
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise HTTPException(status_code=401, detail="Invalid email or password")
            if "not confirmed" in error_message.lower():
                raise HTTPException(status_code=403, detail="Please confirm your email before signing in")
            raise HTTPException(status_code=500, detail=f"Login failed: {error_message}")

    def refresh(self, refresh_token: str) -> TokenResponse:
        try:
            auth_response = self.supabase.auth.refresh_session(refresh_token)
            if not auth_response.user or not auth_response.session:
                raise HTTPException(status_code=401, detail="Invalid refresh token")
            return _session_response(auth_response, "")
        except HTTPException:
            raise
        except Exception as e:
            logger.warning(f"Session refresh failed: {e}")
            raise HTTPException(status_code=401, detail="Invalid refresh token")

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
        try:
            cache_key = _token_cache_key(token)
            now = time.monotonic()
            if cache_key in _AUTH_USER_CACHE:
                user_data, expiry = _AUTH_USER_CACHE[cache_key]
                if now < expiry:
                    return user_data
                del _AUTH_USER_CACHE[cache_key]
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            user = user_response.user
            user_data = {
                "id": user.id,
                "email": user.email,
                "user_metadata": user.user_metadata or {},
                "app_metadata": user.app_metadata or {},
                "created_at": user.created_at,
                "updated_at": user.updated_at
            }
            if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
                _AUTH_USER_CACHE[cache_key] = (user_data, now + _AUTH_CACHE_TTL_SEC)
            return user_data
        except HTTPException:
            raise
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")

    def logout(self, token: str) -> bool:
        """Revoke the session behind token and forget it locally"""
        _AUTH_USER_CACHE.pop(_token_cache_key(token), None)
        try:
            self.service_supabase.auth.admin.sign_out(token)
            return True
        except Exception as e:
            logger.warning(f"Session revoke failed: {e}")
            return False

    def send_password_reset(self, email: str) -> str:
        """Send the recovery mail. The answer never reveals whether the account exists."""
        try:
            self.supabase.auth.reset_password_for_email(
                email,
                {"redirect_to": f"{settings.frontend_url}/auth/reset-password"}
            )
        except Exception as e:
            logger.warning(f"Password reset request failed for {email}: {e}")
        return PASSWORD_RESET_MESSAGE

    def update_password(self, user_id: str, password: str) -> bool:
        """Set a new password for the authenticated (recovery) user (requires service role key)"""
        if not settings.supabase_service_role_key and self.service_supabase is self.supabase:
            raise HTTPException(
                status_code=500,
                detail="Service role key not configured. Cannot update password."
            )
        try:
            response = self.service_supabase.auth.admin.update_user_by_id(
                user_id,
                {"password": password}
            )
            if not response.user:
                raise HTTPException(status_code=404, detail="User not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(
                status_code=500,
                detail=f"Failed to update password: {str(e)}"
            )
