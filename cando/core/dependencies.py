"""
Core dependencies for route protection and company-scoped access checks
"""

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from cando.database.supabase_client import get_supabase, get_service_supabase, get_user_supabase
from cando.modules.auth.service import AuthService
from cando.core.storage import StorageService
from cando.config.permissions_config import ADMIN_MEMBERSHIP_ROLES
from supabase import Client
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()


def _get_request_cache(request: Request) -> Dict[str, Any]:
    """Return request-scoped cache for access data (is_admin, administered company ids)."""
    if not hasattr(request.state, "access_cache"):
        request.state.access_cache = {}
    return request.state.access_cache


def get_auth_service(
    supabase: Client = Depends(get_supabase),
    service_supabase: Client = Depends(get_service_supabase)
) -> AuthService:
    return AuthService(supabase, service_supabase)


def get_storage_service(supabase: Client = Depends(get_service_supabase)) -> StorageService:
    return StorageService(supabase)


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    token = credentials.credentials
    user_data = auth_service.get_current_user(token)
    return user_data


def is_platform_admin(supabase: Client, cache: Optional[Dict[str, Any]] = None) -> bool:
    """Ask is_current_user_admin() for the caller behind the client's JWT"""
    if cache is not None and "is_admin" in cache:
        return cache["is_admin"]
    try:
        result = supabase.rpc("is_current_user_admin", {}).execute()
        is_admin = bool(result.data)
    except Exception as e:
        logger.error(f"Error checking admin status: {e}")
        is_admin = False
    if cache is not None:
        cache["is_admin"] = is_admin
    return is_admin


def require_admin(
    request: Request,
    user_data: dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_user_supabase)
) -> dict:
    """Dependency that lets only platform admins through"""
    if not is_platform_admin(supabase, _get_request_cache(request)):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return user_data


def is_company_admin(user_id: str, company_id: str, supabase: Client) -> bool:
    try:
        result = supabase.rpc("is_company_admin", {
            "p_user_id": user_id,
            "p_company_id": company_id
        }).execute()
        return bool(result.data)
    except Exception as e:
        logger.error(f"Error checking company admin for {company_id}: {e}")
        return False


def check_company_admin(company_id: str, user_data: dict, supabase: Client) -> dict:
    """Raise 403 unless the user administers the company"""
    if not is_company_admin(user_data["id"], company_id, supabase):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You must be an admin of this company to perform this action"
        )
    return user_data


def get_company_role(company_id: str, user_id: str, supabase: Client) -> Optional[str]:
    """Return the caller's company_users role, 'owner' for the owning account, or None"""
    member_result = supabase.table("company_users")\
        .select("role")\
        .eq("company_id", company_id)\
        .eq("user_id", user_id)\
        .limit(1)\
        .execute()
    if member_result.data:
        return member_result.data[0]["role"]
    owner_result = supabase.table("companies")\
        .select("id")\
        .eq("id", company_id)\
        .eq("owner_id", user_id)\
        .limit(1)\
        .execute()
    if owner_result.data:
        return "owner"
    return None


def check_company_owner(company_id: str, user_data: dict, supabase: Client) -> dict:
    if get_company_role(company_id, user_data["id"], supabase) != "owner":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the company owner can perform this action"
        )
    return user_data


def get_administered_company_ids(
    user_id: str,
    supabase: Client,
    cache: Optional[Dict[str, Any]] = None
) -> List[str]:
    """Company ids where the user holds an owner/admin membership. Uses request-scoped cache when provided."""
    if cache is not None and "admin_company_ids" in cache:
        return cache["admin_company_ids"]
    try:
        result = supabase.table("company_users")\
            .select("company_id")\
            .eq("user_id", user_id)\
            .in_("role", list(ADMIN_MEMBERSHIP_ROLES))\
            .execute()
        ids = list({row["company_id"] for row in result.data}) if result.data else []
    except Exception as e:
        logger.error(f"Error getting administered companies: {e}")
        ids = []
    if cache is not None:
        cache["admin_company_ids"] = ids
    return ids


def get_access_cache(request: Request) -> Dict[str, Any]:
    """Dependency that returns the request-scoped access cache."""
    return _get_request_cache(request)
