from fastapi import APIRouter, BackgroundTasks, Depends, File, UploadFile
from cando.database.supabase_client import get_user_supabase
from cando.modules.profiles.schemas import ProfileUpdate, ProfileResponse, PublicProfileResponse
from cando.modules.profiles.service import ProfileService
from cando.modules.analytics.service import track_event
from cando.core.dependencies import get_current_user_id, get_storage_service, is_platform_admin, get_access_cache
from cando.core.storage import StorageService
from supabase import Client
from typing import Dict, List

router = APIRouter(prefix="/profiles", tags=["profiles"])


def get_profile_service(supabase: Client = Depends(get_user_supabase)) -> ProfileService:
    return ProfileService(supabase)


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    current_user: Dict = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service)
):
    """Get the caller's profile"""
    return service.get_my_profile(current_user["id"])


@router.put("/me", response_model=ProfileResponse)
async def update_my_profile(
    profile_data: ProfileUpdate,
    current_user: Dict = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service)
):
    """Update the caller's profile"""
    return service.update_profile(current_user["id"], profile_data)


@router.post("/me/avatar", response_model=ProfileResponse)
async def upload_avatar(
    file: UploadFile = File(...),
    current_user: Dict = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service),
    storage: StorageService = Depends(get_storage_service)
):
    """Upload a new avatar image"""
    return await service.upload_avatar(current_user["id"], file, storage)


@router.get("/{user_id}", response_model=PublicProfileResponse)
async def get_profile(
    user_id: str,
    background_tasks: BackgroundTasks,
    current_user: Dict = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service),
    supabase: Client = Depends(get_user_supabase)
):
    """Public profile of another user"""
    profile = service.get_public_profile(user_id)
    if user_id != current_user["id"]:
        background_tasks.add_task(track_event, supabase, current_user["id"], "profile_view", {"profile_id": user_id})
    return profile


@router.get("/{user_id}/connections", response_model=List[dict])
async def get_profile_connections(
    user_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service),
    supabase: Client = Depends(get_user_supabase),
    cache: Dict = Depends(get_access_cache)
):
    """A user's network (public networks, your own, or any as admin)"""
    viewer_is_admin = user_id != current_user["id"] and is_platform_admin(supabase, cache)
    return service.get_user_network(user_id, current_user["id"], viewer_is_admin)
