import logging
from datetime import datetime, timezone
from supabase import Client
from cando.modules.profiles.schemas import ProfileUpdate, ProfileResponse, PublicProfileResponse
from cando.core.errors import http_error_from_supabase
from cando.core.storage import StorageService, AVATARS_BUCKET, epoch_ms, file_extension
from typing import List
from fastapi import HTTPException, UploadFile

logger = logging.getLogger(__name__)


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _get_profile_row(self, user_id: str, columns: str = "*") -> dict:
        result = self.supabase.table("profiles")\
            .select(columns)\
            .eq("id", user_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Profile not found")
        return result.data[0]

    def get_my_profile(self, user_id: str) -> ProfileResponse:
        """Get the caller's full profile"""
        try:
            return ProfileResponse(**self._get_profile_row(user_id))
        except HTTPException:
            raise
        except Exception as e:
            raise http_error_from_supabase(e)

    def get_public_profile(self, user_id: str) -> PublicProfileResponse:
        """Fields any signed-in user may see"""
        try:
            return PublicProfileResponse(**self._get_profile_row(user_id, "id, name, avatar_url"))
        except HTTPException:
            raise
        except Exception as e:
            raise http_error_from_supabase(e)

    def update_profile(self, user_id: str, profile_data: ProfileUpdate) -> ProfileResponse:
        """Update the caller's profile"""
        try:
            update_data = profile_data.model_dump(exclude_unset=True)
            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

            result = self.supabase.table("profiles")\
                .update(update_data)\
                .eq("id", user_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Profile not found")

            return ProfileResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise http_error_from_supabase(e)

    async def upload_avatar(self, user_id: str, file: UploadFile, storage: StorageService) -> ProfileResponse:
        """Store the image in the avatars bucket and point the profile at it"""
        if not file.content_type or not file.content_type.startswith("image/"):
            raise HTTPException(status_code=400, detail="Avatar must be an image")
        path = f"{user_id}/avatar-{epoch_ms()}.{file_extension(file.filename, 'png')}"
        await storage.upload_file(AVATARS_BUCKET, path, file, upsert=True)
        avatar_url = storage.get_public_url(AVATARS_BUCKET, path)
        return self.update_profile(user_id, ProfileUpdate(avatar_url=avatar_url))

    def get_user_network(self, target_user_id: str, viewer_id: str, viewer_is_admin: bool) -> List[dict]:
        """Connections of target, visible when their network is public, to themselves, or to admins"""
        try:
            target = self._get_profile_row(target_user_id, "id, name, avatar_url, is_network_public")
            allowed = target.get("is_network_public") is True or target_user_id == viewer_id or viewer_is_admin
            if not allowed:
                raise HTTPException(status_code=403, detail="This user's network is private")
            result = self.supabase.rpc("get_user_network", {"p_target_user_id": target_user_id}).execute()
            return result.data or []
        except HTTPException:
            raise
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to load network")
