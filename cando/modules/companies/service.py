import logging
from datetime import datetime, timezone
from supabase import Client
from cando.modules.companies.schemas import (
    CompanyCreate, CompanyUpdate, CompanyResponse,
    CompanyMemberAdd, CompanyMemberUpdate, CompanyMemberResponse, CompanyMembersPage,
    DirectoryPage, CompanyPermissionsResponse, FollowStatusResponse
)
from cando.config.settings import settings
from cando.config.permissions_config import get_role_permissions
from cando.core.dependencies import get_company_role
from cando.core.errors import http_error_from_supabase
from cando.core.rate_limiter import RateLimiter, rate_limiter as default_rate_limiter
from cando.core.storage import StorageService, COMPANY_LOGOS_BUCKET, epoch_ms, file_extension
from cando.core.validation import search_term
from typing import List, Optional
from fastapi import HTTPException, UploadFile

logger = logging.getLogger(__name__)

MEMBER_COLUMNS = "*, profile:profiles(id, name, avatar_url, email)"


def _member(row: dict) -> CompanyMemberResponse:
    return CompanyMemberResponse(**row)


class CompanyService:
    def __init__(self, supabase: Client, limiter: Optional[RateLimiter] = None):
        self.supabase = supabase
        self.limiter = limiter or default_rate_limiter

    def _enforce_rate_limit(self, action: str, user_id: str):
        self.limiter.enforce(
            RateLimiter.generate_key(action, user_id),
            settings.company_rate_limit,
            settings.company_rate_window_ms
        )

    def create_company(self, company_data: CompanyCreate, user_id: str) -> CompanyResponse:
        """Create a company owned by the user and make them its owner member"""
        self._enforce_rate_limit("createCompany", user_id)
        try:
            owned = self.supabase.table("companies")\
                .select("id, name")\
                .eq("owner_id", user_id)\
                .execute()
            wanted = company_data.name.casefold()
            if any((row.get("name") or "").casefold() == wanted for row in owned.data or []):
                raise HTTPException(status_code=409, detail="You already have a company with this name")

            insert_data = company_data.model_dump(mode="json", exclude_none=True)
            insert_data["owner_id"] = user_id
            result = self.supabase.table("companies").insert(insert_data).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create company")
            company = result.data[0]

            try:
                self.supabase.table("company_users").insert({
                    "company_id": company["id"],
                    "user_id": user_id,
                    "role": "owner",
                    "is_primary": True
                }).execute()
                self.supabase.table("company_users")\
                    .update({"is_primary": False})\
                    .eq("user_id", user_id)\
                    .neq("company_id", company["id"])\
                    .execute()
            except Exception:
                logger.error(f"Owner membership setup failed, removing company {company['id']}")
                self._remove_company(company["id"], user_id)
                raise

            logger.info(f"Company {company['id']} created by {user_id}")
            return CompanyResponse(**company)
        except HTTPException:
            raise
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to create company")

    def _remove_company(self, company_id: str, user_id: str):
        """Undo a half-created company. Failures are only logged so the original error surfaces."""
        try:
            self.supabase.table("company_users")\
                .delete()\
                .eq("company_id", company_id)\
                .eq("user_id", user_id)\
                .execute()
        except Exception as e:
            logger.error(f"Rollback of owner membership for company {company_id} failed: {e}")
        try:
            self.supabase.table("companies").delete().eq("id", company_id).execute()
        except Exception as e:
            logger.error(f"Rollback of company {company_id} failed: {e}")

    def list_user_companies(self, user_id: str) -> List[dict]:
        """Companies the user belongs to, with their role and primary flag"""
        self._enforce_rate_limit("getCompanies", user_id)
        try:
            result = self.supabase.rpc("get_user_companies", {"p_user_id": user_id}).execute()
            return result.data or []
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to fetch companies")

    def search_directory(
        self,
        query: Optional[str] = None,
        industry_tags: Optional[List[str]] = None,
        capability_tags: Optional[List[str]] = None,
        region_tags: Optional[List[str]] = None,
        verified_only: bool = False,
        page: int = 1,
        limit: int = 12
    ) -> DirectoryPage:
        """Browse public_companies with tag filters and a name search"""
        try:
            offset = (page - 1) * limit
            request = self.supabase.table("public_companies").select("*", count="exact")
            if verified_only:
                request = request.eq("is_verified", True)
            if industry_tags:
                request = request.contains("industry_tags", industry_tags)
            if capability_tags:
                request = request.contains("capability_tags", capability_tags)
            if region_tags:
                request = request.contains("region_tags", region_tags)
            term = search_term(query)
            if term:
                request = request.or_(f"name.ilike.%{term}%,trading_name.ilike.%{term}%")
            result = request.order("name")\
                .range(offset, offset + limit - 1)\
                .execute()
            total = result.count or 0
            return DirectoryPage(
                data=result.data or [],
                total=total,
                page=page,
                limit=limit,
                has_more=total > offset + limit
            )
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to fetch companies")

    def get_company_by_id(self, company_id: str) -> CompanyResponse:
        """Get company by ID"""
        try:
            result = self.supabase.table("companies")\
                .select("*")\
                .eq("id", company_id)\
                .limit(1)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Company not found")

            return CompanyResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise http_error_from_supabase(e)

    def update_company(self, company_id: str, company_data: CompanyUpdate) -> CompanyResponse:
        """Update company"""
        try:
            update_data = company_data.model_dump(mode="json", exclude_unset=True)
            if not update_data:
                return self.get_company_by_id(company_id)
            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

            result = self.supabase.table("companies")\
                .update(update_data)\
                .eq("id", company_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Company not found")

            return CompanyResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to update company")

    def delete_company(self, company_id: str) -> bool:
        """Delete company"""
        try:
            result = self.supabase.table("companies")\
                .delete()\
                .eq("id", company_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Company not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to delete company")

    async def upload_logo(self, company_id: str, file: UploadFile, storage: StorageService) -> CompanyResponse:
        if not file.content_type or not file.content_type.startswith("image/"):
            raise HTTPException(status_code=400, detail="Logo must be an image")
        path = f"{company_id}/logo-{epoch_ms()}.{file_extension(file.filename, 'png')}"
        await storage.upload_file(COMPANY_LOGOS_BUCKET, path, file, upsert=True)
        logo_url = storage.get_public_url(COMPANY_LOGOS_BUCKET, path)
        try:
            result = self.supabase.table("companies")\
                .update({"logo_url": logo_url})\
                .eq("id", company_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Company not found")
            return CompanyResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise http_error_from_supabase(e)

    def set_primary_company(self, company_id: str, user_id: str) -> bool:
        """Make company the user's primary company (clears the flag everywhere else first)"""
        try:
            membership = self.supabase.table("company_users")\
                .select("id")\
                .eq("company_id", company_id)\
                .eq("user_id", user_id)\
                .limit(1)\
                .execute()
            if not membership.data:
                raise HTTPException(status_code=404, detail="You are not a member of this company")

            self.supabase.table("company_users")\
                .update({"is_primary": False})\
                .eq("user_id", user_id)\
                .execute()
            self.supabase.table("company_users")\
                .update({"is_primary": True})\
                .eq("company_id", company_id)\
                .eq("user_id", user_id)\
                .execute()
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to set primary company")

    def list_members(self, company_id: str, page: int = 1, limit: int = 10) -> CompanyMembersPage:
        """Paginated team list"""
        try:
            offset = (page - 1) * limit
            result = self.supabase.table("company_users")\
                .select(MEMBER_COLUMNS, count="exact")\
                .eq("company_id", company_id)\
                .order("created_at", desc=True)\
                .range(offset, offset + limit - 1)\
                .execute()
            total = result.count or 0
            return CompanyMembersPage(
                data=[_member(row) for row in result.data or []],
                total=total,
                page=page,
                limit=limit,
                has_more=total > offset + limit
            )
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to fetch company users")

    def add_member(self, company_id: str, member_data: CompanyMemberAdd) -> CompanyMemberResponse:
        """Add a member to the company"""
        try:
            result = self.supabase.table("company_users").insert({
                "company_id": company_id,
                "user_id": member_data.user_id,
                "role": member_data.role,
                "is_primary": member_data.is_primary
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to add company user")

            return _member(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to add company user")

    def update_member(self, company_id: str, user_id: str, member_data: CompanyMemberUpdate) -> CompanyMemberResponse:
        try:
            update_data = member_data.model_dump(exclude_none=True)
            if not update_data:
                raise HTTPException(status_code=400, detail="Nothing to update")
            result = self.supabase.table("company_users")\
                .update(update_data)\
                .eq("company_id", company_id)\
                .eq("user_id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Company user not found")
            return _member(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to update user role")

    def remove_member(self, company_id: str, user_id: str) -> bool:
        try:
            if get_company_role(company_id, user_id, self.supabase) == "owner":
                raise HTTPException(status_code=400, detail="The company owner cannot be removed")
            self.supabase.table("company_users")\
                .delete()\
                .eq("company_id", company_id)\
                .eq("user_id", user_id)\
                .execute()
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to remove company user")

    def get_permissions(self, company_id: str, user_id: str) -> CompanyPermissionsResponse:
        """What the user may do in this company, from their team role"""
        try:
            role = get_company_role(company_id, user_id, self.supabase)
            return CompanyPermissionsResponse(
                company_id=company_id,
                role=role,
                permissions=get_role_permissions(role)
            )
        except Exception as e:
            raise http_error_from_supabase(e)

    def follow(self, company_id: str) -> FollowStatusResponse:
        try:
            self.supabase.rpc("follow_company", {"p_company_id": company_id}).execute()
            return FollowStatusResponse(company_id=company_id, is_following=True)
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to follow company")

    def unfollow(self, company_id: str) -> FollowStatusResponse:
        try:
            self.supabase.rpc("unfollow_company", {"p_company_id": company_id}).execute()
            return FollowStatusResponse(company_id=company_id, is_following=False)
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to unfollow company")

    def get_follow_status(self, company_id: str) -> FollowStatusResponse:
        try:
            result = self.supabase.rpc("get_company_follow_status", {"p_company_id": company_id}).execute()
            return FollowStatusResponse(company_id=company_id, is_following=bool(result.data))
        except Exception as e:
            raise http_error_from_supabase(e)

    def list_followed(self, user_id: str) -> List[dict]:
        try:
            result = self.supabase.rpc("get_followed_companies", {"p_user_id": user_id}).execute()
            return result.data or []
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to fetch followed companies")
