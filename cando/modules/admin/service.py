import logging
from supabase import Client
from cando.modules.admin.schemas import (
    CompanyVerificationUpdate, FlagStatusUpdate, RemoveContentRequest,
    WarnUserRequest, BanUserRequest, FlagsPage
)
from cando.core.errors import http_error_from_supabase
from typing import List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)

# Per flag type: (list rpc, status rpc, remove rpc, id parameter of the remove rpc, flag table)
FLAG_RPCS = {
    "posts": ("admin_get_post_flags", "admin_update_post_flag_status", "admin_remove_post",
              "p_post_id", "post_flags"),
    "comments": ("admin_get_comment_flags", "admin_update_comment_flag_status", "admin_remove_comment",
                 "p_comment_id", "comment_flags"),
}

FLAG_TABLE_BY_CONTENT = {"post": "post_flags", "comment": "comment_flags"}


def flag_total(rows: List[dict]) -> int:
    """Flag list rpcs repeat the filtered total on every row"""
    if not rows:
        return 0
    total = rows[0].get("total_count")
    return total if isinstance(total, int) else 0


class AdminService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _rpc(self, name: str, params: Optional[dict] = None, error_detail: Optional[str] = None):
        try:
            return self.supabase.rpc(name, params or {}).execute().data
        except Exception as e:
            raise http_error_from_supabase(e, error_detail)

    def list_users(self) -> List[dict]:
        return self._rpc("admin_get_all_users", error_detail="Failed to load users") or []

    def list_verification_requests(self) -> List[dict]:
        try:
            result = self.supabase.table("company_verification_requests")\
                .select("*, company:companies(name)")\
                .order("submitted_at", desc=True)\
                .execute()
            return result.data or []
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to load verification requests")

    def process_verification_request(self, request_id: str, status: str) -> bool:
        self._rpc("process_verification_request", {
            "p_request_id": request_id,
            "p_status": status
        }, "Failed to process verification request")
        logger.info(f"Verification request {request_id} {status}")
        return True

    def get_verification_stats(self) -> List[dict]:
        return self._rpc("get_company_verification_stats", error_detail="Failed to load company statistics.") or []

    def list_companies(self) -> List[dict]:
        """Companies with owner info, keyed by id/name like every other company payload"""
        rows = self._rpc("admin_get_all_companies_with_owner_info", error_detail="Failed to fetch companies.") or []
        return [{**row, "id": row.get("company_id"), "name": row.get("company_name")} for row in rows]

    def update_company_verification(self, company_id: str, update: CompanyVerificationUpdate) -> dict:
        data = self._rpc("admin_update_company_verification", {
            "p_company_id": company_id,
            "p_new_status": update.verification_status,
            "p_new_admin_notes": update.admin_notes
        }, "Failed to update company.")
        if isinstance(data, list):
            data = data[0] if data else None
        if not data:
            raise HTTPException(status_code=404, detail="Company not found")
        return data

    def get_company_document(self, company_id: str) -> dict:
        """Tier 2 document path and filename of a company"""
        try:
            result = self.supabase.table("companies")\
                .select("tier2_document_filename, tier2_document_storage_path")\
                .eq("id", company_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise http_error_from_supabase(e)
        if not result.data or not result.data[0].get("tier2_document_storage_path"):
            raise HTTPException(status_code=404, detail="File path or name is missing.")
        return result.data[0]

    def list_flags(self, flag_type: str, page: int = 1, limit: int = 10, status: Optional[str] = None) -> FlagsPage:
        list_rpc = FLAG_RPCS[flag_type][0]
        params = {"p_page_number": page, "p_page_size": limit}
        if status and status != "all":
            params["p_status"] = status
        rows = self._rpc(list_rpc, params, "Failed to load flags.") or []
        return FlagsPage(data=rows, total=flag_total(rows), page=page, limit=limit)

    def update_flag_status(self, flag_type: str, flag_id: str, update: FlagStatusUpdate) -> bool:
        status_rpc = FLAG_RPCS[flag_type][1]
        self._rpc(status_rpc, {
            "p_flag_id": flag_id,
            "p_new_status": update.status,
            "p_admin_notes": update.admin_notes
        }, "Failed to update flag.")
        return True

    def remove_content(self, flag_type: str, flag_id: str, request: RemoveContentRequest) -> bool:
        """Remove the flagged post or comment; the rpc also closes the flag"""
        _, _, remove_rpc, id_param, flag_table = FLAG_RPCS[flag_type]
        self._rpc(remove_rpc, {
            id_param: request.content_id,
            "p_reason": request.reason,
            "p_related_flag_id": flag_id,
            "p_flag_table": flag_table
        }, "Failed to remove content.")
        logger.info(f"Removed {flag_type} content {request.content_id} (flag {flag_id})")
        return True

    def _moderation_params(self, user_id: str, request: WarnUserRequest) -> dict:
        params = {
            "p_target_profile_id": user_id,
            "p_reason": request.reason,
            "p_related_content_id": request.content_id,
            "p_related_content_type": request.content_type,
        }
        if request.flag_id:
            params["p_related_flag_id"] = request.flag_id
            params["p_flag_table"] = FLAG_TABLE_BY_CONTENT.get(request.content_type)
        return params

    def warn_user(self, user_id: str, request: WarnUserRequest) -> bool:
        self._rpc("admin_warn_user", self._moderation_params(user_id, request), "Failed to warn user.")
        logger.info(f"User {user_id} warned")
        return True

    def ban_user(self, user_id: str, request: BanUserRequest) -> bool:
        params = self._moderation_params(user_id, request)
        params["p_duration_days"] = request.duration_days
        self._rpc("admin_ban_user", params, "Failed to ban user.")
        duration = f"for {request.duration_days} days" if request.duration_days else "permanently"
        logger.info(f"User {user_id} banned {duration}")
        return True
