from fastapi import APIRouter, Depends, Query
from cando.database.supabase_client import get_user_supabase
from cando.modules.admin.schemas import (
    VerificationDecision, CompanyVerificationUpdate, FlagStatusUpdate, RemoveContentRequest,
    WarnUserRequest, BanUserRequest, FlagsPage, FlagType, DocumentLinkResponse
)
from cando.modules.admin.service import AdminService
from cando.config.settings import settings
from cando.core.dependencies import require_admin, get_storage_service
from cando.core.storage import StorageService, TIER2_DOCUMENTS_BUCKET
from supabase import Client
from typing import Dict, List, Optional

router = APIRouter(prefix="/admin", tags=["admin"])


def get_admin_service(supabase: Client = Depends(get_user_supabase)) -> AdminService:
    return AdminService(supabase)


@router.get("/users", response_model=List[dict])
async def list_users(
    admin_user: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    """All users (admin only)"""
    return service.list_users()


@router.post("/users/{user_id}/warn")
async def warn_user(
    user_id: str,
    request: WarnUserRequest,
    admin_user: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    return {"success": service.warn_user(user_id, request)}


@router.post("/users/{user_id}/ban")
async def ban_user(
    user_id: str,
    request: BanUserRequest,
    admin_user: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    """Ban a user; without duration_days the ban is permanent"""
    return {"success": service.ban_user(user_id, request)}


@router.get("/verifications", response_model=List[dict])
async def list_verification_requests(
    admin_user: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    """Verification requests, newest first"""
    return service.list_verification_requests()


@router.get("/verifications/stats", response_model=List[dict])
async def get_verification_stats(
    admin_user: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    return service.get_verification_stats()


@router.post("/verifications/{request_id}")
async def process_verification_request(
    request_id: str,
    decision: VerificationDecision,
    admin_user: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    """Approve or reject a verification request"""
    return {"success": service.process_verification_request(request_id, decision.status)}


@router.get("/companies", response_model=List[dict])
async def list_companies(
    admin_user: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    return service.list_companies()


@router.put("/companies/{company_id}/verification")
async def update_company_verification(
    company_id: str,
    update: CompanyVerificationUpdate,
    admin_user: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    """Set a company's verification status and notes"""
    return service.update_company_verification(company_id, update)


@router.get("/companies/{company_id}/tier2-document", response_model=DocumentLinkResponse)
async def get_tier2_document(
    company_id: str,
    admin_user: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
    storage: StorageService = Depends(get_storage_service)
):
    """Signed download link for a company's tier 2 document"""
    document = service.get_company_document(company_id)
    url = storage.create_signed_url(TIER2_DOCUMENTS_BUCKET, document["tier2_document_storage_path"])
    return DocumentLinkResponse(url=url, filename=document.get("tier2_document_filename"))


@router.get("/flags/{flag_type}", response_model=FlagsPage)
async def list_flags(
    flag_type: FlagType,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.flags_page_size, ge=1, le=100),
    status: Optional[str] = None,
    admin_user: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    """Flagged posts or comments; status=all (or none) lists every status"""
    return service.list_flags(flag_type, page, limit, status)


@router.put("/flags/{flag_type}/{flag_id}")
async def update_flag_status(
    flag_type: FlagType,
    flag_id: str,
    update: FlagStatusUpdate,
    admin_user: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    return {"success": service.update_flag_status(flag_type, flag_id, update)}


@router.post("/flags/{flag_type}/{flag_id}/remove-content")
async def remove_flagged_content(
    flag_type: FlagType,
    flag_id: str,
    request: RemoveContentRequest,
    admin_user: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    """Remove the flagged post or comment"""
    return {"success": service.remove_content(flag_type, flag_id, request)}
