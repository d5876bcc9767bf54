from fastapi import APIRouter, BackgroundTasks, Depends, File, Query, UploadFile
from cando.database.supabase_client import get_user_supabase
from cando.modules.companies.schemas import (
    CompanyCreate, CompanyUpdate, CompanyResponse,
    CompanyMemberAdd, CompanyMemberUpdate, CompanyMemberResponse, CompanyMembersPage,
    DirectoryPage, CompanyPermissionsResponse, FollowStatusResponse
)
from cando.modules.companies.service import CompanyService
from cando.modules.analytics.service import track_event
from cando.config.settings import settings
from cando.config.permissions_config import get_permission_matrix
from cando.core.dependencies import (
    get_current_user_id, check_company_admin, check_company_owner, get_storage_service
)
from cando.core.storage import StorageService
from supabase import Client
from typing import Dict, List, Optional

router = APIRouter(prefix="/companies", tags=["companies"])


def get_company_service(supabase: Client = Depends(get_user_supabase)) -> CompanyService:
    return CompanyService(supabase)


@router.post("", response_model=CompanyResponse, status_code=201)
async def create_company(
    company_data: CompanyCreate,
    current_user: Dict = Depends(get_current_user_id),
    service: CompanyService = Depends(get_company_service)
):
    """Create a company; the caller becomes its owner"""
    return service.create_company(company_data, current_user["id"])


@router.get("", response_model=List[dict])
async def list_my_companies(
    current_user: Dict = Depends(get_current_user_id),
    service: CompanyService = Depends(get_company_service)
):
    """Companies the caller belongs to"""
    return service.list_user_companies(current_user["id"])


@router.get("/directory", response_model=DirectoryPage)
async def search_directory(
    background_tasks: BackgroundTasks,
    query: Optional[str] = None,
    industry: List[str] = Query(default=[]),
    capability: List[str] = Query(default=[]),
    region: List[str] = Query(default=[]),
    verified_only: bool = False,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.directory_page_size, ge=1, le=100),
    current_user: Dict = Depends(get_current_user_id),
    service: CompanyService = Depends(get_company_service),
    supabase: Client = Depends(get_user_supabase)
):
    """Public company directory"""
    result = service.search_directory(query, industry, capability, region, verified_only, page, limit)
    if query:
        background_tasks.add_task(track_event, supabase, current_user["id"], "search_perform",
                                  {"query": query, "scope": "directory"})
    return result


@router.get("/roles")
async def list_roles(current_user: Dict = Depends(get_current_user_id)):
    """Role types and the permissions each grants"""
    return get_permission_matrix()


@router.get("/followed", response_model=List[dict])
async def list_followed_companies(
    current_user: Dict = Depends(get_current_user_id),
    service: CompanyService = Depends(get_company_service)
):
    """Companies the caller follows"""
    return service.list_followed(current_user["id"])


@router.get("/{company_id}", response_model=CompanyResponse)
async def get_company(
    company_id: str,
    background_tasks: BackgroundTasks,
    current_user: Dict = Depends(get_current_user_id),
    service: CompanyService = Depends(get_company_service),
    supabase: Client = Depends(get_user_supabase)
):
    """Get company by ID"""
    company = service.get_company_by_id(company_id)
    background_tasks.add_task(track_event, supabase, current_user["id"], "company_view", {"company_id": company_id})
    return company


@router.put("/{company_id}", response_model=CompanyResponse)
async def update_company(
    company_id: str,
    company_data: CompanyUpdate,
    current_user: Dict = Depends(get_current_user_id),
    service: CompanyService = Depends(get_company_service),
    supabase: Client = Depends(get_user_supabase)
):
    """Update company (company admins)"""
    check_company_admin(company_id, current_user, supabase)
    return service.update_company(company_id, company_data)


@router.delete("/{company_id}", status_code=204)
async def delete_company(
    company_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: CompanyService = Depends(get_company_service),
    supabase: Client = Depends(get_user_supabase)
):
    """Delete company (owner only)"""
    check_company_owner(company_id, current_user, supabase)
    service.delete_company(company_id)
    return None


@router.post("/{company_id}/logo", response_model=CompanyResponse)
async def upload_logo(
    company_id: str,
    file: UploadFile = File(...),
    current_user: Dict = Depends(get_current_user_id),
    service: CompanyService = Depends(get_company_service),
    storage: StorageService = Depends(get_storage_service),
    supabase: Client = Depends(get_user_supabase)
):
    """Upload the company logo (company admins)"""
    check_company_admin(company_id, current_user, supabase)
    return await service.upload_logo(company_id, file, storage)


@router.post("/{company_id}/primary", status_code=200)
async def set_primary_company(
    company_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: CompanyService = Depends(get_company_service)
):
    """Make this the caller's primary company"""
    service.set_primary_company(company_id, current_user["id"])
    return {"company_id": company_id, "is_primary": True}


@router.get("/{company_id}/members", response_model=CompanyMembersPage)
async def list_members(
    company_id: str,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    current_user: Dict = Depends(get_current_user_id),
    service: CompanyService = Depends(get_company_service)
):
    """List company team members"""
    return service.list_members(company_id, page, limit)


@router.post("/{company_id}/members", response_model=CompanyMemberResponse, status_code=201)
async def add_member(
    company_id: str,
    member_data: CompanyMemberAdd,
    current_user: Dict = Depends(get_current_user_id),
    service: CompanyService = Depends(get_company_service),
    supabase: Client = Depends(get_user_supabase)
):
    """Add a team member (company admins)"""
    check_company_admin(company_id, current_user, supabase)
    return service.add_member(company_id, member_data)


@router.put("/{company_id}/members/{user_id}", response_model=CompanyMemberResponse)
async def update_member(
    company_id: str,
    user_id: str,
    member_data: CompanyMemberUpdate,
    current_user: Dict = Depends(get_current_user_id),
    service: CompanyService = Depends(get_company_service),
    supabase: Client = Depends(get_user_supabase)
):
    """Change a member's role (company admins)"""
    check_company_admin(company_id, current_user, supabase)
    return service.update_member(company_id, user_id, member_data)


@router.delete("/{company_id}/members/{user_id}", status_code=204)
async def remove_member(
    company_id: str,
    user_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: CompanyService = Depends(get_company_service),
    supabase: Client = Depends(get_user_supabase)
):
    """Remove a team member (company admins)"""
    check_company_admin(company_id, current_user, supabase)
    service.remove_member(company_id, user_id)
    return None


@router.get("/{company_id}/permissions", response_model=CompanyPermissionsResponse)
async def get_my_permissions(
    company_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: CompanyService = Depends(get_company_service)
):
    """The caller's role and permissions in this company"""
    return service.get_permissions(company_id, current_user["id"])


@router.get("/{company_id}/follow", response_model=FollowStatusResponse)
async def get_follow_status(
    company_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: CompanyService = Depends(get_company_service)
):
    return service.get_follow_status(company_id)


@router.post("/{company_id}/follow", response_model=FollowStatusResponse)
async def follow_company(
    company_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: CompanyService = Depends(get_company_service)
):
    """Follow a company"""
    return service.follow(company_id)


@router.delete("/{company_id}/follow", response_model=FollowStatusResponse)
async def unfollow_company(
    company_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: CompanyService = Depends(get_company_service)
):
    """Unfollow a company"""
    return service.unfollow(company_id)
