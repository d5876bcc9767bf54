from fastapi import APIRouter, Depends, HTTPException
from cando.database.supabase_client import get_service_supabase, get_user_supabase
from cando.modules.invitations.schemas import InvitationCreate, InvitationResponse
from cando.modules.invitations.service import InvitationService
from cando.core.dependencies import get_current_user_id, check_company_admin
from supabase import Client
from typing import Dict, List, Optional

router = APIRouter(prefix="/companies", tags=["invitations"])


def get_invitation_service(supabase: Client = Depends(get_service_supabase)) -> InvitationService:
    return InvitationService(supabase)


@router.post("/invite", response_model=InvitationResponse)
async def create_invitation(
    invitation_data: InvitationCreate,
    current_user: Dict = Depends(get_current_user_id),
    service: InvitationService = Depends(get_invitation_service),
    supabase: Client = Depends(get_user_supabase)
):
    """Invite someone to join a company by email"""
    check_company_admin(str(invitation_data.company_id), current_user, supabase)
    return service.create_invitation(invitation_data)


@router.get("/invite", response_model=List[InvitationResponse])
async def list_invitations(
    companyId: Optional[str] = None,
    current_user: Dict = Depends(get_current_user_id),
    service: InvitationService = Depends(get_invitation_service),
    supabase: Client = Depends(get_user_supabase)
):
    """Pending invitations of a company"""
    if not companyId:
        raise HTTPException(status_code=400, detail="Company ID is required")
    check_company_admin(companyId, current_user, supabase)
    return service.list_pending(companyId)


@router.delete("/invite")
async def delete_invitation(
    id: Optional[str] = None,
    current_user: Dict = Depends(get_current_user_id),
    service: InvitationService = Depends(get_invitation_service),
    supabase: Client = Depends(get_user_supabase)
):
    """Withdraw an invitation"""
    if not id:
        raise HTTPException(status_code=400, detail="Invitation ID is required")
    invitation = service.get_invitation(id)
    check_company_admin(invitation["company_id"], current_user, supabase)
    service.delete_invitation(id)
    return {"success": True}


@router.post("/invitations/{invitation_id}/accept")
async def accept_invitation(
    invitation_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: InvitationService = Depends(get_invitation_service)
):
    """Accept an invitation addressed to the caller's email"""
    return service.accept_invitation(invitation_id, current_user)
