from fastapi import APIRouter, Depends, File, Form, UploadFile
from cando.database.supabase_client import get_user_supabase
from cando.modules.verifications.schemas import (
    VerificationRequestCreate, Tier1VerificationRequest, VerificationSubmitted, Tier2DocumentType
)
from cando.modules.verifications.service import VerificationService
from cando.core.dependencies import get_current_user_id, check_company_admin, get_storage_service
from cando.core.storage import StorageService
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/verifications", tags=["verifications"])


def get_verification_service(supabase: Client = Depends(get_user_supabase)) -> VerificationService:
    return VerificationService(supabase)


@router.post("/companies/{company_id}", response_model=VerificationSubmitted, status_code=201)
async def submit_verification_request(
    company_id: str,
    request_data: VerificationRequestCreate,
    current_user: Dict = Depends(get_current_user_id),
    service: VerificationService = Depends(get_verification_service),
    supabase: Client = Depends(get_user_supabase)
):
    """Ask for a company to be verified"""
    check_company_admin(company_id, current_user, supabase)
    return service.submit_request(company_id, request_data)


@router.post("/companies/{company_id}/tier1", response_model=VerificationSubmitted, status_code=201)
async def request_tier1_verification(
    company_id: str,
    request_data: Tier1VerificationRequest,
    current_user: Dict = Depends(get_current_user_id),
    service: VerificationService = Depends(get_verification_service),
    supabase: Client = Depends(get_user_supabase)
):
    check_company_admin(company_id, current_user, supabase)
    return service.request_tier1(company_id, request_data)


@router.post("/companies/{company_id}/tier2", response_model=VerificationSubmitted, status_code=201)
async def request_tier2_verification(
    company_id: str,
    document_type: Tier2DocumentType = Form(...),
    file: UploadFile = File(...),
    current_user: Dict = Depends(get_current_user_id),
    service: VerificationService = Depends(get_verification_service),
    storage: StorageService = Depends(get_storage_service),
    supabase: Client = Depends(get_user_supabase)
):
    """Submit a supporting document for tier 2 verification"""
    check_company_admin(company_id, current_user, supabase)
    return await service.request_tier2(company_id, document_type, file, storage)
