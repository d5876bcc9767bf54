from fastapi import APIRouter, Depends, File, Query, UploadFile
from cando.database.supabase_client import get_user_supabase
from cando.modules.rfqs.schemas import (
    RFQCreate, RFQResponse, RFQDetailResponse, RFQPage, RFQStatusUpdate,
    QuoteCreate, QuoteResponse, AttachmentUploadResponse
)
from cando.modules.rfqs.service import RFQService
from cando.config.settings import settings
from cando.core.dependencies import get_current_user_id, check_company_admin, get_storage_service
from cando.core.storage import StorageService
from supabase import Client
from typing import Dict, List, Literal, Optional

router = APIRouter(prefix="/rfqs", tags=["rfqs"])


def get_rfq_service(supabase: Client = Depends(get_user_supabase)) -> RFQService:
    return RFQService(supabase)


@router.post("", response_model=RFQResponse, status_code=201)
async def create_rfq(
    rfq_data: RFQCreate,
    current_user: Dict = Depends(get_current_user_id),
    service: RFQService = Depends(get_rfq_service),
    supabase: Client = Depends(get_user_supabase)
):
    """Post an RFQ for the caller's company"""
    if rfq_data.company_id:
        check_company_admin(rfq_data.company_id, current_user, supabase)
        company_id = rfq_data.company_id
    else:
        company_id = service.get_owned_company_id(current_user["id"])
    return service.create_rfq(company_id, rfq_data)


@router.post("/attachments", response_model=AttachmentUploadResponse, status_code=201)
async def upload_attachment(
    file: UploadFile = File(...),
    company_id: Optional[str] = None,
    current_user: Dict = Depends(get_current_user_id),
    service: RFQService = Depends(get_rfq_service),
    storage: StorageService = Depends(get_storage_service),
    supabase: Client = Depends(get_user_supabase)
):
    """Upload a file to reference from an RFQ"""
    if company_id:
        check_company_admin(company_id, current_user, supabase)
    else:
        company_id = service.get_owned_company_id(current_user["id"])
    path = await service.upload_attachment(company_id, file, storage)
    return AttachmentUploadResponse(path=path)


@router.get("", response_model=RFQPage)
async def list_rfqs(
    search: Optional[str] = None,
    category: Optional[str] = None,
    tag: Optional[str] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.rfqs_page_size, ge=1, le=100),
    current_user: Dict = Depends(get_current_user_id),
    service: RFQService = Depends(get_rfq_service)
):
    """Browse open RFQs"""
    return service.list_open_rfqs(search, category, tag, page, limit)


@router.get("/company/{company_id}", response_model=List[RFQResponse])
async def list_company_rfqs(
    company_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: RFQService = Depends(get_rfq_service),
    supabase: Client = Depends(get_user_supabase)
):
    """Every RFQ a company has posted, whatever its status"""
    check_company_admin(company_id, current_user, supabase)
    return service.list_company_rfqs(company_id)


@router.get("/{rfq_id}", response_model=RFQDetailResponse)
async def get_rfq(
    rfq_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: RFQService = Depends(get_rfq_service)
):
    return service.get_rfq(rfq_id)


@router.patch("/{rfq_id}/status", response_model=RFQResponse)
async def update_rfq_status(
    rfq_id: str,
    status_data: RFQStatusUpdate,
    current_user: Dict = Depends(get_current_user_id),
    service: RFQService = Depends(get_rfq_service),
    supabase: Client = Depends(get_user_supabase)
):
    """Open, start or close an RFQ (owning company admins only)"""
    check_company_admin(service.get_rfq_company_id(rfq_id), current_user, supabase)
    return service.update_status(rfq_id, status_data.status)


@router.post("/{rfq_id}/quotes", response_model=QuoteResponse, status_code=201)
async def submit_quote(
    rfq_id: str,
    quote_data: QuoteCreate,
    current_user: Dict = Depends(get_current_user_id),
    service: RFQService = Depends(get_rfq_service),
    supabase: Client = Depends(get_user_supabase)
):
    check_company_admin(quote_data.company_id, current_user, supabase)
    return service.submit_quote(rfq_id, quote_data)


@router.post("/{rfq_id}/quotes/{quote_id}/{action}", response_model=QuoteResponse)
async def respond_to_quote(
    rfq_id: str,
    quote_id: str,
    action: Literal["accept", "reject"],
    current_user: Dict = Depends(get_current_user_id),
    service: RFQService = Depends(get_rfq_service),
    supabase: Client = Depends(get_user_supabase)
):
    """Accept or reject a quote on one of the caller's RFQs"""
    check_company_admin(service.get_rfq_company_id(rfq_id), current_user, supabase)
    return service.respond_to_quote(rfq_id, quote_id, action)
