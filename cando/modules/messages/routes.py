from fastapi import APIRouter, BackgroundTasks, Depends, File, UploadFile
from cando.database.supabase_client import get_user_supabase
from cando.modules.messages.schemas import MessageCreate, MessagesResponse, PartnerType
from cando.modules.messages.service import MessageService
from cando.modules.analytics.service import track_event
from cando.core.dependencies import (
    get_current_user_id, check_company_admin, get_storage_service,
    get_administered_company_ids, get_access_cache
)
from cando.core.storage import StorageService
from supabase import Client
from datetime import datetime
from typing import Dict, List, Optional

router = APIRouter(prefix="/messages", tags=["messages"])


def get_message_service(supabase: Client = Depends(get_user_supabase)) -> MessageService:
    return MessageService(supabase)


@router.get("/conversations", response_model=List[dict])
async def list_conversations(
    acting_as_company_id: Optional[str] = None,
    current_user: Dict = Depends(get_current_user_id),
    service: MessageService = Depends(get_message_service),
    supabase: Client = Depends(get_user_supabase)
):
    """Conversation list (personal, or for a company the caller administers)"""
    if acting_as_company_id:
        check_company_admin(acting_as_company_id, current_user, supabase)
    return service.list_conversations(acting_as_company_id)


@router.post("/attachments", status_code=201)
async def upload_attachment(
    file: UploadFile = File(...),
    current_user: Dict = Depends(get_current_user_id),
    service: MessageService = Depends(get_message_service),
    storage: StorageService = Depends(get_storage_service)
):
    """Upload a file to attach to a message"""
    return await service.upload_attachment(current_user["id"], file, storage)


@router.get("/{partner_type}/{partner_id}", response_model=MessagesResponse)
async def get_messages(
    partner_type: PartnerType,
    partner_id: str,
    acting_as_company_id: Optional[str] = None,
    since: Optional[datetime] = None,
    current_user: Dict = Depends(get_current_user_id),
    service: MessageService = Depends(get_message_service),
    supabase: Client = Depends(get_user_supabase),
    cache: Dict = Depends(get_access_cache)
):
    """Messages of a conversation. Pass since to fetch only what arrived after it."""
    admin_company_ids = get_administered_company_ids(current_user["id"], supabase, cache)
    if acting_as_company_id and acting_as_company_id not in admin_company_ids:
        check_company_admin(acting_as_company_id, current_user, supabase)
        admin_company_ids = [*admin_company_ids, acting_as_company_id]
    return service.get_messages(
        current_user["id"], partner_type, partner_id, admin_company_ids, acting_as_company_id, since
    )


@router.post("/{partner_type}/{partner_id}", status_code=201)
def send_message(
    partner_type: PartnerType,
    partner_id: str,
    message_data: MessageCreate,
    background_tasks: BackgroundTasks,
    current_user: Dict = Depends(get_current_user_id),
    service: MessageService = Depends(get_message_service),
    supabase: Client = Depends(get_user_supabase)
):
    """Send a message. Runs in the threadpool since retries back off with a blocking sleep."""
    if message_data.acting_as_company_id:
        check_company_admin(message_data.acting_as_company_id, current_user, supabase)
    message = service.send_message(current_user["id"], partner_type, partner_id, message_data)
    background_tasks.add_task(track_event, supabase, current_user["id"], "message_sent", {
        "partner_type": partner_type,
        "has_attachments": bool(message_data.attachments)
    })
    return message


@router.post("/{partner_type}/{partner_id}/read")
async def mark_as_read(
    partner_type: PartnerType,
    partner_id: str,
    acting_as_company_id: Optional[str] = None,
    current_user: Dict = Depends(get_current_user_id),
    service: MessageService = Depends(get_message_service),
    supabase: Client = Depends(get_user_supabase)
):
    """Mark the partner's messages to the viewer as read"""
    viewer_id = current_user["id"]
    if acting_as_company_id:
        check_company_admin(acting_as_company_id, current_user, supabase)
        viewer_id = acting_as_company_id
    return {"updated": service.mark_as_read(viewer_id, partner_id)}
