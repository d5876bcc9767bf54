from fastapi import APIRouter, BackgroundTasks, Depends, Query
from cando.database.supabase_client import get_user_supabase
from cando.modules.connections.schemas import ConnectionStatusResponse
from cando.modules.connections.service import ConnectionService, COMPANY_BUTTON_STATES, describe_status
from cando.modules.analytics.service import track_event
from cando.core.dependencies import get_current_user_id, is_company_admin, check_company_admin
from supabase import Client
from typing import Dict, List, Literal

router = APIRouter(prefix="/connections", tags=["connections"])

Response = Literal["accept", "decline"]


def get_connection_service(supabase: Client = Depends(get_user_supabase)) -> ConnectionService:
    return ConnectionService(supabase)


@router.get("/pending", response_model=List[dict])
async def list_pending_requests(
    current_user: Dict = Depends(get_current_user_id),
    service: ConnectionService = Depends(get_connection_service)
):
    """Connection requests waiting for the caller"""
    return service.list_pending()


@router.get("/sent", response_model=List[dict])
async def list_sent_requests(
    current_user: Dict = Depends(get_current_user_id),
    service: ConnectionService = Depends(get_connection_service)
):
    return service.list_sent()


@router.get("/network", response_model=List[dict])
async def get_my_network(
    current_user: Dict = Depends(get_current_user_id),
    service: ConnectionService = Depends(get_connection_service)
):
    """The caller's accepted connections"""
    return service.get_user_network(current_user["id"])


@router.get("/users/{target_id}", response_model=ConnectionStatusResponse)
async def get_user_status(
    target_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: ConnectionService = Depends(get_connection_service)
):
    """Connection status with another user and the actions it allows"""
    return service.get_user_status(current_user["id"], target_id)


@router.post("/users/{target_id}/request", response_model=ConnectionStatusResponse)
async def send_user_request(
    target_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: ConnectionService = Depends(get_connection_service)
):
    return service.send_user_request(current_user["id"], target_id)


@router.post("/users/{target_id}/{response}", response_model=ConnectionStatusResponse)
async def respond_user_request(
    target_id: str,
    response: Response,
    background_tasks: BackgroundTasks,
    current_user: Dict = Depends(get_current_user_id),
    service: ConnectionService = Depends(get_connection_service),
    supabase: Client = Depends(get_user_supabase)
):
    """Accept or decline a request from another user"""
    result = service.respond_user_request(current_user["id"], target_id, response)
    if response == "accept":
        background_tasks.add_task(track_event, supabase, current_user["id"], "connection_made", {
            "connection_type": "user",
            "target_id": target_id
        })
    return result


@router.delete("/users/{target_id}", response_model=ConnectionStatusResponse)
async def remove_user_connection(
    target_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: ConnectionService = Depends(get_connection_service)
):
    """Cancel a sent request or disconnect"""
    return service.remove_user_connection(current_user["id"], target_id)


@router.get("/companies/{company_id}/network", response_model=List[dict])
async def get_company_network(
    company_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: ConnectionService = Depends(get_connection_service)
):
    """Companies connected to a company"""
    return service.get_company_network(company_id)


@router.get("/companies/{company_id}/pending", response_model=List[dict])
async def list_company_pending(
    company_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: ConnectionService = Depends(get_connection_service),
    supabase: Client = Depends(get_user_supabase)
):
    check_company_admin(company_id, current_user, supabase)
    return service.list_company_pending(company_id)


@router.get("/companies/{company_id}/sent", response_model=List[dict])
async def list_company_sent(
    company_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: ConnectionService = Depends(get_connection_service),
    supabase: Client = Depends(get_user_supabase)
):
    check_company_admin(company_id, current_user, supabase)
    return service.list_company_sent(company_id)


@router.get("/companies/{target_company_id}", response_model=ConnectionStatusResponse)
async def get_company_status(
    target_company_id: str,
    acting_company_id: str = Query(...),
    current_user: Dict = Depends(get_current_user_id),
    service: ConnectionService = Depends(get_connection_service),
    supabase: Client = Depends(get_user_supabase)
):
    """Connection status between the acting company and another company"""
    if not is_company_admin(current_user["id"], acting_company_id, supabase):
        return describe_status(target_company_id, "CANNOT_CONNECT", COMPANY_BUTTON_STATES)
    return service.get_company_status(acting_company_id, target_company_id)


@router.post("/companies/{target_company_id}/request", response_model=ConnectionStatusResponse)
async def send_company_request(
    target_company_id: str,
    acting_company_id: str = Query(...),
    current_user: Dict = Depends(get_current_user_id),
    service: ConnectionService = Depends(get_connection_service),
    supabase: Client = Depends(get_user_supabase)
):
    check_company_admin(acting_company_id, current_user, supabase)
    return service.send_company_request(acting_company_id, target_company_id)


@router.post("/companies/{target_company_id}/{response}", response_model=ConnectionStatusResponse)
async def respond_company_request(
    target_company_id: str,
    response: Response,
    background_tasks: BackgroundTasks,
    acting_company_id: str = Query(...),
    current_user: Dict = Depends(get_current_user_id),
    service: ConnectionService = Depends(get_connection_service),
    supabase: Client = Depends(get_user_supabase)
):
    check_company_admin(acting_company_id, current_user, supabase)
    result = service.respond_company_request(acting_company_id, target_company_id, response)
    if response == "accept":
        background_tasks.add_task(track_event, supabase, current_user["id"], "connection_made", {
            "connection_type": "company",
            "company_id": acting_company_id,
            "target_id": target_company_id
        })
    return result


@router.delete("/companies/{target_company_id}", response_model=ConnectionStatusResponse)
async def remove_company_connection(
    target_company_id: str,
    acting_company_id: str = Query(...),
    current_user: Dict = Depends(get_current_user_id),
    service: ConnectionService = Depends(get_connection_service),
    supabase: Client = Depends(get_user_supabase)
):
    check_company_admin(acting_company_id, current_user, supabase)
    return service.remove_company_connection(acting_company_id, target_company_id)
