from fastapi import APIRouter, BackgroundTasks, Depends
from cando.database.supabase_client import get_user_supabase
from cando.modules.analytics.schemas import TrackEventRequest
from cando.modules.analytics.service import track_event
from cando.core.dependencies import get_current_user_id
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.post("/events", status_code=202)
async def create_event(
    event: TrackEventRequest,
    background_tasks: BackgroundTasks,
    current_user: Dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_user_supabase)
):
    """Record a client-side event (post/media views, searches)"""
    background_tasks.add_task(track_event, supabase, current_user["id"], event.event_type, event.metadata)
    return {"accepted": True}
