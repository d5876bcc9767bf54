import logging
from typing import Any, Dict, Optional

from supabase import Client

logger = logging.getLogger(__name__)

PRO_TIER = "PRO"
REGULAR_TIER = "REGULAR"
LIVE_SUBSCRIPTION_STATUSES = ["active", "trialing"]


def get_subscription_tier(supabase: Client, user_id: str) -> str:
    """Tier of the user's latest active or trialing subscription, REGULAR when there is none"""
    result = supabase.table("user_subscriptions")\
        .select("tier, status")\
        .eq("user_id", user_id)\
        .in_("status", LIVE_SUBSCRIPTION_STATUSES)\
        .order("created_at", desc=True)\
        .limit(1)\
        .execute()
    if result.data and result.data[0].get("tier"):
        return result.data[0]["tier"]
    return REGULAR_TIER


def track_event(
    supabase: Client,
    user_id: Optional[str],
    event_type: str,
    metadata: Optional[Dict[str, Any]] = None
) -> bool:
    """Record an analytics event for PRO users. Never raises; returns whether a row was written."""
    if not user_id:
        logger.warning(f"Analytics event {event_type} dropped: no user id")
        return False
    try:
        if get_subscription_tier(supabase, user_id) != PRO_TIER:
            return False
        supabase.table("analytics_events").insert({
            "user_id": user_id,
            "event_type": event_type,
            "event_data": metadata or {}
        }).execute()
        return True
    except Exception as e:
        logger.error(f"Error tracking analytics event {event_type}: {e}")
        return False
