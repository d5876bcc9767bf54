from pydantic import BaseModel
from typing import Any, Dict, Literal

AnalyticsEventType = Literal[
    "post_view",
    "post_create",
    "post_like",
    "post_comment",
    "post_share",
    "media_view",
    "profile_view",
    "company_view",
    "search_perform",
    "connection_made",
    "message_sent",
]

# Events only the client can observe; everything else is tracked by the API itself
ClientEventType = Literal["post_view", "media_view", "search_perform"]


class TrackEventRequest(BaseModel):
    event_type: ClientEventType
    metadata: Dict[str, Any] = {}
