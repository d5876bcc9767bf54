from pydantic import BaseModel
from typing import List, Literal

UserConnectionStatus = Literal[
    "NONE", "PENDING_SENT", "PENDING_RECEIVED", "ACCEPTED",
    "DECLINED_BY_THEM", "DECLINED_BY_ME", "BLOCKED", "ERROR"
]

CompanyConnectionStatus = Literal[
    "NONE", "PENDING_SENT", "PENDING_RECEIVED", "ACCEPTED",
    "DECLINED_SENT", "DECLINED_RECEIVED", "BLOCKED", "ERROR", "CANNOT_CONNECT"
]

ConnectionAction = Literal["connect", "cancel", "accept", "decline", "disconnect", "retry"]


class ConnectionStatusResponse(BaseModel):
    target_id: str
    status: str
    label: str
    disabled: bool
    actions: List[ConnectionAction]
