from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional

PartnerType = Literal["user", "company"]

MAX_MESSAGE_LENGTH = 5000


class MessageAttachment(BaseModel):
    url: str
    name: str
    content_type: Optional[str] = None
    size: Optional[int] = None


class MessageCreate(BaseModel):
    content: str = Field(min_length=1, max_length=MAX_MESSAGE_LENGTH)
    attachments: List[MessageAttachment] = Field(default_factory=list)
    acting_as_company_id: Optional[str] = None


class MessagesResponse(BaseModel):
    messages: List[Dict[str, Any]]
    partner_id: str
    partner_type: PartnerType
