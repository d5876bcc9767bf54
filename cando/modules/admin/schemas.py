from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional

from cando.modules.verifications.schemas import VerificationStatus

FlagType = Literal["posts", "comments"]
ContentType = Literal["post", "comment"]


class VerificationDecision(BaseModel):
    status: Literal["approved", "rejected"]


class CompanyVerificationUpdate(BaseModel):
    verification_status: VerificationStatus
    admin_notes: Optional[str] = Field(default=None, max_length=2000)


class FlagStatusUpdate(BaseModel):
    status: str = Field(min_length=1, max_length=50)
    admin_notes: Optional[str] = Field(default=None, max_length=2000)


class RemoveContentRequest(BaseModel):
    content_id: str
    reason: str = Field(min_length=1, max_length=1000)


class WarnUserRequest(BaseModel):
    reason: str = Field(min_length=1, max_length=1000)
    content_id: Optional[str] = None
    content_type: Optional[ContentType] = None
    flag_id: Optional[str] = None


class BanUserRequest(WarnUserRequest):
    duration_days: Optional[int] = Field(default=None, ge=1)


class FlagsPage(BaseModel):
    data: List[Dict[str, Any]]
    total: int
    page: int
    limit: int


class DocumentLinkResponse(BaseModel):
    url: str
    filename: Optional[str] = None
