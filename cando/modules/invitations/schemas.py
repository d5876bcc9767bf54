from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Literal, Optional
from uuid import UUID
from datetime import datetime


class InvitationCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    company_id: UUID = Field(alias="companyId")
    email: EmailStr
    role: Literal["admin", "member"]


class InvitationResponse(BaseModel):
    id: str
    company_id: str
    email: str
    role: str
    status: str
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
