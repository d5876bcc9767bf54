from pydantic import BaseModel, EmailStr, Field, HttpUrl, field_validator
from typing import Any, Dict, List, Literal, Optional
from datetime import datetime

from cando.core.validation import sanitize_input
from cando.modules.tags.service import validate_tags

CompanyMemberRole = Literal["owner", "admin", "member", "viewer"]


class CompanyBase(BaseModel):
    trading_name: Optional[str] = Field(default=None, max_length=100)
    registration_number: Optional[str] = Field(default=None, max_length=50)
    tax_number: Optional[str] = Field(default=None, max_length=50)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=20)
    website: Optional[HttpUrl] = None
    address: Optional[Dict[str, Any]] = None
    description: Optional[str] = Field(default=None, max_length=2000)
    industry_tags: Optional[List[str]] = None
    capability_tags: Optional[List[str]] = None
    region_tags: Optional[List[str]] = None

    @field_validator("trading_name", "description")
    @classmethod
    def strip_markup(cls, value: Optional[str]) -> Optional[str]:
        return sanitize_input(value) if value is not None else None

    @field_validator("industry_tags")
    @classmethod
    def check_industry_tags(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return validate_tags("industry", value) if value is not None else None

    @field_validator("capability_tags")
    @classmethod
    def check_capability_tags(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return validate_tags("capability", value) if value is not None else None

    @field_validator("region_tags")
    @classmethod
    def check_region_tags(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return validate_tags("region", value) if value is not None else None


class CompanyCreate(CompanyBase):
    name: str = Field(min_length=1, max_length=100)

    @field_validator("name")
    @classmethod
    def clean_name(cls, value: str) -> str:
        cleaned = sanitize_input(value).strip()
        if not cleaned:
            raise ValueError("Company name is required")
        return cleaned


class CompanyUpdate(CompanyBase):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)

    @field_validator("name")
    @classmethod
    def clean_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = sanitize_input(value).strip()
        if not cleaned:
            raise ValueError("Company name is required")
        return cleaned


class CompanyResponse(BaseModel):
    id: str
    name: str
    trading_name: Optional[str] = None
    registration_number: Optional[str] = None
    tax_number: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    address: Optional[Dict[str, Any]] = None
    description: Optional[str] = None
    logo_url: Optional[str] = None
    industry_tags: Optional[List[str]] = None
    capability_tags: Optional[List[str]] = None
    region_tags: Optional[List[str]] = None
    verification_status: Optional[str] = None
    owner_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CompanyMemberAdd(BaseModel):
    user_id: str
    role: CompanyMemberRole = "member"
    is_primary: bool = False


class CompanyMemberUpdate(BaseModel):
    role: Optional[CompanyMemberRole] = None
    is_primary: Optional[bool] = None


class CompanyMemberResponse(BaseModel):
    id: str
    company_id: str
    user_id: str
    role: str
    is_primary: bool = False
    created_at: Optional[datetime] = None
    profile: Optional[Dict[str, Any]] = None

    class Config:
        from_attributes = True


class CompanyMembersPage(BaseModel):
    data: List[CompanyMemberResponse]
    total: int
    page: int
    limit: int
    has_more: bool


class DirectoryPage(BaseModel):
    data: List[Dict[str, Any]]
    total: int
    page: int
    limit: int
    has_more: bool


class CompanyPermissionsResponse(BaseModel):
    company_id: str
    role: Optional[str] = None
    permissions: Dict[str, bool]


class FollowStatusResponse(BaseModel):
    company_id: str
    is_following: bool
