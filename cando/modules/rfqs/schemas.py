from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, List, Literal, Optional
from datetime import date, datetime

from cando.core.validation import sanitize_input

RFQStatus = Literal["open", "in_progress", "closed"]
RFQVisibility = Literal["public", "private", "invited"]
QuoteStatus = Literal["draft", "submitted", "accepted", "rejected", "withdrawn"]


def clean_list(values: Optional[List[str]]) -> List[str]:
    """Trim entries, drop blanks and keep the first occurrence of each value"""
    cleaned = []
    for value in values or []:
        value = sanitize_input(value).strip()
        if value and value not in cleaned:
            cleaned.append(value)
    return cleaned


class RFQCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=5000)
    budget: Optional[float] = Field(default=None, ge=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    deadline: Optional[date] = None
    category: Optional[str] = Field(default=None, max_length=100)
    required_certifications: List[str] = Field(default_factory=list)
    visibility: RFQVisibility = "public"
    tags: List[str] = Field(default_factory=list)
    requirements: Dict[str, Any] = Field(default_factory=dict)
    attachments: List[str] = Field(default_factory=list)
    company_id: Optional[str] = None

    @field_validator("title", "description")
    @classmethod
    def strip_markup(cls, value: str) -> str:
        cleaned = sanitize_input(value).strip()
        if not cleaned:
            raise ValueError("Field cannot be empty")
        return cleaned

    @field_validator("required_certifications", "tags")
    @classmethod
    def dedupe(cls, value: List[str]) -> List[str]:
        return clean_list(value)

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, value: str) -> str:
        return value.upper()


class RFQStatusUpdate(BaseModel):
    status: RFQStatus


class QuoteCreate(BaseModel):
    company_id: str
    amount: float = Field(gt=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    delivery_time: Optional[str] = Field(default=None, max_length=100)
    validity_period: Optional[str] = Field(default=None, max_length=100)
    notes: Optional[str] = Field(default=None, max_length=2000)
    terms_and_conditions: Optional[str] = Field(default=None, max_length=5000)
    technical_specifications: Optional[Dict[str, Any]] = None
    attachments: List[str] = Field(default_factory=list)

    @field_validator("notes", "terms_and_conditions")
    @classmethod
    def strip_markup(cls, value: Optional[str]) -> Optional[str]:
        return sanitize_input(value) if value is not None else None

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, value: str) -> str:
        return value.upper()


class CompanySummary(BaseModel):
    id: str
    name: Optional[str] = None


class RFQResponse(BaseModel):
    id: str
    company_id: str
    title: str
    description: str
    budget: Optional[float] = None
    currency: Optional[str] = None
    deadline: Optional[date] = None
    category: Optional[str] = None
    required_certifications: Optional[List[str]] = None
    attachments: Optional[List[str]] = None
    visibility: Optional[RFQVisibility] = None
    tags: Optional[List[str]] = None
    requirements: Optional[Dict[str, Any]] = None
    status: RFQStatus
    companies: Optional[CompanySummary] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class QuoteResponse(BaseModel):
    id: str
    rfq_id: str
    company_id: str
    amount: float
    currency: Optional[str] = None
    delivery_time: Optional[str] = None
    validity_period: Optional[str] = None
    status: QuoteStatus
    notes: Optional[str] = None
    attachments: Optional[List[str]] = None
    terms_and_conditions: Optional[str] = None
    technical_specifications: Optional[Dict[str, Any]] = None
    companies: Optional[CompanySummary] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RFQDetailResponse(RFQResponse):
    quotes: List[QuoteResponse] = Field(default_factory=list)


class RFQPage(BaseModel):
    data: List[RFQResponse]
    total: int
    page: int
    limit: int
    has_more: bool


class AttachmentUploadResponse(BaseModel):
    path: str
