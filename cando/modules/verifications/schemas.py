from pydantic import BaseModel, EmailStr, Field, HttpUrl, field_validator
from typing import Any, List, Literal, Optional

VerificationStatus = Literal[
    "UNVERIFIED", "TIER1_PENDING", "TIER1_VERIFIED", "TIER1_REJECTED",
    "TIER2_PENDING", "TIER2_FULLY_VERIFIED", "TIER2_REJECTED"
]

Tier2DocumentType = Literal["government_id", "proof_of_address"]

TIER2_MAX_BYTES = 5 * 1024 * 1024

TIER2_ALLOWED_TYPES = (
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
)


def blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class VerificationRequestCreate(BaseModel):
    business_legal_name: str = Field(min_length=1, max_length=200)
    business_number: str = Field(min_length=1, max_length=50)
    submitter_full_name: str = Field(min_length=1, max_length=100)
    submitter_email: EmailStr
    company_website: Optional[HttpUrl] = None
    company_linkedin: Optional[HttpUrl] = None
    company_phone: Optional[str] = Field(default=None, max_length=20)

    @field_validator("company_website", "company_linkedin", "company_phone", mode="before")
    @classmethod
    def empty_as_none(cls, value):
        return blank_to_none(value)


class Tier1VerificationRequest(BaseModel):
    business_number: str = Field(min_length=1, max_length=50)
    public_presence_links: List[HttpUrl] = Field(default_factory=list)
    self_attestation_completed: bool

    @field_validator("self_attestation_completed")
    @classmethod
    def must_attest(cls, value: bool) -> bool:
        if value is not True:
            raise ValueError("You must attest to the accuracy of the information.")
        return value


class VerificationSubmitted(BaseModel):
    company_id: str
    status: str
    message: str
    result: Optional[Any] = None
