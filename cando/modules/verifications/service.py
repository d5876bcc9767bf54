import logging
from supabase import Client
from cando.modules.verifications.schemas import (
    VerificationRequestCreate, Tier1VerificationRequest, VerificationSubmitted,
    TIER2_MAX_BYTES, TIER2_ALLOWED_TYPES
)
from cando.core.errors import http_error_from_supabase
from cando.core.storage import StorageService, TIER2_DOCUMENTS_BUCKET, epoch_ms, safe_filename
from fastapi import HTTPException, UploadFile
from typing import Optional

logger = logging.getLogger(__name__)


def _url(value) -> Optional[str]:
    return str(value) if value is not None else None


class VerificationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def submit_request(self, company_id: str, request_data: VerificationRequestCreate) -> VerificationSubmitted:
        """Open a verification request for admin review"""
        try:
            result = self.supabase.rpc("submit_company_verification_request", {
                "p_company_id": company_id,
                "p_business_legal_name": request_data.business_legal_name,
                "p_business_number": request_data.business_number,
                "p_submitter_full_name": request_data.submitter_full_name,
                "p_submitter_email": request_data.submitter_email,
                "p_company_website": _url(request_data.company_website),
                "p_company_linkedin": _url(request_data.company_linkedin),
                "p_company_phone": request_data.company_phone
            }).execute()
            logger.info(f"Verification request submitted for company {company_id}")
            return VerificationSubmitted(
                company_id=company_id,
                status="pending",
                message="Your verification request has been submitted successfully. We will review it shortly.",
                result=result.data
            )
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to submit verification request")

    def request_tier1(self, company_id: str, request_data: Tier1VerificationRequest) -> VerificationSubmitted:
        try:
            self.supabase.rpc("request_company_tier1_verification", {
                "p_company_id": company_id,
                "p_business_number": request_data.business_number,
                "p_public_presence_links": [str(link) for link in request_data.public_presence_links],
                "p_self_attestation_completed": request_data.self_attestation_completed
            }).execute()
            return VerificationSubmitted(
                company_id=company_id,
                status="TIER1_PENDING",
                message="Tier 1 verification request submitted successfully!"
            )
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to submit verification")

    def get_verification_status(self, company_id: str) -> str:
        try:
            result = self.supabase.table("companies")\
                .select("verification_status")\
                .eq("id", company_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise http_error_from_supabase(e)
        if not result.data:
            raise HTTPException(status_code=404, detail="Company not found")
        return result.data[0].get("verification_status") or "UNVERIFIED"

    async def request_tier2(
        self,
        company_id: str,
        document_type: str,
        file: UploadFile,
        storage: StorageService
    ) -> VerificationSubmitted:
        """Upload the supporting document, then file the tier 2 request; the upload is removed if that fails"""
        if self.get_verification_status(company_id) != "TIER1_VERIFIED":
            raise HTTPException(status_code=409, detail="Company is not eligible for Tier 2 verification.")
        if file.content_type not in TIER2_ALLOWED_TYPES:
            raise HTTPException(
                status_code=400,
                detail="Invalid file type. Allowed types: JPG, PNG, GIF, WebP, PDF, DOC, DOCX, TXT."
            )
        content = await file.read()
        if len(content) > TIER2_MAX_BYTES:
            raise HTTPException(status_code=413, detail="File size should be less than 5MB.")

        path = f"{company_id}/{epoch_ms()}_{safe_filename(file.filename)}"
        storage.upload(TIER2_DOCUMENTS_BUCKET, path, content, file.content_type)
        try:
            self.supabase.rpc("request_company_tier2_verification", {
                "p_company_id": company_id,
                "p_tier2_document_type": document_type,
                "p_tier2_document_filename": file.filename,
                "p_tier2_document_storage_path": path
            }).execute()
        except Exception as e:
            storage.remove(TIER2_DOCUMENTS_BUCKET, [path])
            raise http_error_from_supabase(e, "Failed to submit Tier 2 verification")
        return VerificationSubmitted(
            company_id=company_id,
            status="TIER2_PENDING",
            message="Tier 2 verification request submitted successfully! You will be notified once reviewed."
        )
