import logging
from datetime import datetime, timezone
from supabase import Client
from cando.modules.rfqs.schemas import (
    RFQCreate, RFQResponse, RFQDetailResponse, RFQPage, QuoteCreate, QuoteResponse
)
from cando.core.errors import http_error_from_supabase
from cando.core.storage import StorageService, RFQ_ATTACHMENTS_BUCKET, build_object_path
from cando.core.validation import search_term
from typing import List, Optional
from fastapi import HTTPException, UploadFile

logger = logging.getLogger(__name__)

RFQ_COLUMNS = "*, companies(id, name)"


def none_if_empty(value):
    return value if value else None


class RFQService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_owned_company_id(self, user_id: str) -> str:
        """The company the user owns; RFQs are posted on its behalf"""
        try:
            result = self.supabase.table("companies")\
                .select("id")\
                .eq("owner_id", user_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise http_error_from_supabase(e)
        if not result.data:
            raise HTTPException(status_code=404, detail="Company not found")
        return result.data[0]["id"]

    def create_rfq(self, company_id: str, rfq_data: RFQCreate) -> RFQResponse:
        try:
            payload = {
                "company_id": company_id,
                "title": rfq_data.title,
                "description": rfq_data.description,
                "budget": rfq_data.budget,
                "currency": rfq_data.currency,
                "deadline": rfq_data.deadline.isoformat() if rfq_data.deadline else None,
                "category": rfq_data.category or None,
                "required_certifications": none_if_empty(rfq_data.required_certifications),
                "attachments": none_if_empty(rfq_data.attachments),
                "visibility": rfq_data.visibility,
                "tags": none_if_empty(rfq_data.tags),
                "requirements": none_if_empty(rfq_data.requirements),
                "status": "open"
            }
            result = self.supabase.table("rfqs").insert(payload).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create RFQ")
            logger.info(f"RFQ {result.data[0]['id']} created for company {company_id}")
            return RFQResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to create RFQ")

    async def upload_attachment(self, company_id: str, file: UploadFile, storage: StorageService) -> str:
        """Store an attachment under the company's folder and return its object path"""
        path = build_object_path(company_id, file.filename)
        return await storage.upload_file(RFQ_ATTACHMENTS_BUCKET, path, file)

    def list_open_rfqs(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        tag: Optional[str] = None,
        page: int = 1,
        limit: int = 10
    ) -> RFQPage:
        """Open RFQs, newest first"""
        try:
            offset = (page - 1) * limit
            request = self.supabase.table("rfqs")\
                .select(RFQ_COLUMNS, count="exact")\
                .eq("status", "open")
            if category:
                request = request.eq("category", category)
            if tag:
                request = request.contains("tags", [tag])
            term = search_term(search)
            if term:
                request = request.or_(f"title.ilike.%{term}%,description.ilike.%{term}%")
            result = request.order("created_at", desc=True)\
                .range(offset, offset + limit - 1)\
                .execute()
            total = result.count or 0
            return RFQPage(
                data=[RFQResponse(**row) for row in result.data or []],
                total=total,
                page=page,
                limit=limit,
                has_more=offset + limit < total
            )
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to load RFQs")

    def _get_rfq_row(self, rfq_id: str) -> dict:
        try:
            result = self.supabase.table("rfqs")\
                .select(RFQ_COLUMNS)\
                .eq("id", rfq_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise http_error_from_supabase(e)
        if not result.data:
            raise HTTPException(status_code=404, detail="RFQ not found")
        return result.data[0]

    def get_rfq_company_id(self, rfq_id: str) -> str:
        return self._get_rfq_row(rfq_id)["company_id"]

    def get_rfq(self, rfq_id: str) -> RFQDetailResponse:
        """RFQ with its quotes, newest quote first"""
        rfq = self._get_rfq_row(rfq_id)
        try:
            quotes = self.supabase.table("quotes")\
                .select("*, companies(id, name)")\
                .eq("rfq_id", rfq_id)\
                .order("created_at", desc=True)\
                .execute()
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to load quotes")
        return RFQDetailResponse(**rfq, quotes=[QuoteResponse(**q) for q in quotes.data or []])

    def update_status(self, rfq_id: str, status: str) -> RFQResponse:
        try:
            result = self.supabase.table("rfqs")\
                .update({"status": status, "updated_at": datetime.now(timezone.utc).isoformat()})\
                .eq("id", rfq_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="RFQ not found")
            return RFQResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to update RFQ status")

    def submit_quote(self, rfq_id: str, quote_data: QuoteCreate) -> QuoteResponse:
        """Quote on an open RFQ owned by another company"""
        rfq = self._get_rfq_row(rfq_id)
        if rfq.get("status") != "open":
            raise HTTPException(status_code=409, detail="This RFQ is no longer accepting quotes")
        if rfq.get("company_id") == quote_data.company_id:
            raise HTTPException(status_code=400, detail="You cannot quote on your own RFQ")
        try:
            payload = quote_data.model_dump(mode="json", exclude_none=True)
            payload["attachments"] = none_if_empty(quote_data.attachments)
            payload.update({"rfq_id": rfq_id, "status": "submitted"})
            result = self.supabase.table("quotes").insert(payload).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to submit quote")
            return QuoteResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to submit quote")

    def respond_to_quote(self, rfq_id: str, quote_id: str, action: str) -> QuoteResponse:
        """Accept or reject a submitted quote; accepting moves the RFQ to in_progress"""
        try:
            existing = self.supabase.table("quotes")\
                .select("id, status")\
                .eq("id", quote_id)\
                .eq("rfq_id", rfq_id)\
                .limit(1)\
                .execute()
            if not existing.data:
                raise HTTPException(status_code=404, detail="Quote not found")
            if existing.data[0].get("status") != "submitted":
                raise HTTPException(status_code=409, detail="Only submitted quotes can be accepted or rejected")

            new_status = "accepted" if action == "accept" else "rejected"
            result = self.supabase.table("quotes")\
                .update({"status": new_status})\
                .eq("id", quote_id)\
                .execute()
            if new_status == "accepted":
                self.supabase.table("rfqs")\
                    .update({"status": "in_progress"})\
                    .eq("id", rfq_id)\
                    .execute()
            return QuoteResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to update quote status")

    def list_company_rfqs(self, company_id: str) -> List[RFQResponse]:
        try:
            result = self.supabase.table("rfqs")\
                .select(RFQ_COLUMNS)\
                .eq("company_id", company_id)\
                .order("created_at", desc=True)\
                .execute()
            return [RFQResponse(**row) for row in result.data or []]
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to load RFQs")
