"""
Requests for quotation and the quotes submitted against them.
"""

import pytest
from httpx import AsyncClient

from cando.modules.rfqs.schemas import RFQCreate, clean_list
from conftest import USER_ID, COMPANY_ID, OTHER_COMPANY_ID


def rfq_row(**overrides):
    row = {
        "id": "rfq-1",
        "company_id": COMPANY_ID,
        "title": "Steel brackets",
        "description": "500 units",
        "status": "open",
        "companies": {"id": COMPANY_ID, "name": "Acme Foods"}
    }
    row.update(overrides)
    return row


def quote_row(**overrides):
    row = {"id": "q-1", "rfq_id": "rfq-1", "company_id": OTHER_COMPANY_ID, "amount": 1200.0, "status": "submitted"}
    row.update(overrides)
    return row


class TestRFQPayload:
    def test_clean_list(self):
        assert clean_list([" ISO 9001 ", "", "ISO 9001", "<CE>"]) == ["ISO 9001", "CE"]

    def test_currency_is_upper_cased(self):
        assert RFQCreate(title="t", description="d", currency="eur").currency == "EUR"

    def test_blank_title_is_rejected(self):
        with pytest.raises(ValueError):
            RFQCreate(title="<>", description="d")


class TestCreateRFQ:
    @pytest.mark.asyncio
    async def test_posted_for_owned_company(self, client: AsyncClient, supabase):
        supabase.respond("companies", data=[{"id": COMPANY_ID}])
        supabase.respond("rfqs", data=[rfq_row()])
        response = await client.post("/api/v1/rfqs", json={
            "title": "Steel brackets",
            "description": "500 units",
            "tags": ["metal", "metal", " "]
        })
        assert response.status_code == 201
        payload = supabase.writes("rfqs")[0].op("insert")[0]
        assert payload["company_id"] == COMPANY_ID
        assert payload["status"] == "open"
        assert payload["tags"] == ["metal"]
        assert payload["required_certifications"] is None
        assert payload["requirements"] is None
        assert payload["attachments"] is None
        assert supabase.calls("companies")[0].op("eq") == ("owner_id", USER_ID)

    @pytest.mark.asyncio
    async def test_user_without_company(self, client: AsyncClient, supabase):
        supabase.respond("companies", data=[])
        response = await client.post("/api/v1/rfqs", json={"title": "t", "description": "d"})
        assert response.status_code == 404
        assert supabase.writes("rfqs") == []


class TestBrowse:
    @pytest.mark.asyncio
    async def test_only_open_rfqs_with_filters(self, client: AsyncClient, supabase):
        supabase.respond("rfqs", data=[rfq_row()], count=11)
        response = await client.get("/api/v1/rfqs", params={"tag": "metal", "category": "Manufacturing"})
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 11
        assert body["has_more"] is True
        query = supabase.calls("rfqs")[0]
        eqs = [args for name, args, _ in query.ops if name == "eq"]
        assert ("status", "open") in eqs
        assert ("category", "Manufacturing") in eqs
        assert query.op("contains") == ("tags", ["metal"])
        assert query.op("order") == ("created_at",)

    @pytest.mark.asyncio
    async def test_search_term_is_stripped_of_filter_syntax(self, client: AsyncClient, supabase):
        supabase.respond("rfqs", data=[], count=0)
        response = await client.get("/api/v1/rfqs", params={"search": "steel (bulk), 5.5mm"})
        assert response.status_code == 200
        query = supabase.calls("rfqs")[0]
        assert query.op("or_") == ("title.ilike.%steel bulk 5 5mm%,description.ilike.%steel bulk 5 5mm%",)

    @pytest.mark.asyncio
    async def test_detail_includes_quotes(self, client: AsyncClient, supabase):
        supabase.respond("rfqs", data=[rfq_row()])
        supabase.respond("quotes", data=[quote_row()])
        response = await client.get("/api/v1/rfqs/rfq-1")
        assert response.status_code == 200
        assert [q["id"] for q in response.json()["quotes"]] == ["q-1"]

    @pytest.mark.asyncio
    async def test_unknown_rfq(self, client: AsyncClient, supabase):
        response = await client.get("/api/v1/rfqs/missing")
        assert response.status_code == 404


class TestQuotes:
    @pytest.mark.asyncio
    async def test_quote_on_closed_rfq_conflicts(self, client: AsyncClient, supabase):
        supabase.respond("is_company_admin", data=True)
        supabase.respond("rfqs", data=[rfq_row(status="closed")])
        response = await client.post("/api/v1/rfqs/rfq-1/quotes", json={
            "company_id": OTHER_COMPANY_ID, "amount": 100
        })
        assert response.status_code == 409
        assert supabase.writes("quotes") == []

    @pytest.mark.asyncio
    async def test_cannot_quote_own_rfq(self, client: AsyncClient, supabase):
        supabase.respond("is_company_admin", data=True)
        supabase.respond("rfqs", data=[rfq_row()])
        response = await client.post("/api/v1/rfqs/rfq-1/quotes", json={"company_id": COMPANY_ID, "amount": 100})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_amount_must_be_positive(self, client: AsyncClient, supabase):
        response = await client.post("/api/v1/rfqs/rfq-1/quotes", json={"company_id": OTHER_COMPANY_ID, "amount": 0})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_submit_quote(self, client: AsyncClient, supabase):
        supabase.respond("is_company_admin", data=True)
        supabase.respond("rfqs", data=[rfq_row()])
        supabase.respond("quotes", data=[quote_row()])
        response = await client.post("/api/v1/rfqs/rfq-1/quotes", json={
            "company_id": OTHER_COMPANY_ID, "amount": 1200, "currency": "usd"
        })
        assert response.status_code == 201
        payload = supabase.writes("quotes")[0].op("insert")[0]
        assert payload["rfq_id"] == "rfq-1"
        assert payload["status"] == "submitted"
        assert payload["currency"] == "USD"
        assert payload["attachments"] is None

    @pytest.mark.asyncio
    async def test_accepting_quote_moves_rfq_in_progress(self, client: AsyncClient, supabase):
        supabase.respond("rfqs", data=[rfq_row()])
        supabase.respond("is_company_admin", data=True)
        supabase.respond("quotes", data=[{"id": "q-1", "status": "submitted"}])
        supabase.respond("quotes", data=[quote_row(status="accepted")])
        response = await client.post("/api/v1/rfqs/rfq-1/quotes/q-1/accept")
        assert response.status_code == 200
        assert response.json()["status"] == "accepted"
        rfq_update = supabase.writes("rfqs")[0]
        assert rfq_update.op("update") == ({"status": "in_progress"},)

    @pytest.mark.asyncio
    async def test_rejecting_leaves_rfq_open(self, client: AsyncClient, supabase):
        supabase.respond("rfqs", data=[rfq_row()])
        supabase.respond("is_company_admin", data=True)
        supabase.respond("quotes", data=[{"id": "q-1", "status": "submitted"}])
        supabase.respond("quotes", data=[quote_row(status="rejected")])
        response = await client.post("/api/v1/rfqs/rfq-1/quotes/q-1/reject")
        assert response.status_code == 200
        assert supabase.writes("rfqs") == []

    @pytest.mark.asyncio
    async def test_only_submitted_quotes_can_be_answered(self, client: AsyncClient, supabase):
        supabase.respond("rfqs", data=[rfq_row()])
        supabase.respond("is_company_admin", data=True)
        supabase.respond("quotes", data=[{"id": "q-1", "status": "accepted"}])
        response = await client.post("/api/v1/rfqs/rfq-1/quotes/q-1/reject")
        assert response.status_code == 409
        assert supabase.writes("quotes") == []

    @pytest.mark.asyncio
    async def test_non_owner_cannot_answer_quotes(self, client: AsyncClient, supabase):
        supabase.respond("rfqs", data=[rfq_row()])
        supabase.respond("is_company_admin", data=False)
        response = await client.post("/api/v1/rfqs/rfq-1/quotes/q-1/accept")
        assert response.status_code == 403
        assert supabase.calls("quotes") == []
