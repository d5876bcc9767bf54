"""
Company creation, directory search, team management and throttling.
"""

import pytest
from httpx import AsyncClient
from postgrest.exceptions import APIError

from cando.config.settings import settings
from conftest import USER_ID, OTHER_USER_ID, COMPANY_ID


class TestCreateCompany:
    @pytest.mark.asyncio
    async def test_duplicate_name_conflicts_without_insert(self, client: AsyncClient, supabase):
        supabase.respond("companies", data=[{"id": COMPANY_ID, "name": "Acme Foods"}])
        response = await client.post("/api/v1/companies", json={"name": "  ACME foods "})
        assert response.status_code == 409
        assert supabase.writes("companies") == []
        assert supabase.writes("company_users") == []

    @pytest.mark.asyncio
    async def test_new_company_becomes_primary(self, client: AsyncClient, supabase):
        supabase.respond("companies", data=[])
        supabase.respond("companies", data=[{"id": COMPANY_ID, "name": "Acme Foods", "owner_id": USER_ID}])
        supabase.respond("company_users", data=[{"id": "m-1"}])

        response = await client.post("/api/v1/companies", json={
            "name": "Acme Foods",
            "industry_tags": ["Agriculture", "Agriculture"]
        })

        assert response.status_code == 201
        assert response.json()["id"] == COMPANY_ID
        insert = supabase.writes("companies")[0].op("insert")[0]
        assert insert["owner_id"] == USER_ID
        assert insert["industry_tags"] == ["Agriculture"]
        membership, others = supabase.writes("company_users")
        assert membership.op("insert")[0] == {
            "company_id": COMPANY_ID, "user_id": USER_ID, "role": "owner", "is_primary": True
        }
        assert others.op("update") == ({"is_primary": False},)
        assert others.op("eq") == ("user_id", USER_ID)
        assert others.op("neq") == ("company_id", COMPANY_ID)

    @pytest.mark.asyncio
    async def test_failed_membership_removes_company(self, client: AsyncClient, supabase):
        supabase.respond("companies", data=[])
        supabase.respond("companies", data=[{"id": COMPANY_ID, "name": "Acme Foods", "owner_id": USER_ID}])
        supabase.fail("company_users", Exception("connection reset"))

        response = await client.post("/api/v1/companies", json={"name": "Acme Foods"})

        assert response.status_code == 500
        company_delete = [q for q in supabase.writes("companies") if q.has("delete")]
        assert company_delete[0].op("eq") == ("id", COMPANY_ID)

    @pytest.mark.asyncio
    async def test_failed_rollback_keeps_original_error(self, client: AsyncClient, supabase):
        supabase.respond("companies", data=[])
        supabase.respond("companies", data=[{"id": COMPANY_ID, "name": "Acme Foods", "owner_id": USER_ID}])
        supabase.fail("company_users", APIError({
            "code": "23503", "message": "violates foreign key", "details": None, "hint": None
        }))
        supabase.fail("company_users", Exception("rollback failed"))
        supabase.fail("companies", Exception("rollback failed"))

        response = await client.post("/api/v1/companies", json={"name": "Acme Foods"})

        assert response.status_code == 409
        assert len([q for q in supabase.writes("companies") if q.has("delete")]) == 1

    @pytest.mark.asyncio
    async def test_unknown_tag_is_rejected(self, client: AsyncClient, supabase):
        response = await client.post("/api/v1/companies", json={
            "name": "Acme Foods",
            "region_tags": ["Atlantis"]
        })
        assert response.status_code == 422
        assert supabase.executed == []

    @pytest.mark.asyncio
    async def test_blank_name_is_rejected(self, client: AsyncClient, supabase):
        response = await client.post("/api/v1/companies", json={"name": "<>"})
        assert response.status_code == 422
        assert supabase.executed == []


class TestDirectory:
    @pytest.mark.asyncio
    async def test_filters_and_paging(self, client: AsyncClient, supabase):
        supabase.respond("public_companies", data=[{"id": COMPANY_ID, "name": "Acme Foods"}], count=12)
        response = await client.get(
            "/api/v1/companies/directory",
            params={"industry": "Agriculture", "verified_only": "true", "page": 2, "limit": 5}
        )
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 12
        assert body["has_more"] is True

        query = supabase.calls("public_companies")[0]
        assert query.op("eq") == ("is_verified", True)
        assert query.op("contains") == ("industry_tags", ["Agriculture"])
        assert query.op("range") == (5, 9)
        assert not query.has("or_")

    @pytest.mark.asyncio
    async def test_search_matches_name_or_trading_name(self, client: AsyncClient, supabase):
        supabase.respond("public_companies", data=[], count=0)
        response = await client.get("/api/v1/companies/directory", params={"query": "acme"})
        assert response.status_code == 200
        assert response.json()["has_more"] is False
        query = supabase.calls("public_companies")[0]
        assert query.op("or_") == ("name.ilike.%acme%,trading_name.ilike.%acme%",)

    @pytest.mark.asyncio
    async def test_search_drops_filter_syntax(self, client: AsyncClient, supabase):
        supabase.respond("public_companies", data=[], count=0)
        response = await client.get("/api/v1/companies/directory", params={"query": "Acme (Pty).Ltd, foods"})
        assert response.status_code == 200
        query = supabase.calls("public_companies")[0]
        assert query.op("or_") == ("name.ilike.%Acme Pty Ltd foods%,trading_name.ilike.%Acme Pty Ltd foods%",)

    @pytest.mark.asyncio
    async def test_punctuation_only_search_is_ignored(self, client: AsyncClient, supabase):
        supabase.respond("public_companies", data=[], count=0)
        response = await client.get("/api/v1/companies/directory", params={"query": "().,"})
        assert response.status_code == 200
        assert not supabase.calls("public_companies")[0].has("or_")


class TestMembers:
    @pytest.mark.asyncio
    async def test_owner_cannot_be_removed(self, client: AsyncClient, supabase):
        supabase.respond("is_company_admin", data=True)
        supabase.respond("company_users", data=[{"role": "owner"}])
        response = await client.delete(f"/api/v1/companies/{COMPANY_ID}/members/{USER_ID}")
        assert response.status_code == 400
        assert supabase.writes("company_users") == []

    @pytest.mark.asyncio
    async def test_non_admin_cannot_add_members(self, client: AsyncClient, supabase):
        supabase.respond("is_company_admin", data=False)
        response = await client.post(f"/api/v1/companies/{COMPANY_ID}/members", json={"user_id": OTHER_USER_ID})
        assert response.status_code == 403
        assert supabase.writes("company_users") == []

    @pytest.mark.asyncio
    async def test_permissions_follow_membership_role(self, client: AsyncClient, supabase):
        supabase.respond("company_users", data=[{"role": "member"}])
        response = await client.get(f"/api/v1/companies/{COMPANY_ID}/permissions")
        assert response.status_code == 200
        body = response.json()
        assert body["role"] == "member"
        assert body["permissions"]["view_rfqs"] is True
        assert body["permissions"]["manage_team"] is False


class TestThrottling:
    @pytest.mark.asyncio
    async def test_company_listing_is_rate_limited(self, client: AsyncClient, supabase, monkeypatch):
        monkeypatch.setattr(settings, "company_rate_limit", 1)
        first = await client.get("/api/v1/companies")
        second = await client.get("/api/v1/companies")
        assert first.status_code == 200
        assert second.status_code == 429
        assert int(second.headers["Retry-After"]) >= 1
        assert second.json()["retry_after"] >= 1
        assert len(supabase.calls("get_user_companies")) == 1
