"""
Company invitations: creation guards and acceptance.
"""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient
from postgrest.exceptions import APIError

from conftest import USER_ID, COMPANY_ID


def invitation(**overrides):
    row = {
        "id": "inv-1",
        "company_id": COMPANY_ID,
        "email": "owner@example.com",
        "role": "member",
        "status": "pending",
        "expires_at": (datetime.now(timezone.utc) + timedelta(days=3)).isoformat()
    }
    row.update(overrides)
    return row


class TestCreateInvitation:
    @pytest.mark.asyncio
    async def test_requires_company_admin(self, client: AsyncClient, supabase):
        supabase.respond("is_company_admin", data=False)
        response = await client.post("/api/v1/companies/invite", json={
            "companyId": COMPANY_ID, "email": "new@example.com", "role": "member"
        })
        assert response.status_code == 403
        assert supabase.writes("company_invitations") == []

    @pytest.mark.asyncio
    async def test_existing_member_is_rejected(self, client: AsyncClient, supabase):
        supabase.respond("is_company_admin", data=True)
        supabase.respond("company_members", data=[{"id": "m-1"}])
        response = await client.post("/api/v1/companies/invite", json={
            "companyId": COMPANY_ID, "email": "new@example.com", "role": "member"
        })
        assert response.status_code == 400
        assert response.json()["detail"] == "User is already a member of this company"
        assert supabase.writes("company_invitations") == []

    @pytest.mark.asyncio
    async def test_duplicate_invitation_is_rejected(self, client: AsyncClient, supabase):
        supabase.respond("is_company_admin", data=True)
        supabase.respond("company_members", data=[])
        supabase.respond("company_invitations", data=[{"id": "inv-0"}])
        response = await client.post("/api/v1/companies/invite", json={
            "companyId": COMPANY_ID, "email": "new@example.com", "role": "admin"
        })
        assert response.status_code == 400
        assert supabase.writes("company_invitations") == []

    @pytest.mark.asyncio
    async def test_creates_pending_invitation_with_expiry(self, client: AsyncClient, supabase):
        supabase.respond("is_company_admin", data=True)
        supabase.respond("company_members", data=[])
        supabase.respond("company_invitations", data=[])
        supabase.respond("company_invitations", data=[invitation(email="new@example.com")])
        response = await client.post("/api/v1/companies/invite", json={
            "companyId": COMPANY_ID, "email": "new@example.com", "role": "member"
        })
        assert response.status_code == 200
        insert = supabase.writes("company_invitations")[0].op("insert")[0]
        assert insert["status"] == "pending"
        expires_at = datetime.fromisoformat(insert["expires_at"])
        assert timedelta(days=6) < expires_at - datetime.now(timezone.utc) <= timedelta(days=7)

    @pytest.mark.asyncio
    async def test_invalid_role(self, client: AsyncClient, supabase):
        response = await client.post("/api/v1/companies/invite", json={
            "companyId": COMPANY_ID, "email": "new@example.com", "role": "owner"
        })
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_listing_requires_company_id(self, client: AsyncClient):
        response = await client.get("/api/v1/companies/invite")
        assert response.status_code == 400


class TestAcceptInvitation:
    @pytest.mark.asyncio
    async def test_accept_adds_membership(self, client: AsyncClient, supabase):
        supabase.respond("company_invitations", data=[invitation()])
        supabase.respond("company_users", data=[{"company_id": COMPANY_ID, "user_id": USER_ID, "role": "member"}])
        response = await client.post("/api/v1/companies/invitations/inv-1/accept")
        assert response.status_code == 200
        assert response.json()["role"] == "member"
        update = supabase.writes("company_invitations")[0]
        assert update.op("update") == ({"status": "accepted"},)

    @pytest.mark.asyncio
    async def test_failed_status_update_removes_membership(self, client: AsyncClient, supabase):
        supabase.respond("company_invitations", data=[invitation()])
        supabase.respond("company_users", data=[{"company_id": COMPANY_ID, "user_id": USER_ID, "role": "member"}])
        supabase.fail("company_invitations", Exception("connection reset"))
        response = await client.post("/api/v1/companies/invitations/inv-1/accept")
        assert response.status_code == 500
        insert, rollback = supabase.writes("company_users")
        assert insert.has("insert")
        assert rollback.has("delete")
        assert [args for name, args, _ in rollback.ops if name == "eq"] == [
            ("company_id", COMPANY_ID), ("user_id", USER_ID)
        ]

    @pytest.mark.asyncio
    async def test_existing_membership_closes_invitation(self, client: AsyncClient, supabase):
        supabase.respond("company_invitations", data=[invitation()])
        supabase.fail("company_users", APIError({
            "code": "23505", "message": "duplicate key value", "details": None, "hint": None
        }))
        supabase.respond("company_users", data=[{"company_id": COMPANY_ID, "user_id": USER_ID, "role": "member"}])
        response = await client.post("/api/v1/companies/invitations/inv-1/accept")
        assert response.status_code == 200
        assert response.json()["user_id"] == USER_ID
        update = supabase.writes("company_invitations")[0]
        assert update.op("update") == ({"status": "accepted"},)
        assert not any(q.has("delete") for q in supabase.calls("company_users"))

    @pytest.mark.asyncio
    async def test_expired_invitation(self, client: AsyncClient, supabase):
        expired = (datetime.now(timezone.utc) - timedelta(minutes=1)).isoformat()
        supabase.respond("company_invitations", data=[invitation(expires_at=expired)])
        response = await client.post("/api/v1/companies/invitations/inv-1/accept")
        assert response.status_code == 410
        assert supabase.writes("company_users") == []

    @pytest.mark.asyncio
    async def test_other_email(self, client: AsyncClient, supabase):
        supabase.respond("company_invitations", data=[invitation(email="someone@example.com")])
        response = await client.post("/api/v1/companies/invitations/inv-1/accept")
        assert response.status_code == 403
