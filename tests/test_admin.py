"""
Platform admin routes: access control, verification review and moderation.
"""

import pytest
from httpx import AsyncClient

from cando.core.storage import TIER2_DOCUMENTS_BUCKET
from cando.modules.admin.service import flag_total
from conftest import OTHER_USER_ID, COMPANY_ID


@pytest.fixture
def as_admin(supabase):
    supabase.respond("is_current_user_admin", data=True)
    return supabase


@pytest.mark.asyncio
async def test_non_admin_is_forbidden(client: AsyncClient, supabase):
    supabase.respond("is_current_user_admin", data=False)
    response = await client.get("/api/v1/admin/users")
    assert response.status_code == 403
    assert supabase.calls("admin_get_all_users") == []


@pytest.mark.asyncio
async def test_list_users(client: AsyncClient, as_admin):
    as_admin.respond("admin_get_all_users", data=[{"id": OTHER_USER_ID}])
    response = await client.get("/api/v1/admin/users")
    assert response.status_code == 200
    assert response.json() == [{"id": OTHER_USER_ID}]


@pytest.mark.asyncio
async def test_companies_are_rekeyed(client: AsyncClient, as_admin):
    as_admin.respond("admin_get_all_companies_with_owner_info", data=[
        {"company_id": COMPANY_ID, "company_name": "Acme Foods", "owner_email": "owner@example.com"}
    ])
    response = await client.get("/api/v1/admin/companies")
    company = response.json()[0]
    assert company["id"] == COMPANY_ID
    assert company["name"] == "Acme Foods"
    assert company["owner_email"] == "owner@example.com"


class TestVerificationReview:
    @pytest.mark.asyncio
    async def test_process_request(self, client: AsyncClient, as_admin):
        response = await client.post("/api/v1/admin/verifications/vr-1", json={"status": "approved"})
        assert response.json() == {"success": True}
        assert as_admin.calls("process_verification_request")[0].params == {
            "p_request_id": "vr-1", "p_status": "approved"
        }

    @pytest.mark.asyncio
    async def test_invalid_decision(self, client: AsyncClient, as_admin):
        response = await client.post("/api/v1/admin/verifications/vr-1", json={"status": "maybe"})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_update_unknown_company(self, client: AsyncClient, as_admin):
        as_admin.respond("admin_update_company_verification", data=[])
        response = await client.put(f"/api/v1/admin/companies/{COMPANY_ID}/verification", json={
            "verification_status": "TIER2_FULLY_VERIFIED",
            "admin_notes": "Documents check out"
        })
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_tier2_document_link(self, client: AsyncClient, as_admin):
        as_admin.respond("companies", data=[{
            "tier2_document_filename": "id.pdf",
            "tier2_document_storage_path": f"{COMPANY_ID}/1_id.pdf"
        }])
        as_admin.storage.from_.return_value.create_signed_url.return_value = {"signedURL": "https://signed"}
        response = await client.get(f"/api/v1/admin/companies/{COMPANY_ID}/tier2-document")
        assert response.status_code == 200
        assert response.json() == {"url": "https://signed", "filename": "id.pdf"}
        as_admin.storage.from_.assert_called_with(TIER2_DOCUMENTS_BUCKET)

    @pytest.mark.asyncio
    async def test_tier2_document_missing(self, client: AsyncClient, as_admin):
        as_admin.respond("companies", data=[{"tier2_document_filename": None, "tier2_document_storage_path": None}])
        response = await client.get(f"/api/v1/admin/companies/{COMPANY_ID}/tier2-document")
        assert response.status_code == 404


class TestModeration:
    def test_flag_total(self):
        assert flag_total([]) == 0
        assert flag_total([{"total_count": 42}]) == 42

    @pytest.mark.asyncio
    async def test_all_status_lists_everything(self, client: AsyncClient, as_admin):
        as_admin.respond("admin_get_post_flags", data=[{"id": "f-1", "total_count": 1}])
        response = await client.get("/api/v1/admin/flags/posts", params={"status": "all", "page": 1, "limit": 5})
        assert response.json()["total"] == 1
        assert as_admin.calls("admin_get_post_flags")[0].params == {"p_page_number": 1, "p_page_size": 5}

    @pytest.mark.asyncio
    async def test_status_filter(self, client: AsyncClient, as_admin):
        response = await client.get("/api/v1/admin/flags/comments", params={"status": "pending"})
        assert response.status_code == 200
        assert as_admin.calls("admin_get_comment_flags")[0].params["p_status"] == "pending"

    @pytest.mark.asyncio
    async def test_remove_comment(self, client: AsyncClient, as_admin):
        response = await client.post("/api/v1/admin/flags/comments/f-9/remove-content", json={
            "content_id": "c-1", "reason": "abusive"
        })
        assert response.json() == {"success": True}
        assert as_admin.calls("admin_remove_comment")[0].params == {
            "p_comment_id": "c-1",
            "p_reason": "abusive",
            "p_related_flag_id": "f-9",
            "p_flag_table": "comment_flags"
        }

    @pytest.mark.asyncio
    async def test_warn_links_flag(self, client: AsyncClient, as_admin):
        response = await client.post(f"/api/v1/admin/users/{OTHER_USER_ID}/warn", json={
            "reason": "spam", "content_id": "p-1", "content_type": "post", "flag_id": "f-1"
        })
        assert response.json() == {"success": True}
        params = as_admin.calls("admin_warn_user")[0].params
        assert params["p_target_profile_id"] == OTHER_USER_ID
        assert params["p_related_flag_id"] == "f-1"
        assert params["p_flag_table"] == "post_flags"

    @pytest.mark.asyncio
    async def test_permanent_ban(self, client: AsyncClient, as_admin):
        response = await client.post(f"/api/v1/admin/users/{OTHER_USER_ID}/ban", json={"reason": "fraud"})
        assert response.json() == {"success": True}
        params = as_admin.calls("admin_ban_user")[0].params
        assert params["p_duration_days"] is None
        assert "p_related_flag_id" not in params

    @pytest.mark.asyncio
    async def test_unknown_flag_type(self, client: AsyncClient, as_admin):
        response = await client.get("/api/v1/admin/flags/users")
        assert response.status_code == 422
