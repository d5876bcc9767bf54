"""
Profile reads, updates and network visibility.
"""

import pytest
from httpx import AsyncClient

from conftest import USER_ID, OTHER_USER_ID


@pytest.mark.asyncio
async def test_get_my_profile(client: AsyncClient, supabase):
    supabase.respond("profiles", data=[{"id": USER_ID, "name": "Ada", "email": "owner@example.com"}])
    response = await client.get("/api/v1/profiles/me")
    assert response.status_code == 200
    assert response.json()["name"] == "Ada"


@pytest.mark.asyncio
async def test_missing_profile(client: AsyncClient, supabase):
    response = await client.get("/api/v1/profiles/me")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_only_sends_given_fields(client: AsyncClient, supabase):
    supabase.respond("profiles", data=[{"id": USER_ID, "name": "Ada", "is_network_public": True}])
    response = await client.put("/api/v1/profiles/me", json={"is_network_public": True})
    assert response.status_code == 200
    update = supabase.writes("profiles")[0].op("update")[0]
    assert update["is_network_public"] is True
    assert "name" not in update
    assert "updated_at" in update


@pytest.mark.asyncio
async def test_public_profile_hides_private_fields(client: AsyncClient, supabase):
    supabase.respond("profiles", data=[{"id": OTHER_USER_ID, "name": "Grace", "avatar_url": None}])
    response = await client.get(f"/api/v1/profiles/{OTHER_USER_ID}")
    assert response.status_code == 200
    assert set(response.json()) == {"id", "name", "avatar_url"}


class TestNetworkVisibility:
    @pytest.mark.asyncio
    async def test_private_network_is_hidden(self, client: AsyncClient, supabase):
        supabase.respond("is_current_user_admin", data=False)
        supabase.respond("profiles", data=[{"id": OTHER_USER_ID, "is_network_public": False}])
        response = await client.get(f"/api/v1/profiles/{OTHER_USER_ID}/connections")
        assert response.status_code == 403
        assert supabase.calls("get_user_network") == []

    @pytest.mark.asyncio
    async def test_admin_sees_private_network(self, client: AsyncClient, supabase):
        supabase.respond("is_current_user_admin", data=True)
        supabase.respond("profiles", data=[{"id": OTHER_USER_ID, "is_network_public": False}])
        supabase.respond("get_user_network", data=[{"id": "x"}])
        response = await client.get(f"/api/v1/profiles/{OTHER_USER_ID}/connections")
        assert response.status_code == 200
        assert response.json() == [{"id": "x"}]

    @pytest.mark.asyncio
    async def test_own_network_is_always_visible(self, client: AsyncClient, supabase):
        supabase.respond("profiles", data=[{"id": USER_ID, "is_network_public": False}])
        response = await client.get(f"/api/v1/profiles/{USER_ID}/connections")
        assert response.status_code == 200
        assert supabase.calls("is_current_user_admin") == []
