"""
Notification inbox: paging and unread counts.
"""

import pytest
from httpx import AsyncClient

from cando.modules.notifications.service import unread_count_from


def test_unread_count_comes_from_first_row():
    assert unread_count_from([]) == 0
    assert unread_count_from([{"unread_count": 4}, {"unread_count": 4}]) == 4
    assert unread_count_from([{"unread_count": None}]) == 0


@pytest.mark.asyncio
async def test_list_notifications(client: AsyncClient, supabase):
    supabase.respond("get_user_notifications", data=[
        {"id": "n-1", "type": "connection_request", "is_read": False, "unread_count": 2},
        {"id": "n-2", "type": "message", "is_read": True, "unread_count": 2},
    ])
    response = await client.get("/api/v1/notifications", params={"page": 2, "limit": 5})
    assert response.status_code == 200
    body = response.json()
    assert body["unread_count"] == 2
    assert [n["id"] for n in body["notifications"]] == ["n-1", "n-2"]
    assert supabase.calls("get_user_notifications")[0].params == {"p_limit": 5, "p_page_number": 2}


@pytest.mark.asyncio
async def test_unread_count_endpoint(client: AsyncClient, supabase):
    supabase.respond("get_user_notifications", data=[{"id": "n-1", "unread_count": 7}])
    response = await client.get("/api/v1/notifications/unread-count")
    assert response.json() == {"unread_count": 7}


@pytest.mark.asyncio
async def test_empty_inbox(client: AsyncClient, supabase):
    response = await client.get("/api/v1/notifications/unread-count")
    assert response.json() == {"unread_count": 0}


@pytest.mark.asyncio
async def test_mark_one_and_all(client: AsyncClient, supabase):
    one = await client.post("/api/v1/notifications/n-1/read")
    everything = await client.post("/api/v1/notifications/read-all")
    assert one.json() == {"success": True}
    assert everything.json() == {"success": True}
    assert supabase.calls("mark_notification_as_read")[0].params == {"p_notification_id": "n-1"}
    assert len(supabase.calls("mark_all_notifications_as_read")) == 1
