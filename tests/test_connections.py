"""
Connection status mapping and the guarded connection actions.
"""

import pytest
from fastapi import HTTPException
from httpx import AsyncClient
from postgrest.exceptions import APIError

from cando.modules.connections.service import (
    COMPANY_BUTTON_STATES, USER_BUTTON_STATES, ConnectionService, describe_status
)
from conftest import USER_ID, OTHER_USER_ID, COMPANY_ID, OTHER_COMPANY_ID

USER_STATUS_RPC = "get_user_connection_status_with"
COMPANY_STATUS_RPC = "get_company_connection_status_with"


class TestStatusMapping:
    @pytest.mark.parametrize("status,actions", [
        ("NONE", ["connect"]),
        ("PENDING_SENT", ["cancel"]),
        ("PENDING_RECEIVED", ["accept", "decline"]),
        ("ACCEPTED", ["disconnect"]),
        ("DECLINED_BY_ME", []),
        ("BLOCKED", []),
        ("ERROR", ["retry"]),
    ])
    def test_user_actions(self, status, actions):
        described = describe_status(OTHER_USER_ID, status, USER_BUTTON_STATES)
        assert described.actions == actions
        assert described.disabled is (not actions)

    def test_unknown_status_is_disabled(self):
        described = describe_status(OTHER_USER_ID, "SOMETHING_NEW", USER_BUTTON_STATES)
        assert described.label == "Status: SOMETHING_NEW"
        assert described.disabled is True

    def test_company_labels(self):
        assert describe_status(COMPANY_ID, "NONE", COMPANY_BUTTON_STATES).label == "Connect with Company"
        assert describe_status(COMPANY_ID, "CANNOT_CONNECT", COMPANY_BUTTON_STATES).disabled is True


class TestUserConnections:
    @pytest.mark.asyncio
    async def test_status_lists_allowed_actions(self, client: AsyncClient, supabase):
        supabase.respond(USER_STATUS_RPC, data="PENDING_RECEIVED")
        response = await client.get(f"/api/v1/connections/users/{OTHER_USER_ID}")
        assert response.status_code == 200
        assert response.json()["actions"] == ["accept", "decline"]

    @pytest.mark.asyncio
    async def test_status_failure_renders_error_state(self, client: AsyncClient, supabase):
        supabase.fail(USER_STATUS_RPC, Exception("timeout"))
        response = await client.get(f"/api/v1/connections/users/{OTHER_USER_ID}")
        assert response.status_code == 200
        assert response.json()["status"] == "ERROR"
        assert response.json()["actions"] == ["retry"]

    @pytest.mark.asyncio
    async def test_cannot_connect_with_self(self, client: AsyncClient, supabase):
        response = await client.post(f"/api/v1/connections/users/{USER_ID}/request")
        assert response.status_code == 400
        assert supabase.executed == []

    @pytest.mark.asyncio
    async def test_disallowed_action_conflicts_without_mutation(self, client: AsyncClient, supabase):
        supabase.respond(USER_STATUS_RPC, data="ACCEPTED")
        response = await client.post(f"/api/v1/connections/users/{OTHER_USER_ID}/request")
        assert response.status_code == 409
        assert supabase.calls("send_user_connection_request") == []

    @pytest.mark.asyncio
    async def test_send_request(self, client: AsyncClient, supabase):
        supabase.respond(USER_STATUS_RPC, data="NONE")
        response = await client.post(f"/api/v1/connections/users/{OTHER_USER_ID}/request")
        assert response.status_code == 200
        assert response.json()["status"] == "PENDING_SENT"
        assert supabase.calls("send_user_connection_request")[0].params == {"p_addressee_id": OTHER_USER_ID}

    @pytest.mark.asyncio
    async def test_accept_finds_the_pending_request(self, client: AsyncClient, supabase):
        supabase.respond(USER_STATUS_RPC, data="PENDING_RECEIVED")
        supabase.respond("get_pending_user_connection_requests", data=[
            {"id": "req-9", "requester_id": "someone-else"},
            {"id": "req-1", "requester_id": OTHER_USER_ID},
        ])
        response = await client.post(f"/api/v1/connections/users/{OTHER_USER_ID}/accept")
        assert response.status_code == 200
        assert response.json()["status"] == "ACCEPTED"
        assert supabase.calls("respond_user_connection_request")[0].params == {
            "p_request_id": "req-1",
            "p_response": "accept"
        }

    @pytest.mark.asyncio
    async def test_accept_without_pending_request(self, client: AsyncClient, supabase):
        supabase.respond(USER_STATUS_RPC, data="PENDING_RECEIVED")
        supabase.respond("get_pending_user_connection_requests", data=[])
        response = await client.post(f"/api/v1/connections/users/{OTHER_USER_ID}/decline")
        assert response.status_code == 404
        assert supabase.calls("respond_user_connection_request") == []

    @pytest.mark.asyncio
    async def test_cancel_deletes_only_own_request(self, client: AsyncClient, supabase):
        supabase.respond(USER_STATUS_RPC, data="PENDING_SENT")
        supabase.respond("get_sent_user_connection_requests", data=[{"id": "req-2", "addressee_id": OTHER_USER_ID}])
        response = await client.delete(f"/api/v1/connections/users/{OTHER_USER_ID}")
        assert response.status_code == 200
        assert response.json()["status"] == "NONE"
        delete = supabase.writes("user_connections")[0]
        assert delete.op("match") == ({"id": "req-2", "requester_id": USER_ID},)

    @pytest.mark.asyncio
    async def test_disconnect(self, client: AsyncClient, supabase):
        supabase.respond(USER_STATUS_RPC, data="ACCEPTED")
        response = await client.delete(f"/api/v1/connections/users/{OTHER_USER_ID}")
        assert response.status_code == 200
        assert supabase.calls("remove_user_connection")[0].params == {"p_other_user_id": OTHER_USER_ID}

    @pytest.mark.asyncio
    async def test_disconnect_refused_for_blocked(self, client: AsyncClient, supabase):
        supabase.respond(USER_STATUS_RPC, data="BLOCKED")
        response = await client.delete(f"/api/v1/connections/users/{OTHER_USER_ID}")
        assert response.status_code == 409
        assert supabase.calls("remove_user_connection") == []


class TestCompanyConnections:
    @pytest.mark.asyncio
    async def test_non_admin_sees_cannot_connect(self, client: AsyncClient, supabase):
        supabase.respond("is_company_admin", data=False)
        response = await client.get(
            f"/api/v1/connections/companies/{OTHER_COMPANY_ID}",
            params={"acting_company_id": COMPANY_ID}
        )
        assert response.status_code == 200
        assert response.json()["status"] == "CANNOT_CONNECT"
        assert supabase.calls(COMPANY_STATUS_RPC) == []

    @pytest.mark.asyncio
    async def test_non_admin_cannot_send(self, client: AsyncClient, supabase):
        supabase.respond("is_company_admin", data=False)
        response = await client.post(
            f"/api/v1/connections/companies/{OTHER_COMPANY_ID}/request",
            params={"acting_company_id": COMPANY_ID}
        )
        assert response.status_code == 403
        assert supabase.calls("send_company_connection_request") == []

    @pytest.mark.asyncio
    async def test_respond_rereads_status(self, client: AsyncClient, supabase):
        supabase.respond("is_company_admin", data=True)
        supabase.respond(COMPANY_STATUS_RPC, data="PENDING_RECEIVED")
        supabase.respond(COMPANY_STATUS_RPC, data="DECLINED_RECEIVED")
        supabase.respond("get_pending_company_connection_requests", data=[
            {"id": "creq-1", "requester_company_id": OTHER_COMPANY_ID}
        ])
        response = await client.post(
            f"/api/v1/connections/companies/{OTHER_COMPANY_ID}/decline",
            params={"acting_company_id": COMPANY_ID}
        )
        assert response.status_code == 200
        assert response.json()["status"] == "DECLINED_RECEIVED"
        assert supabase.calls("respond_company_connection_request")[0].params == {
            "p_request_id": "creq-1",
            "p_response": "DECLINED"
        }
        assert supabase.calls("get_pending_company_connection_requests")[0].params == {
            "p_for_company_id": COMPANY_ID
        }

    def test_cancel_company_request(self, supabase):
        supabase.respond(COMPANY_STATUS_RPC, data="PENDING_SENT")
        supabase.respond("get_sent_company_connection_requests", data=[
            {"id": "creq-2", "addressee_company_id": OTHER_COMPANY_ID}
        ])
        result = ConnectionService(supabase).remove_company_connection(COMPANY_ID, OTHER_COMPANY_ID)
        assert result.status == "NONE"
        delete = supabase.writes("company_connections")[0]
        assert delete.op("match") == ({"id": "creq-2", "requester_company_id": COMPANY_ID},)

    def test_database_error_is_translated(self, supabase):
        supabase.respond(COMPANY_STATUS_RPC, data="NONE")
        supabase.fail("send_company_connection_request", APIError({
            "code": "42501", "message": "permission denied", "details": None, "hint": None
        }))
        with pytest.raises(HTTPException) as exc_info:
            ConnectionService(supabase).send_company_request(COMPANY_ID, OTHER_COMPANY_ID)
        assert exc_info.value.status_code == 403
