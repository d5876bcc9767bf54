"""
Connection state for user-to-user and company-to-company links.

The database decides the status; this module maps each status to the one
button the client shows and the actions that button allows. Mutations first
re-read the status and refuse actions the current button does not offer.
"""

import logging
from typing import Dict, List, NamedTuple, Optional, Tuple

from fastapi import HTTPException
from supabase import Client

from cando.core.errors import http_error_from_supabase
from cando.modules.connections.schemas import ConnectionStatusResponse

logger = logging.getLogger(__name__)


class ButtonState(NamedTuple):
    label: str
    actions: Tuple[str, ...]


USER_BUTTON_STATES: Dict[str, ButtonState] = {
    "NONE": ButtonState("Connect", ("connect",)),
    "PENDING_SENT": ButtonState("Request Sent (Cancel)", ("cancel",)),
    "PENDING_RECEIVED": ButtonState("Accept / Decline", ("accept", "decline")),
    "ACCEPTED": ButtonState("Connected (Disconnect)", ("disconnect",)),
    "DECLINED_BY_THEM": ButtonState("Request Declined", ()),
    "DECLINED_BY_ME": ButtonState("You Declined", ()),
    "BLOCKED": ButtonState("Connection Blocked", ()),
    "ERROR": ButtonState("Error. Retry?", ("retry",)),
}

COMPANY_BUTTON_STATES: Dict[str, ButtonState] = {
    "NONE": ButtonState("Connect with Company", ("connect",)),
    "PENDING_SENT": ButtonState("Request Sent (Cancel)", ("cancel",)),
    "PENDING_RECEIVED": ButtonState("Accept / Decline", ("accept", "decline")),
    "ACCEPTED": ButtonState("Connected (Disconnect)", ("disconnect",)),
    "DECLINED_SENT": ButtonState("Request Declined by Them", ()),
    "DECLINED_RECEIVED": ButtonState("Declined by You", ()),
    "BLOCKED": ButtonState("Connection Blocked", ()),
    "ERROR": ButtonState("Error. Retry?", ("retry",)),
    "CANNOT_CONNECT": ButtonState("Cannot Connect", ()),
}

USER_RESPONSES = {"accept": "accept", "decline": "decline"}
COMPANY_RESPONSES = {"accept": "ACCEPTED", "decline": "DECLINED"}


def button_state(status: str, states: Dict[str, ButtonState]) -> ButtonState:
    """Unknown statuses render as a disabled button showing the raw value"""
    return states.get(status) or ButtonState(f"Status: {status}", ())


def describe_status(target_id: str, status: str, states: Dict[str, ButtonState]) -> ConnectionStatusResponse:
    state = button_state(status, states)
    return ConnectionStatusResponse(
        target_id=target_id,
        status=status,
        label=state.label,
        disabled=not state.actions,
        actions=list(state.actions)
    )


def require_action(status: str, action: str, states: Dict[str, ButtonState]) -> None:
    if action not in button_state(status, states).actions:
        raise HTTPException(
            status_code=409,
            detail=f"Cannot {action} while the connection status is {status}"
        )


class ConnectionService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _rpc_rows(self, name: str, params: Optional[dict] = None) -> List[dict]:
        result = self.supabase.rpc(name, params or {}).execute()
        return result.data or []

    # User connections

    def _read_user_status(self, user_id: str, target_id: str) -> str:
        if user_id == target_id:
            raise HTTPException(status_code=400, detail="You cannot connect with yourself")
        result = self.supabase.rpc("get_user_connection_status_with", {
            "p_other_user_id": target_id
        }).execute()
        return result.data or "NONE"

    def get_user_status(self, user_id: str, target_id: str) -> ConnectionStatusResponse:
        try:
            status = self._read_user_status(user_id, target_id)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error fetching connection status with {target_id}: {e}")
            status = "ERROR"
        return describe_status(target_id, status, USER_BUTTON_STATES)

    def send_user_request(self, user_id: str, target_id: str) -> ConnectionStatusResponse:
        try:
            status = self._read_user_status(user_id, target_id)
            require_action(status, "connect", USER_BUTTON_STATES)
            self.supabase.rpc("send_user_connection_request", {
                "p_addressee_id": target_id
            }).execute()
            logger.info(f"Connection request sent from {user_id} to {target_id}")
            return describe_status(target_id, "PENDING_SENT", USER_BUTTON_STATES)
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to send request.")

    def respond_user_request(self, user_id: str, target_id: str, action: str) -> ConnectionStatusResponse:
        """Accept or decline the pending request target_id sent to the caller"""
        try:
            status = self._read_user_status(user_id, target_id)
            require_action(status, action, USER_BUTTON_STATES)
            pending = self._rpc_rows("get_pending_user_connection_requests")
            request = next((r for r in pending if r.get("requester_id") == target_id), None)
            if not request:
                raise HTTPException(status_code=404, detail="Connection request not found")
            self.supabase.rpc("respond_user_connection_request", {
                "p_request_id": request["id"],
                "p_response": USER_RESPONSES[action]
            }).execute()
            new_status = "ACCEPTED" if action == "accept" else "DECLINED_BY_ME"
            return describe_status(target_id, new_status, USER_BUTTON_STATES)
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to respond to request.")

    def remove_user_connection(self, user_id: str, target_id: str) -> ConnectionStatusResponse:
        """Cancel a sent request or disconnect an accepted connection"""
        try:
            status = self._read_user_status(user_id, target_id)
            if status == "PENDING_SENT":
                sent = self._rpc_rows("get_sent_user_connection_requests")
                request = next((r for r in sent if r.get("addressee_id") == target_id), None)
                if not request:
                    raise HTTPException(status_code=404, detail="Sent request not found to cancel")
                self.supabase.table("user_connections")\
                    .delete()\
                    .match({"id": request["id"], "requester_id": user_id})\
                    .execute()
            else:
                require_action(status, "disconnect", USER_BUTTON_STATES)
                self.supabase.rpc("remove_user_connection", {
                    "p_other_user_id": target_id
                }).execute()
            return describe_status(target_id, "NONE", USER_BUTTON_STATES)
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to update connection.")

    def list_pending(self) -> List[dict]:
        try:
            return self._rpc_rows("get_pending_user_connection_requests")
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to load pending requests")

    def list_sent(self) -> List[dict]:
        try:
            return self._rpc_rows("get_sent_user_connection_requests")
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to load sent requests")

    def get_user_network(self, user_id: str) -> List[dict]:
        try:
            return self._rpc_rows("get_user_network", {"p_target_user_id": user_id})
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to load network")

    # Company connections

    def _read_company_status(self, acting_company_id: str, target_company_id: str) -> str:
        if acting_company_id == target_company_id:
            raise HTTPException(status_code=400, detail="Cannot connect to self")
        result = self.supabase.rpc("get_company_connection_status_with", {
            "p_acting_company_id": acting_company_id,
            "p_other_company_id": target_company_id
        }).execute()
        return result.data or "NONE"

    def get_company_status(self, acting_company_id: str, target_company_id: str) -> ConnectionStatusResponse:
        try:
            status = self._read_company_status(acting_company_id, target_company_id)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error fetching company connection status: {e}")
            status = "ERROR"
        return describe_status(target_company_id, status, COMPANY_BUTTON_STATES)

    def send_company_request(self, acting_company_id: str, target_company_id: str) -> ConnectionStatusResponse:
        try:
            status = self._read_company_status(acting_company_id, target_company_id)
            require_action(status, "connect", COMPANY_BUTTON_STATES)
            self.supabase.rpc("send_company_connection_request", {
                "p_acting_company_id": acting_company_id,
                "p_target_company_id": target_company_id
            }).execute()
            return describe_status(target_company_id, "PENDING_SENT", COMPANY_BUTTON_STATES)
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to send request.")

    def respond_company_request(
        self,
        acting_company_id: str,
        target_company_id: str,
        action: str
    ) -> ConnectionStatusResponse:
        try:
            status = self._read_company_status(acting_company_id, target_company_id)
            require_action(status, action, COMPANY_BUTTON_STATES)
            pending = self._rpc_rows("get_pending_company_connection_requests", {
                "p_for_company_id": acting_company_id
            })
            request = next((r for r in pending if r.get("requester_company_id") == target_company_id), None)
            if not request:
                raise HTTPException(status_code=404, detail="Connection request not found")
            self.supabase.rpc("respond_company_connection_request", {
                "p_request_id": request["id"],
                "p_response": COMPANY_RESPONSES[action]
            }).execute()
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to respond to request.")
        # The database owns the resulting status
        return self.get_company_status(acting_company_id, target_company_id)

    def remove_company_connection(self, acting_company_id: str, target_company_id: str) -> ConnectionStatusResponse:
        try:
            status = self._read_company_status(acting_company_id, target_company_id)
            if status == "PENDING_SENT":
                sent = self._rpc_rows("get_sent_company_connection_requests", {
                    "p_from_company_id": acting_company_id
                })
                request = next((r for r in sent if r.get("addressee_company_id") == target_company_id), None)
                if not request:
                    raise HTTPException(
                        status_code=404,
                        detail="Sent request not found. It might have been responded to."
                    )
                self.supabase.table("company_connections")\
                    .delete()\
                    .match({"id": request["id"], "requester_company_id": acting_company_id})\
                    .execute()
            else:
                require_action(status, "disconnect", COMPANY_BUTTON_STATES)
                self.supabase.rpc("remove_company_connection", {
                    "p_acting_company_id": acting_company_id,
                    "p_other_company_id": target_company_id
                }).execute()
            return describe_status(target_company_id, "NONE", COMPANY_BUTTON_STATES)
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to update connection.")

    def get_company_network(self, company_id: str) -> List[dict]:
        try:
            return self._rpc_rows("get_company_connections", {"p_company_id": company_id})
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to load company connections")

    def list_company_pending(self, company_id: str) -> List[dict]:
        try:
            return self._rpc_rows("get_pending_company_connection_requests", {"p_for_company_id": company_id})
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to load pending requests")

    def list_company_sent(self, company_id: str) -> List[dict]:
        try:
            return self._rpc_rows("get_sent_company_connection_requests", {"p_from_company_id": company_id})
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to load sent requests")
