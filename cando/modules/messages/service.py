"""
Conversations between users and companies.

A conversation is identified from the viewer's side by (viewer identity,
partner identity), where an identity is ("user", user_id) or
("company", company_id). A company identity may only be used by users who
administer that company; the set of administered companies is resolved once
per request and handed to the pure matching predicate below.
"""

import logging
import time
from datetime import datetime
from supabase import Client
from cando.modules.messages.schemas import MessageCreate, MessagesResponse
from cando.config.settings import settings
from cando.core.errors import (
    http_error_from_supabase, handle_message_error, http_error_from_message_error, with_retry
)
from cando.core.rate_limiter import RateLimiter, rate_limiter as default_rate_limiter
from cando.core.storage import StorageService, MESSAGE_ATTACHMENTS_BUCKET, build_object_path
from cando.core.validation import sanitize_input, parse_timestamp
from typing import Callable, Collection, List, Optional, Tuple
from fastapi import HTTPException, UploadFile

logger = logging.getLogger(__name__)

Identity = Tuple[str, str]


def viewer_identity(user_id: str, acting_as_company_id: Optional[str] = None) -> Identity:
    if acting_as_company_id:
        return ("company", acting_as_company_id)
    return ("user", user_id)


def belongs_to_conversation(
    message: dict,
    viewer: Identity,
    partner: Identity,
    admin_company_ids: Collection[str]
) -> bool:
    """True when message was exchanged between viewer and partner, in either direction"""
    if viewer[0] == "company" and viewer[1] not in admin_company_ids:
        return False
    sender = (message.get("sender_type") or "user", message.get("sender_id"))
    receiver = (message.get("receiver_type") or "user", message.get("receiver_id"))
    return (sender == viewer and receiver == partner) or (sender == partner and receiver == viewer)


def newer_than(message: dict, since: Optional[datetime]) -> bool:
    if since is None:
        return True
    created_at = parse_timestamp(message.get("created_at"))
    return created_at is not None and created_at > parse_timestamp(since)


class MessageService:
    def __init__(
        self,
        supabase: Client,
        limiter: Optional[RateLimiter] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.supabase = supabase
        self.limiter = limiter or default_rate_limiter
        self.sleep = sleep

    def list_conversations(self, acting_as_company_id: Optional[str] = None) -> List[dict]:
        """Conversation list for the caller, or for a company they administer"""
        try:
            result = self.supabase.rpc("get_conversations", {
                "p_acting_as_company_id": acting_as_company_id
            }).execute()
            return result.data or []
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to load conversations")

    def get_messages(
        self,
        user_id: str,
        partner_type: str,
        partner_id: str,
        admin_company_ids: Collection[str],
        acting_as_company_id: Optional[str] = None,
        since: Optional[datetime] = None
    ) -> MessagesResponse:
        """Messages of one conversation; with since, only rows newer than it"""
        try:
            result = self.supabase.rpc("get_messages_for_conversation", {
                "p_partner_id": partner_id,
                "p_partner_type": partner_type,
                "p_acting_as_company_id": acting_as_company_id
            }).execute()
            messages = result.data or []
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to load messages")

        if since is not None:
            viewer = viewer_identity(user_id, acting_as_company_id)
            partner = (partner_type, partner_id)
            messages = [
                m for m in messages
                if newer_than(m, since) and belongs_to_conversation(m, viewer, partner, admin_company_ids)
            ]
        return MessagesResponse(messages=messages, partner_id=partner_id, partner_type=partner_type)

    def send_message(
        self,
        user_id: str,
        partner_type: str,
        partner_id: str,
        message_data: MessageCreate
    ) -> dict:
        """Send through the send_message RPC, retrying only retryable failures"""
        content = sanitize_input(message_data.content).strip()
        if not content:
            raise HTTPException(status_code=422, detail="Message cannot be empty")
        if viewer_identity(user_id, message_data.acting_as_company_id) == (partner_type, partner_id):
            raise HTTPException(status_code=400, detail="You cannot message yourself")

        self.limiter.enforce(
            RateLimiter.generate_key("sendMessage", user_id),
            settings.message_rate_limit,
            settings.message_rate_window_ms
        )

        params = {
            "p_receiver_id": partner_id,
            "p_receiver_type": partner_type,
            "p_content": content,
            "p_attachments": [a.model_dump() for a in message_data.attachments],
            "p_acting_as_company_id": message_data.acting_as_company_id
        }

        def on_error(error: Exception, attempt: int):
            logger.error(f"Error sending message (attempt {attempt}): {error}")

        try:
            result = with_retry(
                lambda: self.supabase.rpc("send_message", params).execute(),
                retries=settings.message_send_retries,
                delay=1.0,
                on_error=on_error,
                should_retry=lambda e: handle_message_error(e).retryable,
                sleep=self.sleep
            )
        except Exception as e:
            raise http_error_from_message_error(handle_message_error(e))

        data = result.data
        if isinstance(data, list):
            data = data[0] if data else {}
        return data or {}

    def mark_as_read(self, viewer_id: str, partner_id: str) -> int:
        """Mark everything partner sent to viewer as read; returns the number of rows updated"""
        try:
            result = self.supabase.table("messages")\
                .update({"read": True})\
                .eq("receiver_id", viewer_id)\
                .eq("sender_id", partner_id)\
                .eq("read", False)\
                .execute()
            return len(result.data or [])
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to mark messages as read")

    async def upload_attachment(self, user_id: str, file: UploadFile, storage: StorageService) -> dict:
        content = await file.read()
        path = build_object_path(user_id, file.filename)
        storage.upload(MESSAGE_ATTACHMENTS_BUCKET, path, content, file.content_type)
        return {
            "url": storage.get_public_url(MESSAGE_ATTACHMENTS_BUCKET, path),
            "name": file.filename or path.rsplit("/", 1)[-1],
            "content_type": file.content_type,
            "size": len(content)
        }
