import logging
from datetime import datetime, timedelta, timezone
from supabase import Client
from postgrest.exceptions import APIError
from cando.modules.invitations.schemas import InvitationCreate, InvitationResponse
from cando.core.errors import UNIQUE_VIOLATION
from cando.core.validation import parse_timestamp
from typing import List
from fastapi import HTTPException

logger = logging.getLogger(__name__)

INVITATION_TTL = timedelta(days=7)


class InvitationService:
    """Runs on the service role client; callers are authorised in routes.py"""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_invitation(self, invitation_data: InvitationCreate) -> InvitationResponse:
        """Invite an email to a company unless it is already a member or already invited"""
        company_id = str(invitation_data.company_id)
        email = invitation_data.email
        try:
            existing_member = self.supabase.table("company_members")\
                .select("id")\
                .eq("company_id", company_id)\
                .eq("email", email)\
                .limit(1)\
                .execute()
            if existing_member.data:
                raise HTTPException(status_code=400, detail="User is already a member of this company")

            existing_invitation = self.supabase.table("company_invitations")\
                .select("id")\
                .eq("company_id", company_id)\
                .eq("email", email)\
                .limit(1)\
                .execute()
            if existing_invitation.data:
                raise HTTPException(status_code=400, detail="An invitation has already been sent to this email")

            result = self.supabase.table("company_invitations").insert({
                "company_id": company_id,
                "email": email,
                "role": invitation_data.role,
                "status": "pending",
                "expires_at": (datetime.now(timezone.utc) + INVITATION_TTL).isoformat()
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create invitation")

            logger.info(f"Invitation created for {email} to company {company_id}")
            return InvitationResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating invitation: {e}")
            raise HTTPException(status_code=500, detail="Failed to create invitation")

    def list_pending(self, company_id: str) -> List[InvitationResponse]:
        try:
            result = self.supabase.table("company_invitations")\
                .select("*")\
                .eq("company_id", company_id)\
                .eq("status", "pending")\
                .execute()
            return [InvitationResponse(**row) for row in result.data or []]
        except Exception as e:
            logger.error(f"Error fetching invitations: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch invitations")

    def get_invitation(self, invitation_id: str) -> dict:
        try:
            result = self.supabase.table("company_invitations")\
                .select("*")\
                .eq("id", invitation_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching invitation {invitation_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch invitation")
        if not result.data:
            raise HTTPException(status_code=404, detail="Invitation not found")
        return result.data[0]

    def delete_invitation(self, invitation_id: str) -> bool:
        try:
            self.supabase.table("company_invitations")\
                .delete()\
                .eq("id", invitation_id)\
                .execute()
            return True
        except Exception as e:
            logger.error(f"Error deleting invitation: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete invitation")

    def accept_invitation(self, invitation_id: str, user_data: dict) -> dict:
        """Join the company as the invited role and mark the invitation accepted"""
        invitation = self.get_invitation(invitation_id)
        if invitation.get("status") != "pending":
            raise HTTPException(status_code=400, detail="Invitation is no longer pending")
        if (invitation.get("email") or "").lower() != (user_data.get("email") or "").lower():
            raise HTTPException(status_code=403, detail="This invitation was sent to a different email")
        expires_at = parse_timestamp(invitation.get("expires_at"))
        if expires_at and expires_at < datetime.now(timezone.utc):
            raise HTTPException(status_code=410, detail="Invitation has expired")
        company_id = invitation["company_id"]
        user_id = user_data["id"]
        joined = False
        try:
            try:
                result = self.supabase.table("company_users").insert({
                    "company_id": company_id,
                    "user_id": user_id,
                    "role": invitation["role"],
                    "is_primary": False
                }).execute()
                membership = result.data[0] if result.data else {}
                joined = True
            except APIError as e:
                if e.code != UNIQUE_VIOLATION:
                    raise
                logger.info(f"User {user_id} already belongs to company {company_id}, closing invitation {invitation_id}")
                membership = self._get_membership(company_id, user_id)
            self.supabase.table("company_invitations")\
                .update({"status": "accepted"})\
                .eq("id", invitation_id)\
                .execute()
            return membership
        except Exception as e:
            logger.error(f"Error accepting invitation {invitation_id}: {e}")
            if joined:
                self._remove_membership(company_id, user_id)
            raise HTTPException(status_code=500, detail="Failed to accept invitation")

    def _get_membership(self, company_id: str, user_id: str) -> dict:
        result = self.supabase.table("company_users")\
            .select("*")\
            .eq("company_id", company_id)\
            .eq("user_id", user_id)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else {}

    def _remove_membership(self, company_id: str, user_id: str):
        try:
            self.supabase.table("company_users")\
                .delete()\
                .eq("company_id", company_id)\
                .eq("user_id", user_id)\
                .execute()
        except Exception as e:
            logger.error(f"Rollback of membership in company {company_id} for {user_id} failed: {e}")
