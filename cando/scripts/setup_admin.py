"""
Admin Setup Script
Signs in the platform admin account (creating it when the credentials are unknown)
and upserts its profile. Credentials come from ADMIN_EMAIL / ADMIN_PASSWORD / ADMIN_NAME.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from cando.config import settings
from cando.database.supabase_client import get_supabase
from supabase import Client
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

ADMIN_AVATAR_URL = "https://placehold.co/64x64/7f56d9/white?text=SA"


def get_or_create_admin(supabase: Client, email: str, password: str) -> str:
    """Return the admin's user id, signing the account up when sign-in says the credentials are invalid"""
    try:
        response = supabase.auth.sign_in_with_password({"email": email, "password": password})
        user_id = response.user.id
        logger.info(f"Admin user already exists. User ID: {user_id}")
        supabase.auth.sign_out()
        return user_id
    except Exception as e:
        if "invalid login credentials" not in str(e).lower():
            raise

    logger.info("Admin user does not exist or password incorrect. Attempting to sign up...")
    response = supabase.auth.sign_up({"email": email, "password": password})
    if not response.user:
        raise RuntimeError("Sign up returned no user")
    logger.info(f"Admin user created successfully. User ID: {response.user.id}")
    logger.info("If email confirmations are enabled, confirm the email before logging in.")
    return response.user.id


def upsert_admin_profile(supabase: Client, user_id: str, email: str, name: str):
    supabase.rpc("internal_upsert_profile_for_user", {
        "p_user_id": user_id,
        "p_email": email,
        "p_name": name,
        "p_avatar_url": ADMIN_AVATAR_URL
    }).execute()
    logger.info(f"Admin profile upserted successfully for {email}")


def main():
    """Main function to set up the admin account"""
    if not settings.admin_email or not settings.admin_password:
        logger.error("ADMIN_EMAIL and ADMIN_PASSWORD must be set")
        sys.exit(1)
    try:
        supabase = get_supabase()
        logger.info(f"Setting up admin user: {settings.admin_email}")
        user_id = get_or_create_admin(supabase, settings.admin_email, settings.admin_password)
        upsert_admin_profile(supabase, user_id, settings.admin_email, settings.admin_name)
        logger.info("Admin setup finished.")
    except Exception as e:
        logger.error(f"Error during admin setup: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
