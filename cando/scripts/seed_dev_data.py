"""
Seed Dev Data Script
Fills a development project with users, companies, posts, comments, connections
and company follows. Runs on the service role key; users and companies are
matched on email and name, so re-running only adds what is missing.
"""

import random
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from cando.database.supabase_client import get_service_supabase
from cando.modules.tags.catalog import TAG_CATALOG
from supabase import Client
from typing import List, Optional, Tuple
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEV_PASSWORD = "password"
NUM_USERS = 7
POSTS_PER_USER = 3
COMMENTS_PER_POST = 2

POST_CATEGORIES = [
    "general", "business_update", "industry_news", "job_opportunity",
    "event", "question", "partnership", "product_launch"
]
FIRST_NAMES = ["Alice", "Bob", "Charlie", "Diana", "Edward", "Fiona", "George", "Hannah", "Ian", "Julia"]
LAST_NAMES = ["Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis"]
COMPANY_PREFIXES = ["Apex", "Nova", "Quantum", "Stellar", "Zenith", "Momentum", "Synergy", "Catalyst"]
COMPANY_SUFFIXES = ["Solutions", "Dynamics", "Innovations", "Group", "Enterprises", "Labs", "Works"]
POST_THEMES = [
    "Just launched our new {product}! #launch",
    "Exciting business update: we've reached {milestone}. Thanks to our amazing team!",
    "Quick question for the community: how do you handle {challenge}?",
    "We're hiring a {job_role}. Know anyone?",
]
COMMENT_PHRASES = [
    "This is great news! Congratulations!",
    "Interesting perspective, thanks for sharing.",
    "Could you elaborate a bit more on that?",
    "Looking forward to seeing more!",
]


def mock_post_content(rng: random.Random) -> str:
    return rng.choice(POST_THEMES).format(
        product=rng.choice(["WidgetPro", "ServiceX", "PlatformZ"]),
        milestone=rng.choice(["1000 users", "ISO certification", "record profits"]),
        challenge=rng.choice(["scaling operations", "customer retention", "supply chain issues"]),
        job_role=rng.choice(["Software Engineer", "Marketing Manager", "Sales Lead"]),
    )


def avatar_for(name: str) -> str:
    return f"https://api.dicebear.com/7.x/initials/svg?seed={name.replace(' ', '%20')}"


def ensure_user(supabase: Client, email: str, name: str) -> Tuple[Optional[str], bool]:
    """Return (user id, created), creating a confirmed auth user and profile when the email is new"""
    existing = supabase.table("profiles")\
        .select("id")\
        .eq("email", email)\
        .limit(1)\
        .execute()
    if existing.data:
        logger.debug(f"User {email} already exists")
        return existing.data[0]["id"], False
    try:
        response = supabase.auth.admin.create_user({
            "email": email,
            "password": DEV_PASSWORD,
            "email_confirm": True
        })
    except Exception as e:
        logger.error(f"Error creating user {email}: {e}")
        return None, False
    user_id = response.user.id
    supabase.rpc("internal_upsert_profile_for_user", {
        "p_user_id": user_id,
        "p_email": email,
        "p_name": name,
        "p_avatar_url": avatar_for(name)
    }).execute()
    logger.info(f"Created user {name} <{email}>")
    return user_id, True


def ensure_company(supabase: Client, rng: random.Random, owner_id: str, name: str) -> str:
    existing = supabase.table("companies")\
        .select("id")\
        .eq("name", name)\
        .limit(1)\
        .execute()
    if existing.data:
        return existing.data[0]["id"]
    result = supabase.table("companies").insert({
        "name": name,
        "owner_id": owner_id,
        "description": f"{name} is a demo company created for development.",
        "industry_tags": rng.sample(TAG_CATALOG["industry"], 2),
        "capability_tags": rng.sample(TAG_CATALOG["capability"], 2),
        "region_tags": rng.sample(TAG_CATALOG["region"], 1),
        "verification_status": rng.choice(["UNVERIFIED", "TIER1_PENDING", "TIER1_VERIFIED"])
    }).execute()
    company_id = result.data[0]["id"]
    supabase.table("company_users").insert({
        "company_id": company_id,
        "user_id": owner_id,
        "role": "owner",
        "is_primary": True
    }).execute()
    logger.info(f"Created company {name}")
    return company_id


def seed_posts(supabase: Client, rng: random.Random, user_ids: List[str]) -> int:
    created = 0
    for user_id in user_ids:
        for _ in range(POSTS_PER_USER):
            post = supabase.table("posts").insert({
                "user_id": user_id,
                "content": mock_post_content(rng),
                "category": rng.choice(POST_CATEGORIES)
            }).execute()
            post_id = post.data[0]["id"]
            created += 1
            for commenter in rng.sample(user_ids, min(COMMENTS_PER_POST, len(user_ids))):
                supabase.table("post_comments").insert({
                    "post_id": post_id,
                    "user_id": commenter,
                    "content": rng.choice(COMMENT_PHRASES)
                }).execute()
    return created


def seed_connections(supabase: Client, hub_id: str, others: List[str]) -> int:
    """Connect the hub user with everyone else, both directions accepted"""
    created = 0
    for other_id in others:
        try:
            supabase.table("user_connections").insert([
                {"requester_id": hub_id, "addressee_id": other_id, "status": "ACCEPTED"},
                {"requester_id": other_id, "addressee_id": hub_id, "status": "ACCEPTED"}
            ]).execute()
            created += 1
        except Exception as e:
            logger.debug(f"Skipping connection {hub_id} <-> {other_id}: {e}")
    return created


def seed_follows(supabase: Client, rng: random.Random, user_ids: List[str], company_ids: List[str]) -> int:
    created = 0
    for user_id in user_ids:
        for company_id in rng.sample(company_ids, min(2, len(company_ids))):
            existing = supabase.table("user_company_follows")\
                .select("user_id")\
                .eq("user_id", user_id)\
                .eq("company_id", company_id)\
                .limit(1)\
                .execute()
            if existing.data:
                continue
            supabase.table("user_company_follows").insert({
                "user_id": user_id,
                "company_id": company_id
            }).execute()
            created += 1
    return created


def main():
    """Main function to seed development data"""
    try:
        supabase = get_service_supabase()
        rng = random.Random(42)
        logger.info("Starting dev data seeding...")

        user_ids = []
        new_user_ids = []
        for i in range(NUM_USERS):
            name = f"{FIRST_NAMES[i % len(FIRST_NAMES)]} {LAST_NAMES[i % len(LAST_NAMES)]}"
            email = f"{name.lower().replace(' ', '.')}@example.com"
            user_id, created = ensure_user(supabase, email, name)
            if user_id:
                user_ids.append(user_id)
                if created:
                    new_user_ids.append(user_id)

        company_ids = []
        for i, user_id in enumerate(user_ids):
            name = f"{COMPANY_PREFIXES[i % len(COMPANY_PREFIXES)]} {COMPANY_SUFFIXES[i % len(COMPANY_SUFFIXES)]}"
            company_ids.append(ensure_company(supabase, rng, user_id, name))

        # Posts only for users created in this run so reruns do not duplicate content
        post_count = seed_posts(supabase, rng, new_user_ids) if new_user_ids else 0
        connection_count = seed_connections(supabase, user_ids[0], user_ids[1:]) if user_ids else 0
        follow_count = seed_follows(supabase, rng, user_ids, company_ids)

        logger.info("Seeding completed successfully!")
        logger.info(
            f"Total: {len(user_ids)} users, {len(company_ids)} companies, {post_count} posts, "
            f"{connection_count} connections, {follow_count} follows"
        )
    except Exception as e:
        logger.error(f"Error during seeding: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
