# Supabase table: profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, foreign key to auth.users.id)
- name: text (nullable)
- email: text (nullable)
- avatar_url: text (nullable) - public URL in the 'avatars' bucket
- is_network_public: boolean (nullable) - others may browse this user's connections
- subscription_tier: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Rows are created by the on-signup trigger or internal_upsert_profile_for_user().

RPC:
- get_user_network(p_target_user_id uuid) -> setof connection rows
"""
