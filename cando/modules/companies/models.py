# Supabase tables: companies, company_users, user_company_follows; view: public_companies
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

companies:
- id: uuid (primary key)
- name: text (not null, 1..100 chars)
- trading_name: text (nullable)
- registration_number: text (nullable)
- tax_number: text (nullable)
- email: text (nullable)
- phone: text (nullable)
- website: text (nullable)
- address: jsonb (nullable) - {street, city, province, postal_code, country}
- description: text (nullable)
- logo_url: text (nullable) - public URL in the 'company_logos' bucket
- industry_tags, capability_tags, region_tags: text[] (default: '{}')
- verification_status: text (default: 'unverified')
- owner_id: uuid (foreign key to auth.users.id, not null)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

company_users:
- id: uuid (primary key)
- company_id: uuid (foreign key to companies.id, not null)
- user_id: uuid (foreign key to auth.users.id, not null)
- role: text (not null) - values: owner, admin, member, viewer
- is_primary: boolean (default: false) - at most one true per user
- created_at: timestamp (default: now())
- unique constraint on (company_id, user_id)

public_companies (view): the directory-safe columns of companies plus is_verified

user_company_follows: maintained only through the follow RPCs below

RPC:
- get_user_companies(p_user_id uuid) -> companies with the caller's role and is_primary
- is_company_admin(p_user_id uuid, p_company_id uuid) -> boolean
- follow_company(p_company_id uuid) / unfollow_company(p_company_id uuid)
- get_company_follow_status(p_company_id uuid) -> boolean
- get_followed_companies(p_user_id uuid) -> setof companies
"""
