# Supabase tables: company_invitations, company_members
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py (service role client)

"""
Expected Supabase table structure:

company_invitations:
- id: uuid (primary key)
- company_id: uuid (foreign key to companies.id, not null)
- email: text (not null)
- role: text (not null) - values: admin, member
- status: text (not null, default: 'pending') - values: pending, accepted
- expires_at: timestamp (nullable) - seven days after creation
- created_at: timestamp (default: now())

company_members (view or table, keyed by email):
- id: uuid
- company_id: uuid
- email: text

Accepting an invitation inserts the company_users row for the invitee.
"""
