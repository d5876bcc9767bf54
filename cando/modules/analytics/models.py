# Supabase tables: analytics_events, user_subscriptions
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

user_subscriptions:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, not null)
- tier: text (not null) - values: REGULAR, PRO
- status: text (not null) - values: active, trialing, canceled, past_due
- created_at: timestamp (default: now())

analytics_events:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, not null)
- event_type: text (not null) - see ANALYTICS_EVENT_TYPES in schemas.py
- event_data: jsonb (default: '{}')
- created_at: timestamp (default: now())

Only PRO subscribers have events recorded.
"""
