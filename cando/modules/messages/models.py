# Supabase table: messages; view: message_view
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

messages:
- id: uuid (primary key)
- sender_id: uuid (not null) - user id, or company id when sent as a company
- sender_type: text (not null) - values: user, company
- receiver_id: uuid (not null)
- receiver_type: text (not null) - values: user, company
- sent_by_user_id: uuid (not null) - the human behind a company-sent message
- content: text (not null, check: 1..5000 chars)
- attachments: jsonb (default: '[]') - [{url, name, content_type, size}]
- read: boolean (default: false)
- created_at: timestamp (default: now())

RPC:
- get_conversations(p_acting_as_company_id uuid null)
    -> partner_id, partner_type, partner_name, partner_avatar_url, last_message, last_message_at, unread_count
- get_messages_for_conversation(p_partner_id uuid, p_partner_type text, p_acting_as_company_id uuid null)
- send_message(p_receiver_id uuid, p_receiver_type text, p_content text, p_attachments jsonb,
               p_acting_as_company_id uuid null)
    raises P0001 'Rate limit ...' when the database throttle trips, 23514 for invalid content,
    42501 when the caller may not act as the company
"""
