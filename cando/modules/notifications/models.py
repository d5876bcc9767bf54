# Supabase table: notifications
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

notifications:
- id: uuid (primary key)
- user_profile_id: uuid (foreign key to profiles.id)
- type: text - e.g. new_connection_request, post_like, new_message
- content: text
- link: text (nullable) - in-app path the notification points to
- is_read: boolean (default: false)
- created_at: timestamp (default: now())

RPC (all scoped to auth.uid()):
- get_user_notifications(p_limit int, p_page_number int)
    -> rows of the page, each carrying unread_count for the whole inbox
- mark_notification_as_read(p_notification_id uuid)
- mark_all_notifications_as_read()
"""
