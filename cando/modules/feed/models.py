# Supabase tables: posts, post_likes, post_comments, post_bookmarks, post_flags, comment_flags
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

posts:
- id: uuid (primary key)
- user_id: uuid (foreign key to profiles.id, not null)
- company_id: uuid (nullable) - set when posted as a company
- content: text
- category: text (default: 'general')
- media_urls: text[] - public URLs in the 'post_media' bucket
- media_types: text[] - MIME type per media url
- author_subscription_tier: text - PRO or REGULAR at time of posting
- created_at: timestamp (default: now())

post_likes:      (post_id, user_id) unique
post_bookmarks:  (post_id, user_id) unique, maintained by toggle_post_bookmark
post_comments:   id, post_id, user_id, content, parent_comment_id (nullable), status, created_at
post_flags:      id, post_id, user_id, reason (nullable), status, unique (post_id, user_id)
comment_flags:   id, comment_id, user_id, reason (nullable), status, unique (comment_id, user_id)

RPC:
- get_feed_posts(p_user_id uuid, p_limit int, p_offset int) -> ranked feed rows
- get_post_comments_threaded(p_post_id uuid) -> rows with user_name, user_avatar_url, depth, sort_path
- toggle_post_bookmark(p_post_id uuid) -> {is_bookmarked, bookmark_count}
- get_pymk_suggestions(p_requesting_user_id uuid, p_limit int)
- get_cymk_suggestions(p_requesting_user_id uuid, p_limit int)
"""
