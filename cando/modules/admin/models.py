# Admin operations run through security-definer RPCs that check is_current_user_admin()
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
RPC:
- is_current_user_admin() -> boolean
- admin_get_all_users() -> profiles joined with auth data
- process_verification_request(p_request_id, p_status 'approved' | 'rejected')
- get_company_verification_stats() -> rows of {verification_status, count}
- admin_get_all_companies_with_owner_info() -> rows keyed by company_id / company_name
- admin_update_company_verification(p_company_id, p_new_status, p_new_admin_notes) -> updated company
- admin_get_post_flags(p_page_number, p_page_size, p_status) -> rows with flag_id, post_id, total_count
- admin_get_comment_flags(p_page_number, p_page_size, p_status) -> rows with flag_id, comment_id, total_count
- admin_update_post_flag_status(p_flag_id, p_new_status, p_admin_notes)
- admin_update_comment_flag_status(p_flag_id, p_new_status, p_admin_notes)
- admin_remove_post(p_post_id, p_reason, p_related_flag_id, p_flag_table)
- admin_remove_comment(p_comment_id, p_reason, p_related_flag_id, p_flag_table)
- admin_warn_user(p_target_profile_id, p_reason, p_related_content_id, p_related_content_type,
  p_related_flag_id, p_flag_table)
- admin_ban_user(p_target_profile_id, p_reason, p_duration_days, p_related_content_id,
  p_related_content_type, p_related_flag_id, p_flag_table) - no duration bans permanently

Table read directly:
- company_verification_requests (see modules/verifications/models.py), joined to companies(name)
"""
