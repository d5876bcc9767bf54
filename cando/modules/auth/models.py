# Supabase Auth
# Accounts, sessions and password recovery are owned by Supabase Auth
# (auth.users). The public.profiles row for each account is created by a
# database trigger on sign-up, or by internal_upsert_profile_for_user for
# accounts provisioned by scripts/setup_admin.py.

"""
Supabase Auth calls used by this module:
- auth.sign_up()                     - register (confirmation mail points at FRONTEND_URL/auth/callback)
- auth.sign_in_with_password()       - login
- auth.refresh_session()             - exchange a refresh token for a new session
- auth.get_user(jwt)                 - resolve the bearer token on every request
- auth.reset_password_for_email()    - send the recovery mail (FRONTEND_URL/auth/reset-password)
- auth.admin.update_user_by_id()     - set the new password (service role)
- auth.admin.sign_out()              - revoke a session (service role)

RPC:
- is_current_user_admin() -> boolean
"""
