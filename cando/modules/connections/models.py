# Supabase tables: user_connections, company_connections
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

user_connections:
- id: uuid (primary key)
- requester_id: uuid (foreign key to profiles.id)
- addressee_id: uuid (foreign key to profiles.id)
- status: text - PENDING, ACCEPTED, DECLINED, BLOCKED
- created_at / updated_at: timestamp

company_connections:
- id: uuid (primary key)
- requester_company_id: uuid (foreign key to companies.id)
- addressee_company_id: uuid (foreign key to companies.id)
- status: text - PENDING, ACCEPTED, DECLINED, BLOCKED
- created_at / updated_at: timestamp

RPC (user side, scoped to auth.uid()):
- get_user_connection_status_with(p_other_user_id) -> status text or null
- send_user_connection_request(p_addressee_id)
- get_pending_user_connection_requests() -> user_connections rows addressed to the caller
- get_sent_user_connection_requests() -> user_connections rows sent by the caller
- respond_user_connection_request(p_request_id, p_response 'accept' | 'decline')
- remove_user_connection(p_other_user_id)
- get_user_network(p_target_user_id)

RPC (company side):
- is_company_admin(p_user_id, p_company_id) -> boolean
- get_company_connection_status_with(p_acting_company_id, p_other_company_id)
- send_company_connection_request(p_acting_company_id, p_target_company_id)
- get_pending_company_connection_requests(p_for_company_id)
- get_sent_company_connection_requests(p_from_company_id)
- respond_company_connection_request(p_request_id, p_response 'ACCEPTED' | 'DECLINED')
- remove_company_connection(p_acting_company_id, p_other_company_id)
- get_company_connections(p_company_id)
"""
