# Supabase tables: company_verification_requests, companies (verification columns)
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

company_verification_requests:
- id: uuid (primary key)
- company_id: uuid (foreign key to companies.id)
- business_legal_name, business_number: text
- submitter_full_name, submitter_email: text
- company_website, company_linkedin, company_phone: text (nullable)
- status: text - pending, approved, rejected
- submitted_at: timestamp (default: now())

companies (verification columns):
- verification_status: UNVERIFIED, TIER1_PENDING, TIER1_VERIFIED, TIER1_REJECTED,
  TIER2_PENDING, TIER2_FULLY_VERIFIED, TIER2_REJECTED
- self_attestation_completed: boolean
- business_number: text
- public_presence_links: text[]
- tier2_document_type, tier2_document_filename, tier2_document_storage_path: text
- admin_notes: text

Storage bucket 'tier2-verification-documents' is private; objects live under <company_id>/.

RPC:
- submit_company_verification_request(p_company_id, p_business_legal_name, p_business_number,
  p_submitter_full_name, p_submitter_email, p_company_website, p_company_linkedin, p_company_phone)
- request_company_tier1_verification(p_company_id, p_business_number,
  p_public_presence_links, p_self_attestation_completed)
- request_company_tier2_verification(p_company_id, p_tier2_document_type,
  p_tier2_document_filename, p_tier2_document_storage_path)
"""
