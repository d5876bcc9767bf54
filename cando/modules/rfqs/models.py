# Supabase tables: rfqs, quotes
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

rfqs:
- id: uuid (primary key)
- company_id: uuid (foreign key to companies.id, not null)
- title: text (not null)
- description: text (not null)
- budget: numeric (nullable)
- currency: text (default: 'USD')
- deadline: date (nullable)
- category: text (nullable)
- required_certifications: text[] (nullable)
- attachments: text[] (nullable) - object paths in the 'rfq-attachments' bucket
- visibility: text - public, private, invited
- tags: text[] (nullable)
- requirements: jsonb (nullable)
- status: text - open, in_progress, closed
- created_at / updated_at: timestamp

quotes:
- id: uuid (primary key)
- rfq_id: uuid (foreign key to rfqs.id)
- company_id: uuid (foreign key to companies.id) - the quoting company
- amount: numeric (not null)
- currency: text (default: 'USD')
- delivery_time: text (nullable)
- validity_period: text (nullable)
- status: text - draft, submitted, accepted, rejected, withdrawn
- notes: text (nullable)
- attachments: text[] (nullable)
- terms_and_conditions: text (nullable)
- technical_specifications: jsonb (nullable)
- created_at / updated_at: timestamp
"""
