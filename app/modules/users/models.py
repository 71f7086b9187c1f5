# Supabase table: members
# This file documents the expected database schema
# Actual operations are handled through SupabaseTable in service.py

"""
Expected Supabase table structure:

members:
- id: uuid (primary key, same id as the auth identity)
- name: text (not null)
- email: text (unique, not null)
- skills: text[] (default: '{}')
- created_at: timestamp (default: now())

Credentials are owned by the configured auth provider; this table never
holds password material.
"""
