# Supabase tables: profiles, identities, auth.users
# This file documents the expected database schema
# Actual operations are handled through SupabaseTable in app.database.supabase_client

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id or identities.id)
- username: text (not null)
- full_name: text (nullable)
- avatar_url: text (nullable)
- role: text (not null, default: 'user')
- created_at: timestamp (default: now())
- updated_at: timestamp (set on insert and on every update)

identities (only used when AUTH_BACKEND=password):
- id: uuid (primary key)
- email: text (unique, not null, stored lowercase)
- password_hash: text (bcrypt, not null)
- user_metadata: jsonb (default: '{}')
- created_at: timestamp (default: now())

With AUTH_BACKEND=supabase credentials live in auth.users, managed by
Supabase Auth; this application never reads password material.
"""
