# Supabase Auth + local users table
# Supabase Auth (auth.users) owns identities, passwords and email confirmation.
# The public.users table below is the local profile, keyed by the Auth id.

"""
Supabase Auth provides:
- auth.sign_up() - Register new users and send the confirmation email
- auth.resend() - Resend the signup confirmation email
- auth.sign_in_with_password() - Verify credentials

This API then issues its own session token (see app.core.security) carrying
the merged profile: id, email, name, role.

Expected Supabase table structure:

users:
- id: uuid (primary key, same value as auth.users.id)
- name: text (not null)
- email: text (unique, not null)
- phone: text (nullable)
- role: text (not null, default 'public') - public | officer | admin
- password_hash: text (nullable) - legacy, Auth verifies passwords
- avatar_url: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
- last_login: timestamp (nullable)
"""
