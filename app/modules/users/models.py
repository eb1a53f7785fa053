# Supabase table: users
# The schema is documented in app/modules/auth/models.py; this module only
# reads and edits profile fields. Authentication data lives in auth.users.

USER_COLUMNS = "id, name, email, phone, role, avatar_url, created_at, updated_at, last_login"
EDITABLE_FIELDS = ("name", "phone", "avatar_url")
