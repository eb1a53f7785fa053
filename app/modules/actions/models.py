# Supabase table: action_history
# Append-only audit log; rows are never updated or deleted by the API.

"""
Expected Supabase table structure:
- id: uuid (primary key, default: gen_random_uuid())
- user_id: uuid (foreign key to users.id, nullable)
- bin_id: uuid (foreign key to trash_bins.id, nullable)
- action: text (not null) - e.g. EMPTY_BIN
- notes: text (nullable)
- created_at: timestamp (default: now())
"""

EMPTY_BIN = "EMPTY_BIN"
ACTION_COLUMNS = "id, user_id, bin_id, action, notes, created_at"
