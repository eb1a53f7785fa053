# Supabase table: notifications
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key, default: gen_random_uuid())
- bin_id: uuid (foreign key to trash_bins.id, on delete cascade)
- message: text (not null)
- type: text (not null, default 'info') - info | warning | critical
- read: boolean (default false)
- created_at: timestamp (default: now())

Read state is shared: notifications are per bin, not per user.
"""

NOTIFICATION_COLUMNS = "id, bin_id, message, type, read, created_at, trash_bins(id, name, location)"
