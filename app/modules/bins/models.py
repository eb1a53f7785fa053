# Supabase table: trash_bins
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key, default: gen_random_uuid())
- name: text (not null)
- location: text (not null) - human readable address / area
- latitude: double precision (nullable)
- longitude: double precision (nullable)
- fill_level: integer (0-100, default 0)
- status: text (default 'normal') - normal | warning | full, derived from fill_level
- battery_level: integer (0-100, nullable)
- sensor_id: text (unique, nullable) - id reported by the bin's sensor
- capacity: integer (litres, nullable)
- notes: text (nullable)
- images: text[] (nullable)
- field_officer_id: uuid (foreign key to users.id, nullable)
- last_collection: timestamp (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
