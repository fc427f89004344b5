# Supabase table: team_members
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key, default: gen_random_uuid())
- name: text (not null)
- color: text (not null) - hex color, e.g. '#3B82F6'
- created_at: timestamp (default: now())

Realtime: table must be part of the supabase_realtime publication.
Deleting a member does not cascade to chores; chores.assignee_id is set to
null (on delete set null) so that orphaned chores render as unassigned.
"""
