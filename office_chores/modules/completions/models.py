# Supabase table: completions
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key, default: gen_random_uuid())
- chore_id: uuid (foreign key to chores.id, not null, on delete cascade)
- occurrence_date: date (not null) - which instance of the chore was done
- completed_at: timestamptz (not null, default: now())
- completed_by_id: uuid (foreign key to team_members.id, not null)
- unique constraint on (chore_id, occurrence_date)

Realtime: table must be part of the supabase_realtime publication with
replica identity full, so delete events carry the old row id.
"""
