# Supabase table: chores
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key, default: gen_random_uuid())
- title: text (not null)
- description: text (nullable)
- assignee_id: uuid (foreign key to team_members.id, nullable, on delete set null)
- start_date: date (not null) - first possible occurrence
- recurrence: jsonb (nullable) - null for one-time chores, otherwise
    {"frequency": "daily" | "weekly" | "monthly",
     "interval": 1,
     "daysOfWeek": [1, 3],      -- weekly only, 0=Sunday .. 6=Saturday
     "dayOfMonth": 15,          -- monthly only
     "endDate": "2026-12-31"}   -- optional, inclusive
- created_at: timestamp (default: now())

Deleting a chore cascades to completions (on delete cascade).
"""
