"""Database schema DDL — the ``habits`` table."""

HABITS_TABLE = "habits"

SCHEMA_DDL = """
PRAGMA journal_mode=WAL;

-- ==========================================================================
-- Habits
--   is_completed     0 or 1
--   created_at       epoch millis
--   completed_dates  comma-delimited YYYY-MM-DD strings
-- ==========================================================================
CREATE TABLE IF NOT EXISTS habits (
    id              TEXT PRIMARY KEY NOT NULL,
    title           TEXT,
    description     TEXT,
    is_completed    INTEGER NOT NULL,
    created_at      INTEGER NOT NULL,
    completed_dates TEXT
);
"""
