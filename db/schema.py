# SQL schema for the Recite database

SCHEMA_VERSION = 1

# Each table keeps its key in a real column and the full record as JSON.
TABLE_KEYS = {
    "texts": "id",
    "sessions": "date",
}

SCHEMA_SQL = """
-- Texts (lines are embedded in the record)
CREATE TABLE IF NOT EXISTS texts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    record TEXT NOT NULL
);

-- Practice sessions, one per calendar date
CREATE TABLE IF NOT EXISTS sessions (
    date TEXT PRIMARY KEY,
    record TEXT NOT NULL
);
"""
