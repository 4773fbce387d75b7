"""
Database Migrations - Schema setup and versioning.
"""

import sqlite3
from pathlib import Path
from typing import Optional


SCHEMA_VERSION = 1

SCHEMA_SQL = """
-- Candidate profiles built by the intake chat
CREATE TABLE IF NOT EXISTS students (
    id TEXT PRIMARY KEY,
    session_id TEXT NOT NULL UNIQUE,
    name TEXT DEFAULT '',
    email TEXT,
    phone TEXT DEFAULT '',
    is_active INTEGER NOT NULL DEFAULT 1,
    replaced_by TEXT REFERENCES students(id),
    education TEXT,
    work_experience TEXT,
    location TEXT,
    availability TEXT,
    links TEXT,
    cv_file TEXT,
    personal_statement TEXT DEFAULT '',
    additional_info TEXT DEFAULT '',
    special_roles TEXT DEFAULT '',
    soft_skills TEXT DEFAULT '',
    key_info TEXT DEFAULT '',
    profile_complete INTEGER NOT NULL DEFAULT 0,
    terms_accepted INTEGER NOT NULL DEFAULT 0,
    terms_accepted_date TEXT,
    current_step INTEGER NOT NULL DEFAULT 1,
    chat_completed INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    last_updated TEXT NOT NULL,
    last_accessed TEXT NOT NULL
);

-- Recruiter exposure grants
CREATE TABLE IF NOT EXISTS exposures (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    viewer_id TEXT NOT NULL,
    student_id TEXT NOT NULL REFERENCES students(id),
    is_active INTEGER NOT NULL DEFAULT 1,
    expires_at TEXT NOT NULL,
    created_at TEXT NOT NULL
);

-- Schema version tracking
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY
);

-- At most one active profile per email
CREATE UNIQUE INDEX IF NOT EXISTS idx_students_active_email
    ON students(email) WHERE is_active = 1 AND email IS NOT NULL;

-- Indexes for performance
CREATE INDEX IF NOT EXISTS idx_students_phone ON students(phone);
CREATE INDEX IF NOT EXISTS idx_students_active ON students(is_active, profile_complete);
CREATE INDEX IF NOT EXISTS idx_exposures_viewer ON exposures(viewer_id, is_active);
"""


def run_migrations(db_path: Path, conn: Optional[sqlite3.Connection] = None) -> None:
    """
    Run database migrations to ensure schema is up to date.

    Args:
        db_path: Path to the SQLite database file.
        conn: Optional existing connection to use.
    """
    should_close = conn is None
    if conn is None:
        conn = sqlite3.connect(str(db_path))

    try:
        cursor = conn.cursor()

        # Check current version
        cursor.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='schema_version'"
        )
        version_table_exists = cursor.fetchone() is not None

        current_version = 0
        if version_table_exists:
            cursor.execute("SELECT MAX(version) FROM schema_version")
            row = cursor.fetchone()
            current_version = row[0] if row and row[0] else 0

        # Run migrations if needed
        if current_version < SCHEMA_VERSION:
            cursor.executescript(SCHEMA_SQL)

            # Record new version
            cursor.execute(
                "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
                (SCHEMA_VERSION,)
            )
            conn.commit()

    finally:
        if should_close:
            conn.close()
