"""
SQLite Adapter - Database operations for the intake core.

Students keep identity and flags in columns and nested sections as JSON.
A partial unique index enforces one active profile per email.
"""

import json
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, AsyncIterator, Mapping, Optional, Sequence

import aiosqlite

from src.application.interfaces import StoragePort
from src.domain.entities import Exposure, Student
from src.domain.errors import ConflictError, StorageError
from src.domain.value_objects import StudentFilter
from .migrations import run_migrations


logger = logging.getLogger(__name__)


JSON_COLUMNS = (
    "education",
    "work_experience",
    "location",
    "availability",
    "links",
    "cv_file",
)

STUDENT_COLUMNS = (
    "id",
    "session_id",
    "name",
    "email",
    "phone",
    "is_active",
    "replaced_by",
    *JSON_COLUMNS,
    "personal_statement",
    "additional_info",
    "special_roles",
    "soft_skills",
    "key_info",
    "profile_complete",
    "terms_accepted",
    "terms_accepted_date",
    "current_step",
    "chat_completed",
    "created_at",
    "last_updated",
    "last_accessed",
)

# Columns the identity resolver may match on
MATCHABLE_COLUMNS = frozenset({"email", "phone"})

_UPSERT_SQL = (
    f"INSERT INTO students ({', '.join(STUDENT_COLUMNS)}) "
    f"VALUES ({', '.join('?' for _ in STUDENT_COLUMNS)}) "
    "ON CONFLICT(id) DO UPDATE SET "
    + ", ".join(f"{col} = excluded.{col}" for col in STUDENT_COLUMNS if col != "id")
)


def _timestamp(value: datetime) -> str:
    return value.isoformat(timespec="microseconds")


def student_to_row(student: Student) -> tuple:
    """Flatten a Student into column order."""
    data = student.to_dict()
    progress = data.pop("chat_progress")
    data["current_step"] = progress["current_step"]
    data["chat_completed"] = int(progress["completed"])
    for column in JSON_COLUMNS:
        data[column] = json.dumps(data[column], ensure_ascii=False) if data[column] else None
    for column in ("is_active", "profile_complete", "terms_accepted"):
        data[column] = int(data[column])
    return tuple(data[column] for column in STUDENT_COLUMNS)


def row_to_student(row: Mapping[str, Any]) -> Student:
    """Rebuild a Student from a database row."""
    data = dict(row)
    for column in JSON_COLUMNS:
        data[column] = json.loads(data[column]) if data[column] else None
    data["chat_progress"] = {
        "current_step": data.pop("current_step"),
        "completed": bool(data.pop("chat_completed")),
    }
    return Student.from_dict(data)


# Filter fields stored inside JSON columns
_JSON_FIELDS = {
    "institution": "json_extract(education, '$.institution')",
    "degree_field": "json_extract(education, '$.degree_field')",
    "current_degree": "json_extract(education, '$.current_degree')",
    "study_year": "json_extract(education, '$.study_year')",
    "gpa": "json_extract(education, '$.gpa')",
    "has_experience": "json_extract(work_experience, '$.has_experience')",
    "city": "json_extract(location, '$.city')",
    "hours_per_week": "json_extract(availability, '$.hours_per_week')",
    "flexible_hours": "json_extract(availability, '$.flexible_hours')",
}

SEARCH_FIELDS = ("name", _JSON_FIELDS["institution"], _JSON_FIELDS["degree_field"], _JSON_FIELDS["city"])


def _like_pattern(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def filter_clauses(filters: Optional[StudentFilter]) -> tuple[str, list[Any]]:
    """
    Translate a StudentFilter into a WHERE clause over active rows.

    Returns:
        (clause, params); None filters select every active row.
    """
    clauses = ["is_active = 1"]
    params: list[Any] = []
    if filters is None:
        return " AND ".join(clauses), params

    if filters.completed is not None:
        clauses.append("profile_complete = ?")
        params.append(int(filters.completed))

    if filters.search:
        clauses.append(
            "(" + " OR ".join(f"lower({col}) LIKE lower(?) ESCAPE '\\'" for col in SEARCH_FIELDS) + ")"
        )
        params.extend([_like_pattern(filters.search)] * len(SEARCH_FIELDS))

    if filters.gpa_min is not None:
        clauses.append(f"{_JSON_FIELDS['gpa']} >= ?")
        params.append(filters.gpa_min)
    if filters.gpa_max is not None:
        clauses.append(f"{_JSON_FIELDS['gpa']} <= ?")
        params.append(filters.gpa_max)

    for name in ("has_experience", "flexible_hours"):
        value = getattr(filters, name)
        if value is not None:
            clauses.append(f"{_JSON_FIELDS[name]} = ?")
            params.append(int(value))

    for name in ("institution", "degree_field", "current_degree", "hours_per_week", "study_year"):
        value = getattr(filters, name)
        if value:
            clauses.append(f"{_JSON_FIELDS[name]} = ?")
            params.append(value)

    if filters.city:
        clauses.append(f"lower({_JSON_FIELDS['city']}) LIKE lower(?) ESCAPE '\\'")
        params.append(_like_pattern(filters.city))

    return " AND ".join(clauses), params


class SQLiteAdapter(StoragePort):
    """
    SQLite database adapter for the intake core.

    Provides async CRUD operations for students and exposure grants.
    """

    def __init__(self, db_path: Path) -> None:
        """
        Initialize the adapter.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = db_path
        self._connection: Optional[aiosqlite.Connection] = None

    async def initialize(self) -> None:
        """Initialize database and run migrations."""
        # Ensure parent directory exists
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        # Run migrations synchronously first
        run_migrations(self.db_path)

        # Open async connection
        self._connection = await aiosqlite.connect(str(self.db_path))
        self._connection.row_factory = aiosqlite.Row

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    @property
    def conn(self) -> aiosqlite.Connection:
        """Get the active connection or raise error."""
        if not self._connection:
            raise RuntimeError("Database not initialized. Call initialize() first.")
        return self._connection

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """Commit on success, roll back and translate errors on failure."""
        try:
            yield self.conn
            await self.conn.commit()
        except aiosqlite.IntegrityError as e:
            await self.conn.rollback()
            field = "session_id" if "session_id" in str(e) else "email"
            raise ConflictError(f"Constraint violated: {e}", field=field) from e
        except aiosqlite.Error as e:
            await self.conn.rollback()
            logger.error(f"Storage write failed: {e}")
            raise StorageError(f"Storage write failed: {e}") from e
        except Exception:
            await self.conn.rollback()
            raise

    async def _fetch_student(self, query: str, params: Sequence[Any]) -> Optional[Student]:
        try:
            cursor = await self.conn.execute(query, params)
            row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise StorageError(f"Storage read failed: {e}") from e
        return row_to_student(row) if row else None

    # ==================== Student Operations ====================

    async def find_by_id(self, student_id: str) -> Optional[Student]:
        """Get a student by record id."""
        return await self._fetch_student(
            "SELECT * FROM students WHERE id = ?",
            (student_id,)
        )

    async def find_by_session_id(
        self,
        session_id: str,
        active_only: bool = False,
    ) -> Optional[Student]:
        """Get the student bound to a chat session."""
        query = "SELECT * FROM students WHERE session_id = ?"
        if active_only:
            query += " AND is_active = 1"
        return await self._fetch_student(query, (session_id,))

    async def find_one_active_matching(
        self,
        conditions: Mapping[str, str],
        exclude_id: Optional[str] = None,
    ) -> Optional[Student]:
        """First active student matching any of the conditions, by insertion order."""
        if not conditions:
            return None
        unknown = set(conditions) - MATCHABLE_COLUMNS
        if unknown:
            raise ValueError(f"Unsupported match columns: {sorted(unknown)}")

        clauses = [f"{column} = ?" for column in conditions]
        params: list[Any] = list(conditions.values())
        query = f"SELECT * FROM students WHERE is_active = 1 AND ({' OR '.join(clauses)})"
        if exclude_id:
            query += " AND id != ?"
            params.append(exclude_id)
        query += " ORDER BY rowid LIMIT 1"

        return await self._fetch_student(query, params)

    async def save(self, student: Student) -> None:
        """Insert or update a student."""
        async with self._transaction() as conn:
            await conn.execute(_UPSERT_SQL, student_to_row(student))

    async def save_all(self, students: Sequence[Student]) -> None:
        """Write several students atomically, in the given order."""
        async with self._transaction() as conn:
            for student in students:
                await conn.execute(_UPSERT_SQL, student_to_row(student))

    async def deactivate_stale_sessions(self, cutoff: datetime) -> int:
        """Deactivate incomplete sessions idle since before cutoff."""
        async with self._transaction() as conn:
            cursor = await conn.execute(
                """
                UPDATE students SET is_active = 0
                WHERE is_active = 1
                  AND chat_completed = 0
                  AND created_at < ?
                  AND last_accessed < ?
                """,
                (_timestamp(cutoff), _timestamp(cutoff))
            )
        return cursor.rowcount

    async def list_active(
        self,
        filters: Optional[StudentFilter] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[Student]:
        """Active students matching filters (None: all), newest first."""
        where, params = filter_clauses(filters)
        query = f"SELECT * FROM students WHERE {where} ORDER BY created_at DESC LIMIT ? OFFSET ?"

        cursor = await self.conn.execute(query, (*params, limit, offset))
        rows = await cursor.fetchall()
        return [row_to_student(row) for row in rows]

    async def count_active(self, filters: Optional[StudentFilter] = None) -> int:
        """Count active students matching filters (None: all)."""
        where, params = filter_clauses(filters)
        cursor = await self.conn.execute(f"SELECT COUNT(*) FROM students WHERE {where}", params)
        row = await cursor.fetchone()
        return row[0] if row else 0

    # ==================== Exposure Operations ====================

    async def save_exposure(self, exposure: Exposure) -> int:
        """
        Save an exposure grant.

        Returns:
            The ID of the inserted record.
        """
        data = exposure.to_dict()
        async with self._transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO exposures (viewer_id, student_id, is_active, expires_at, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    data["viewer_id"],
                    data["student_id"],
                    int(data["is_active"]),
                    data["expires_at"],
                    data["created_at"],
                )
            )
        exposure.id = cursor.lastrowid
        return cursor.lastrowid or 0

    async def get_live_exposure_ids(
        self,
        viewer_id: str,
        now: Optional[datetime] = None,
    ) -> set[str]:
        """Student ids with an active, unexpired grant for the viewer."""
        cursor = await self.conn.execute(
            """
            SELECT DISTINCT student_id FROM exposures
            WHERE viewer_id = ? AND is_active = 1 AND expires_at > ?
            """,
            (viewer_id, _timestamp(now or datetime.now()))
        )
        rows = await cursor.fetchall()
        return {row["student_id"] for row in rows}
