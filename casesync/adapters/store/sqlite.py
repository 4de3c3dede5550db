"""SQLite record store adapter.

Implements RecordStorePort using SQLite with aiosqlite for async access.
Applicant and case attributes are kept as JSON documents so that field
reads tolerate schema drift; the handle fields are dedicated columns so
that case resolution can filter on them.
"""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import aiosqlite

from casesync.core.models import ApplicantRecord, CaseRecord, ExternalHandles
from casesync.core.ports import RecordStorePort

logger = logging.getLogger(__name__)

UpdateListener = Callable[[ApplicantRecord, ApplicantRecord | None], Awaitable[None]]


def _to_utc_iso(value: datetime) -> str:
    """Normalize a timestamp so lexical order matches chronological order."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


class SQLiteRecordStore(RecordStorePort):
    """SQLite-backed applicant/case store with connection pooling and async access."""

    def __init__(self, db_path: str, pool_size: int = 5):
        """Initialize SQLite store with connection pooling.

        Args:
            db_path: Path to SQLite database file.
            pool_size: Number of connections to maintain in the pool.
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._pool: list[aiosqlite.Connection] = []
        self._pool_lock = asyncio.Lock()
        self._pool_size = pool_size
        self._schema_initialized = False
        self._listeners: list[UpdateListener] = []

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get a connection from the pool or create a new one."""
        async with self._pool_lock:
            if self._pool:
                conn = self._pool.pop()
            else:
                conn = await aiosqlite.connect(str(self.db_path))
                await conn.execute("PRAGMA foreign_keys = ON")
        return conn

    async def _return_connection(self, conn: aiosqlite.Connection) -> None:
        """Return a connection to the pool."""
        async with self._pool_lock:
            if len(self._pool) < self._pool_size:
                self._pool.append(conn)
            else:
                await conn.close()

    async def close_pool(self) -> None:
        """Close all pooled connections."""
        async with self._pool_lock:
            for conn in self._pool:
                await conn.close()
            self._pool.clear()

    async def _init_schema(self) -> None:
        """Initialize database schema on first use.

        Only runs once per instance. Subsequent calls are no-ops.
        """
        if self._schema_initialized:
            return

        conn = await self._get_connection()
        try:
            await conn.execute(
                """
                CREATE TABLE IF NOT EXISTS applicants (
                    id TEXT PRIMARY KEY,
                    sm_person_handle TEXT,
                    attributes TEXT NOT NULL DEFAULT '{}',
                    sys_created_on TIMESTAMP NOT NULL
                )
                """
            )
            await conn.execute(
                """
                CREATE TABLE IF NOT EXISTS cases (
                    id TEXT PRIMARY KEY,
                    applicant TEXT NOT NULL REFERENCES applicants(id),
                    sm_position_handle TEXT,
                    sm_case_handle TEXT,
                    attributes TEXT NOT NULL DEFAULT '{}',
                    sys_created_on TIMESTAMP NOT NULL
                )
                """
            )
            await conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_cases_applicant "
                "ON cases(applicant, sys_created_on)"
            )
            await conn.commit()
            self._schema_initialized = True
        finally:
            await self._return_connection(conn)

    def add_update_listener(self, listener: UpdateListener) -> None:
        """Register a coroutine called after every applicant save.

        Listeners receive the applicant after the save and before it
        (None for a newly created applicant).
        """
        self._listeners.append(listener)

    async def _notify(
        self, current: ApplicantRecord, previous: ApplicantRecord | None
    ) -> None:
        for listener in self._listeners:
            try:
                await listener(current, previous)
            except Exception as e:
                # The save is already committed; a listener failure must not undo it
                logger.error(
                    f"Update listener failed for applicant {current.id}: {e}",
                    exc_info=True,
                    extra={"applicant_id": current.id},
                )

    async def save_applicant(
        self, applicant: ApplicantRecord, suppress_triggers: bool = False
    ) -> None:
        """Create or replace an applicant and notify update listeners.

        Args:
            applicant: Applicant to persist.
            suppress_triggers: Skip update listeners for this save.
        """
        await self._init_schema()
        previous = await self.get_applicant(applicant.id)
        created_on = applicant.created_on or (
            previous.created_on if previous else datetime.now(timezone.utc)
        )

        conn = await self._get_connection()
        try:
            await conn.execute(
                """
                INSERT INTO applicants
                (id, sm_person_handle, attributes, sys_created_on)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    sm_person_handle = excluded.sm_person_handle,
                    attributes = excluded.attributes,
                    sys_created_on = excluded.sys_created_on
                """,
                (
                    applicant.id,
                    applicant.sm_person_handle or None,
                    json.dumps(applicant.attributes, default=str),
                    _to_utc_iso(created_on),
                ),
            )
            await conn.commit()
        finally:
            await self._return_connection(conn)

        if not suppress_triggers:
            current = await self.get_applicant(applicant.id)
            if current is not None:
                await self._notify(current, previous)

    async def save_case(self, case: CaseRecord) -> None:
        """Create or replace a case."""
        await self._init_schema()

        conn = await self._get_connection()
        try:
            await conn.execute(
                """
                INSERT INTO cases
                (id, applicant, sm_position_handle, sm_case_handle,
                 attributes, sys_created_on)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    applicant = excluded.applicant,
                    sm_position_handle = excluded.sm_position_handle,
                    sm_case_handle = excluded.sm_case_handle,
                    attributes = excluded.attributes,
                    sys_created_on = excluded.sys_created_on
                """,
                (
                    case.id,
                    case.applicant_id,
                    case.sm_position_handle or None,
                    case.sm_case_handle or None,
                    json.dumps(case.attributes, default=str),
                    _to_utc_iso(case.created_on),
                ),
            )
            await conn.commit()
        finally:
            await self._return_connection(conn)

    async def get_applicant(self, applicant_id: str) -> ApplicantRecord | None:
        """Look up an applicant by its ID."""
        await self._init_schema()

        conn = await self._get_connection()
        try:
            cursor = await conn.execute(
                """
                SELECT id, sm_person_handle, attributes, sys_created_on
                FROM applicants WHERE id = ?
                """,
                (applicant_id,),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_applicant(row)
        finally:
            await self._return_connection(conn)

    async def get_case(self, case_id: str) -> CaseRecord | None:
        """Look up a case by its ID."""
        await self._init_schema()

        conn = await self._get_connection()
        try:
            cursor = await conn.execute(
                """
                SELECT id, applicant, sm_position_handle, sm_case_handle,
                       attributes, sys_created_on
                FROM cases WHERE id = ?
                """,
                (case_id,),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_case(row)
        finally:
            await self._return_connection(conn)

    async def find_case_for_applicant(self, applicant_id: str) -> CaseRecord | None:
        """Most recently created case of the applicant that has no handles yet."""
        await self._init_schema()

        conn = await self._get_connection()
        try:
            cursor = await conn.execute(
                """
                SELECT id, applicant, sm_position_handle, sm_case_handle,
                       attributes, sys_created_on
                FROM cases
                WHERE applicant = ?
                  AND COALESCE(sm_case_handle, '') = ''
                  AND COALESCE(sm_position_handle, '') = ''
                ORDER BY sys_created_on DESC
                LIMIT 1
                """,
                (applicant_id,),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_case(row)
        finally:
            await self._return_connection(conn)

    def read_field(self, record: ApplicantRecord | CaseRecord, name: str) -> str:
        """Read a field from a loaded record, "" when it does not exist."""
        return record.get(name)

    async def write_handles(
        self,
        applicant_id: str,
        case_id: str,
        handles: ExternalHandles,
        suppress_triggers: bool = True,
    ) -> None:
        """Write the three handles onto both records in one transaction."""
        if not handles.is_complete:
            raise ValueError(
                f"Refusing to write incomplete handles, missing: "
                f"{', '.join(handles.missing())}"
            )
        await self._init_schema()
        previous = None if suppress_triggers else await self.get_applicant(applicant_id)

        conn = await self._get_connection()
        try:
            cursor = await conn.execute(
                "UPDATE applicants SET sm_person_handle = ? WHERE id = ?",
                (handles.person_handle, applicant_id),
            )
            if cursor.rowcount != 1:
                raise ValueError(f"Applicant not found: {applicant_id}")
            cursor = await conn.execute(
                """
                UPDATE cases SET sm_position_handle = ?, sm_case_handle = ?
                WHERE id = ?
                """,
                (handles.position_handle, handles.case_handle, case_id),
            )
            if cursor.rowcount != 1:
                raise ValueError(f"Case not found: {case_id}")
            await conn.commit()
        except Exception:
            await conn.rollback()
            raise
        finally:
            await self._return_connection(conn)

        if not suppress_triggers:
            current = await self.get_applicant(applicant_id)
            if current is not None:
                await self._notify(current, previous)

    @staticmethod
    def _load_attributes(raw: str | None, record_id: str) -> dict[str, Any]:
        try:
            attributes = json.loads(raw) if raw else {}
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid attributes for record {record_id}: {e}") from e
        if not isinstance(attributes, dict):
            raise ValueError(f"Attributes for record {record_id} are not an object")
        return attributes

    def _row_to_applicant(self, row: tuple[Any, ...]) -> ApplicantRecord:
        """Convert a database row to an ApplicantRecord.

        Raises:
            ValueError: If row contains invalid data.
        """
        applicant_id, person_handle, attributes_json, created_on = row
        try:
            created = datetime.fromisoformat(created_on)
        except (ValueError, TypeError) as e:
            raise ValueError(f"Invalid date format: {e}") from e
        return ApplicantRecord(
            id=applicant_id,
            attributes=self._load_attributes(attributes_json, applicant_id),
            sm_person_handle=person_handle or "",
            created_on=created,
        )

    def _row_to_case(self, row: tuple[Any, ...]) -> CaseRecord:
        """Convert a database row to a CaseRecord.

        Raises:
            ValueError: If row contains invalid data.
        """
        (
            case_id,
            applicant_id,
            position_handle,
            case_handle,
            attributes_json,
            created_on,
        ) = row
        try:
            created = datetime.fromisoformat(created_on)
        except (ValueError, TypeError) as e:
            raise ValueError(f"Invalid date format: {e}") from e
        return CaseRecord(
            id=case_id,
            applicant_id=applicant_id,
            created_on=created,
            attributes=self._load_attributes(attributes_json, case_id),
            sm_position_handle=position_handle or "",
            sm_case_handle=case_handle or "",
        )
