"""
Remote relational store for plants, care schedules and care logs.

Every public method opens its own connection from the injected factory, runs
blocking PyMySQL work and returns typed records. Driver failures are wrapped in
FetchError with a message fit for the acting user; CareError subclasses raised
inside (ownership rejections, missing rows) propagate unchanged.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional

from pymysql import MySQLError

from ..db import bin_to_hex, get_conn, new_id
from ..errors import FetchError, NotFoundError, ValidationError
from ..schemas.care import CareLog, CareSchedule, CareType
from ..schemas.plant import Plant, PlantCreateRequest, PlantUpdateRequest
from ..utils.date_time import to_db_utc, utc_now

PLANT_COLUMNS = (
    "p.id, p.user_id, p.name, p.species, p.health_score, p.location, p.notes, "
    "p.acquired_date, p.created_at, p.updated_at"
)
SCHEDULE_COLUMNS = (
    "s.id, s.plant_id, s.care_type, s.frequency_days, s.next_due_date, s.is_active, "
    "p.name, s.created_at, s.updated_at"
)
LOG_COLUMNS = "l.id, l.plant_id, l.care_type, l.completed_at, l.notes, p.name, l.created_at"

PLANT_UPDATABLE = ("name", "species", "health_score", "location", "notes", "acquired_date")
SCHEDULE_UPDATABLE = ("care_type", "frequency_days", "next_due_date", "is_active")


def plant_from_row(row) -> Plant:
    # row = (id, user_id, name, species, health_score, location, notes, acquired_date, created_at, updated_at)
    return Plant(
        id=bin_to_hex(row[0]),
        user_id=bin_to_hex(row[1]),
        name=row[2],
        species=row[3],
        health_score=int(row[4]) if row[4] is not None else 100,
        location=row[5],
        notes=row[6],
        acquired_date=row[7],
        created_at=row[8] or utc_now(),
        updated_at=row[9],
    )


def schedule_from_row(row) -> CareSchedule:
    # row = (id, plant_id, care_type, frequency_days, next_due_date, is_active, plant_name, created_at, updated_at)
    return CareSchedule(
        id=bin_to_hex(row[0]),
        plant_id=bin_to_hex(row[1]),
        care_type=row[2],
        frequency_days=int(row[3]),
        next_due_date=row[4],
        is_active=bool(row[5]),
        plant_name=row[6],
        created_at=row[7],
        updated_at=row[8],
    )


def log_from_row(row) -> CareLog:
    # row = (id, plant_id, care_type, completed_at, notes, plant_name, created_at)
    return CareLog(
        id=bin_to_hex(row[0]),
        plant_id=bin_to_hex(row[1]),
        care_type=row[2],
        completed_at=row[3],
        notes=row[4],
        plant_name=row[5],
        created_at=row[6],
    )


def _db_value(value: Any) -> Any:
    if isinstance(value, CareType):
        return value.value
    if isinstance(value, bool):
        return 1 if value else 0
    return value


class CareRepository:
    """
    PyMySQL-backed store. Ownership is always checked against plants.user_id.

    Usage:
      repo = CareRepository(get_conn)
      schedules = repo.list_schedules(user_id)
    """

    def __init__(self, conn_factory: Callable[[], Any] = get_conn, *, logger: Optional[logging.Logger] = None):
        self._conn_factory = conn_factory
        self._log = logger or logging.getLogger(__name__)

    # --- plumbing -------------------------------------------------------------

    def _run(self, action: str, work: Callable[[Any], Any], *, transactional: bool = False):
        try:
            conn = self._conn_factory()
            try:
                if transactional:
                    conn.autocommit(False)
                result = work(conn)
                if transactional:
                    conn.commit()
                return result
            except Exception:
                if transactional:
                    try:
                        conn.rollback()
                    except Exception:
                        pass
                raise
            finally:
                try:
                    conn.close()
                except Exception:
                    pass
        except MySQLError as exc:
            self._log.error("Store call failed (%s): %s", action, exc)
            raise FetchError(f"Failed to {action}. Please try again.") from exc

    @staticmethod
    def _fetch_schedule(cur, schedule_id: bytes | str) -> Optional[CareSchedule]:
        where = "s.id = UNHEX(%s)" if isinstance(schedule_id, str) else "s.id = %s"
        cur.execute(
            f"SELECT {SCHEDULE_COLUMNS} FROM care_schedules s JOIN plants p ON p.id = s.plant_id WHERE {where}",
            (schedule_id,),
        )
        row = cur.fetchone()
        return schedule_from_row(row) if row else None

    @staticmethod
    def _owned_schedule_exists(cur, user_id: str, schedule_id: str) -> bool:
        cur.execute(
            """
            SELECT 1
            FROM care_schedules s
                     JOIN plants p ON p.id = s.plant_id
            WHERE s.id = UNHEX(%s)
              AND p.user_id = UNHEX(%s)
            LIMIT 1
            """,
            (schedule_id, user_id),
        )
        return cur.fetchone() is not None

    # --- plants ---------------------------------------------------------------

    def list_plants(self, user_id: str) -> List[Plant]:
        def work(conn):
            with conn.cursor() as cur:
                cur.execute(
                    f"SELECT {PLANT_COLUMNS} FROM plants p WHERE p.user_id = UNHEX(%s) ORDER BY p.created_at DESC",
                    (user_id,),
                )
                return [plant_from_row(r) for r in (cur.fetchall() or [])]

        return self._run("load plants", work)

    def get_plant(self, user_id: str, plant_id: str) -> Plant:
        def work(conn):
            with conn.cursor() as cur:
                cur.execute(
                    f"SELECT {PLANT_COLUMNS} FROM plants p WHERE p.id = UNHEX(%s) AND p.user_id = UNHEX(%s)",
                    (plant_id, user_id),
                )
                row = cur.fetchone()
                if not row:
                    raise NotFoundError("Plant not found")
                return plant_from_row(row)

        return self._run("load plant", work)

    def create_plant(self, user_id: str, payload: PlantCreateRequest) -> Plant:
        def work(conn):
            with conn.cursor() as cur:
                plant_id = new_id()
                cur.execute(
                    (
                        "INSERT INTO plants (id, user_id, name, species, health_score, location, notes, acquired_date) "
                        "VALUES (%s, UNHEX(%s), %s, %s, %s, %s, %s, %s)"
                    ),
                    (
                        plant_id,
                        user_id,
                        payload.name,
                        payload.species or None,
                        payload.health_score,
                        payload.location or None,
                        payload.notes or None,
                        payload.acquired_date,
                    ),
                )
                cur.execute(f"SELECT {PLANT_COLUMNS} FROM plants p WHERE p.id = %s", (plant_id,))
                return plant_from_row(cur.fetchone())

        return self._run("create plant", work, transactional=True)

    def update_plant(self, user_id: str, plant_id: str, payload: PlantUpdateRequest) -> Plant:
        changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if k in PLANT_UPDATABLE}

        def work(conn):
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT 1 FROM plants WHERE id = UNHEX(%s) AND user_id = UNHEX(%s) LIMIT 1",
                    (plant_id, user_id),
                )
                if not cur.fetchone():
                    raise NotFoundError("Plant not found")
                if changes:
                    assignments = ", ".join(f"{col}=%s" for col in changes)
                    cur.execute(
                        f"UPDATE plants SET {assignments} WHERE id = UNHEX(%s)",
                        (*[_db_value(v) for v in changes.values()], plant_id),
                    )
                cur.execute(f"SELECT {PLANT_COLUMNS} FROM plants p WHERE p.id = UNHEX(%s)", (plant_id,))
                return plant_from_row(cur.fetchone())

        return self._run("update plant", work, transactional=True)

    def delete_plant(self, user_id: str, plant_id: str) -> None:
        """Delete a plant together with its schedules and logs."""

        def work(conn):
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT 1 FROM plants WHERE id = UNHEX(%s) AND user_id = UNHEX(%s) LIMIT 1",
                    (plant_id, user_id),
                )
                if not cur.fetchone():
                    raise NotFoundError("Plant not found")
                # Children first; the FKs cascade too, but older tables may lack them
                cur.execute("DELETE FROM care_logs WHERE plant_id = UNHEX(%s)", (plant_id,))
                cur.execute("DELETE FROM care_schedules WHERE plant_id = UNHEX(%s)", (plant_id,))
                cur.execute("DELETE FROM plants WHERE id = UNHEX(%s)", (plant_id,))

        self._run("delete plant", work, transactional=True)

    # --- schedules ------------------------------------------------------------

    def list_schedules(self, user_id: str) -> List[CareSchedule]:
        def work(conn):
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    SELECT {SCHEDULE_COLUMNS}
                    FROM care_schedules s
                             JOIN plants p ON p.id = s.plant_id
                    WHERE p.user_id = UNHEX(%s)
                    ORDER BY s.next_due_date ASC
                    """,
                    (user_id,),
                )
                return [schedule_from_row(r) for r in (cur.fetchall() or [])]

        return self._run("load care schedules", work)

    def list_due_schedules(self, user_id: str, today: date) -> List[CareSchedule]:
        """Active schedules due today or earlier."""

        def work(conn):
            with conn.cursor() as cur:
                cur.execute(
                    f"""
                    SELECT {SCHEDULE_COLUMNS}
                    FROM care_schedules s
                             JOIN plants p ON p.id = s.plant_id
                    WHERE p.user_id = UNHEX(%s)
                      AND s.is_active = 1
                      AND s.next_due_date <= %s
                    ORDER BY s.next_due_date ASC
                    """,
                    (user_id, today),
                )
                return [schedule_from_row(r) for r in (cur.fetchall() or [])]

        return self._run("load due care schedules", work)

    def get_schedule(self, user_id: str, schedule_id: str) -> CareSchedule:
        def work(conn):
            with conn.cursor() as cur:
                if not self._owned_schedule_exists(cur, user_id, schedule_id):
                    raise NotFoundError("Care schedule not found")
                return self._fetch_schedule(cur, schedule_id)

        return self._run("load care schedule", work)

    def create_schedule(
        self,
        user_id: str,
        plant_id: str,
        care_type: CareType,
        frequency_days: int,
        next_due_date: date,
        is_active: bool = True,
    ) -> CareSchedule:
        def work(conn):
            with conn.cursor() as cur:
                schedule_id = new_id()
                # Insert-select so a plant owned by someone else inserts nothing
                cur.execute(
                    """
                    INSERT INTO care_schedules (id, plant_id, care_type, frequency_days, next_due_date, is_active)
                    SELECT %s, p.id, %s, %s, %s, %s
                    FROM plants p
                    WHERE p.id = UNHEX(%s)
                      AND p.user_id = UNHEX(%s)
                    """,
                    (
                        schedule_id,
                        _db_value(care_type),
                        int(frequency_days),
                        next_due_date,
                        _db_value(bool(is_active)),
                        plant_id,
                        user_id,
                    ),
                )
                if cur.rowcount == 0:
                    raise ValidationError("Plant not found for this user")
                return self._fetch_schedule(cur, schedule_id)

        return self._run("create care task", work, transactional=True)

    def update_schedule(self, user_id: str, schedule_id: str, changes: Dict[str, Any]) -> CareSchedule:
        fields = {k: v for k, v in changes.items() if k in SCHEDULE_UPDATABLE}

        def work(conn):
            with conn.cursor() as cur:
                if not self._owned_schedule_exists(cur, user_id, schedule_id):
                    raise NotFoundError("Care schedule not found")
                if fields:
                    assignments = ", ".join(f"{col}=%s" for col in fields)
                    cur.execute(
                        f"UPDATE care_schedules SET {assignments} WHERE id = UNHEX(%s)",
                        (*[_db_value(v) for v in fields.values()], schedule_id),
                    )
                return self._fetch_schedule(cur, schedule_id)

        return self._run("update care task", work, transactional=True)

    def delete_schedule(self, user_id: str, schedule_id: str) -> None:
        def work(conn):
            with conn.cursor() as cur:
                if not self._owned_schedule_exists(cur, user_id, schedule_id):
                    raise NotFoundError("Care schedule not found")
                cur.execute("DELETE FROM care_schedules WHERE id = UNHEX(%s)", (schedule_id,))

        self._run("delete care task", work, transactional=True)

    # --- logs -----------------------------------------------------------------

    def list_logs(self, user_id: str, limit: Optional[int] = None) -> List[CareLog]:
        if limit is not None and limit < 0:
            raise ValidationError("Log limit cannot be negative")

        def work(conn):
            with conn.cursor() as cur:
                query = f"""
                    SELECT {LOG_COLUMNS}
                    FROM care_logs l
                             JOIN plants p ON p.id = l.plant_id
                    WHERE p.user_id = UNHEX(%s)
                    ORDER BY l.completed_at DESC
                """
                params: list = [user_id]
                if limit is not None:
                    query += " LIMIT %s"
                    params.append(int(limit))
                cur.execute(query, params)
                return [log_from_row(r) for r in (cur.fetchall() or [])]

        return self._run("load care history", work)

    def create_log(
        self,
        user_id: str,
        plant_id: str,
        care_type: CareType,
        completed_at: datetime,
        notes: Optional[str] = None,
    ) -> CareLog:
        def work(conn):
            with conn.cursor() as cur:
                log_id = new_id()
                cur.execute(
                    """
                    INSERT INTO care_logs (id, plant_id, care_type, completed_at, notes)
                    SELECT %s, p.id, %s, %s, %s
                    FROM plants p
                    WHERE p.id = UNHEX(%s)
                      AND p.user_id = UNHEX(%s)
                    """,
                    (log_id, _db_value(care_type), to_db_utc(completed_at), notes, plant_id, user_id),
                )
                if cur.rowcount == 0:
                    raise NotFoundError("Plant not found")
                cur.execute(
                    f"SELECT {LOG_COLUMNS} FROM care_logs l JOIN plants p ON p.id = l.plant_id WHERE l.id = %s",
                    (log_id,),
                )
                return log_from_row(cur.fetchone())

        return self._run("record care log", work, transactional=True)
