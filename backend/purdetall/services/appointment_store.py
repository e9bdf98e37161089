import logging
import sqlite3
from datetime import date
from typing import Any, Dict, List, Optional

from purdetall.models import AppointmentCreate, AppointmentUpdate
from purdetall.services.database import Database, row_to_dict, rows_to_dicts
from purdetall.services.errors import (
    SlotUnavailableError,
    StoreNotFoundError,
    StoreValidationError,
    field_error,
    raise_if_errors,
)
from purdetall.services.validators import blank_to_none, is_iso_date, is_valid_time

logger = logging.getLogger(__name__)

# Hourly slots offered every day; the last one starts at closing time.
WORKING_HOURS = [f"{hour:02d}:00" for hour in range(9, 19)]

APPOINTMENT_STATUSES = ("pending", "confirmed", "in_progress", "completed", "cancelled")

SLOT_TAKEN_MESSAGE = "Esa fecha y hora ya están ocupadas"

_LIST_QUERY = """
    SELECT a.*, s.title AS service_title, c.name AS client_name_db
    FROM appointments a
    LEFT JOIN services s ON a.service_id = s.id
    LEFT JOIN clients c ON a.client_id = c.id
"""


def normalize_date(value: str) -> str:
    return date.fromisoformat(value.strip()).isoformat()


def normalize_time(value: str) -> str:
    hours, minutes = value.strip().split(":", 1)
    return f"{int(hours):02d}:{minutes}"


class AppointmentStore:
    def __init__(self, db: Database) -> None:
        self.db = db

    def available_times(self, slot_date: str) -> List[str]:
        if not is_iso_date(slot_date):
            raise StoreValidationError("Fecha válida requerida", errors=[field_error("date", "Fecha válida requerida")])
        with self.db.transaction("Error al verificar disponibilidad") as conn:
            booked = self._booked_times(conn, normalize_date(slot_date))
        return [slot for slot in WORKING_HOURS if slot not in booked]

    def _booked_times(self, conn: sqlite3.Connection, slot_date: str) -> set[str]:
        rows = conn.execute(
            "SELECT appointment_time FROM appointments WHERE appointment_date = ? AND status != 'cancelled'",
            (slot_date,),
        ).fetchall()
        return {row["appointment_time"] for row in rows}

    def _slot_taken(
        self,
        conn: sqlite3.Connection,
        slot_date: str,
        slot_time: str,
        exclude_id: Optional[int] = None,
    ) -> bool:
        query = (
            "SELECT id FROM appointments "
            "WHERE appointment_date = ? AND appointment_time = ? AND status != 'cancelled'"
        )
        params: List[Any] = [slot_date, slot_time]
        if exclude_id is not None:
            query += " AND id != ?"
            params.append(exclude_id)
        return conn.execute(query, tuple(params)).fetchone() is not None

    def _validate(self, payload: AppointmentCreate) -> None:
        errors = []
        if not payload.client_name.strip():
            errors.append(field_error("client_name", "El nombre es requerido"))
        if not payload.client_phone.strip():
            errors.append(field_error("client_phone", "El teléfono es requerido"))
        if not is_iso_date(payload.appointment_date):
            errors.append(field_error("appointment_date", "Fecha válida requerida"))
        if not is_valid_time(payload.appointment_time):
            errors.append(field_error("appointment_time", "Hora válida requerida"))
        raise_if_errors(errors)

    def list_appointments(self, status: Optional[str] = None) -> List[Dict[str, Any]]:
        if status is None:
            query = _LIST_QUERY + " ORDER BY a.appointment_date DESC, a.appointment_time DESC"
            params: tuple = ()
        else:
            query = _LIST_QUERY + " WHERE a.status = ? ORDER BY a.appointment_date ASC, a.appointment_time ASC"
            params = (status,)
        with self.db.transaction("Error al obtener las citas") as conn:
            rows = conn.execute(query, params).fetchall()
        return rows_to_dicts(rows)

    def get_appointment(self, appointment_id: int) -> Dict[str, Any]:
        with self.db.transaction("Error al obtener la cita") as conn:
            row = conn.execute(_LIST_QUERY + " WHERE a.id = ?", (appointment_id,)).fetchone()
        if row is None:
            raise StoreNotFoundError("Cita no encontrada")
        return row_to_dict(row)

    def create_appointment(self, payload: AppointmentCreate) -> int:
        self._validate(payload)
        slot_date = normalize_date(payload.appointment_date)
        slot_time = normalize_time(payload.appointment_time)

        # Check and insert share one unit of work; there is no unique index
        # backing the slot invariant across processes.
        with self.db.transaction("Error al crear la cita") as conn:
            if self._slot_taken(conn, slot_date, slot_time):
                raise SlotUnavailableError(SLOT_TAKEN_MESSAGE)
            cursor = conn.execute(
                """
                INSERT INTO appointments (
                    client_name, client_email, client_phone, service_id, service_name,
                    vehicle_make, vehicle_model, vehicle_year, vehicle_color,
                    appointment_date, appointment_time, notes, status
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 'pending')
                """,
                (
                    payload.client_name.strip(),
                    blank_to_none(payload.client_email),
                    payload.client_phone.strip(),
                    payload.service_id,
                    payload.service_name,
                    payload.vehicle_make,
                    payload.vehicle_model,
                    payload.vehicle_year,
                    payload.vehicle_color,
                    slot_date,
                    slot_time,
                    payload.notes,
                ),
            )
            appointment_id = int(cursor.lastrowid)
        logger.info("Appointment id=%s requested for %s %s", appointment_id, slot_date, slot_time)
        return appointment_id

    def update_appointment(self, appointment_id: int, payload: AppointmentUpdate) -> None:
        self._validate(payload)
        slot_date = normalize_date(payload.appointment_date)
        slot_time = normalize_time(payload.appointment_time)

        with self.db.transaction("Error al actualizar la cita") as conn:
            current = conn.execute(
                "SELECT status, client_id FROM appointments WHERE id = ?", (appointment_id,)
            ).fetchone()
            if current is None:
                raise StoreNotFoundError("Cita no encontrada")
            next_status = payload.status or current["status"]
            # An omitted client_id keeps the existing link; an explicit null clears it.
            client_id = payload.client_id if "client_id" in payload.model_fields_set else current["client_id"]
            if next_status != "cancelled" and self._slot_taken(conn, slot_date, slot_time, exclude_id=appointment_id):
                raise SlotUnavailableError(SLOT_TAKEN_MESSAGE)
            conn.execute(
                """
                UPDATE appointments
                SET client_id = ?, client_name = ?, client_email = ?, client_phone = ?, service_id = ?, service_name = ?,
                    vehicle_make = ?, vehicle_model = ?, vehicle_year = ?, vehicle_color = ?,
                    appointment_date = ?, appointment_time = ?, status = ?, notes = ?, price = ?,
                    updated_at = CURRENT_TIMESTAMP
                WHERE id = ?
                """,
                (
                    client_id,
                    payload.client_name.strip(),
                    blank_to_none(payload.client_email),
                    payload.client_phone.strip(),
                    payload.service_id,
                    payload.service_name,
                    payload.vehicle_make,
                    payload.vehicle_model,
                    payload.vehicle_year,
                    payload.vehicle_color,
                    slot_date,
                    slot_time,
                    next_status,
                    payload.notes,
                    payload.price,
                    appointment_id,
                ),
            )

    def update_status(self, appointment_id: int, status: str, notes: Optional[str] = None) -> None:
        """Move an appointment to any status in the enum.

        Transitions are deliberately unrestricted; the only guard is that
        re-activating a cancelled appointment cannot take an occupied slot.
        """
        if status not in APPOINTMENT_STATUSES:
            raise StoreValidationError("Estado inválido", errors=[field_error("status", "Estado inválido")])

        with self.db.transaction("Error al actualizar la cita") as conn:
            current = conn.execute(
                "SELECT status, appointment_date, appointment_time FROM appointments WHERE id = ?",
                (appointment_id,),
            ).fetchone()
            if current is None:
                raise StoreNotFoundError("Cita no encontrada")
            if (
                current["status"] == "cancelled"
                and status != "cancelled"
                and self._slot_taken(
                    conn,
                    current["appointment_date"],
                    current["appointment_time"],
                    exclude_id=appointment_id,
                )
            ):
                raise SlotUnavailableError(SLOT_TAKEN_MESSAGE)
            if notes:
                conn.execute(
                    "UPDATE appointments SET status = ?, notes = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                    (status, notes, appointment_id),
                )
            else:
                conn.execute(
                    "UPDATE appointments SET status = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                    (status, appointment_id),
                )
        logger.info("Appointment id=%s moved %s -> %s", appointment_id, current["status"], status)

    def delete_appointment(self, appointment_id: int) -> None:
        with self.db.transaction("Error al eliminar la cita") as conn:
            cursor = conn.execute("DELETE FROM appointments WHERE id = ?", (appointment_id,))
            if cursor.rowcount == 0:
                raise StoreNotFoundError("Cita no encontrada")
