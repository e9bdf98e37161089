import json
from typing import Any, Dict, List, Optional

from purdetall.models import QuoteCreate
from purdetall.services.database import Database, row_to_dict, rows_to_dicts
from purdetall.services.errors import StoreNotFoundError, field_error, raise_if_errors
from purdetall.services.validators import blank_to_none, is_iso_date, is_valid_email

QUOTE_STATUSES = ("pending", "quoted", "accepted", "rejected")


def _parse_services(raw_value: Any) -> List[Any]:
    if raw_value in (None, ""):
        return []
    try:
        parsed = json.loads(raw_value)
    except (TypeError, json.JSONDecodeError):
        return []
    return parsed if isinstance(parsed, list) else []


def _with_services(row: Dict[str, Any]) -> Dict[str, Any]:
    row["services"] = _parse_services(row.get("services"))
    return row


class QuoteStore:
    def __init__(self, db: Database) -> None:
        self.db = db

    def list_quotes(self, status: Optional[str] = None) -> List[Dict[str, Any]]:
        query = "SELECT * FROM quotes"
        params: tuple = ()
        if status is not None:
            query += " WHERE status = ?"
            params = (status,)
        query += " ORDER BY created_at DESC, id DESC"
        with self.db.transaction("Error al obtener los presupuestos") as conn:
            rows = conn.execute(query, params).fetchall()
        return [_with_services(row) for row in rows_to_dicts(rows)]

    def get_quote(self, quote_id: int) -> Dict[str, Any]:
        with self.db.transaction("Error al obtener el presupuesto") as conn:
            row = conn.execute("SELECT * FROM quotes WHERE id = ?", (quote_id,)).fetchone()
        if row is None:
            raise StoreNotFoundError("Presupuesto no encontrado")
        return _with_services(row_to_dict(row))

    def create_quote(self, payload: QuoteCreate) -> int:
        errors = []
        if not payload.client_name.strip():
            errors.append(field_error("client_name", "El nombre es requerido"))
        if not is_valid_email(payload.client_email):
            errors.append(field_error("client_email", "Email válido requerido"))
        if not payload.services:
            errors.append(field_error("services", "Debe seleccionar al menos un servicio"))
        raise_if_errors(errors)

        with self.db.transaction("Error al crear el presupuesto") as conn:
            cursor = conn.execute(
                """
                INSERT INTO quotes (
                    client_name, client_email, client_phone, vehicle_make, vehicle_model,
                    vehicle_year, services, message, status
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, 'pending')
                """,
                (
                    payload.client_name.strip(),
                    payload.client_email.strip(),
                    blank_to_none(payload.client_phone),
                    payload.vehicle_make,
                    payload.vehicle_model,
                    payload.vehicle_year,
                    json.dumps(payload.services),
                    payload.message,
                ),
            )
            return int(cursor.lastrowid)

    def update_quote(
        self,
        quote_id: int,
        *,
        status: str,
        quote_amount: Optional[float] = None,
        admin_notes: Optional[str] = None,
        valid_until: Optional[str] = None,
    ) -> None:
        """Any status may follow any other; only enum membership is checked."""
        errors = []
        if status not in QUOTE_STATUSES:
            errors.append(field_error("status", "Estado inválido"))
        if blank_to_none(valid_until) is not None and not is_iso_date(valid_until):
            errors.append(field_error("valid_until", "Fecha válida requerida"))
        if quote_amount is not None and quote_amount < 0:
            errors.append(field_error("quote_amount", "El importe no puede ser negativo"))
        raise_if_errors(errors)

        with self.db.transaction("Error al actualizar el presupuesto") as conn:
            cursor = conn.execute(
                """
                UPDATE quotes
                SET status = ?, quote_amount = ?, admin_notes = ?, valid_until = ?, updated_at = CURRENT_TIMESTAMP
                WHERE id = ?
                """,
                (status, quote_amount, admin_notes, blank_to_none(valid_until), quote_id),
            )
            if cursor.rowcount == 0:
                raise StoreNotFoundError("Presupuesto no encontrado")

    def delete_quote(self, quote_id: int) -> None:
        with self.db.transaction("Error al eliminar el presupuesto") as conn:
            cursor = conn.execute("DELETE FROM quotes WHERE id = ?", (quote_id,))
            if cursor.rowcount == 0:
                raise StoreNotFoundError("Presupuesto no encontrado")
