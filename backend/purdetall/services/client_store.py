from typing import Any, Dict, List, Optional

from purdetall.services.database import Database, row_to_dict, rows_to_dicts
from purdetall.services.errors import StoreNotFoundError, field_error, raise_if_errors
from purdetall.services.validators import blank_to_none, is_valid_email


class ClientStore:
    def __init__(self, db: Database) -> None:
        self.db = db

    def list_clients(self) -> List[Dict[str, Any]]:
        with self.db.transaction("Error al obtener los clientes") as conn:
            rows = conn.execute("SELECT * FROM clients ORDER BY created_at DESC, id DESC").fetchall()
        return rows_to_dicts(rows)

    def search_clients(self, term: str) -> List[Dict[str, Any]]:
        escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        pattern = f"%{escaped}%"
        with self.db.transaction("Error en la búsqueda") as conn:
            rows = conn.execute(
                "SELECT * FROM clients WHERE name LIKE ? ESCAPE '\\' OR email LIKE ? ESCAPE '\\' "
                "OR phone LIKE ? ESCAPE '\\' ORDER BY name ASC",
                (pattern, pattern, pattern),
            ).fetchall()
        return rows_to_dicts(rows)

    def get_client(self, client_id: int, *, with_history: bool = True) -> Dict[str, Any]:
        with self.db.transaction("Error al obtener el cliente") as conn:
            row = conn.execute("SELECT * FROM clients WHERE id = ?", (client_id,)).fetchone()
            if row is None:
                raise StoreNotFoundError("Cliente no encontrado")
            client = row_to_dict(row)
            if with_history:
                history = conn.execute(
                    "SELECT * FROM appointments WHERE client_id = ? ORDER BY created_at DESC, id DESC",
                    (client_id,),
                ).fetchall()
                client["appointments"] = rows_to_dicts(history)
        return client

    def _validate(self, name: str, email: Optional[str]) -> None:
        errors = []
        if not name.strip():
            errors.append(field_error("name", "El nombre es requerido"))
        if blank_to_none(email) is not None and not is_valid_email(email):
            errors.append(field_error("email", "Email inválido"))
        raise_if_errors(errors)

    def create_client(
        self,
        *,
        name: str,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        address: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        self._validate(name, email)
        with self.db.transaction("Error al crear el cliente") as conn:
            cursor = conn.execute(
                "INSERT INTO clients (name, email, phone, address, notes) VALUES (?, ?, ?, ?, ?)",
                (name.strip(), blank_to_none(email), phone, address, notes),
            )
            return int(cursor.lastrowid)

    def update_client(
        self,
        client_id: int,
        *,
        name: str,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        address: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> None:
        self._validate(name, email)
        with self.db.transaction("Error al actualizar el cliente") as conn:
            cursor = conn.execute(
                """
                UPDATE clients
                SET name = ?, email = ?, phone = ?, address = ?, notes = ?, updated_at = CURRENT_TIMESTAMP
                WHERE id = ?
                """,
                (name.strip(), blank_to_none(email), phone, address, notes, client_id),
            )
            if cursor.rowcount == 0:
                raise StoreNotFoundError("Cliente no encontrado")

    def delete_client(self, client_id: int) -> None:
        with self.db.transaction("Error al eliminar el cliente") as conn:
            cursor = conn.execute("DELETE FROM clients WHERE id = ?", (client_id,))
            if cursor.rowcount == 0:
                raise StoreNotFoundError("Cliente no encontrado")
