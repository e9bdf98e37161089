import json
from typing import Any, Dict, Iterable, List, Optional, Tuple

from purdetall.services.database import Database, rows_to_dicts
from purdetall.services.errors import StoreNotFoundError, StoreValidationError, field_error

CONTACT_KEYS = (
    "contact_phone",
    "contact_email",
    "contact_address",
    "whatsapp_number",
    "whatsapp_message",
    "business_hours",
    "facebook_url",
    "instagram_url",
    "youtube_url",
)

DEFAULT_CONTACT_EMAIL = "info@purdetall.es"


def _stringify(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, dict)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


class ConfigStore:
    def __init__(self, db: Database) -> None:
        self.db = db

    def get_public_config(self) -> Dict[str, Optional[str]]:
        with self.db.transaction("Error al obtener la configuración") as conn:
            rows = conn.execute("SELECT key, value FROM site_config ORDER BY key").fetchall()
        return {row["key"]: row["value"] for row in rows}

    def get_admin_config(self) -> List[Dict[str, Any]]:
        with self.db.transaction("Error al obtener la configuración") as conn:
            rows = conn.execute("SELECT * FROM site_config ORDER BY key").fetchall()
        return rows_to_dicts(rows)

    def get_value(self, key: str, default: Optional[str] = None) -> Optional[str]:
        with self.db.transaction("Error al obtener la configuración") as conn:
            row = conn.execute("SELECT value FROM site_config WHERE key = ?", (key,)).fetchone()
        if row is None or row["value"] in (None, ""):
            return default
        return row["value"]

    def get_contact_info(self) -> Dict[str, Optional[str]]:
        placeholders = ",".join("?" for _ in CONTACT_KEYS)
        with self.db.transaction("Error al obtener la información de contacto") as conn:
            rows = conn.execute(
                f"SELECT key, value FROM site_config WHERE key IN ({placeholders})",
                CONTACT_KEYS,
            ).fetchall()
        return {row["key"]: row["value"] for row in rows}

    def set_config(self, key: str, value: Any) -> None:
        text = _stringify(value)
        if text is None or text == "":
            raise StoreValidationError("El valor es requerido", errors=[field_error("value", "El valor es requerido")])
        with self.db.transaction("Error al actualizar la configuración") as conn:
            cursor = conn.execute(
                "UPDATE site_config SET value = ?, updated_at = CURRENT_TIMESTAMP WHERE key = ?",
                (text, key),
            )
            if cursor.rowcount == 0:
                raise StoreNotFoundError("Configuración no encontrada")

    def set_config_bulk(self, items: Iterable[Tuple[str, Any]]) -> int:
        """Update every known key; unknown keys are skipped silently.

        Returns the number of rows that changed.
        """
        updated = 0
        with self.db.transaction("Error al actualizar la configuración") as conn:
            for key, value in items:
                cursor = conn.execute(
                    "UPDATE site_config SET value = ?, updated_at = CURRENT_TIMESTAMP WHERE key = ?",
                    (_stringify(value), key),
                )
                updated += cursor.rowcount
        return updated
