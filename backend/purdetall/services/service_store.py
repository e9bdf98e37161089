import logging
from typing import Any, Dict, List, Optional

from fastapi import UploadFile

from purdetall.services.database import Database, row_to_dict, rows_to_dicts
from purdetall.services.errors import StoreNotFoundError, field_error, raise_if_errors
from purdetall.services.image_storage import ImageStorage

logger = logging.getLogger(__name__)


class ServiceStore:
    def __init__(self, db: Database, images: ImageStorage) -> None:
        self.db = db
        self.images = images

    def list_services(self, include_inactive: bool = False) -> List[Dict[str, Any]]:
        query = "SELECT * FROM services"
        if not include_inactive:
            query += " WHERE is_active = 1"
        query += " ORDER BY sort_order ASC, created_at ASC, id ASC"
        with self.db.transaction("Error al obtener los servicios") as conn:
            rows = conn.execute(query).fetchall()
        return rows_to_dicts(rows)

    def get_service(self, service_id: int) -> Dict[str, Any]:
        with self.db.transaction("Error al obtener el servicio") as conn:
            row = conn.execute("SELECT * FROM services WHERE id = ?", (service_id,)).fetchone()
        if row is None:
            raise StoreNotFoundError("Servicio no encontrado")
        return row_to_dict(row)

    def _validate(self, title: str, description: str) -> None:
        errors = []
        if not title.strip():
            errors.append(field_error("title", "El título es requerido"))
        if not description.strip():
            errors.append(field_error("description", "La descripción es requerida"))
        raise_if_errors(errors)

    def create_service(
        self,
        *,
        title: str,
        description: str,
        short_description: Optional[str] = None,
        price_from: Optional[float] = None,
        is_active: bool = True,
        sort_order: int = 0,
        seo_title: Optional[str] = None,
        seo_description: Optional[str] = None,
        image: Optional[UploadFile] = None,
    ) -> int:
        self._validate(title, description)
        image_url = self.images.save(image, "services", "service")
        try:
            with self.db.transaction("Error al crear el servicio") as conn:
                cursor = conn.execute(
                    """
                    INSERT INTO services (
                        title, description, short_description, price_from, image_url,
                        is_active, sort_order, seo_title, seo_description
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        title.strip(),
                        description.strip(),
                        short_description,
                        price_from,
                        image_url,
                        1 if is_active else 0,
                        int(sort_order),
                        seo_title,
                        seo_description,
                    ),
                )
                service_id = int(cursor.lastrowid)
        except Exception:
            self.images.delete(image_url)
            raise
        logger.info("Created service id=%s", service_id)
        return service_id

    def update_service(
        self,
        service_id: int,
        *,
        title: str,
        description: str,
        short_description: Optional[str] = None,
        price_from: Optional[float] = None,
        is_active: bool = True,
        sort_order: int = 0,
        seo_title: Optional[str] = None,
        seo_description: Optional[str] = None,
        image: Optional[UploadFile] = None,
    ) -> None:
        self._validate(title, description)
        new_image_url = self.images.save(image, "services", "service")
        try:
            with self.db.transaction("Error al actualizar el servicio") as conn:
                current = conn.execute("SELECT image_url FROM services WHERE id = ?", (service_id,)).fetchone()
                if current is None:
                    raise StoreNotFoundError("Servicio no encontrado")
                conn.execute(
                    """
                    UPDATE services
                    SET title = ?, description = ?, short_description = ?, price_from = ?,
                        image_url = ?, is_active = ?, sort_order = ?, seo_title = ?, seo_description = ?,
                        updated_at = CURRENT_TIMESTAMP
                    WHERE id = ?
                    """,
                    (
                        title.strip(),
                        description.strip(),
                        short_description,
                        price_from,
                        new_image_url or current["image_url"],
                        1 if is_active else 0,
                        int(sort_order),
                        seo_title,
                        seo_description,
                        service_id,
                    ),
                )
        except Exception:
            self.images.delete(new_image_url)
            raise
        if new_image_url:
            self.images.delete(current["image_url"])

    def delete_service(self, service_id: int) -> None:
        with self.db.transaction("Error al eliminar el servicio") as conn:
            row = conn.execute("SELECT image_url FROM services WHERE id = ?", (service_id,)).fetchone()
            cursor = conn.execute("DELETE FROM services WHERE id = ?", (service_id,))
            if cursor.rowcount == 0:
                raise StoreNotFoundError("Servicio no encontrado")
        self.images.delete(row["image_url"])
        logger.info("Deleted service id=%s", service_id)
