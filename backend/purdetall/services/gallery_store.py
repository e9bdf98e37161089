import logging
from typing import Any, Dict, List, Optional

from fastapi import UploadFile

from purdetall.services.database import Database, row_to_dict, rows_to_dicts
from purdetall.services.errors import StoreNotFoundError, StoreValidationError, field_error
from purdetall.services.image_storage import ImageStorage

logger = logging.getLogger(__name__)

_BASE_QUERY = """
    SELECT g.*, s.title AS service_title
    FROM gallery g
    LEFT JOIN services s ON g.service_id = s.id
"""


def _has_file(upload: Optional[UploadFile]) -> bool:
    return upload is not None and bool(upload.filename)


class GalleryStore:
    def __init__(self, db: Database, images: ImageStorage) -> None:
        self.db = db
        self.images = images

    def list_entries(self, *, featured_only: bool = False, admin: bool = False) -> List[Dict[str, Any]]:
        if admin:
            query = _BASE_QUERY + " ORDER BY g.created_at DESC, g.id DESC"
        elif featured_only:
            query = _BASE_QUERY + " WHERE g.is_featured = 1 ORDER BY g.sort_order ASC, g.created_at DESC, g.id DESC"
        else:
            query = _BASE_QUERY + " ORDER BY g.is_featured DESC, g.sort_order ASC, g.created_at DESC, g.id DESC"
        with self.db.transaction("Error al obtener la galería") as conn:
            rows = conn.execute(query).fetchall()
        return rows_to_dicts(rows)

    def get_entry(self, entry_id: int) -> Dict[str, Any]:
        with self.db.transaction("Error al obtener la entrada") as conn:
            row = conn.execute(_BASE_QUERY + " WHERE g.id = ?", (entry_id,)).fetchone()
        if row is None:
            raise StoreNotFoundError("Entrada de galería no encontrada")
        return row_to_dict(row)

    def _validate_title(self, title: str) -> None:
        if not title.strip():
            raise StoreValidationError("El título es requerido", errors=[field_error("title", "El título es requerido")])

    def _save_pair(
        self,
        before_image: Optional[UploadFile],
        after_image: Optional[UploadFile],
    ) -> tuple[Optional[str], Optional[str]]:
        before_url = self.images.save(before_image, "gallery", "gallery-before", field="before_image")
        try:
            after_url = self.images.save(after_image, "gallery", "gallery-after", field="after_image")
        except Exception:
            self.images.delete(before_url)
            raise
        return before_url, after_url

    def create_entry(
        self,
        *,
        title: str,
        description: Optional[str] = None,
        service_id: Optional[int] = None,
        is_featured: bool = False,
        sort_order: int = 0,
        before_image: Optional[UploadFile] = None,
        after_image: Optional[UploadFile] = None,
    ) -> int:
        self._validate_title(title)
        if not _has_file(before_image) or not _has_file(after_image):
            raise StoreValidationError('Se requieren tanto la imagen "antes" como "después"')

        before_url, after_url = self._save_pair(before_image, after_image)
        try:
            with self.db.transaction("Error al crear la entrada de galería") as conn:
                cursor = conn.execute(
                    """
                    INSERT INTO gallery (title, description, before_image, after_image, service_id, is_featured, sort_order)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        title.strip(),
                        description,
                        before_url,
                        after_url,
                        service_id,
                        1 if is_featured else 0,
                        int(sort_order),
                    ),
                )
                entry_id = int(cursor.lastrowid)
        except Exception:
            self.images.delete(before_url)
            self.images.delete(after_url)
            raise
        logger.info("Created gallery entry id=%s", entry_id)
        return entry_id

    def update_entry(
        self,
        entry_id: int,
        *,
        title: str,
        description: Optional[str] = None,
        service_id: Optional[int] = None,
        is_featured: bool = False,
        sort_order: int = 0,
        before_image: Optional[UploadFile] = None,
        after_image: Optional[UploadFile] = None,
    ) -> None:
        self._validate_title(title)

        new_before, new_after = self._save_pair(before_image, after_image)
        try:
            with self.db.transaction("Error al actualizar la entrada") as conn:
                current = conn.execute(
                    "SELECT before_image, after_image FROM gallery WHERE id = ?",
                    (entry_id,),
                ).fetchone()
                if current is None:
                    raise StoreNotFoundError("Entrada de galería no encontrada")
                conn.execute(
                    """
                    UPDATE gallery
                    SET title = ?, description = ?, before_image = ?, after_image = ?,
                        service_id = ?, is_featured = ?, sort_order = ?
                    WHERE id = ?
                    """,
                    (
                        title.strip(),
                        description,
                        new_before or current["before_image"],
                        new_after or current["after_image"],
                        service_id,
                        1 if is_featured else 0,
                        int(sort_order),
                        entry_id,
                    ),
                )
        except Exception:
            self.images.delete(new_before)
            self.images.delete(new_after)
            raise
        if new_before:
            self.images.delete(current["before_image"])
        if new_after:
            self.images.delete(current["after_image"])

    def delete_entry(self, entry_id: int) -> None:
        with self.db.transaction("Error al eliminar la entrada") as conn:
            row = conn.execute("SELECT before_image, after_image FROM gallery WHERE id = ?", (entry_id,)).fetchone()
            if row is None:
                raise StoreNotFoundError("Entrada no encontrada")
            conn.execute("DELETE FROM gallery WHERE id = ?", (entry_id,))
        self.images.delete(row["before_image"])
        self.images.delete(row["after_image"])
        logger.info("Deleted gallery entry id=%s", entry_id)
