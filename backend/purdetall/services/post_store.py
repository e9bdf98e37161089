import json
import logging
import sqlite3
from typing import Any, Dict, List, Optional, Tuple

from fastapi import UploadFile

from purdetall.services.database import Database, row_to_dict, rows_to_dicts
from purdetall.services.errors import (
    StoreConflictError,
    StoreNotFoundError,
    StoreValidationError,
    field_error,
    raise_if_errors,
)
from purdetall.services.image_storage import ImageStorage
from purdetall.services.slugs import generate_slug

logger = logging.getLogger(__name__)

DEFAULT_AUTHOR = "PurDetall"


class PostStore:
    """Shared persistence for slugged, publishable articles (blog and news)."""

    table = ""
    bucket = ""
    extra_column = ""
    not_found_message = ""
    duplicate_message = ""

    def __init__(self, db: Database, images: ImageStorage) -> None:
        self.db = db
        self.images = images

    def _encode_extra(self, value: Any) -> Any:
        return value

    def _decode(self, row: Dict[str, Any]) -> Dict[str, Any]:
        return row

    def _validate(self, title: str, content: str) -> str:
        errors = []
        if not title.strip():
            errors.append(field_error("title", "El título es requerido"))
        if not content.strip():
            errors.append(field_error("content", "El contenido es requerido"))
        raise_if_errors(errors)
        slug = generate_slug(title)
        if not slug:
            raise StoreValidationError(
                "El título debe contener letras o números",
                errors=[field_error("title", "El título debe contener letras o números")],
            )
        return slug

    def _slug_owner(self, conn: sqlite3.Connection, slug: str) -> Optional[int]:
        row = conn.execute(f"SELECT id FROM {self.table} WHERE slug = ?", (slug,)).fetchone()
        return int(row["id"]) if row else None

    def list_published(
        self,
        limit: int = 10,
        offset: int = 0,
        category: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        columns = "id, title, slug, excerpt, featured_image, author, created_at"
        if self.extra_column == "category":
            columns = "id, title, slug, excerpt, featured_image, author, category, created_at"
        query = f"SELECT {columns} FROM {self.table} WHERE is_published = 1"
        params: List[Any] = []
        if category and self.extra_column == "category":
            query += " AND category = ?"
            params.append(category)
        query += " ORDER BY created_at DESC, id DESC LIMIT ? OFFSET ?"
        params.extend([max(0, int(limit)), max(0, int(offset))])
        with self.db.transaction("Error al obtener las publicaciones") as conn:
            rows = conn.execute(query, tuple(params)).fetchall()
        return rows_to_dicts(rows)

    def list_all(self) -> List[Dict[str, Any]]:
        with self.db.transaction("Error al obtener las publicaciones") as conn:
            rows = conn.execute(f"SELECT * FROM {self.table} ORDER BY created_at DESC, id DESC").fetchall()
        return [self._decode(row) for row in rows_to_dicts(rows)]

    def get_published(self, slug: str) -> Dict[str, Any]:
        with self.db.transaction("Error al obtener la publicación") as conn:
            row = conn.execute(
                f"SELECT * FROM {self.table} WHERE slug = ? AND is_published = 1",
                (slug,),
            ).fetchone()
        if row is None:
            raise StoreNotFoundError(self.not_found_message)
        return self._decode(row_to_dict(row))

    def get(self, post_id: int) -> Dict[str, Any]:
        with self.db.transaction("Error al obtener la publicación") as conn:
            row = conn.execute(f"SELECT * FROM {self.table} WHERE id = ?", (post_id,)).fetchone()
        if row is None:
            raise StoreNotFoundError(self.not_found_message)
        return self._decode(row_to_dict(row))

    def _create(self, fields: Dict[str, Any], image: Optional[UploadFile]) -> Tuple[int, str]:
        slug = self._validate(fields["title"], fields["content"])
        with self.db.transaction("Error al verificar el slug") as conn:
            if self._slug_owner(conn, slug) is not None:
                raise StoreConflictError(self.duplicate_message)

        image_url = self.images.save(image, self.bucket, self.bucket, field="featured_image")
        try:
            with self.db.transaction("Error al crear la publicación") as conn:
                if self._slug_owner(conn, slug) is not None:
                    raise StoreConflictError(self.duplicate_message)
                cursor = conn.execute(
                    f"""
                    INSERT INTO {self.table} (
                        title, slug, content, excerpt, featured_image, author,
                        {self.extra_column}, is_published, seo_title, seo_description
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        fields["title"].strip(),
                        slug,
                        fields["content"],
                        fields.get("excerpt"),
                        image_url,
                        fields.get("author") or DEFAULT_AUTHOR,
                        self._encode_extra(fields.get(self.extra_column)),
                        1 if fields.get("is_published") else 0,
                        fields.get("seo_title"),
                        fields.get("seo_description"),
                    ),
                )
                post_id = int(cursor.lastrowid)
        except Exception:
            self.images.delete(image_url)
            raise
        logger.info("Created %s id=%s slug=%s", self.table, post_id, slug)
        return post_id, slug

    def _update(self, post_id: int, fields: Dict[str, Any], image: Optional[UploadFile]) -> str:
        slug = self._validate(fields["title"], fields["content"])
        new_image_url = self.images.save(image, self.bucket, self.bucket, field="featured_image")
        try:
            with self.db.transaction("Error al actualizar la publicación") as conn:
                current = conn.execute(
                    f"SELECT featured_image FROM {self.table} WHERE id = ?",
                    (post_id,),
                ).fetchone()
                if current is None:
                    raise StoreNotFoundError(self.not_found_message)
                owner = self._slug_owner(conn, slug)
                if owner is not None and owner != post_id:
                    raise StoreConflictError(self.duplicate_message)
                conn.execute(
                    f"""
                    UPDATE {self.table}
                    SET title = ?, slug = ?, content = ?, excerpt = ?, featured_image = ?,
                        author = ?, {self.extra_column} = ?, is_published = ?, seo_title = ?, seo_description = ?,
                        updated_at = CURRENT_TIMESTAMP
                    WHERE id = ?
                    """,
                    (
                        fields["title"].strip(),
                        slug,
                        fields["content"],
                        fields.get("excerpt"),
                        new_image_url or current["featured_image"],
                        fields.get("author") or DEFAULT_AUTHOR,
                        self._encode_extra(fields.get(self.extra_column)),
                        1 if fields.get("is_published") else 0,
                        fields.get("seo_title"),
                        fields.get("seo_description"),
                        post_id,
                    ),
                )
        except Exception:
            self.images.delete(new_image_url)
            raise
        if new_image_url:
            self.images.delete(current["featured_image"])
        return slug

    def delete(self, post_id: int) -> None:
        with self.db.transaction("Error al eliminar la publicación") as conn:
            row = conn.execute(f"SELECT featured_image FROM {self.table} WHERE id = ?", (post_id,)).fetchone()
            cursor = conn.execute(f"DELETE FROM {self.table} WHERE id = ?", (post_id,))
            if cursor.rowcount == 0:
                raise StoreNotFoundError(self.not_found_message)
        self.images.delete(row["featured_image"])
        logger.info("Deleted %s id=%s", self.table, post_id)


class BlogStore(PostStore):
    table = "blog_posts"
    bucket = "blog"
    extra_column = "tags"
    not_found_message = "Post no encontrado"
    duplicate_message = "Ya existe un post con ese título"

    def _encode_extra(self, value: Any) -> str:
        return json.dumps(list(value or []))

    def _decode(self, row: Dict[str, Any]) -> Dict[str, Any]:
        try:
            tags = json.loads(row.get("tags") or "[]")
        except json.JSONDecodeError:
            tags = []
        row["tags"] = tags if isinstance(tags, list) else []
        return row

    def create_post(
        self,
        *,
        title: str,
        content: str,
        excerpt: Optional[str] = None,
        author: Optional[str] = None,
        tags: Optional[List[str]] = None,
        is_published: bool = False,
        seo_title: Optional[str] = None,
        seo_description: Optional[str] = None,
        image: Optional[UploadFile] = None,
    ) -> Tuple[int, str]:
        return self._create(
            {
                "title": title,
                "content": content,
                "excerpt": excerpt,
                "author": author,
                "tags": tags,
                "is_published": is_published,
                "seo_title": seo_title,
                "seo_description": seo_description,
            },
            image,
        )

    def update_post(
        self,
        post_id: int,
        *,
        title: str,
        content: str,
        excerpt: Optional[str] = None,
        author: Optional[str] = None,
        tags: Optional[List[str]] = None,
        is_published: bool = False,
        seo_title: Optional[str] = None,
        seo_description: Optional[str] = None,
        image: Optional[UploadFile] = None,
    ) -> str:
        return self._update(
            post_id,
            {
                "title": title,
                "content": content,
                "excerpt": excerpt,
                "author": author,
                "tags": tags,
                "is_published": is_published,
                "seo_title": seo_title,
                "seo_description": seo_description,
            },
            image,
        )


class NewsStore(PostStore):
    table = "news"
    bucket = "news"
    extra_column = "category"
    not_found_message = "Noticia no encontrada"
    duplicate_message = "Ya existe una noticia con ese título"

    def _encode_extra(self, value: Any) -> Optional[str]:
        if value is None:
            return None
        return str(value).strip() or None

    def list_categories(self) -> List[str]:
        with self.db.transaction("Error al obtener las categorías") as conn:
            rows = conn.execute(
                "SELECT DISTINCT category FROM news WHERE is_published = 1 AND category IS NOT NULL ORDER BY category"
            ).fetchall()
        return [row["category"] for row in rows]

    def create_item(
        self,
        *,
        title: str,
        content: str,
        excerpt: Optional[str] = None,
        author: Optional[str] = None,
        category: Optional[str] = None,
        is_published: bool = False,
        seo_title: Optional[str] = None,
        seo_description: Optional[str] = None,
        image: Optional[UploadFile] = None,
    ) -> Tuple[int, str]:
        return self._create(
            {
                "title": title,
                "content": content,
                "excerpt": excerpt,
                "author": author,
                "category": category,
                "is_published": is_published,
                "seo_title": seo_title,
                "seo_description": seo_description,
            },
            image,
        )

    def update_item(
        self,
        item_id: int,
        *,
        title: str,
        content: str,
        excerpt: Optional[str] = None,
        author: Optional[str] = None,
        category: Optional[str] = None,
        is_published: bool = False,
        seo_title: Optional[str] = None,
        seo_description: Optional[str] = None,
        image: Optional[UploadFile] = None,
    ) -> str:
        return self._update(
            item_id,
            {
                "title": title,
                "content": content,
                "excerpt": excerpt,
                "author": author,
                "category": category,
                "is_published": is_published,
                "seo_title": seo_title,
                "seo_description": seo_description,
            },
            image,
        )
