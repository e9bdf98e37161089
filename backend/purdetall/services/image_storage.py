import logging
import secrets
import time
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from purdetall.services.errors import StoreValidationError, field_error

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif", ".webp"}
ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"}
URL_PREFIX = "/uploads"


class ImageStorage:
    def __init__(self, root: str, max_bytes: int = 5 * 1024 * 1024) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self.max_bytes = max_bytes

    def save(self, upload: Optional[UploadFile], bucket: str, prefix: str, field: str = "image") -> Optional[str]:
        if upload is None or not upload.filename:
            return None
        extension = Path(upload.filename).suffix.lower()
        content_type = (upload.content_type or "").lower()
        if extension not in ALLOWED_EXTENSIONS or content_type not in ALLOWED_CONTENT_TYPES:
            raise StoreValidationError(
                "Solo se permiten archivos de imagen",
                errors=[field_error(field, "Solo se permiten archivos de imagen")],
            )
        data = upload.file.read(self.max_bytes + 1)
        if len(data) > self.max_bytes:
            raise StoreValidationError(
                "La imagen supera el tamaño máximo permitido",
                errors=[field_error(field, "La imagen supera el tamaño máximo permitido")],
            )

        target_dir = self.root / bucket
        target_dir.mkdir(parents=True, exist_ok=True)
        filename = f"{prefix}-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{extension}"
        (target_dir / filename).write_bytes(data)
        return f"{URL_PREFIX}/{bucket}/{filename}"

    def delete(self, url: Optional[str]) -> bool:
        path = self._resolve(url)
        if path is None:
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError:
            logger.warning("Could not remove stored image %s", path, exc_info=True)
            return False
        return True

    def _resolve(self, url: Optional[str]) -> Optional[Path]:
        if not url or not url.startswith(f"{URL_PREFIX}/"):
            return None
        relative = url[len(URL_PREFIX) + 1 :]
        candidate = (self.root / relative).resolve()
        root = self.root.resolve()
        if root not in candidate.parents:
            return None
        return candidate
