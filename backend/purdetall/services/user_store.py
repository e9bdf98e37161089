import logging
from typing import Any, Dict, Optional

from purdetall.auth import burn_password_check, hash_password, verify_password
from purdetall.services.database import Database, row_to_dict
from purdetall.services.errors import (
    StoreConflictError,
    StoreNotFoundError,
    StoreUnauthorizedError,
    field_error,
    raise_if_errors,
)

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class UserStore:
    def __init__(self, db: Database, bcrypt_rounds: int = 12) -> None:
        self.db = db
        self.bcrypt_rounds = bcrypt_rounds

    def authenticate(self, login: str, password: str) -> Dict[str, Any]:
        errors = []
        if not login.strip():
            errors.append(field_error("username", "El nombre de usuario es requerido"))
        if not password:
            errors.append(field_error("password", "La contraseña es requerida"))
        raise_if_errors(errors)

        with self.db.transaction("Error en la base de datos") as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE username = ? OR email = ?",
                (login.strip(), login.strip()),
            ).fetchone()

        if row is None:
            burn_password_check(password, rounds=self.bcrypt_rounds)
            logger.info("Login rejected for unknown user")
            raise StoreUnauthorizedError("Credenciales inválidas")
        if not verify_password(password, row["password"]):
            logger.info("Login rejected for user id=%s", row["id"])
            raise StoreUnauthorizedError("Credenciales inválidas")

        logger.info("Login accepted for user id=%s", row["id"])
        return {"id": row["id"], "username": row["username"], "email": row["email"], "role": row["role"]}

    def find(self, username: str, email: str) -> Optional[Dict[str, Any]]:
        with self.db.transaction() as conn:
            row = conn.execute(
                "SELECT id, username, email, role FROM users WHERE username = ? OR email = ?",
                (username, email),
            ).fetchone()
        return row_to_dict(row)

    def create_user(self, username: str, email: str, password: str, role: str = "admin") -> int:
        errors = []
        if not username.strip():
            errors.append(field_error("username", "El nombre de usuario es requerido"))
        if not email.strip():
            errors.append(field_error("email", "El email es requerido"))
        if len(password) < MIN_PASSWORD_LENGTH:
            errors.append(field_error("password", "La contraseña debe tener al menos 6 caracteres"))
        raise_if_errors(errors)

        if self.find(username.strip(), email.strip()) is not None:
            raise StoreConflictError("El usuario ya existe")

        hashed = hash_password(password, rounds=self.bcrypt_rounds)
        with self.db.transaction("Error al crear el usuario") as conn:
            cursor = conn.execute(
                "INSERT INTO users (username, email, password, role) VALUES (?, ?, ?, ?)",
                (username.strip(), email.strip(), hashed, role),
            )
            user_id = int(cursor.lastrowid)
        logger.info("Created user id=%s role=%s", user_id, role)
        return user_id

    def change_password(self, user_id: int, current_password: str, new_password: str) -> None:
        errors = []
        if not current_password:
            errors.append(field_error("currentPassword", "La contraseña actual es requerida"))
        if len(new_password) < MIN_PASSWORD_LENGTH:
            errors.append(field_error("newPassword", "La nueva contraseña debe tener al menos 6 caracteres"))
        raise_if_errors(errors)

        with self.db.transaction("Error en la base de datos") as conn:
            row = conn.execute("SELECT password FROM users WHERE id = ?", (user_id,)).fetchone()
        if row is None:
            raise StoreNotFoundError("Usuario no encontrado")
        if not verify_password(current_password, row["password"]):
            raise StoreUnauthorizedError("Contraseña actual incorrecta")

        hashed = hash_password(new_password, rounds=self.bcrypt_rounds)
        with self.db.transaction("Error al actualizar la contraseña") as conn:
            cursor = conn.execute(
                "UPDATE users SET password = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (hashed, user_id),
            )
            if cursor.rowcount == 0:
                raise StoreNotFoundError("Usuario no encontrado")
        logger.info("Password changed for user id=%s", user_id)
