import base64
import hashlib
import hmac
import json
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Dict, Optional

import bcrypt
from fastapi import Depends, Header, HTTPException, Request, status

from purdetall.models import AuthUser

DEFAULT_TOKEN_TTL_HOURS = 24


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("utf-8").rstrip("=")


def _b64urldecode(value: str) -> bytes:
    padding = "=" * ((4 - len(value) % 4) % 4)
    return base64.urlsafe_b64decode((value + padding).encode("utf-8"))


def hash_password(password: str, rounds: int = 12) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


@lru_cache(maxsize=4)
def _dummy_hash(rounds: int) -> str:
    return hash_password("not-a-real-password", rounds=rounds)


def burn_password_check(password: str, rounds: int = 12) -> None:
    """Spend the same bcrypt work as a real check when the user does not exist."""
    verify_password(password, _dummy_hash(rounds))


def create_access_token(user: Dict[str, Any], secret: str, ttl_hours: int = DEFAULT_TOKEN_TTL_HOURS) -> tuple[str, str]:
    expiry = datetime.now(timezone.utc) + timedelta(hours=ttl_hours)
    claims = {
        "id": int(user["id"]),
        "username": str(user["username"]),
        "role": str(user["role"]),
        "exp": int(expiry.timestamp()),
    }
    payload = json.dumps(claims, separators=(",", ":"), sort_keys=True).encode("utf-8")
    sig = hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).digest()
    token = f"{_b64url(payload)}.{_b64url(sig)}"
    return token, expiry.isoformat()


def verify_access_token(token: str, secret: str) -> Optional[AuthUser]:
    try:
        payload_part, sig_part = token.split(".", 1)
        payload = _b64urldecode(payload_part)
        sent_sig = _b64urldecode(sig_part)
        expected_sig = hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).digest()
        if not hmac.compare_digest(sent_sig, expected_sig):
            return None
        claims = json.loads(payload.decode("utf-8"))
        if datetime.now(timezone.utc).timestamp() > int(claims["exp"]):
            return None
        return AuthUser(id=int(claims["id"]), username=str(claims["username"]), role=str(claims["role"]))
    except (ValueError, KeyError, TypeError):
        return None


def parse_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1].strip() or None


def require_authenticated_user(
    request: Request,
    authorization: Optional[str] = Header(default=None),
) -> AuthUser:
    token = parse_bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token de acceso requerido")
    user = verify_access_token(token, request.app.state.settings.auth_secret)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token inválido o expirado")
    request.state.user = user
    return user


def require_admin(user: AuthUser = Depends(require_authenticated_user)) -> AuthUser:
    if user.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Acceso denegado: se requieren permisos de administrador",
        )
    return user
