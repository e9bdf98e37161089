from fastapi import APIRouter, Depends

from purdetall.auth import create_access_token, require_authenticated_user
from purdetall.dependencies import get_settings, get_user_store
from purdetall.http_errors import raise_store_http_error
from purdetall.models import (
    AuthLoginRequest,
    AuthLoginResponse,
    AuthLoginUser,
    AuthUser,
    AuthVerifyResponse,
    ChangePasswordRequest,
)
from purdetall.services.errors import StoreError
from purdetall.services.user_store import UserStore
from purdetall.settings import Settings

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=AuthLoginResponse)
def login(
    payload: AuthLoginRequest,
    users: UserStore = Depends(get_user_store),
    settings: Settings = Depends(get_settings),
):
    try:
        user = users.authenticate(payload.username, payload.password)
    except StoreError as exc:
        raise_store_http_error(exc)
    token, expires_at = create_access_token(user, settings.auth_secret, ttl_hours=settings.token_ttl_hours)
    return AuthLoginResponse(token=token, expires_at=expires_at, user=AuthLoginUser(**user))


@router.get("/verify", response_model=AuthVerifyResponse)
def verify(user: AuthUser = Depends(require_authenticated_user)):
    return AuthVerifyResponse(user=user)


@router.post("/change-password")
def change_password(
    payload: ChangePasswordRequest,
    user: AuthUser = Depends(require_authenticated_user),
    users: UserStore = Depends(get_user_store),
):
    try:
        users.change_password(user.id, payload.currentPassword, payload.newPassword)
    except StoreError as exc:
        raise_store_http_error(exc)
    return {"success": True, "message": "Contraseña actualizada correctamente"}
