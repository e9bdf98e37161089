from typing import Dict, Optional, Union

from fastapi import APIRouter, Body, Depends

from purdetall.auth import require_admin
from purdetall.dependencies import get_config_store
from purdetall.http_errors import raise_store_http_error
from purdetall.models import ConfigBulkUpdate, ConfigItem, ConfigValueUpdate, SiteConfigRow
from purdetall.services.config_store import ConfigStore
from purdetall.services.errors import StoreError

router = APIRouter(prefix="/api/content", tags=["content"])


@router.get("/config", response_model=Dict[str, Optional[str]])
def get_config(store: ConfigStore = Depends(get_config_store)):
    try:
        return store.get_public_config()
    except StoreError as exc:
        raise_store_http_error(exc)


@router.get("/config/admin", response_model=list[SiteConfigRow], dependencies=[Depends(require_admin)])
def get_config_admin(store: ConfigStore = Depends(get_config_store)):
    try:
        return store.get_admin_config()
    except StoreError as exc:
        raise_store_http_error(exc)


@router.put("/config", dependencies=[Depends(require_admin)])
def update_config(
    payload: Union[ConfigBulkUpdate, list[ConfigItem]] = Body(...),
    store: ConfigStore = Depends(get_config_store),
):
    items = payload.configs if isinstance(payload, ConfigBulkUpdate) else payload
    try:
        store.set_config_bulk((item.key, item.value) for item in items)
    except StoreError as exc:
        raise_store_http_error(exc)
    return {"success": True, "message": "Configuración actualizada correctamente"}


@router.put("/config/{key}", dependencies=[Depends(require_admin)])
def update_config_value(key: str, payload: ConfigValueUpdate, store: ConfigStore = Depends(get_config_store)):
    try:
        store.set_config(key, payload.value)
    except StoreError as exc:
        raise_store_http_error(exc)
    return {"success": True, "message": "Configuración actualizada correctamente"}
