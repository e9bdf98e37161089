from typing import Dict, Optional

from fastapi import APIRouter, Depends

from purdetall.dependencies import get_config_store, get_contact_notifier
from purdetall.http_errors import raise_store_http_error
from purdetall.models import ContactRequest
from purdetall.services.config_store import ConfigStore
from purdetall.services.contact_notifier import ContactNotifier
from purdetall.services.errors import StoreError

router = APIRouter(prefix="/api/contact", tags=["contact"])


@router.post("")
def send_contact_message(payload: ContactRequest, notifier: ContactNotifier = Depends(get_contact_notifier)):
    try:
        notifier.send(payload)
    except StoreError as exc:
        raise_store_http_error(exc)
    return {"success": True, "message": "Mensaje enviado correctamente. Te contactaremos pronto."}


@router.get("/info", response_model=Dict[str, Optional[str]])
def contact_info(store: ConfigStore = Depends(get_config_store)):
    try:
        return store.get_contact_info()
    except StoreError as exc:
        raise_store_http_error(exc)
