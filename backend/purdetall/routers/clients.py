from fastapi import APIRouter, Depends, status

from purdetall.auth import require_admin
from purdetall.dependencies import get_client_store
from purdetall.http_errors import raise_store_http_error
from purdetall.models import Client, ClientDetails, ClientPayload
from purdetall.services.client_store import ClientStore
from purdetall.services.errors import StoreError

router = APIRouter(prefix="/api/clients", tags=["clients"], dependencies=[Depends(require_admin)])


@router.get("", response_model=list[Client])
def list_clients(store: ClientStore = Depends(get_client_store)):
    try:
        return store.list_clients()
    except StoreError as exc:
        raise_store_http_error(exc)


@router.get("/search/{term}", response_model=list[Client])
def search_clients(term: str, store: ClientStore = Depends(get_client_store)):
    try:
        return store.search_clients(term)
    except StoreError as exc:
        raise_store_http_error(exc)


@router.get("/{client_id}", response_model=ClientDetails)
def get_client(client_id: int, store: ClientStore = Depends(get_client_store)):
    try:
        return store.get_client(client_id)
    except StoreError as exc:
        raise_store_http_error(exc)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_client(payload: ClientPayload, store: ClientStore = Depends(get_client_store)):
    try:
        client_id = store.create_client(**payload.model_dump())
    except StoreError as exc:
        raise_store_http_error(exc)
    return {"success": True, "message": "Cliente creado correctamente", "clientId": client_id}


@router.put("/{client_id}")
def update_client(client_id: int, payload: ClientPayload, store: ClientStore = Depends(get_client_store)):
    try:
        store.update_client(client_id, **payload.model_dump())
    except StoreError as exc:
        raise_store_http_error(exc)
    return {"success": True, "message": "Cliente actualizado correctamente"}


@router.delete("/{client_id}")
def delete_client(client_id: int, store: ClientStore = Depends(get_client_store)):
    try:
        store.delete_client(client_id)
    except StoreError as exc:
        raise_store_http_error(exc)
    return {"success": True, "message": "Cliente eliminado correctamente"}
