from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from purdetall.auth import require_admin
from purdetall.dependencies import get_service_store
from purdetall.http_errors import raise_store_http_error
from purdetall.models import Service
from purdetall.services.errors import StoreError
from purdetall.services.service_store import ServiceStore

router = APIRouter(prefix="/api/services", tags=["services"])


@router.get("", response_model=list[Service])
def list_services(store: ServiceStore = Depends(get_service_store)):
    try:
        return store.list_services()
    except StoreError as exc:
        raise_store_http_error(exc)


@router.get("/admin", response_model=list[Service], dependencies=[Depends(require_admin)])
def list_all_services(store: ServiceStore = Depends(get_service_store)):
    try:
        return store.list_services(include_inactive=True)
    except StoreError as exc:
        raise_store_http_error(exc)


@router.get("/{service_id}", response_model=Service)
def get_service(service_id: int, store: ServiceStore = Depends(get_service_store)):
    try:
        return store.get_service(service_id)
    except StoreError as exc:
        raise_store_http_error(exc)


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
def create_service(
    title: str = Form(default=""),
    description: str = Form(default=""),
    short_description: Optional[str] = Form(default=None),
    price_from: Optional[float] = Form(default=None),
    is_active: bool = Form(default=True),
    sort_order: int = Form(default=0),
    seo_title: Optional[str] = Form(default=None),
    seo_description: Optional[str] = Form(default=None),
    image: Optional[UploadFile] = File(default=None),
    store: ServiceStore = Depends(get_service_store),
):
    try:
        service_id = store.create_service(
            title=title,
            description=description,
            short_description=short_description,
            price_from=price_from,
            is_active=is_active,
            sort_order=sort_order,
            seo_title=seo_title,
            seo_description=seo_description,
            image=image,
        )
    except StoreError as exc:
        raise_store_http_error(exc)
    return {"success": True, "message": "Servicio creado correctamente", "serviceId": service_id}


@router.put("/{service_id}", dependencies=[Depends(require_admin)])
def update_service(
    service_id: int,
    title: str = Form(default=""),
    description: str = Form(default=""),
    short_description: Optional[str] = Form(default=None),
    price_from: Optional[float] = Form(default=None),
    is_active: bool = Form(default=True),
    sort_order: int = Form(default=0),
    seo_title: Optional[str] = Form(default=None),
    seo_description: Optional[str] = Form(default=None),
    image: Optional[UploadFile] = File(default=None),
    store: ServiceStore = Depends(get_service_store),
):
    try:
        store.update_service(
            service_id,
            title=title,
            description=description,
            short_description=short_description,
            price_from=price_from,
            is_active=is_active,
            sort_order=sort_order,
            seo_title=seo_title,
            seo_description=seo_description,
            image=image,
        )
    except StoreError as exc:
        raise_store_http_error(exc)
    return {"success": True, "message": "Servicio actualizado correctamente"}


@router.delete("/{service_id}", dependencies=[Depends(require_admin)])
def delete_service(service_id: int, store: ServiceStore = Depends(get_service_store)):
    try:
        store.delete_service(service_id)
    except StoreError as exc:
        raise_store_http_error(exc)
    return {"success": True, "message": "Servicio eliminado correctamente"}
