from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from purdetall.auth import require_admin
from purdetall.dependencies import get_gallery_store
from purdetall.http_errors import raise_store_http_error
from purdetall.models import GalleryEntry
from purdetall.services.errors import StoreError
from purdetall.services.gallery_store import GalleryStore

router = APIRouter(prefix="/api/gallery", tags=["gallery"])


@router.get("", response_model=list[GalleryEntry])
def list_gallery(store: GalleryStore = Depends(get_gallery_store)):
    try:
        return store.list_entries()
    except StoreError as exc:
        raise_store_http_error(exc)


@router.get("/featured", response_model=list[GalleryEntry])
def list_featured(store: GalleryStore = Depends(get_gallery_store)):
    try:
        return store.list_entries(featured_only=True)
    except StoreError as exc:
        raise_store_http_error(exc)


@router.get("/admin", response_model=list[GalleryEntry], dependencies=[Depends(require_admin)])
def list_gallery_admin(store: GalleryStore = Depends(get_gallery_store)):
    try:
        return store.list_entries(admin=True)
    except StoreError as exc:
        raise_store_http_error(exc)


@router.get("/{entry_id}", response_model=GalleryEntry)
def get_gallery_entry(entry_id: int, store: GalleryStore = Depends(get_gallery_store)):
    try:
        return store.get_entry(entry_id)
    except StoreError as exc:
        raise_store_http_error(exc)


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
def create_gallery_entry(
    title: str = Form(default=""),
    description: Optional[str] = Form(default=None),
    service_id: Optional[int] = Form(default=None),
    is_featured: bool = Form(default=False),
    sort_order: int = Form(default=0),
    before_image: Optional[UploadFile] = File(default=None),
    after_image: Optional[UploadFile] = File(default=None),
    store: GalleryStore = Depends(get_gallery_store),
):
    try:
        entry_id = store.create_entry(
            title=title,
            description=description,
            service_id=service_id,
            is_featured=is_featured,
            sort_order=sort_order,
            before_image=before_image,
            after_image=after_image,
        )
    except StoreError as exc:
        raise_store_http_error(exc)
    return {"success": True, "message": "Entrada de galería creada correctamente", "galleryId": entry_id}


@router.put("/{entry_id}", dependencies=[Depends(require_admin)])
def update_gallery_entry(
    entry_id: int,
    title: str = Form(default=""),
    description: Optional[str] = Form(default=None),
    service_id: Optional[int] = Form(default=None),
    is_featured: bool = Form(default=False),
    sort_order: int = Form(default=0),
    before_image: Optional[UploadFile] = File(default=None),
    after_image: Optional[UploadFile] = File(default=None),
    store: GalleryStore = Depends(get_gallery_store),
):
    try:
        store.update_entry(
            entry_id,
            title=title,
            description=description,
            service_id=service_id,
            is_featured=is_featured,
            sort_order=sort_order,
            before_image=before_image,
            after_image=after_image,
        )
    except StoreError as exc:
        raise_store_http_error(exc)
    return {"success": True, "message": "Entrada actualizada correctamente"}


@router.delete("/{entry_id}", dependencies=[Depends(require_admin)])
def delete_gallery_entry(entry_id: int, store: GalleryStore = Depends(get_gallery_store)):
    try:
        store.delete_entry(entry_id)
    except StoreError as exc:
        raise_store_http_error(exc)
    return {"success": True, "message": "Entrada eliminada correctamente"}
