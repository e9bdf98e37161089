from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from purdetall.auth import require_admin
from purdetall.dependencies import get_news_store
from purdetall.http_errors import raise_store_http_error
from purdetall.models import NewsItem, PostSummary
from purdetall.services.errors import StoreError
from purdetall.services.post_store import NewsStore

router = APIRouter(prefix="/api/news", tags=["news"])


@router.get("", response_model=list[PostSummary])
def list_news(
    limit: int = Query(default=10, ge=0, le=100),
    offset: int = Query(default=0, ge=0),
    category: Optional[str] = Query(default=None),
    store: NewsStore = Depends(get_news_store),
):
    try:
        return store.list_published(limit=limit, offset=offset, category=category)
    except StoreError as exc:
        raise_store_http_error(exc)


@router.get("/categories", response_model=list[str])
def list_categories(store: NewsStore = Depends(get_news_store)):
    try:
        return store.list_categories()
    except StoreError as exc:
        raise_store_http_error(exc)


@router.get("/admin", response_model=list[NewsItem], dependencies=[Depends(require_admin)])
def list_news_admin(store: NewsStore = Depends(get_news_store)):
    try:
        return store.list_all()
    except StoreError as exc:
        raise_store_http_error(exc)


@router.get("/admin/{item_id}", response_model=NewsItem, dependencies=[Depends(require_admin)])
def get_news_admin(item_id: int, store: NewsStore = Depends(get_news_store)):
    try:
        return store.get(item_id)
    except StoreError as exc:
        raise_store_http_error(exc)


@router.get("/{slug}", response_model=NewsItem)
def get_news(slug: str, store: NewsStore = Depends(get_news_store)):
    try:
        return store.get_published(slug)
    except StoreError as exc:
        raise_store_http_error(exc)


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
def create_news(
    title: str = Form(default=""),
    content: str = Form(default=""),
    excerpt: Optional[str] = Form(default=None),
    author: Optional[str] = Form(default=None),
    category: Optional[str] = Form(default=None),
    is_published: bool = Form(default=False),
    seo_title: Optional[str] = Form(default=None),
    seo_description: Optional[str] = Form(default=None),
    featured_image: Optional[UploadFile] = File(default=None),
    store: NewsStore = Depends(get_news_store),
):
    try:
        item_id, slug = store.create_item(
            title=title,
            content=content,
            excerpt=excerpt,
            author=author,
            category=category,
            is_published=is_published,
            seo_title=seo_title,
            seo_description=seo_description,
            image=featured_image,
        )
    except StoreError as exc:
        raise_store_http_error(exc)
    return {"success": True, "message": "Noticia creada correctamente", "newsId": item_id, "slug": slug}


@router.put("/{item_id}", dependencies=[Depends(require_admin)])
def update_news(
    item_id: int,
    title: str = Form(default=""),
    content: str = Form(default=""),
    excerpt: Optional[str] = Form(default=None),
    author: Optional[str] = Form(default=None),
    category: Optional[str] = Form(default=None),
    is_published: bool = Form(default=False),
    seo_title: Optional[str] = Form(default=None),
    seo_description: Optional[str] = Form(default=None),
    featured_image: Optional[UploadFile] = File(default=None),
    store: NewsStore = Depends(get_news_store),
):
    try:
        slug = store.update_item(
            item_id,
            title=title,
            content=content,
            excerpt=excerpt,
            author=author,
            category=category,
            is_published=is_published,
            seo_title=seo_title,
            seo_description=seo_description,
            image=featured_image,
        )
    except StoreError as exc:
        raise_store_http_error(exc)
    return {"success": True, "message": "Noticia actualizada correctamente", "slug": slug}


@router.delete("/{item_id}", dependencies=[Depends(require_admin)])
def delete_news(item_id: int, store: NewsStore = Depends(get_news_store)):
    try:
        store.delete(item_id)
    except StoreError as exc:
        raise_store_http_error(exc)
    return {"success": True, "message": "Noticia eliminada correctamente"}
