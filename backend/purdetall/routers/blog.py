import json
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from purdetall.auth import require_admin
from purdetall.dependencies import get_blog_store
from purdetall.http_errors import raise_store_http_error
from purdetall.models import BlogPost, PostSummary
from purdetall.services.errors import StoreError
from purdetall.services.post_store import BlogStore

router = APIRouter(prefix="/api/blog", tags=["blog"])


def parse_tags(raw_value: Optional[str]) -> List[str]:
    """Accept either a JSON array or a comma separated list."""
    if raw_value is None or not raw_value.strip():
        return []
    text = raw_value.strip()
    if text.startswith("["):
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError:
            parsed = []
        if isinstance(parsed, list):
            return [str(tag).strip() for tag in parsed if str(tag).strip()]
        return []
    return [tag.strip() for tag in text.split(",") if tag.strip()]


@router.get("", response_model=list[PostSummary])
def list_posts(
    limit: int = Query(default=10, ge=0, le=100),
    offset: int = Query(default=0, ge=0),
    store: BlogStore = Depends(get_blog_store),
):
    try:
        return store.list_published(limit=limit, offset=offset)
    except StoreError as exc:
        raise_store_http_error(exc)


@router.get("/admin", response_model=list[BlogPost], dependencies=[Depends(require_admin)])
def list_posts_admin(store: BlogStore = Depends(get_blog_store)):
    try:
        return store.list_all()
    except StoreError as exc:
        raise_store_http_error(exc)


@router.get("/admin/{post_id}", response_model=BlogPost, dependencies=[Depends(require_admin)])
def get_post_admin(post_id: int, store: BlogStore = Depends(get_blog_store)):
    try:
        return store.get(post_id)
    except StoreError as exc:
        raise_store_http_error(exc)


@router.get("/{slug}", response_model=BlogPost)
def get_post(slug: str, store: BlogStore = Depends(get_blog_store)):
    try:
        return store.get_published(slug)
    except StoreError as exc:
        raise_store_http_error(exc)


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
def create_post(
    title: str = Form(default=""),
    content: str = Form(default=""),
    excerpt: Optional[str] = Form(default=None),
    author: Optional[str] = Form(default=None),
    tags: Optional[str] = Form(default=None),
    is_published: bool = Form(default=False),
    seo_title: Optional[str] = Form(default=None),
    seo_description: Optional[str] = Form(default=None),
    featured_image: Optional[UploadFile] = File(default=None),
    store: BlogStore = Depends(get_blog_store),
):
    try:
        post_id, slug = store.create_post(
            title=title,
            content=content,
            excerpt=excerpt,
            author=author,
            tags=parse_tags(tags),
            is_published=is_published,
            seo_title=seo_title,
            seo_description=seo_description,
            image=featured_image,
        )
    except StoreError as exc:
        raise_store_http_error(exc)
    return {"success": True, "message": "Post creado correctamente", "postId": post_id, "slug": slug}


@router.put("/{post_id}", dependencies=[Depends(require_admin)])
def update_post(
    post_id: int,
    title: str = Form(default=""),
    content: str = Form(default=""),
    excerpt: Optional[str] = Form(default=None),
    author: Optional[str] = Form(default=None),
    tags: Optional[str] = Form(default=None),
    is_published: bool = Form(default=False),
    seo_title: Optional[str] = Form(default=None),
    seo_description: Optional[str] = Form(default=None),
    featured_image: Optional[UploadFile] = File(default=None),
    store: BlogStore = Depends(get_blog_store),
):
    try:
        slug = store.update_post(
            post_id,
            title=title,
            content=content,
            excerpt=excerpt,
            author=author,
            tags=parse_tags(tags),
            is_published=is_published,
            seo_title=seo_title,
            seo_description=seo_description,
            image=featured_image,
        )
    except StoreError as exc:
        raise_store_http_error(exc)
    return {"success": True, "message": "Post actualizado correctamente", "slug": slug}


@router.delete("/{post_id}", dependencies=[Depends(require_admin)])
def delete_post(post_id: int, store: BlogStore = Depends(get_blog_store)):
    try:
        store.delete(post_id)
    except StoreError as exc:
        raise_store_http_error(exc)
    return {"success": True, "message": "Post eliminado correctamente"}
