from fastapi import APIRouter, Depends, status

from purdetall.auth import require_admin
from purdetall.dependencies import get_quote_store
from purdetall.http_errors import raise_store_http_error
from purdetall.models import Quote, QuoteCreate, QuoteStatus, QuoteUpdate
from purdetall.services.errors import StoreError
from purdetall.services.quote_store import QuoteStore

router = APIRouter(prefix="/api/quotes", tags=["quotes"])


@router.get("", response_model=list[Quote], dependencies=[Depends(require_admin)])
def list_quotes(store: QuoteStore = Depends(get_quote_store)):
    try:
        return store.list_quotes()
    except StoreError as exc:
        raise_store_http_error(exc)


@router.get("/status/{quote_status}", response_model=list[Quote], dependencies=[Depends(require_admin)])
def list_quotes_by_status(quote_status: QuoteStatus, store: QuoteStore = Depends(get_quote_store)):
    try:
        return store.list_quotes(status=quote_status)
    except StoreError as exc:
        raise_store_http_error(exc)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_quote(payload: QuoteCreate, store: QuoteStore = Depends(get_quote_store)):
    try:
        quote_id = store.create_quote(payload)
    except StoreError as exc:
        raise_store_http_error(exc)
    return {
        "success": True,
        "message": "Solicitud de presupuesto enviada correctamente. Te contactaremos pronto.",
        "quoteId": quote_id,
    }


@router.get("/{quote_id}", response_model=Quote, dependencies=[Depends(require_admin)])
def get_quote(quote_id: int, store: QuoteStore = Depends(get_quote_store)):
    try:
        return store.get_quote(quote_id)
    except StoreError as exc:
        raise_store_http_error(exc)


@router.put("/{quote_id}", dependencies=[Depends(require_admin)])
def update_quote(quote_id: int, payload: QuoteUpdate, store: QuoteStore = Depends(get_quote_store)):
    try:
        store.update_quote(
            quote_id,
            status=payload.status,
            quote_amount=payload.quote_amount,
            admin_notes=payload.admin_notes,
            valid_until=payload.valid_until,
        )
    except StoreError as exc:
        raise_store_http_error(exc)
    return {"success": True, "message": "Presupuesto actualizado correctamente"}


@router.delete("/{quote_id}", dependencies=[Depends(require_admin)])
def delete_quote(quote_id: int, store: QuoteStore = Depends(get_quote_store)):
    try:
        store.delete_quote(quote_id)
    except StoreError as exc:
        raise_store_http_error(exc)
    return {"success": True, "message": "Presupuesto eliminado correctamente"}
