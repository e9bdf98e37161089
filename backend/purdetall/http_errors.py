import logging
from typing import Any, Dict, List, NoReturn

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from purdetall.services.errors import StoreError, StoreValidationError

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Página no encontrada"
INTERNAL_ERROR_MESSAGE = "Error interno del servidor"

_LOCATION_ROOTS = {"body", "query", "path", "header", "cookie"}


def raise_store_http_error(exc: StoreError) -> NoReturn:
    if isinstance(exc, StoreValidationError) and exc.errors:
        raise HTTPException(status_code=exc.status_code, detail={"errors": exc.errors}) from exc
    raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


def _validation_errors(exc: RequestValidationError) -> List[Dict[str, str]]:
    errors = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if str(part) not in _LOCATION_ROOTS]
        errors.append({"field": ".".join(location) or "body", "message": str(error.get("msg", "Valor inválido"))})
    return errors


def _error_content(exc: StarletteHTTPException) -> Dict[str, Any]:
    if isinstance(exc.detail, dict):
        return exc.detail
    if exc.status_code == 404 and exc.detail == "Not Found":
        return {"error": NOT_FOUND_MESSAGE}
    return {"error": str(exc.detail)}


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_content(exc),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"errors": _validation_errors(exc)})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR_MESSAGE})
