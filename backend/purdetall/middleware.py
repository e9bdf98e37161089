import time
from threading import Lock
from typing import Dict, Optional, Tuple

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import RequestResponseEndpoint

RATE_LIMIT_MESSAGE = "Demasiadas solicitudes desde esta IP, inténtalo de nuevo más tarde."
BODY_TOO_LARGE_MESSAGE = "La solicitud es demasiado grande"
BODY_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


class RateLimiter:
    """Fixed-window request counter keyed by client address."""

    def __init__(self, max_requests: int, window_seconds: int) -> None:
        self._lock = Lock()
        self._windows: Dict[str, Tuple[float, int]] = {}
        self.max_requests = max_requests
        self.window_seconds = window_seconds

    def hit(self, key: str, now: Optional[float] = None) -> bool:
        now = time.monotonic() if now is None else now
        with self._lock:
            started, count = self._windows.get(key, (now, 0))
            if now - started >= self.window_seconds:
                started, count = now, 0
            count += 1
            self._windows[key] = (started, count)
            if len(self._windows) > 10_000:
                self._prune(now)
            return count <= self.max_requests

    def _prune(self, now: float) -> None:
        expired = [key for key, (started, _) in self._windows.items() if now - started >= self.window_seconds]
        for key in expired:
            del self._windows[key]


def install_request_guards(app: FastAPI, limiter: RateLimiter, max_body_bytes: int) -> None:
    @app.middleware("http")
    async def body_size_guard(request: Request, call_next: RequestResponseEndpoint) -> Response:
        declared = request.headers.get("content-length")
        if declared is not None:
            try:
                too_large = int(declared) > max_body_bytes
            except ValueError:
                return JSONResponse(status_code=400, content={"error": "Content-Length inválido"})
            if too_large:
                return JSONResponse(status_code=413, content={"error": BODY_TOO_LARGE_MESSAGE})
        elif request.method in BODY_METHODS:
            # Chunked upload: count while reading, then hand the buffered body downstream.
            chunks = []
            received = 0
            async for chunk in request.stream():
                received += len(chunk)
                if received > max_body_bytes:
                    return JSONResponse(status_code=413, content={"error": BODY_TOO_LARGE_MESSAGE})
                chunks.append(chunk)
            request._body = b"".join(chunks)
        return await call_next(request)

    # Registered last so it runs first.
    @app.middleware("http")
    async def rate_limit_guard(request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path.startswith("/api/"):
            client_host = request.client.host if request.client else "unknown"
            if not limiter.hit(client_host):
                return JSONResponse(status_code=429, content={"error": RATE_LIMIT_MESSAGE})
        return await call_next(request)
