import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.trustedhost import TrustedHostMiddleware

from purdetall.http_errors import register_error_handlers
from purdetall.logging_config import configure_logging
from purdetall.middleware import RateLimiter, install_request_guards
from purdetall.routers import appointments, auth, blog, clients, contact, content, gallery, news, quotes, services
from purdetall.services.appointment_store import AppointmentStore
from purdetall.services.client_store import ClientStore
from purdetall.services.config_store import ConfigStore
from purdetall.services.contact_notifier import ContactNotifier
from purdetall.services.database import Database
from purdetall.services.gallery_store import GalleryStore
from purdetall.services.image_storage import ImageStorage
from purdetall.services.mail_sender import MailSender
from purdetall.services.post_store import BlogStore, NewsStore
from purdetall.services.quote_store import QuoteStore
from purdetall.services.service_store import ServiceStore
from purdetall.services.user_store import UserStore
from purdetall.settings import Settings, load_settings

logger = logging.getLogger(__name__)


class SinglePageFiles(StaticFiles):
    """Static files that fall back to index.html for client-side routes."""

    async def get_response(self, path, scope):
        try:
            return await super().get_response(path, scope)
        except StarletteHTTPException as exc:
            if exc.status_code != 404:
                raise
            return await super().get_response("index.html", scope)


def _is_wildcard(values: list[str]) -> bool:
    return len(values) == 1 and values[0] == "*"


def _attach_stores(app: FastAPI, settings: Settings) -> None:
    db = Database(settings.db_path)
    images = ImageStorage(settings.upload_dir, max_bytes=settings.max_upload_bytes)
    mail_sender = MailSender(
        settings.email_host,
        port=settings.email_port,
        user=settings.email_user,
        password=settings.email_password,
        from_address=settings.email_from,
    )
    config_store = ConfigStore(db)

    app.state.settings = settings
    app.state.db = db
    app.state.images = images
    app.state.mail_sender = mail_sender
    app.state.user_store = UserStore(db, bcrypt_rounds=settings.bcrypt_rounds)
    app.state.config_store = config_store
    app.state.service_store = ServiceStore(db, images)
    app.state.gallery_store = GalleryStore(db, images)
    app.state.client_store = ClientStore(db)
    app.state.appointment_store = AppointmentStore(db)
    app.state.quote_store = QuoteStore(db)
    app.state.blog_store = BlogStore(db, images)
    app.state.news_store = NewsStore(db, images)
    app.state.contact_notifier = ContactNotifier(config_store, mail_sender)


def _mount_static(app: FastAPI, settings: Settings) -> None:
    app.mount("/uploads", StaticFiles(directory=settings.upload_dir), name="uploads")

    public_dir = Path(settings.public_dir)
    admin_dir = public_dir / "admin"
    if (admin_dir / "index.html").exists():
        app.mount("/admin", SinglePageFiles(directory=admin_dir, html=True), name="admin")
    if public_dir.is_dir():
        app.mount("/", StaticFiles(directory=public_dir, html=True), name="site")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="PurDetall API", version="1.0.0")
    _attach_stores(app, settings)
    register_error_handlers(app)

    install_request_guards(
        app,
        RateLimiter(settings.rate_limit_max, settings.rate_limit_window_seconds),
        settings.max_body_bytes,
    )
    allow_any_origin = _is_wildcard(settings.cors_origins)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        # Browsers reject wildcard CORS with credentials enabled.
        allow_credentials=not allow_any_origin,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if not _is_wildcard(settings.trusted_hosts):
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.trusted_hosts)

    for module in (auth, services, gallery, appointments, clients, quotes, blog, news, content, contact):
        app.include_router(module.router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/ready")
    def ready():
        if not app.state.db.ping():
            return JSONResponse(status_code=503, content={"status": "unavailable", "database": False})
        return {"status": "ready", "database": True}

    _mount_static(app, settings)
    logger.info("PurDetall API configured (db=%s, uploads=%s)", settings.db_path, settings.upload_dir)
    return app


app = create_app()
