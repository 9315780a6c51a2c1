# app/main.py
# Run with: uvicorn app.main:create_app --factory
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import Settings
from app.core.errors import register_exception_handlers
from app.core.logging_config import configure_logging
from app.services.container import ServiceContainer
from app.services.repository import ContentStore, build_store
from app.services.storage import AttachmentStorage

from app.routers.api_blog_posts import router as api_blog_posts_router
from app.routers.api_learning_resources import router as api_learning_resources_router
from app.routers.api_uploads import router as api_uploads_router

logger = logging.getLogger(__name__)


def _parse_cors_origins(value) -> list[str]:
    """
    Accepts:
      - "*" (open to everyone, no credentials)
      - comma separated list: "https://site.com,http://localhost:5000"
      - empty -> local defaults
    """
    v = (value or "").strip()
    if not v:
        return [
            "http://localhost",
            "http://localhost:5000",
            "http://127.0.0.1",
            "http://127.0.0.1:5000",
        ]
    if v == "*":
        return ["*"]
    return [x.strip() for x in v.split(",") if x.strip()]


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[ContentStore] = None,
    attachments: Optional[AttachmentStorage] = None,
) -> FastAPI:
    settings = settings or Settings()
    configure_logging(settings.LOG_LEVEL)

    # a missing DATABASE_URL fails here, before the app accepts requests
    store = store or build_store(settings)
    attachments = attachments or AttachmentStorage.from_settings(settings)
    attachments.ensure_dir()

    app = FastAPI(title=settings.APP_NAME)
    app.state.container = ServiceContainer(settings=settings, store=store, attachments=attachments)

    # =========================
    # CORS
    # =========================
    cors_origins = _parse_cors_origins(settings.CORS_ORIGINS)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=cors_origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # =========================
    # Routers
    # =========================
    app.include_router(api_blog_posts_router)
    app.include_router(api_learning_resources_router)
    app.include_router(api_uploads_router)

    @app.get("/health")
    def health():
        return {
            "status": "ok",
            "app": settings.APP_NAME,
            "env": settings.ENV,
            **app.state.container.get_service_status(),
        }

    logger.info("%s ready (storage=%s, uploads=%s)", settings.APP_NAME, store.backend, attachments.base_dir)
    return app
