"""
FastAPI application factory.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .core.config import Settings, get_settings
from .core.errors import (
    ConstraintViolationError,
    GenerationFailure,
    InvalidInputError,
    InvalidStateError,
    LookStudioError,
    NotFoundError,
    StoreUnavailableError,
)
from .core.flags import get_flags
from .api.router import router
from .lookbook import LookbookManager
from .pipeline import RunRegistry, StepOrchestrator
from .pipeline.orchestrator import ProductCatalog
from .services.catalog import CatalogClient
from .services.image_synthesis import GeminiImageGateway, ImageSynthesisGateway
from .store import EntityStore

logger = logging.getLogger(__name__)

# Most specific first; subclasses would otherwise match their parent
ERROR_STATUS: list[tuple[type[LookStudioError], int]] = [
    (NotFoundError, 404),
    (ConstraintViolationError, 409),
    (InvalidStateError, 409),
    (InvalidInputError, 422),
    (GenerationFailure, 502),
    (StoreUnavailableError, 503),
]


def status_for(error: LookStudioError) -> int:
    for cls, code in ERROR_STATUS:
        if isinstance(error, cls):
            return code
    return 500


def create_app(
    settings: Optional[Settings] = None,
    *,
    catalog: Optional[ProductCatalog] = None,
    gateway: Optional[ImageSynthesisGateway] = None,
) -> FastAPI:
    """Build the app. Tests pass their own settings, catalog and gateway."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Look Studio",
        description="Virtual try-on look assembly",
        version="1.0.0",
        docs_url="/docs" if settings.env == "development" else None,
        redoc_url="/redoc" if settings.env == "development" else None,
    )

    # ── CORS ─────────────────────────────────────────────────────
    origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Errors ───────────────────────────────────────────────────
    @app.exception_handler(LookStudioError)
    async def on_domain_error(request: Request, exc: LookStudioError):
        code = status_for(exc)
        if code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        body = {"detail": str(exc)}
        if isinstance(exc, NotFoundError) and exc.missing:
            body["missing"] = exc.missing
        return JSONResponse(status_code=code, content=body)

    # ── Startup ──────────────────────────────────────────────────
    @app.on_event("startup")
    async def on_startup():
        logging.basicConfig(
            level=getattr(logging, settings.log_level.upper(), logging.INFO),
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
        logger.info("Starting Look Studio (env=%s)", settings.env)

        store = await EntityStore(settings.database_url, echo=settings.debug).open()
        app.state.store = store
        app.state.catalog = catalog or CatalogClient(settings)
        app.state.gateway = gateway or GeminiImageGateway(settings)
        app.state.orchestrator = StepOrchestrator(app.state.catalog, app.state.gateway, store)
        app.state.runs = RunRegistry()
        app.state.manager = LookbookManager(
            store,
            app.state.gateway,
            public_id_length=settings.public_id_length,
            public_id_max_attempts=settings.public_id_max_attempts,
        )

        flags = get_flags()
        logger.info(
            "Flags: conversational_edit=%s look_import=%s",
            flags.enable_conversational_edit, flags.enable_look_import,
        )
        logger.info("Look Studio is ready")

    # ── Shutdown ─────────────────────────────────────────────────
    @app.on_event("shutdown")
    async def on_shutdown():
        close_catalog = getattr(app.state.catalog, "close", None)
        if close_catalog is not None:
            await close_catalog()
        await app.state.gateway.close()
        await app.state.store.close()
        logger.info("Look Studio shut down")

    # ── Routes ───────────────────────────────────────────────────
    app.include_router(router)

    return app
