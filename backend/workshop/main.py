from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from workshop.core.config import settings
from workshop.core.errors import WorkshopError, NotFound, ValidationFailed
from workshop.core.logging import configure_logging, bind_request, logger
from workshop.api.router import api_router
from workshop.db.session import engine
from workshop.db.base import Base
from workshop.services.files import ensure_dirs
from workshop.services.seed import seed_demo

def domain_error_handler(request: Request, exc: WorkshopError) -> JSONResponse:
    if isinstance(exc, ValidationFailed):
        body = {"detail": exc.message, "field": exc.field}
    elif isinstance(exc, NotFound):
        body = {"detail": exc.message}
    else:
        # denial reasons and store errors stay in the log
        body = {"detail": exc.public_message}
    logger.info(
        "request_rejected",
        error=type(exc).__name__,
        status=exc.status_code,
        reason=str(exc),
    )
    return JSONResponse(status_code=exc.status_code, content=body)

def create_app() -> FastAPI:
    configure_logging(settings.ENV)
    app = FastAPI(title="Workshop checklists & budgets", version="0.1.0")

    origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(WorkshopError, domain_error_handler)

    @app.middleware("http")
    async def _request_context(request: Request, call_next):
        bind_request(request.method, request.url.path)
        return await call_next(request)

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    @app.on_event("startup")
    def _startup():
        ensure_dirs()
        # Ensure tables exist for dev-only convenience; in prod rely on alembic
        if settings.ENV == "dev":
            Base.metadata.create_all(bind=engine)
        if settings.SEED_DEMO and settings.ENV == "dev":
            seed_demo()

    app.include_router(api_router)
    logger.info("app_started", env=settings.ENV)
    return app

app = create_app()
