from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .config import Settings, settings
from .core.errors import FinanceError, StoreError
from .core.logging import configure_logging, get_logger
from .database import build_engine, init_db
from .routers import budgets as budgets_router
from .routers import expenses as expenses_router


logger = get_logger(__name__)


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    app_settings = app_settings or settings
    configure_logging(app_settings.log_level, json_logs=app_settings.json_logs)

    app = FastAPI(title="Weekly Finance – Backend", version="0.1.0")
    app.state.settings = app_settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "Content-Type", "Authorization"],
        expose_headers=["Content-Length", "Content-Disposition"],
    )

    @app.on_event("startup")
    def on_startup():
        # A database that cannot be opened or migrated aborts startup.
        try:
            engine = build_engine(app_settings)
            init_db(engine)
        except SQLAlchemyError as exc:
            logger.critical("database_startup_failed", error=str(exc))
            raise
        app.state.engine = engine

    @app.on_event("shutdown")
    def on_shutdown():
        engine = getattr(app.state, "engine", None)
        if engine is not None:
            engine.dispose()

    @app.exception_handler(FinanceError)
    def handle_finance_error(request: Request, exc: FinanceError):
        log = logger.error if isinstance(exc, StoreError) else logger.warning
        log(
            "request_failed",
            method=request.method,
            path=request.url.path,
            status=exc.status_code,
            error=exc.message,
        )
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(RequestValidationError)
    def handle_request_validation(request: Request, exc: RequestValidationError):
        logger.warning("request_invalid", method=request.method, path=request.url.path)
        return JSONResponse(
            status_code=400,
            content={"detail": jsonable_encoder(exc.errors())},
        )

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(expenses_router.router, prefix=app_settings.api_prefix)
    app.include_router(budgets_router.router, prefix=app_settings.api_prefix)

    return app


app = create_app()
