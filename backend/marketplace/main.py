import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from .config import settings
from .db import Base, engine
from .routes import admin as admin_routes
from .routes import balances as balances_routes
from .routes import contracts as contracts_routes
from .routes import jobs as jobs_routes
from .utils import error_response

logger = logging.getLogger("marketplace")
logging.basicConfig(level=settings.log_level.upper())


def _describe(exc: RequestValidationError) -> str:
    err = exc.errors()[0]
    where = ".".join(str(part) for part in err.get("loc", ()))
    return f"Invalid value for {where}: {err.get('msg', 'invalid input')}"


def create_app() -> FastAPI:
    app = FastAPI(title="Contractor Marketplace API", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(o) for o in settings.cors_origins],
        allow_origin_regex=settings.cors_origin_regex,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Malformed ids and query values share the routes' 400 {message} envelope
    @app.exception_handler(RequestValidationError)
    async def invalid_request(request: Request, exc: RequestValidationError):
        message = _describe(exc)
        logger.info("Rejected %s %s: %s", request.method, request.url.path, message)
        return error_response(400, message)

    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        logger.warning("Could not create tables, continuing without them: %s", e)

    @app.get("/healthz")
    def healthz():
        try:
            with engine.connect() as conn:
                conn.exec_driver_sql("SELECT 1")
        except SQLAlchemyError as e:
            logger.warning("Health check failed: %s", e)
            return {"status": "db_error", "detail": str(e)}
        return {"status": "ok"}

    app.include_router(contracts_routes.router)
    app.include_router(jobs_routes.router)
    app.include_router(balances_routes.router)
    app.include_router(admin_routes.router)

    @app.get("/")
    def root():
        return {"name": "contractor-marketplace", "docs": "/docs"}

    return app


app = create_app()
