from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from contextlib import asynccontextmanager
from typing import Optional
import logging
import os

from sqlalchemy import func, select
from sqlalchemy.engine import make_url
from sqlalchemy.exc import InterfaceError, OperationalError

from clinic_queue.config.constants import SERVICE_NAME, SERVICE_VERSION
from clinic_queue.config.settings import Settings, get_settings
from clinic_queue.core.auth import PasswordHasher, TokenService
from clinic_queue.core.exceptions import ClinicError, StorageUnavailable
from clinic_queue.core.middleware import IdentityResolver
from clinic_queue.db.bootstrap import init_db
from clinic_queue.db.crud.patient import PatientQueue
from clinic_queue.db.crud.user import UserDirectory
from clinic_queue.db.models import PatientModel, UserModel
from clinic_queue.db.session import Database

logger = logging.getLogger(__name__)


# -------------------------------------------------------------------------------------
# Error handlers
# -------------------------------------------------------------------------------------
async def clinic_error_handler(request: Request, exc: ClinicError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=exc.headers,
    )


async def storage_error_handler(request: Request, exc: Exception):
    logger.error(
        f"Storage error on {request.method} {request.url.path}: {type(exc).__name__}",
        exc_info=exc,
    )
    return await clinic_error_handler(request, StorageUnavailable())


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application start-up & shutdown hooks."""
        # ------------------------------------------------------------------ start‑up -----
        logger.info("Application startup …")

        db = Database(settings.database_url, pool_size=settings.db_pool_size)
        tokens = TokenService(
            settings.jwt_secret_key,
            settings.jwt_algorithm,
            settings.access_token_expire_minutes,
        )
        app.state.database = db
        app.state.token_service = tokens
        app.state.identity_resolver = IdentityResolver(tokens, settings.jwt_cookie_name)
        app.state.user_directory = UserDirectory(db, PasswordHasher(settings.bcrypt_rounds))
        app.state.patient_queue = PatientQueue(db)

        # the app still starts without storage; requests report 503 until it is back
        try:
            await init_db(db, app.state.user_directory, app.state.patient_queue, settings)
            logger.info("Database initialized successfully")
        except Exception:
            logger.warning(
                "Database initialization failed; storage operations will fail until it is reachable",
                exc_info=True,
            )

        # ------------------------------------------------ give control back
        yield

        # ------------------------------------------------ shutdown --------
        logger.info("Application shutdown …")
        try:
            await db.dispose()
        except Exception:
            logger.exception("Error disposing DB engine")
        logger.info("Shutdown complete")

    app = FastAPI(title=SERVICE_NAME, version=SERVICE_VERSION, lifespan=lifespan)
    app.state.settings = settings

    # CORS ---------------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(o) for o in settings.cors_origins],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ClinicError, clinic_error_handler)
    for exc_class in (OperationalError, InterfaceError, OSError):
        app.add_exception_handler(exc_class, storage_error_handler)

    # ------------------------------------------------------------- service routes ---
    @app.get("/")
    async def root():
        return {
            "message": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "docs": "/docs",
            "openapi": "/openapi.json",
        }

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    @app.get("/favicon.ico", include_in_schema=False)
    async def favicon():
        return Response(status_code=204)

    if settings.debug_routes:

        @app.get("/debug/db-info")
        async def db_info(request: Request):
            """Connection diagnostics. Only mounted when DEBUG_ROUTES is on."""
            db: Database = request.app.state.database
            info = {
                "database_url": make_url(db.url).render_as_string(hide_password=True),
                "working_directory": os.getcwd(),
            }
            try:
                async with db.session() as session:
                    info["user_count"] = await session.scalar(select(func.count(UserModel.id)))
                    info["patient_count"] = await session.scalar(select(func.count(PatientModel.id)))
                    emails = await session.scalars(select(UserModel.email).order_by(UserModel.id))
                    info["user_emails"] = list(emails)
                info["connection_status"] = "connected"
            except (OperationalError, InterfaceError, OSError) as e:
                info["error"] = str(e)
                info["connection_status"] = "error"
            return info

    # ------------------------------------------------------------------- routes ---------
    from clinic_queue.routes.auth.router import router as auth_router
    from clinic_queue.routes.patients.router import router as patients_router

    app.include_router(auth_router)
    app.include_router(patients_router)

    return app


# uvicorn clinic_queue.main:app
app = create_app()
