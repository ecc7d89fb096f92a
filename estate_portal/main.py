# estate_portal/main.py
import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from sqlmodel import Session

from estate_portal.core.auth import LoginRedirect
from estate_portal.core.config import Settings, get_settings
from estate_portal.core.middleware import SessionMiddleware
from estate_portal.core.sessions import (
    DatabaseSessionStore,
    MemorySessionStore,
    SessionStore,
    SessionStoreError,
)
from estate_portal.core.storage_utils import ImageStorage
from estate_portal.core.supabase_client import supabase_admin
from estate_portal.database import create_db_and_tables, create_db_engine
from estate_portal.repositories.user_repo import UserRepository
from estate_portal.services.auth_service import AuthService

# Routers
from estate_portal.routers.auth import router as auth_router
from estate_portal.routers.dashboard import router as dashboard_router
from estate_portal.routers.estates import router as estates_router
from estate_portal.routers.users import router as users_router

logger = logging.getLogger("uvicorn")


async def sweep_expired_sessions(store: SessionStore, interval_seconds: int) -> None:
    """Periodically drop expired session records until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            removed = await store.delete_expired()
        except SessionStoreError as exc:
            logger.warning(f"Expired session sweep failed: {exc}")
            continue
        if removed:
            logger.info(f"Removed {removed} expired session(s)")


def build_session_store(settings: Settings, engine) -> SessionStore:
    if settings.SESSION_BACKEND == "memory":
        return MemorySessionStore()
    return DatabaseSessionStore(engine)


def create_app(
    settings: Settings | None = None,
    *,
    session_store: SessionStore | None = None,
    storage: ImageStorage | None = None,
) -> FastAPI:
    """
    Build the application.

    The database engine, session store and image storage are created here
    (or passed in, e.g. by tests) and kept on `app.state`; nothing is
    initialized lazily on first use.
    """
    settings = settings or get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL.upper())

    engine = create_db_engine(settings)
    store = session_store or build_session_store(settings, engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan handler.

        Startup:
          - Verify DB connectivity and create tables.
          - Create the first admin if configured and the users table is empty.
          - Connect image storage (if configured).
          - Start the expired-session sweeper.

        Shutdown:
          - Stop the sweeper and dispose the engine.
        """
        logger.info("🔄 Startup: Connecting to database...")
        try:
            create_db_and_tables(engine)
            logger.info("✅ Startup: DB connection OK, tables verified.")
        except Exception as e:
            logger.error(f"❌ Startup: DB connection FAILED: {e}")
            raise

        if settings.ADMIN_BOOTSTRAP_NAME and settings.ADMIN_BOOTSTRAP_PASSWORD:
            with Session(engine) as session:
                AuthService(UserRepository()).bootstrap_admin(
                    session,
                    settings.ADMIN_BOOTSTRAP_NAME,
                    settings.ADMIN_BOOTSTRAP_PASSWORD,
                )

        if app.state.storage is None and settings.storage_enabled:
            app.state.storage = ImageStorage(
                supabase_admin(settings),
                bucket=settings.SUPABASE_BUCKET,
            )
            logger.info(f"Image storage ready (bucket={settings.SUPABASE_BUCKET})")
        elif app.state.storage is None:
            logger.warning("Image storage is not configured; uploads are disabled.")

        sweeper = asyncio.create_task(
            sweep_expired_sessions(store, settings.SESSION_CLEANUP_INTERVAL_SECONDS)
        )
        try:
            yield
        finally:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper
            engine.dispose()
            logger.info("Shutdown complete.")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_store = store
    app.state.storage = storage

    # --- Middleware ---
    # Added last = outermost, so CORS headers are also set on session errors.
    app.add_middleware(SessionMiddleware, store=store, settings=settings)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- Auth / session error mapping ---

    @app.exception_handler(LoginRedirect)
    async def login_redirect_handler(request: Request, exc: LoginRedirect):
        return RedirectResponse(url=exc.location, status_code=status.HTTP_303_SEE_OTHER)

    @app.exception_handler(SessionStoreError)
    async def session_store_error_handler(request: Request, exc: SessionStoreError):
        logger.error(f"Session store failure on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Session service unavailable"},
        )

    # Versioned API prefix, e.g. /api/v1
    app.include_router(auth_router, prefix=settings.API_V1_STR)
    app.include_router(dashboard_router, prefix=settings.API_V1_STR)
    app.include_router(users_router, prefix=settings.API_V1_STR)
    app.include_router(estates_router, prefix=settings.API_V1_STR)

    @app.get("/")
    def root():
        """Health check endpoint."""
        return {"status": "ok", "service": "estate-portal"}

    return app


app = create_app()
