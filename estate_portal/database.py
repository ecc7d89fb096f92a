# estate_portal/database.py
from fastapi import Request
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session

from estate_portal.core.config import Settings

# Import models so SQLModel metadata is populated before create_all()
from estate_portal.models import estate as _estate_models  # noqa: F401
from estate_portal.models import user as _user_models  # noqa: F401
from estate_portal.models import web_session as _web_session_models  # noqa: F401


def _postgres_url(db_url: str) -> str:
    """Append sslmode=require if it is not already present."""
    if "sslmode=" in db_url:
        return db_url
    if "?" in db_url:
        return db_url + "&sslmode=require"
    return db_url + "?sslmode=require"


def create_db_engine(settings: Settings) -> Engine:
    """
    Build the SQLAlchemy engine for `settings.DATABASE_URL`.

    - Postgres: SSL enforced, small pool, pre-ping (managed poolers limit
      the number of client connections).
    - SQLite: connections shared across threads, since sessions and
      Argon2 work run in the threadpool. An in-memory URL gets a single
      static connection so every session sees the same database.

    The engine is created once per app and disposed on shutdown.
    """
    db_url = settings.DATABASE_URL

    if db_url.startswith("sqlite"):
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if db_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(db_url, echo=False, **kwargs)

    if db_url.startswith("postgresql"):
        db_url = _postgres_url(db_url)

    return create_engine(
        db_url,
        echo=False,        # set to True if you want to debug SQL queries
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=0,
    )


def create_db_and_tables(engine: Engine) -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.

    This is called once on application startup.
    """
    SQLModel.metadata.create_all(engine)


def get_session(request: Request):
    """
    FastAPI dependency that yields a SQLModel Session bound to the app's engine.

    Usage:

        from fastapi import Depends

        @router.get("/example")
        def example_endpoint(session: Session = Depends(get_session)):
            ...
    """
    with Session(request.app.state.engine) as session:
        yield session
