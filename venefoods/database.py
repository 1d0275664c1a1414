# venefoods/database.py
from functools import lru_cache

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session

from venefoods.core.config import get_settings

# ---------------------------------------------------------
# Supabase Postgres connection (via pooler)
#
# - sslmode=require   : enforce SSL when running in the cloud
# - pool_size=1       : keep only 1 connection to the Supabase pooler
# - max_overflow=0    : do not open extra connections beyond the pool
# - pool_pre_ping=True: validate connections before using them
#
# Supabase Session mode limits the number of clients; the default
# SQLAlchemy pool (5+) quickly hits "MaxClientsInSessionMode".
#
# SQLite URLs (local dev / tests) share one in-process connection.
# ---------------------------------------------------------


def _with_sslmode(db_url: str) -> str:
    if "sslmode=" in db_url:
        return db_url
    if "?" in db_url:
        return db_url + "&sslmode=require"
    return db_url + "?sslmode=require"


def build_engine(db_url: str) -> Engine:
    if db_url.startswith("sqlite"):
        return create_engine(
            db_url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    return create_engine(
        _with_sslmode(db_url),
        echo=False,        # set to True if you want to debug SQL queries
        pool_pre_ping=True,
        pool_size=1,
        max_overflow=0,
    )


@lru_cache
def get_engine() -> Engine:
    return build_engine(get_settings().DATABASE_URL)


def create_db_and_tables(engine: Engine | None = None) -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.

    This is called once on application startup.
    """
    # Import models so SQLModel metadata is populated before create_all()
    from venefoods.models import cart, coupon, order, product, setting  # noqa: F401

    SQLModel.metadata.create_all(engine or get_engine())


def get_session():
    """
    FastAPI dependency that yields a SQLModel Session.

    Usage:

        from fastapi import Depends

        @router.get("/example")
        def example_endpoint(session: Session = Depends(get_session)):
            ...
    """
    with Session(get_engine()) as session:
        yield session
