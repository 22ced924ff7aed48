"""
SQLAlchemy engine, declarative base and the per-request session dependency.
"""
import logging
from typing import Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from gev_api.common.config import DATABASE_URL

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def _on_sqlite_connect(dbapi_conn, _conn_record):
    cur = dbapi_conn.cursor()
    cur.execute("PRAGMA foreign_keys = ON;")
    cur.execute("PRAGMA journal_mode = WAL;")
    cur.execute("PRAGMA synchronous = NORMAL;")
    cur.close()


def make_engine(url: str) -> Engine:
    """
    Create an engine for the given URL.

    SQLite connections get foreign keys, WAL journaling and a generous busy
    timeout so concurrent writers wait for the lock instead of failing.
    """
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": 30}

    engine = create_engine(url, connect_args=connect_args, pool_pre_ping=True)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _on_sqlite_connect)
    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


engine = make_engine(DATABASE_URL)
SessionLocal = make_session_factory(engine)


def init_db(bind: Optional[Engine] = None) -> None:
    """Create every table that does not exist yet."""
    # Model modules register their tables on Base.metadata when imported
    from gev_api.auth import models as _auth_models  # noqa: F401
    from gev_api.customers import models as _customer_models  # noqa: F401
    from gev_api.products import models as _product_models  # noqa: F401
    from gev_api.sales import models as _sale_models  # noqa: F401

    target = bind or engine
    Base.metadata.create_all(target)
    logger.info("Database tables ready on %s", target.url.render_as_string(hide_password=True))


def get_session() -> Iterator[Session]:
    """FastAPI dependency yielding one session per request."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
