import logging
import sqlite3

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import StaticPool

from retail_ledger.config import Settings, get_settings


app_settings: Settings = get_settings()
logger = logging.getLogger(__name__)

_SQLITE_BUSY_TIMEOUT_SECONDS = 30
_SQLITE_BUSY_TIMEOUT_MS = _SQLITE_BUSY_TIMEOUT_SECONDS * 1000


def is_sqlite_memory_url(database_url: str) -> bool:
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return False
    return url.database in (None, "", ":memory:") or url.query.get("mode") == "memory"


def enable_sqlite_pragmas(target_engine: Engine, *, in_memory: bool = False) -> None:
    """Turn on foreign keys for every connection; file databases also get WAL."""

    @event.listens_for(target_engine, "connect")
    def _set_sqlite_pragmas(dbapi_connection, _connection_record):
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute(f"PRAGMA busy_timeout={_SQLITE_BUSY_TIMEOUT_MS}")
            if not in_memory:
                try:
                    cursor.execute("PRAGMA journal_mode=WAL")
                    cursor.execute("PRAGMA synchronous=NORMAL")
                except sqlite3.DatabaseError:
                    logger.warning("Unable to enable WAL journal mode for %s", target_engine.url)
        finally:
            cursor.close()


def build_engine(database_url: str) -> Engine:
    """
    Create the ledger engine for ``database_url``.

    In-memory SQLite shares one connection across threads so every session
    sees the same database.
    """
    is_sqlite = make_url(database_url).get_backend_name() == "sqlite"
    in_memory = is_sqlite_memory_url(database_url)

    connect_args = {}
    engine_kwargs: dict[str, object] = dict(pool_pre_ping=True)
    if is_sqlite:
        connect_args = {"check_same_thread": False, "timeout": _SQLITE_BUSY_TIMEOUT_SECONDS}
        if in_memory:
            engine_kwargs.update(poolclass=StaticPool)

    new_engine = create_engine(database_url, connect_args=connect_args, **engine_kwargs)
    if is_sqlite:
        enable_sqlite_pragmas(new_engine, in_memory=in_memory)
    return new_engine


engine = build_engine(app_settings.DATABASE_URL)
