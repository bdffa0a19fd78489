# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from hotelhub.shared.config import DatabaseConfig
from hotelhub.shared.errors.base import InfrastructureError
from hotelhub.shared.logging import logger


class Base(DeclarativeBase):
    pass


def _is_memory_sqlite(url: str) -> bool:
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return False
    return parsed.database in (None, "", ":memory:") or parsed.query.get("mode") == "memory"


def build_engine(config: DatabaseConfig) -> Engine:
    """Create the engine with transactions strong enough for token eviction.

    SQLite transactions are started with ``BEGIN IMMEDIATE`` so concurrent
    writers queue on the database lock instead of both reading the same
    pre-eviction token set. Other dialects use the configured isolation level.
    """

    if _is_memory_sqlite(config.url):
        # Each pooled connection would open its own empty database.
        raise InfrastructureError(
            "unsupported_database", context={"reason": "in-memory SQLite is not shared between threads"}
        )

    kwargs: dict[str, object] = {
        "echo": False,
        "future": True,
        "pool_pre_ping": True,
        "pool_size": config.pool_size,
        "max_overflow": config.max_overflow,
        "pool_timeout": config.pool_timeout,
    }
    if config.is_sqlite():
        kwargs["connect_args"] = {
            "check_same_thread": False,
            "timeout": int(config.pool_timeout),
        }
    else:
        kwargs["isolation_level"] = config.isolation_level

    engine = create_engine(config.url, **kwargs)
    if config.is_sqlite():
        _install_sqlite_hooks(engine, busy_timeout_ms=int(config.pool_timeout * 1000))
    logger.debug(f"db.engine: created dialect={engine.dialect.name}")
    return engine


def _install_sqlite_hooks(engine: Engine, *, busy_timeout_ms: int) -> None:
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragmas(dbapi_conn, _):
        # Take transaction control away from pysqlite; "begin" below emits it.
        dbapi_conn.isolation_level = None
        cur = dbapi_conn.cursor()
        try:
            cur.execute("PRAGMA foreign_keys=ON;")
            cur.execute(f"PRAGMA busy_timeout={busy_timeout_ms};")
        finally:
            cur.close()

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    # Register the mapped tables on Base.metadata before creating them.
    from hotelhub.infrastructure.db import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ensured")
