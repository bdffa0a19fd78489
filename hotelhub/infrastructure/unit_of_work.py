# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Database unit of work implementations."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from sqlalchemy.orm import Session

from hotelhub.application.interfaces import UnitOfWork
from hotelhub.infrastructure.repositories.memory import (
    InMemoryStore,
    InMemoryTokenRepository,
    InMemoryUserRepository,
)
from hotelhub.infrastructure.repositories.users.sqlalchemy_user_repository import (
    SqlAlchemyTokenRepository,
    SqlAlchemyUserRepository,
)
from hotelhub.shared.logging import logger as _default_logger


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy-backed unit of work; one session, one transaction."""

    def __init__(self, session_factory: Callable[[], Session], *, logger: Any = None) -> None:
        self.session_factory = session_factory
        self._logger = logger or _default_logger
        self._session: Session | None = None

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        self._session = self.session_factory()
        self.users = SqlAlchemyUserRepository(self._session)
        self.tokens = SqlAlchemyTokenRepository(self._session, logger=self._logger)
        self._logger.debug("uow: session opened")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        assert self._session is not None
        try:
            if exc:
                self._logger.warning(f"uow: rollback due to {exc_type.__name__}")
                self._session.rollback()
            else:
                self._session.commit()
                self._logger.debug("uow: committed")
        except Exception:
            self._logger.exception("uow: exception while finalising")
            self._session.rollback()
            raise
        finally:
            self._session.close()
            self._logger.debug("uow: session closed")
            self._session = None


class InMemoryUnitOfWork(UnitOfWork):
    """Serialises units on the store lock and undoes a failed unit."""

    def __init__(self, store: InMemoryStore, *, logger: Any = None) -> None:
        self.store = store
        self._logger = logger or _default_logger
        self._snapshot: tuple | None = None
        self.users = InMemoryUserRepository(store)
        self.tokens = InMemoryTokenRepository(store, logger=self._logger)

    def __enter__(self) -> InMemoryUnitOfWork:
        self.store.lock.acquire()
        self._snapshot = self.store.snapshot()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if exc:
                self._logger.warning(f"uow: rollback due to {exc_type.__name__}")
                self._rollback()
        finally:
            self._snapshot = None
            self.store.lock.release()

    def _rollback(self) -> None:
        if self._snapshot is not None:
            self.store.restore(self._snapshot)

