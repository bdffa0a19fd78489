from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import UTC, datetime, timedelta

import pytest

from hotelhub.application.interfaces import UnitOfWork
from hotelhub.domain.users.entities import PasswordValidationInfo, Role
from hotelhub.infrastructure.db import build_engine, build_session_factory, init_db
from hotelhub.infrastructure.repositories.memory import InMemoryStore
from hotelhub.infrastructure.unit_of_work import InMemoryUnitOfWork, SqlAlchemyUnitOfWork
from hotelhub.shared.config import DatabaseConfig

T0 = datetime(2025, 1, 1, 12, 0, 0, tzinfo=UTC)


class ManualClock:
    def __init__(self, start: datetime = T0) -> None:
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: int = 1) -> datetime:
        self.current += timedelta(seconds=seconds)
        return self.current


class RecordingLogger:
    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def _record(self, level: str, message: str) -> None:
        self.messages.append((level, message))

    def debug(self, message: str) -> None:
        self._record("debug", message)

    def info(self, message: str) -> None:
        self._record("info", message)

    def warning(self, message: str) -> None:
        self._record("warning", message)

    def exception(self, message: str) -> None:
        self._record("exception", message)

    def text(self) -> str:
        return "\n".join(message for _, message in self.messages)


@pytest.fixture()
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture()
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture()
def database_config(tmp_path) -> DatabaseConfig:
    return DatabaseConfig(
        DATABASE_URL=f"sqlite:///{tmp_path / 'hotelhub.db'}",
        DATABASE_POOL_TIMEOUT=10.0,
    )


@pytest.fixture()
def sql_session_factory(database_config: DatabaseConfig) -> Iterator:
    engine = build_engine(database_config)
    init_db(engine)
    yield build_session_factory(engine)
    engine.dispose()


@pytest.fixture()
def sql_uow_factory(sql_session_factory, recording_logger) -> Callable[[], SqlAlchemyUnitOfWork]:
    return lambda: SqlAlchemyUnitOfWork(sql_session_factory, logger=recording_logger)


@pytest.fixture()
def memory_uow_factory(recording_logger) -> Callable[[], InMemoryUnitOfWork]:
    store = InMemoryStore()
    return lambda: InMemoryUnitOfWork(store, logger=recording_logger)


@pytest.fixture(params=["sql", "memory"])
def uow_factory(request) -> Callable[[], UnitOfWork]:
    return request.getfixturevalue(f"{request.param}_uow_factory")


@pytest.fixture()
def make_user(uow_factory) -> Callable[..., int]:
    def _make(username: str = "alice", role: Role = Role.USER) -> int:
        with uow_factory() as uow:
            return uow.users.create(
                username, f"{username}@example.com", PasswordValidationInfo("hashed"), role
            )

    return _make
