"""Application dependency container."""

from __future__ import annotations

from functools import cached_property

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from hotelhub.application.services.clock import SystemClock
from hotelhub.application.services.password_hashing import WerkzeugPasswordHasher
from hotelhub.application.services.session_service import SessionService
from hotelhub.application.services.token_encoding import Sha256TokenEncoder
from hotelhub.application.use_cases.users.register_user import RegisterUserUseCase
from hotelhub.infrastructure.db import build_engine, build_session_factory, init_db
from hotelhub.infrastructure.unit_of_work import SqlAlchemyUnitOfWork
from hotelhub.shared.config import AppConfig, load_config
from hotelhub.shared.logging import ContextualLogger, logger, setup_logging


class Container:
    def __init__(self, config: AppConfig | None = None) -> None:
        self.config = config or load_config()

    @cached_property
    def engine(self) -> Engine:
        engine = build_engine(self.config.database)
        init_db(engine)
        return engine

    @cached_property
    def session_factory(self) -> sessionmaker[Session]:
        return build_session_factory(self.engine)

    @cached_property
    def token_logger(self) -> ContextualLogger:
        return logger.bind(component="tokens")

    @cached_property
    def password_hasher(self) -> WerkzeugPasswordHasher:
        return WerkzeugPasswordHasher()

    @cached_property
    def token_encoder(self) -> Sha256TokenEncoder:
        return Sha256TokenEncoder()

    @cached_property
    def clock(self) -> SystemClock:
        return SystemClock()

    def unit_of_work(self) -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork(self.session_factory, logger=self.token_logger)

    @cached_property
    def session_service(self) -> SessionService:
        return SessionService(
            uow_factory=self.unit_of_work,
            password_hasher=self.password_hasher,
            token_encoder=self.token_encoder,
            clock=self.clock,
            policy=self.config.sessions.to_policy(),
            logger=logger.bind(component="sessions"),
            token_bytes=self.config.sessions.token_bytes,
        )

    @cached_property
    def register_user_use_case(self) -> RegisterUserUseCase:
        return RegisterUserUseCase(
            uow_factory=self.unit_of_work,
            password_hasher=self.password_hasher,
        )

    def dispose(self) -> None:
        if "engine" in self.__dict__:
            self.engine.dispose()
            logger.info("db.engine: disposed")


def bootstrap(config: AppConfig | None = None) -> Container:
    config = config or load_config()
    setup_logging(config.effective_log_level(), config.log_file)
    container = Container(config)
    logger.info(
        f"hotelhub: bootstrapped env={config.app_env} max_tokens={config.sessions.max_tokens}"
    )
    return container
