# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import delete, exists, func, insert, select, update
from sqlalchemy.engine import Row
from sqlalchemy.exc import IntegrityError, MultipleResultsFound, NoResultFound
from sqlalchemy.orm import Session

from hotelhub.domain.users.entities import (
    PasswordValidationInfo,
    Role,
    Token,
    TokenValidationInfo,
    User,
    from_epoch_seconds,
    to_epoch_seconds,
)
from hotelhub.domain.users.exceptions import UserError
from hotelhub.domain.users.repositories import TokenRepository, UserRepository
from hotelhub.infrastructure.db.models import TokenRow, UserRow
from hotelhub.shared.errors.base import IntegrityViolationError

_USER_COLUMNS = (
    UserRow.id,
    UserRow.username,
    UserRow.email,
    UserRow.password_validation,
    UserRow.role,
)
_TOKEN_COLUMNS = (
    TokenRow.token_validation,
    TokenRow.user_id,
    TokenRow.created_at,
    TokenRow.last_used_at,
)


def user_from_row(row: Row | tuple) -> User:
    user_id, username, email, password_validation, role = row
    return User(
        id=user_id,
        username=username,
        email=email,
        password_validation=PasswordValidationInfo(password_validation),
        role=Role(role),
    )


def token_from_row(row: Row | tuple) -> Token:
    token_validation, user_id, created_at, last_used_at = row
    return Token(
        token_validation_info=TokenValidationInfo(token_validation),
        user_id=user_id,
        created_at=from_epoch_seconds(created_at),
        last_used_at=from_epoch_seconds(last_used_at),
    )


class SqlAlchemyUserRepository(UserRepository):
    def __init__(self, session: Session) -> None:
        self._session = session

    def find_by_username(self, username: str) -> User:
        stmt = select(*_USER_COLUMNS).where(UserRow.username == username)
        return user_from_row(self._single(stmt, "user"))

    def find_by_id(self, user_id: int) -> User:
        stmt = select(*_USER_COLUMNS).where(UserRow.id == user_id)
        return user_from_row(self._single(stmt, "user"))

    def exists_by_username(self, username: str) -> bool:
        return bool(self._session.scalar(select(exists().where(UserRow.username == username))))

    def exists_by_id(self, user_id: int) -> bool:
        return bool(self._session.scalar(select(exists().where(UserRow.id == user_id))))

    def create(
        self,
        username: str,
        email: str,
        password_validation: PasswordValidationInfo,
        role: Role,
    ) -> int:
        row = UserRow(
            username=username,
            email=email,
            password_validation=password_validation.validation_info,
            role=role.value,
        )
        try:
            # A savepoint keeps the surrounding unit of work usable after a conflict.
            with self._session.begin_nested():
                self._session.add(row)
                self._session.flush()
        except IntegrityError as exc:
            raise UserError.already_exists("user", username=username) from exc
        return int(row.id)

    def delete_all(self) -> None:
        self._session.execute(delete(TokenRow))
        self._session.execute(delete(UserRow))

    def _single(self, stmt: Any, what: str) -> Row:
        try:
            return self._session.execute(stmt).one()
        except NoResultFound:
            raise UserError.not_found(what) from None
        except MultipleResultsFound as exc:
            raise IntegrityViolationError(what) from exc


class SqlAlchemyTokenRepository(TokenRepository):
    def __init__(self, session: Session, *, logger: Any) -> None:
        self._session = session
        self._logger = logger

    def create(self, token: Token, max_tokens: int) -> None:
        if max_tokens <= 0:
            raise UserError.invalid_argument("max_tokens", "must be positive")

        # Everything past the newest max_tokens - 1 tokens makes room for this one.
        evicted = (
            select(TokenRow.token_validation)
            .where(TokenRow.user_id == token.user_id)
            .order_by(TokenRow.last_used_at.desc(), TokenRow.id.desc())
            .offset(max_tokens - 1)
        )
        deletions = self._session.execute(
            delete(TokenRow)
            .where(TokenRow.user_id == token.user_id)
            .where(TokenRow.token_validation.in_(evicted.scalar_subquery()))
            .execution_options(synchronize_session=False)
        ).rowcount

        self._logger.info(f"{deletions} tokens deleted when creating new token")

        try:
            with self._session.begin_nested():
                self._session.execute(
                    insert(TokenRow).values(
                        user_id=token.user_id,
                        token_validation=token.token_validation_info.validation_info,
                        created_at=to_epoch_seconds(token.created_at),
                        last_used_at=to_epoch_seconds(token.last_used_at),
                    )
                )
        except IntegrityError as exc:
            owner_exists = self._session.scalar(
                select(exists().where(UserRow.id == token.user_id))
            )
            if not owner_exists:
                raise UserError.not_found("user") from exc
            raise UserError.already_exists("token") from exc

    def update_last_used(self, token_validation_info: TokenValidationInfo, now: datetime) -> None:
        seconds = to_epoch_seconds(now)
        self._session.execute(
            update(TokenRow)
            .where(TokenRow.token_validation == token_validation_info.validation_info)
            .where(TokenRow.last_used_at <= seconds)
            .values(last_used_at=seconds)
            .execution_options(synchronize_session=False)
        )

    def find_by_validation(
        self, token_validation_info: TokenValidationInfo
    ) -> tuple[User, Token]:
        stmt = (
            select(*_USER_COLUMNS, *_TOKEN_COLUMNS)
            .join(TokenRow, UserRow.id == TokenRow.user_id)
            .where(TokenRow.token_validation == token_validation_info.validation_info)
        )
        try:
            row = self._session.execute(stmt).one()
        except NoResultFound:
            raise UserError.not_found("token") from None
        except MultipleResultsFound as exc:
            raise IntegrityViolationError("token") from exc
        values = tuple(row)
        return user_from_row(values[:5]), token_from_row(values[5:])

    def remove_by_validation(self, token_validation_info: TokenValidationInfo) -> int:
        return self._session.execute(
            delete(TokenRow)
            .where(TokenRow.token_validation == token_validation_info.validation_info)
            .execution_options(synchronize_session=False)
        ).rowcount

    def count_for_user(self, user_id: int) -> int:
        return int(
            self._session.scalar(
                select(func.count()).select_from(TokenRow).where(TokenRow.user_id == user_id)
            )
            or 0
        )
