# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Session issuance, renewal and revocation.

Each public method runs inside its own unit of work, so the eviction that
precedes a token insert and the lookup that precedes a refresh are applied
atomically with respect to concurrent calls for the same user.
"""

from __future__ import annotations

from typing import Any

from hotelhub.application.interfaces import UnitOfWorkFactory
from hotelhub.application.services.token_encoding import generate_token_value
from hotelhub.domain.users.entities import IssuedToken, SessionPolicy, Token, User
from hotelhub.domain.users.exceptions import UserError, UserErrorKind
from hotelhub.domain.users.repositories import Clock, PasswordHasher, TokenEncoder

DEFAULT_TOKEN_BYTES = 32


class SessionService:
    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory,
        password_hasher: PasswordHasher,
        token_encoder: TokenEncoder,
        clock: Clock,
        policy: SessionPolicy,
        logger: Any,
        token_bytes: int = DEFAULT_TOKEN_BYTES,
    ) -> None:
        self._uow_factory = uow_factory
        self._password_hasher = password_hasher
        self._token_encoder = token_encoder
        self._clock = clock
        self._policy = policy
        self._logger = logger
        self._token_bytes = token_bytes

    @property
    def policy(self) -> SessionPolicy:
        return self._policy

    def authenticate(self, username: str, password: str) -> IssuedToken:
        if not username or not password:
            raise UserError.invalid_credentials()

        with self._uow_factory() as uow:
            try:
                user = uow.users.find_by_username(username)
            except UserError as exc:
                if exc.kind is not UserErrorKind.NOT_FOUND:
                    raise
                user = None

            if user is None or not self._password_hasher.verify(
                password, user.password_validation.validation_info
            ):
                self._logger.info("session.authenticate: rejected")
                raise UserError.invalid_credentials()

            issued = self._create_token(uow, user.id)

        self._logger.info(f"session.authenticate: ok user_id={user.id}")
        return issued

    def issue(self, user_id: int) -> IssuedToken:
        with self._uow_factory() as uow:
            if not uow.users.exists_by_id(user_id):
                raise UserError.not_found("user")
            issued = self._create_token(uow, user_id)

        self._logger.info(f"session.issue: ok user_id={user_id}")
        return issued

    def refresh(self, token_value: str) -> None:
        with self._uow_factory() as uow:
            user, _ = self._resolve_and_touch(uow, token_value)
        self._logger.debug(f"session.refresh: ok user_id={user.id}")

    def get_user_by_token(self, token_value: str) -> User:
        with self._uow_factory() as uow:
            user, _ = self._resolve_and_touch(uow, token_value)
        return user

    def revoke(self, token_value: str) -> None:
        if not token_value:
            return
        validation_info = self._token_encoder.create_validation_info(token_value)
        with self._uow_factory() as uow:
            removed = uow.tokens.remove_by_validation(validation_info)
        self._logger.info(f"session.revoke: removed={removed}")

    def _create_token(self, uow, user_id: int) -> IssuedToken:
        value = generate_token_value(self._token_bytes)
        token = Token.new(
            self._token_encoder.create_validation_info(value), user_id, self._clock.now()
        )
        uow.tokens.create(token, self._policy.max_tokens)
        return IssuedToken(value=value, token=token)

    def _resolve_and_touch(self, uow, token_value: str) -> tuple[User, Token]:
        # Evicted, revoked, expired and unknown tokens all look the same to the caller.
        if not token_value:
            raise UserError.session_invalid()
        validation_info = self._token_encoder.create_validation_info(token_value)
        try:
            user, token = uow.tokens.find_by_validation(validation_info)
        except UserError as exc:
            if exc.kind is UserErrorKind.NOT_FOUND:
                raise UserError.session_invalid() from None
            raise

        now = self._clock.now()
        if not self._policy.is_time_valid(token, now):
            self._logger.debug(f"session: expired token for user_id={user.id}")
            raise UserError.session_invalid()

        uow.tokens.update_last_used(validation_info, now)
        return user, token.used_at(now)
