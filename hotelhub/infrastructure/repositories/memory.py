# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Dictionary-backed user and token stores.

Same contracts as the SQL repositories. Atomicity comes from
``InMemoryUnitOfWork``, which holds the store lock for the whole unit and
restores a snapshot when the unit fails.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from hotelhub.domain.users.entities import (
    PasswordValidationInfo,
    Role,
    Token,
    TokenValidationInfo,
    User,
)
from hotelhub.domain.users.exceptions import UserError
from hotelhub.domain.users.repositories import TokenRepository, UserRepository


@dataclass(slots=True, frozen=True)
class _StoredToken:
    token: Token
    seq: int


@dataclass
class InMemoryStore:
    users: dict[int, User] = field(default_factory=dict)
    tokens: dict[str, _StoredToken] = field(default_factory=dict)
    next_user_id: int = 1
    next_token_seq: int = 1
    lock: threading.RLock = field(default_factory=threading.RLock)

    def snapshot(self) -> tuple[dict[int, User], dict[str, _StoredToken], int, int]:
        # Stored values are frozen, shallow copies of the maps are enough.
        return dict(self.users), dict(self.tokens), self.next_user_id, self.next_token_seq

    def restore(self, state: tuple[dict[int, User], dict[str, _StoredToken], int, int]) -> None:
        self.users, self.tokens, self.next_user_id, self.next_token_seq = state


class InMemoryUserRepository(UserRepository):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def find_by_username(self, username: str) -> User:
        for user in self._store.users.values():
            if user.username == username:
                return user
        raise UserError.not_found("user")

    def find_by_id(self, user_id: int) -> User:
        user = self._store.users.get(user_id)
        if user is None:
            raise UserError.not_found("user")
        return user

    def exists_by_username(self, username: str) -> bool:
        return any(user.username == username for user in self._store.users.values())

    def exists_by_id(self, user_id: int) -> bool:
        return user_id in self._store.users

    def create(
        self,
        username: str,
        email: str,
        password_validation: PasswordValidationInfo,
        role: Role,
    ) -> int:
        if self.exists_by_username(username):
            raise UserError.already_exists("user", username=username)
        user_id = self._store.next_user_id
        self._store.next_user_id += 1
        self._store.users[user_id] = User(
            id=user_id,
            username=username,
            email=email,
            password_validation=password_validation,
            role=role,
        )
        return user_id

    def delete_all(self) -> None:
        self._store.tokens.clear()
        self._store.users.clear()


class InMemoryTokenRepository(TokenRepository):
    def __init__(self, store: InMemoryStore, *, logger: Any) -> None:
        self._store = store
        self._logger = logger

    def create(self, token: Token, max_tokens: int) -> None:
        if max_tokens <= 0:
            raise UserError.invalid_argument("max_tokens", "must be positive")

        if token.user_id not in self._store.users:
            raise UserError.not_found("user")

        owned = sorted(
            (s for s in self._store.tokens.values() if s.token.user_id == token.user_id),
            key=lambda stored: (stored.token.last_used_at, stored.seq),
            reverse=True,
        )
        evicted = owned[max_tokens - 1 :]
        for stored in evicted:
            del self._store.tokens[stored.token.token_validation_info.validation_info]

        self._logger.info(f"{len(evicted)} tokens deleted when creating new token")

        key = token.token_validation_info.validation_info
        if key in self._store.tokens:
            raise UserError.already_exists("token")
        self._store.tokens[key] = _StoredToken(token=token, seq=self._store.next_token_seq)
        self._store.next_token_seq += 1

    def update_last_used(self, token_validation_info: TokenValidationInfo, now: datetime) -> None:
        stored = self._store.tokens.get(token_validation_info.validation_info)
        if stored is not None:
            self._store.tokens[token_validation_info.validation_info] = _StoredToken(
                token=stored.token.used_at(now), seq=stored.seq
            )

    def find_by_validation(
        self, token_validation_info: TokenValidationInfo
    ) -> tuple[User, Token]:
        stored = self._store.tokens.get(token_validation_info.validation_info)
        if stored is None or stored.token.user_id not in self._store.users:
            raise UserError.not_found("token")
        return self._store.users[stored.token.user_id], stored.token

    def remove_by_validation(self, token_validation_info: TokenValidationInfo) -> int:
        removed = self._store.tokens.pop(token_validation_info.validation_info, None)
        return 0 if removed is None else 1

    def count_for_user(self, user_id: int) -> int:
        return sum(1 for stored in self._store.tokens.values() if stored.token.user_id == user_id)
