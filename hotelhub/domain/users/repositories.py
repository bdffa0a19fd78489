# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from .entities import PasswordValidationInfo, Role, Token, TokenValidationInfo, User


class UserRepository(Protocol):
    def find_by_username(self, username: str) -> User: ...
    def find_by_id(self, user_id: int) -> User: ...
    def exists_by_username(self, username: str) -> bool: ...
    def exists_by_id(self, user_id: int) -> bool: ...
    def create(
        self,
        username: str,
        email: str,
        password_validation: PasswordValidationInfo,
        role: Role,
    ) -> int: ...
    def delete_all(self) -> None: ...


class TokenRepository(Protocol):
    def create(self, token: Token, max_tokens: int) -> None: ...
    def update_last_used(self, token_validation_info: TokenValidationInfo, now: datetime) -> None: ...
    def find_by_validation(
        self, token_validation_info: TokenValidationInfo
    ) -> tuple[User, Token]: ...
    def remove_by_validation(self, token_validation_info: TokenValidationInfo) -> int: ...
    def count_for_user(self, user_id: int) -> int: ...


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...
    def verify(self, password: str, hashed: str) -> bool: ...


class TokenEncoder(Protocol):
    def create_validation_info(self, token: str) -> TokenValidationInfo: ...


class Clock(Protocol):
    def now(self) -> datetime: ...
