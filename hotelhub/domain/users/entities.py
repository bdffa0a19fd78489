# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Users, their session tokens and the policy bounding them."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum

from hotelhub.domain.exceptions import InvariantViolation


class Role(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


@dataclass(slots=True, frozen=True)
class PasswordValidationInfo:
    """Opaque hash of a user's password, as produced by the password hasher."""

    validation_info: str

    def __repr__(self) -> str:
        return "PasswordValidationInfo(***)"


@dataclass(slots=True, frozen=True)
class TokenValidationInfo:
    """Store-side identifier of a session token.

    Derived from the bearer value by a token encoder; the bearer value itself
    is never persisted.
    """

    validation_info: str

    def __post_init__(self) -> None:
        if not self.validation_info:
            raise InvariantViolation("validation info must not be empty", field="validation_info")

    def __repr__(self) -> str:
        return "TokenValidationInfo(***)"


@dataclass(slots=True, frozen=True)
class User:

    id: int
    username: str
    email: str
    password_validation: PasswordValidationInfo
    role: Role = Role.USER


@dataclass(slots=True, frozen=True)
class Token:

    token_validation_info: TokenValidationInfo
    user_id: int
    created_at: datetime
    last_used_at: datetime

    def __post_init__(self) -> None:
        if self.last_used_at < self.created_at:
            raise InvariantViolation(
                "last used time cannot precede creation time", field="last_used_at"
            )

    @classmethod
    def new(
        cls, token_validation_info: TokenValidationInfo, user_id: int, now: datetime
    ) -> Token:
        return cls(
            token_validation_info=token_validation_info,
            user_id=user_id,
            created_at=now,
            last_used_at=now,
        )

    def used_at(self, now: datetime) -> Token:
        """Return a copy touched at ``now``; last use never moves backwards."""

        return Token(
            token_validation_info=self.token_validation_info,
            user_id=self.user_id,
            created_at=self.created_at,
            last_used_at=max(self.last_used_at, now),
        )


@dataclass(slots=True, frozen=True)
class SessionPolicy:
    """Capacity and lifetime limits applied to every user's tokens."""

    max_tokens: int
    token_ttl: timedelta | None = None
    token_rolling_ttl: timedelta | None = None

    def __post_init__(self) -> None:
        if self.max_tokens <= 0:
            raise InvariantViolation("max tokens must be positive", field="max_tokens")
        for fld in ("token_ttl", "token_rolling_ttl"):
            value = getattr(self, fld)
            if value is not None and value <= timedelta(0):
                raise InvariantViolation("ttl must be positive", field=fld)

    def is_time_valid(self, token: Token, now: datetime) -> bool:
        if self.token_ttl is not None and now - token.created_at > self.token_ttl:
            return False
        if self.token_rolling_ttl is not None and now - token.last_used_at > self.token_rolling_ttl:
            return False
        return True


@dataclass(slots=True, frozen=True)
class IssuedToken:
    """Bearer value handed to the client together with the stored token."""

    value: str
    token: Token

    def __repr__(self) -> str:
        return f"IssuedToken(value=***, user_id={self.token.user_id})"


def to_epoch_seconds(moment: datetime) -> int:
    return int(moment.timestamp())


def from_epoch_seconds(seconds: int) -> datetime:
    return datetime.fromtimestamp(seconds, UTC)
