# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from http import HTTPStatus
from typing import Any

from hotelhub.shared.errors.base import DomainError


class UserErrorKind(str, Enum):
    ALREADY_EXISTS = "already_exists"
    NOT_FOUND = "not_found"
    SESSION_INVALID = "session_invalid"
    INVALID_ARGUMENT = "invalid_argument"
    INVALID_CREDENTIALS = "invalid_credentials"


_STATUS_BY_KIND: dict[UserErrorKind, HTTPStatus] = {
    UserErrorKind.ALREADY_EXISTS: HTTPStatus.CONFLICT,
    UserErrorKind.NOT_FOUND: HTTPStatus.NOT_FOUND,
    UserErrorKind.SESSION_INVALID: HTTPStatus.UNAUTHORIZED,
    UserErrorKind.INVALID_ARGUMENT: HTTPStatus.BAD_REQUEST,
    UserErrorKind.INVALID_CREDENTIALS: HTTPStatus.UNAUTHORIZED,
}


class UserError(DomainError):
    """Every user/session failure; callers branch on ``kind``."""

    def __init__(self, kind: UserErrorKind, *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(code=kind.value, status=_STATUS_BY_KIND[kind], context=context)
        self.kind = kind

    @classmethod
    def already_exists(cls, what: str, **context: Any) -> UserError:
        return cls(UserErrorKind.ALREADY_EXISTS, context={"what": what, **context})

    @classmethod
    def not_found(cls, what: str) -> UserError:
        return cls(UserErrorKind.NOT_FOUND, context={"what": what})

    @classmethod
    def session_invalid(cls) -> UserError:
        return cls(UserErrorKind.SESSION_INVALID)

    @classmethod
    def invalid_argument(cls, field: str, reason: str) -> UserError:
        return cls(UserErrorKind.INVALID_ARGUMENT, context={"field": field, "reason": reason})

    @classmethod
    def invalid_credentials(cls) -> UserError:
        return cls(UserErrorKind.INVALID_CREDENTIALS)
