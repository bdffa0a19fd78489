# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any


@dataclass(slots=True)
class AppError(Exception):
    code: str
    status: HTTPStatus
    context: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        Exception.__init__(self, self.code)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.code}
        if self.context:
            payload["context"] = dict(self.context)
        return payload


class DomainError(AppError):
    """Business rule failure; the status is what an HTTP adapter would answer."""

    def __init__(
        self,
        *,
        code: str = "domain_error",
        status: HTTPStatus = HTTPStatus.BAD_REQUEST,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(code=code, status=status, context=context)


class InfrastructureError(AppError):
    def __init__(
        self,
        code: str = "infrastructure_error",
        *,
        status: HTTPStatus | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        resolved_status = status or HTTPStatus.INTERNAL_SERVER_ERROR
        super().__init__(code=code, status=resolved_status, context=context)


class IntegrityViolationError(InfrastructureError):
    """More than one row where the schema guarantees at most one.

    Points at store corruption or a missing uniqueness constraint, so it is
    never retried.
    """

    def __init__(self, what: str) -> None:
        super().__init__("integrity_violation", context={"what": what})
