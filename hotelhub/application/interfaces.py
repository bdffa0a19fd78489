# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from hotelhub.domain.users.repositories import TokenRepository, UserRepository


class UnitOfWork(Protocol):
    """Repositories bound to one transaction.

    Commits on a clean exit from the ``with`` block, rolls back when it is left
    by an exception.
    """

    users: UserRepository
    tokens: TokenRepository

    def __enter__(self) -> UnitOfWork: ...

    def __exit__(self, exc_type, exc, tb) -> None: ...


UnitOfWorkFactory = Callable[[], UnitOfWork]
