# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from hotelhub.application.interfaces import UnitOfWorkFactory
from hotelhub.domain.users.entities import PasswordValidationInfo, Role
from hotelhub.domain.users.repositories import PasswordHasher


class RegisterUserUseCase:
    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory,
        password_hasher: PasswordHasher,
    ) -> None:
        self._uow_factory = uow_factory
        self._password_hasher = password_hasher

    def execute(self, username: str, email: str, password: str, role: Role = Role.USER) -> int:
        # No exists-check first: the store's unique constraint decides.
        hashed = PasswordValidationInfo(self._password_hasher.hash(password))
        with self._uow_factory() as uow:
            return uow.users.create(username, email, hashed, role)
