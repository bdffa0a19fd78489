# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .interfaces import UnitOfWork, UnitOfWorkFactory
from .services.session_service import SessionService
from .use_cases.users.register_user import RegisterUserUseCase

__all__ = [
    "RegisterUserUseCase",
    "SessionService",
    "UnitOfWork",
    "UnitOfWorkFactory",
]
