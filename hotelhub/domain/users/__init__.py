# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .entities import (
    IssuedToken,
    PasswordValidationInfo,
    Role,
    SessionPolicy,
    Token,
    TokenValidationInfo,
    User,
)
from .exceptions import UserError, UserErrorKind

__all__ = [
    "IssuedToken",
    "PasswordValidationInfo",
    "Role",
    "SessionPolicy",
    "Token",
    "TokenValidationInfo",
    "User",
    "UserError",
    "UserErrorKind",
]
