# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Bearer token generation and the store-side identifiers derived from it."""

from __future__ import annotations

import base64
import hashlib
import secrets

from hotelhub.domain.users.entities import TokenValidationInfo
from hotelhub.domain.users.repositories import TokenEncoder


def generate_token_value(num_bytes: int) -> str:
    return secrets.token_urlsafe(num_bytes)


class Sha256TokenEncoder(TokenEncoder):
    def create_validation_info(self, token: str) -> TokenValidationInfo:
        digest = hashlib.sha256(token.encode("utf-8")).digest()
        return TokenValidationInfo(base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii"))
