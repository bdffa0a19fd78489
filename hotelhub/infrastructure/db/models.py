# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from hotelhub.infrastructure.db.session import Base
from sqlalchemy import BigInteger, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column


class UserRow(Base):
    __tablename__ = "users"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    email: Mapped[str] = mapped_column(String(256))
    password_validation: Mapped[str] = mapped_column(String(256))
    role: Mapped[str] = mapped_column(String(16), nullable=False, default="USER")


class TokenRow(Base):
    __tablename__ = "tokens"
    __table_args__ = (Index("ix_tokens_user_last_used", "user_id", "last_used_at"),)
    # Insertion sequence; breaks ties between equal last_used_at values.
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    token_validation: Mapped[str] = mapped_column(String(256), unique=True, index=True)
    # Seconds since the epoch.
    created_at: Mapped[int] = mapped_column(BigInteger)
    last_used_at: Mapped[int] = mapped_column(BigInteger)
