"""Account model — one registered phone number and its passcode hash."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 - SQLAlchemy needs this at runtime for Mapped[datetime]

from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from rebook.engine.models.base import Base, TimestampMixin

# Hard cap on live contacts per account, enforced by the database as well.
CONTACT_LIMIT = 5


class Account(Base, TimestampMixin):
    """A registered user identified by phone number.

    ``contact_count`` mirrors the number of live contacts and is only ever
    changed in the same transaction as the contact insert/delete.
    """

    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint(
            f"contact_count >= 0 AND contact_count <= {CONTACT_LIMIT}",
            name="ck_accounts_contact_count",
        ),
    )

    id: Mapped[str] = mapped_column(
        String(32), primary_key=True, comment="Unique account ID"
    )
    phone_number: Mapped[str] = mapped_column(
        String(16), nullable=False, unique=True, index=True, comment="E.164-like phone number"
    )
    passcode_hash: Mapped[str] = mapped_column(
        String(60), nullable=False, comment="bcrypt hash of the 6-digit passcode"
    )
    last_login_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    contact_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )

    def __repr__(self) -> str:
        return f"<Account id={self.id} contacts={self.contact_count}>"
