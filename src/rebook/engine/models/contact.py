"""Contact model — an emergency contact owned by one account."""

from __future__ import annotations

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from rebook.engine.models.base import Base, TimestampMixin


class Contact(Base, TimestampMixin):
    """An emergency contact (display name + phone number)."""

    __tablename__ = "contacts"
    __table_args__ = (Index("ix_contacts_account_created", "account_id", "created_at"),)

    id: Mapped[str] = mapped_column(
        String(32), primary_key=True, comment="Unique contact ID"
    )
    account_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        comment="Owning account ID",
    )
    name: Mapped[str] = mapped_column(
        String(50), nullable=False, comment="Contact display name"
    )
    phone_number: Mapped[str] = mapped_column(
        String(16), nullable=False, comment="Contact's phone number"
    )

    def __repr__(self) -> str:
        return f"<Contact id={self.id} account_id={self.account_id}>"
