"""Engine data models (SQLAlchemy ORM).

Import :data:`ALL_MODELS` for migration and table creation.
"""

from rebook.engine.models.account import CONTACT_LIMIT, Account
from rebook.engine.models.base import Base, TimestampMixin
from rebook.engine.models.contact import Contact

ALL_MODELS: list[type[Base]] = [
    Account,
    Contact,
]

__all__ = [
    "ALL_MODELS",
    "CONTACT_LIMIT",
    "Account",
    "Base",
    "Contact",
    "TimestampMixin",
]
