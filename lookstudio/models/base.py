"""
Base table with a store-assigned integer key. Every record table inherits from this.
"""

import time

from sqlalchemy import Integer
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base


def now_ms() -> int:
    """Current time as epoch milliseconds (the timestamp unit used by every record)."""
    return int(time.time() * 1000)


class RecordBase(Base):
    """Abstract base: autoincrement surrogate id, never reused after deletion."""

    __abstract__ = True
    # SQLite only guarantees non-reuse with AUTOINCREMENT; PostgreSQL sequences never reuse.
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
