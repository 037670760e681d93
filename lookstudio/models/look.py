"""
Looks: the persisted result of an assembly run.
Products and the model snapshot are embedded by value as JSON.
"""

from typing import Optional

from sqlalchemy import BigInteger, JSON, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import RecordBase


class LookRecord(RecordBase):
    __tablename__ = "looks"

    model: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    base_image: Mapped[str] = mapped_column(Text, nullable=False, default="")
    final_image: Mapped[str] = mapped_column(Text, nullable=False)
    products: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    # Ordered set of alternate images; the primary is a member once any exist
    variations: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
