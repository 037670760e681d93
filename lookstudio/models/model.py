"""
Model records: the people products are composited onto.
"""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import RecordBase


class ModelRecord(RecordBase):
    __tablename__ = "models"

    name: Mapped[str] = mapped_column(String, nullable=False)
    image_url: Mapped[str] = mapped_column(Text, nullable=False)
    gender: Mapped[str] = mapped_column(String, nullable=False)
    ethnicity: Mapped[str] = mapped_column(String, nullable=False, default="")
    age_appearance: Mapped[str] = mapped_column(String, nullable=False, default="")
    height: Mapped[str] = mapped_column(String, nullable=False, default="")
    skin_tone: Mapped[str] = mapped_column(String, nullable=False, default="")
    hair_color: Mapped[str] = mapped_column(String, nullable=False, default="")
    hair_style: Mapped[str] = mapped_column(String, nullable=False, default="")
    body_shape: Mapped[str] = mapped_column(String, nullable=False, default="")
    facial_hair: Mapped[str] = mapped_column(String, nullable=False, default="")
