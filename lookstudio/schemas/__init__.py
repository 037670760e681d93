"""Pydantic domain entities (drafts and persisted records)."""

from .entities import (
    CamelModel,
    ProductMedia,
    ProductReference,
    Gender,
    ModelDraft,
    Model,
    LookDraft,
    Look,
    Visibility,
    LookboardDraft,
    Lookboard,
)

__all__ = [
    "CamelModel",
    "ProductMedia",
    "ProductReference",
    "Gender",
    "ModelDraft",
    "Model",
    "LookDraft",
    "Look",
    "Visibility",
    "LookboardDraft",
    "Lookboard",
]
