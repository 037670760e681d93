"""Persistence layer."""

from .entity_store import EntityKind, EntityStore

__all__ = ["EntityKind", "EntityStore"]
