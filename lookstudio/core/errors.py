"""
Error taxonomy shared by the store, the pipeline and the lookbook manager.
The API layer maps each class to an HTTP status (see factory.py).
"""

from typing import Optional


class LookStudioError(Exception):
    """Base class for every domain error raised by lookstudio."""


class NotFoundError(LookStudioError):
    """A SKU or a stored entity does not exist."""

    def __init__(self, message: str, missing: Optional[list[str]] = None):
        super().__init__(message)
        self.missing = missing or []


class ConstraintViolationError(LookStudioError):
    """A write collided with a unique index (e.g. duplicate public id)."""


class GenerationFailure(LookStudioError):
    """The image gateway failed or returned no usable image."""


class InvalidStateError(LookStudioError):
    """Illegal transition, e.g. promoting an unknown variation."""


class StoreUnavailableError(LookStudioError):
    """The backing database cannot be opened or is closed."""


class InvalidInputError(LookStudioError):
    """Request data rejected before any write (empty title, bad import batch)."""
