"""Look and lookboard consistency: variations, cascades, share tokens, export/import."""

from .manager import LookbookManager, generate_public_id
from .variations import VariationSet

__all__ = ["LookbookManager", "VariationSet", "generate_public_id"]
