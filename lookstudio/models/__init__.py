"""
All database tables. Imported here so Base.metadata sees them for create_all().
"""

from .base import RecordBase, now_ms
from .model import ModelRecord
from .look import LookRecord
from .lookboard import LookboardRecord

__all__ = [
    "RecordBase", "now_ms",
    "ModelRecord",
    "LookRecord",
    "LookboardRecord",
]
