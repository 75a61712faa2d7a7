"""
Database models for the record-storage backend.

Models included:
    - LearningRecord: what was learned, with an optional repository file
    - Tag: case-sensitive labels
    - LearningTag: record <-> tag join rows
    - Category: one optional bucket per record
"""

from .base import BaseModel
from .category import Category
from .record import LearningRecord
from .tag import LearningTag, Tag

__all__ = [
    "BaseModel",
    "LearningRecord",
    "Tag",
    "LearningTag",
    "Category",
]
