"""Repository layer for data access."""

from .record_repository import RecordRepository

__all__ = ["RecordRepository"]
