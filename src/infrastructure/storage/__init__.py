"""Storage for extraction results."""

from .records import FrameRecordRepository, InMemoryFrameRecordRepository

__all__ = ["FrameRecordRepository", "InMemoryFrameRecordRepository"]
