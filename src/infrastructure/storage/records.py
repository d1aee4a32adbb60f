"""
Persistence for frame extraction results.

The analysis record itself lives with whatever stores analyses. This
module covers just the part extraction owns: the list of phase frames
and the full-swing GIF path for an analysis id.

Only an in-memory implementation ships here. It behaves like the other
mock-mode backends: a shared instance per process, and data that lasts
as long as the process does.
"""

import logging
from typing import Optional, Protocol

from ...core.frames.models import FrameExtraction, FrameRecord

logger = logging.getLogger(__name__)


class FrameRecordRepository(Protocol):
    """
    Protocol for storing extraction results against an analysis.

    Using a protocol means routes and tests don't care which backend
    is behind it.
    """

    async def save(
        self,
        analysis_id: str,
        extractions: list[FrameExtraction],
        full_clip_path: Optional[str] = None,
    ) -> FrameRecord:
        """Replace the stored frames for an analysis."""
        ...

    async def get(self, analysis_id: str) -> Optional[FrameRecord]:
        """Return the stored frames, or None if nothing was saved."""
        ...


class InMemoryFrameRecordRepository:
    """Dict-backed repository for local development and tests."""

    def __init__(self):
        self._records: dict[str, FrameRecord] = {}
        logger.info("Initialized in-memory frame record repository")

    async def save(
        self,
        analysis_id: str,
        extractions: list[FrameExtraction],
        full_clip_path: Optional[str] = None,
    ) -> FrameRecord:
        record = FrameRecord(
            analysis_id=analysis_id,
            extractions=list(extractions),
            full_clip_path=full_clip_path,
        )
        self._records[analysis_id] = record

        logger.debug(
            "Saved frame record",
            extra={"analysis_id": analysis_id, "frame_count": len(extractions)},
        )
        return record

    async def get(self, analysis_id: str) -> Optional[FrameRecord]:
        return self._records.get(analysis_id)
