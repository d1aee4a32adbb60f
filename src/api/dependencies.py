"""
FastAPI dependency injection.

Dependencies provide instances of services, clients, and configuration
to route handlers. Using dependency injection means:
- Routes don't instantiate their own dependencies (easier to test)
- Dependencies can be overridden in tests (app.dependency_overrides)
- Configuration is centralized

Each dependency is a function that FastAPI calls when needed.
"""

import logging
from typing import Annotated, Optional

from fastapi import Depends

from ..config.settings import Settings, get_settings
from ..core.frames.events import RecordingEventSink
from ..core.frames.filters import FilterGraphBuilder, HighlightStyle
from ..core.frames.orchestrator import ExtractionOrchestrator
from ..core.frames.runner import FrameJobRunner, Transcoder
from ..infrastructure.storage.records import (
    FrameRecordRepository,
    InMemoryFrameRecordRepository,
)
from ..infrastructure.video.transcoder import create_transcoder

logger = logging.getLogger(__name__)

# Process-wide instances (shared across requests)
_event_sink: Optional[RecordingEventSink] = None
_record_repository: Optional[InMemoryFrameRecordRepository] = None
_transcoder: Optional[Transcoder] = None


# ---------------------------------------------------------------------------
# Shared Instances
# ---------------------------------------------------------------------------

def get_event_sink() -> RecordingEventSink:
    """
    Provide the failure event sink.

    Shared so the health endpoint sees the failures recorded by
    extraction requests.
    """
    global _event_sink

    if _event_sink is None:
        _event_sink = RecordingEventSink()
    return _event_sink


def get_record_repository() -> FrameRecordRepository:
    """
    Provide the frame record repository.

    In-memory and shared, so records saved by one request are visible to
    the next for the lifetime of the process.
    """
    global _record_repository

    if _record_repository is None:
        _record_repository = InMemoryFrameRecordRepository()
        logger.info("Created shared frame record repository")
    return _record_repository


def get_transcoder(
    settings: Annotated[Settings, Depends(get_settings)],
) -> Transcoder:
    """
    Provide the transcoder, created once per process.

    The real transcoder checks the ffmpeg binary on construction, which
    we don't want to repeat on every request.
    """
    global _transcoder

    if _transcoder is None:
        _transcoder = create_transcoder(
            mock_mode=settings.transcoder_mock_mode,
            ffmpeg_path=settings.ffmpeg_path,
            timeout_seconds=settings.transcode_timeout_seconds,
        )
        logger.info(
            "Created transcoder",
            extra={"mock_mode": settings.transcoder_mock_mode},
        )
    return _transcoder


# ---------------------------------------------------------------------------
# Service Dependencies
# ---------------------------------------------------------------------------

def get_orchestrator(
    settings: Annotated[Settings, Depends(get_settings)],
    transcoder: Annotated[Transcoder, Depends(get_transcoder)],
    event_sink: Annotated[RecordingEventSink, Depends(get_event_sink)],
) -> ExtractionOrchestrator:
    """
    Provide an ExtractionOrchestrator wired from settings.

    The orchestrator and runner are cheap and stateless, so we build them
    per request. The transcoder and event sink underneath are shared.
    """
    builder = FilterGraphBuilder(
        highlight=HighlightStyle.from_hex(settings.motion_highlight_color),
    )
    runner = FrameJobRunner(
        transcoder=transcoder,
        builder=builder,
        output_fps=settings.gif_fps,
        output_width=settings.gif_width,
    )
    return ExtractionOrchestrator(
        runner=runner,
        media_root=settings.media_root_path,
        frames_dirname=settings.frames_dirname,
        event_sink=event_sink,
    )


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

# These type aliases make route signatures cleaner
SettingsDep = Annotated[Settings, Depends(get_settings)]
EventSinkDep = Annotated[RecordingEventSink, Depends(get_event_sink)]
RecordRepositoryDep = Annotated[FrameRecordRepository, Depends(get_record_repository)]
OrchestratorDep = Annotated[ExtractionOrchestrator, Depends(get_orchestrator)]
