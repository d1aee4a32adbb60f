"""
Swing-phase frame extraction.

Parses the AI's phase timestamps, builds ffmpeg filter graphs, and turns
each phase into a GIF or still under the analysis's frames directory.
"""

from .events import PhaseExtractionFailed, RecordingEventSink
from .filters import FilterGraph, FilterGraphBuilder, GifIntent, HighlightStyle
from .models import (
    ExtractionJob,
    FrameExtraction,
    FrameExtractionError,
    FrameRecord,
    OutputKind,
    SwingPhase,
    TimeRange,
)
from .naming import sanitize_phase_name, url_for_full_clip, url_for_phase
from .orchestrator import ExtractionOrchestrator
from .runner import (
    FrameJobRunner,
    TranscodeError,
    TranscodeRequest,
    TranscodeTimeout,
    Transcoder,
)
from .timestamps import parse_endpoint, parse_range

__all__ = [
    "PhaseExtractionFailed",
    "RecordingEventSink",
    "FilterGraph",
    "FilterGraphBuilder",
    "GifIntent",
    "HighlightStyle",
    "ExtractionJob",
    "FrameExtraction",
    "FrameExtractionError",
    "FrameRecord",
    "OutputKind",
    "SwingPhase",
    "TimeRange",
    "sanitize_phase_name",
    "url_for_full_clip",
    "url_for_phase",
    "ExtractionOrchestrator",
    "FrameJobRunner",
    "TranscodeError",
    "TranscodeRequest",
    "TranscodeTimeout",
    "Transcoder",
    "parse_endpoint",
    "parse_range",
]
