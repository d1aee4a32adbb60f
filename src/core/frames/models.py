"""
Domain models for swing-phase frame extraction.

A swing analysis gives us a list of named phases, each with a timestamp
string written by the AI model. Extraction turns those into GIF (or JPEG)
files on disk, one per phase. These models describe that flow without
knowing anything about ffmpeg, HTTP, or where the records end up.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional


MOTION_PHASE_KEYWORDS = ("impact", "follow")


class OutputKind(Enum):
    """What a phase extraction writes to disk."""
    GIF = "gif"      # short looping clip of the phase
    STILL = "jpg"    # single frame thumbnail

    @property
    def extension(self) -> str:
        return f".{self.value}"


class FrameExtractionError(Exception):
    """Raised when a frame job fails terminally or output can't be written."""
    pass


@dataclass(frozen=True)
class SwingPhase:
    """
    A named segment of the swing as reported by the AI analysis.

    The timestamp is whatever text the model produced ("0.5s",
    "00:01 - 00:02", ...). We keep it verbatim and only interpret it
    when building a job.
    """
    name: str
    timestamp: str

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("Swing phase name cannot be empty")

    @property
    def tracks_motion(self) -> bool:
        """Impact and follow-through phases get the motion-highlight overlay."""
        lowered = self.name.lower()
        return any(keyword in lowered for keyword in MOTION_PHASE_KEYWORDS)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SwingPhase":
        """
        Build a phase from the provider's JSON.

        The provider also sends score, feedback, strengths and so on.
        Extraction only needs name and timestamp.
        """
        return cls(
            name=str(data.get("name", "")),
            timestamp=str(data.get("timestamp", "")),
        )


@dataclass(frozen=True)
class TimeRange:
    """
    A [start, end) span of the source video, in seconds.

    `widened` is set when the parser had to invent the end point, either
    because the text was a single instant or because the range collapsed
    to zero length.
    """
    start: float
    end: float
    widened: bool = False

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError("End of range must not be before start")

    @property
    def duration_seconds(self) -> float:
        return self.end - self.start

    @property
    def seek_point(self) -> float:
        """Where to grab a still: the instant itself, or the middle of a real range."""
        if self.widened:
            return self.start
        return (self.start + self.end) / 2


@dataclass(frozen=True)
class ExtractionJob:
    """
    One transcoding job: a slice of the source video to one output file.

    `range` is None for the full-clip job, which covers the whole video.
    """
    phase_name: str
    source_video_path: Path
    output_path: Path
    range: Optional[TimeRange] = None
    track_motion: bool = False


@dataclass(frozen=True)
class FrameExtraction:
    """
    A phase that was successfully extracted.

    `timestamp` is the original model text, unchanged, so the UI can
    match it back to the phase. `frame_path` is relative to the media
    root, with forward slashes.
    """
    timestamp: str
    frame_path: str

    def to_dict(self) -> dict[str, str]:
        return {"timestamp": self.timestamp, "framePath": self.frame_path}


@dataclass
class FrameRecord:
    """Everything extraction produced for one analysis."""
    analysis_id: str
    extractions: list[FrameExtraction] = field(default_factory=list)
    full_clip_path: Optional[str] = None
