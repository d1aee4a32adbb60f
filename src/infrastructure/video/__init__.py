"""
Video transcoding infrastructure.

Wraps FFmpeg behind the Transcoder protocol the frame runner expects:
- GIF encodes of a seek/duration window with a filter graph
- single-frame stills
- a mock implementation for running without FFmpeg
"""

from .transcoder import (
    FFmpegTranscoder,
    MockTranscoder,
    create_transcoder,
)

__all__ = [
    "FFmpegTranscoder",
    "MockTranscoder",
    "create_transcoder",
]
