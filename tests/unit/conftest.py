"""
Shared fixtures for unit tests.

The FakeTranscoder stands in for ffmpeg: it records every request and
either writes the rendered filter graph to the output file or fails,
depending on a predicate. Writing the graph lets tests check which
filter variant produced a file without decoding any media.
"""

from pathlib import Path
from typing import Callable, Optional

import pytest

from src.core.frames.runner import TranscodeError, TranscodeRequest

SINGLE_FRAME_MARKER = "single-frame"


class FakeTranscoder:
    """In-memory transcoder with scriptable failures."""

    def __init__(
        self,
        fail_when: Optional[Callable[[TranscodeRequest], bool]] = None,
        error: type[Exception] = TranscodeError,
    ):
        self.requests: list[TranscodeRequest] = []
        self._fail_when = fail_when or (lambda request: False)
        self._error = error

    async def transcode(self, request: TranscodeRequest) -> None:
        self.requests.append(request)

        if self._fail_when(request):
            # ffmpeg often leaves an empty file behind when it dies
            request.output_path.write_bytes(b"")
            raise self._error(f"simulated failure for {request.output_path.name}")

        if request.filter_graph is not None:
            request.output_path.write_text(request.filter_graph.render())
        else:
            request.output_path.write_text(SINGLE_FRAME_MARKER)


@pytest.fixture
def fake_transcoder() -> FakeTranscoder:
    return FakeTranscoder()


@pytest.fixture
def source_video(tmp_path: Path) -> Path:
    """A stand-in video file; the fake transcoder never reads it."""
    video = tmp_path / "videos" / "swing.mp4"
    video.parent.mkdir(parents=True)
    video.write_bytes(b"not really a video")
    return video
