"""
Runs a single extraction job through a transcoder.

The runner owns the per-job policy:
- which filter graph to use (motion highlight or standard)
- the one allowed fallback from motion highlight to standard
- cleaning up half-written output from a failed attempt

It doesn't know how the transcoder runs. FFmpeg, a mock, and the fakes
in tests all satisfy the Transcoder protocol, and the runner receives
one at construction.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

from .filters import FilterGraph, FilterGraphBuilder, GifIntent
from .models import ExtractionJob, FrameExtractionError

logger = logging.getLogger(__name__)

INFINITE_LOOP = 0


# ---------------------------------------------------------------------------
# Transcoder interface
# ---------------------------------------------------------------------------

class TranscodeError(Exception):
    """One transcoder invocation failed."""
    pass


class TranscodeTimeout(TranscodeError):
    """The transcoder ran past its time limit and was killed."""
    pass


@dataclass(frozen=True)
class TranscodeRequest:
    """
    Everything a transcoder needs for one invocation.

    None means "not set": no seek, no duration limit, no filter graph,
    and so on.
    """
    input_path: Path
    output_path: Path
    seek_seconds: Optional[float] = None
    duration_seconds: Optional[float] = None
    filter_graph: Optional[FilterGraph] = None
    max_frames: Optional[int] = None
    loop: Optional[int] = None


class Transcoder(Protocol):
    """
    Interface to the external media transcoder.

    Implementations write request.output_path on success and raise
    TranscodeError (or TranscodeTimeout) on failure.
    """

    async def transcode(self, request: TranscodeRequest) -> None:
        ...


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------

class FrameJobRunner:
    """
    Turns ExtractionJobs into transcoder calls.

    run() makes animated GIFs. run_single_frame() makes a single still.
    Both raise FrameExtractionError when the job fails terminally.
    """

    def __init__(
        self,
        transcoder: Transcoder,
        builder: Optional[FilterGraphBuilder] = None,
        output_fps: int = 10,
        output_width: int = 320,
    ):
        self._transcoder = transcoder
        self._builder = builder or FilterGraphBuilder()
        self._output_fps = output_fps
        self._output_width = output_width

    async def run(self, job: ExtractionJob) -> None:
        """
        Encode the job's range as a looping GIF.

        Motion-tracked jobs get one retry with the standard graph if the
        highlight graph fails. Standard jobs fail on the first error.
        """
        source = _absolute(job.source_video_path)

        if job.track_motion:
            try:
                await self._attempt(job, source, track_motion=True)
                return
            except TranscodeError as e:
                logger.info(
                    "Motion highlight failed, retrying with standard filters",
                    extra={"phase": job.phase_name, "error": str(e)},
                )

        try:
            await self._attempt(job, source, track_motion=False)
        except TranscodeError as e:
            raise FrameExtractionError(
                f"Failed to extract GIF for {job.phase_name}: {e}"
            ) from e

    async def run_single_frame(self, job: ExtractionJob) -> None:
        """Grab one still at the job's seek point. No filters, no fallback."""
        source = _absolute(job.source_video_path)
        seek = job.range.seek_point if job.range else None

        request = TranscodeRequest(
            input_path=source,
            output_path=job.output_path,
            seek_seconds=seek,
            max_frames=1,
        )

        try:
            await self._transcode(request)
        except TranscodeError as e:
            raise FrameExtractionError(
                f"Failed to extract frame for {job.phase_name}: {e}"
            ) from e

    async def _attempt(self, job: ExtractionJob, source: Path, track_motion: bool) -> None:
        graph = self._builder.build(GifIntent(
            track_motion=track_motion,
            output_fps=self._output_fps,
            output_width=self._output_width,
        ))

        request = TranscodeRequest(
            input_path=source,
            output_path=job.output_path,
            seek_seconds=job.range.start if job.range else None,
            duration_seconds=job.range.duration_seconds if job.range else None,
            filter_graph=graph,
            loop=INFINITE_LOOP,
        )

        await self._transcode(request)

    async def _transcode(self, request: TranscodeRequest) -> None:
        try:
            await self._transcoder.transcode(request)
        except TranscodeError:
            _remove_partial_output(request.output_path)
            raise
        except OSError as e:
            _remove_partial_output(request.output_path)
            raise TranscodeError(f"Transcoder failed: {e}") from e


def _absolute(path: Path) -> Path:
    return Path(path).resolve()


def _remove_partial_output(path: Path) -> None:
    """Failed ffmpeg runs can leave zero-byte or truncated files behind."""
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(
            "Could not remove partial output",
            extra={"path": str(path), "error": str(e)},
        )
