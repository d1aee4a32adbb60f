"""
Transcoder implementations backed by FFmpeg.

The frame runner describes what it wants as a TranscodeRequest. This
module turns that into an ffmpeg command line and runs it:
- seek (-ss before -i for fast input seeking)
- duration limit (-t)
- filter graph (-vf, rendered from the typed graph)
- single-frame output (-frames:v 1)
- GIF loop metadata (-loop 0 = forever)

Every run has a timeout. subprocess.run kills ffmpeg when the timeout
expires, so a stuck encode can't hang the request that triggered it.

MockTranscoder writes placeholder files so the API can be exercised
locally without ffmpeg installed.
"""

import asyncio
import logging
import subprocess
from pathlib import Path

from ...core.frames.runner import (
    TranscodeError,
    TranscodeRequest,
    TranscodeTimeout,
    Transcoder,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 60.0

# stills only; lower is better, 2 is near-lossless
JPEG_QUALITY = 2

# ffmpeg can be chatty; keep just the end of stderr in error messages
STDERR_TAIL_CHARS = 2000


class FFmpegTranscoder:
    """
    Runs ffmpeg as a subprocess for each request.

    The binary path comes from configuration. Nothing is set globally, so
    tests and multiple instances can point at different binaries.
    """

    def __init__(
        self,
        ffmpeg_path: str = "ffmpeg",
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        verify: bool = True,
    ):
        """
        Initialize transcoder.

        Args:
            ffmpeg_path: Path to ffmpeg binary (default assumes it's in PATH)
            timeout_seconds: Hard limit for a single ffmpeg run
            verify: Check the binary works before accepting requests
        """
        self._ffmpeg = ffmpeg_path
        self._timeout = timeout_seconds

        if verify:
            self._verify()

    def _verify(self) -> None:
        try:
            result = subprocess.run(
                [self._ffmpeg, "-version"],
                capture_output=True,
                text=True,
                timeout=5,
            )
        except FileNotFoundError:
            raise RuntimeError(
                f"FFmpeg not found at {self._ffmpeg!r}. Install with: apt-get install ffmpeg"
            )
        except subprocess.TimeoutExpired:
            raise RuntimeError("FFmpeg did not respond to -version")

        if result.returncode != 0:
            raise RuntimeError("FFmpeg not working properly")

        logger.info("FFmpeg transcoder initialized", extra={"ffmpeg_path": self._ffmpeg})

    def build_command(self, request: TranscodeRequest) -> list[str]:
        """Translate a request into ffmpeg arguments."""
        cmd = [self._ffmpeg, "-hide_banner", "-loglevel", "error", "-y"]

        if request.seek_seconds is not None:
            cmd += ["-ss", _format_seconds(request.seek_seconds)]

        cmd += ["-i", str(request.input_path)]

        if request.duration_seconds is not None:
            cmd += ["-t", _format_seconds(request.duration_seconds)]

        if request.filter_graph is not None:
            cmd += ["-vf", request.filter_graph.render()]

        if request.max_frames is not None:
            cmd += ["-frames:v", str(request.max_frames)]
            if _is_jpeg(request.output_path):
                cmd += ["-q:v", str(JPEG_QUALITY)]

        if request.loop is not None:
            cmd += ["-loop", str(request.loop)]

        # no audio in GIFs or stills
        cmd += ["-an", str(request.output_path)]
        return cmd

    async def transcode(self, request: TranscodeRequest) -> None:
        cmd = self.build_command(request)

        try:
            result = await asyncio.to_thread(
                subprocess.run,
                cmd,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise TranscodeTimeout(
                f"ffmpeg timed out after {self._timeout}s writing {request.output_path.name}"
            ) from e
        except FileNotFoundError as e:
            raise TranscodeError(f"ffmpeg binary not found: {self._ffmpeg}") from e
        except OSError as e:
            # e.g. EMFILE or a binary without exec permission
            raise TranscodeError(f"Could not start ffmpeg: {e}") from e

        if result.returncode != 0:
            stderr = (result.stderr or "")[-STDERR_TAIL_CHARS:]
            raise TranscodeError(
                f"ffmpeg exited with code {result.returncode}: {stderr.strip()}"
            )

        if not _has_content(request.output_path):
            raise TranscodeError(f"ffmpeg produced no output at {request.output_path}")

        logger.debug(
            "ffmpeg finished",
            extra={
                "output": str(request.output_path),
                "seek": request.seek_seconds,
                "duration": request.duration_seconds,
                "motion_highlight": bool(
                    request.filter_graph and request.filter_graph.motion_highlighted
                ),
            },
        )


class MockTranscoder:
    """
    Transcoder for local development without FFmpeg.

    Writes a 1x1 GIF to every output path and remembers the requests it
    saw. The file is a placeholder even when the path ends in .jpg.
    """

    PLACEHOLDER_GIF = (
        b"GIF89a\x01\x00\x01\x00\x80\x00\x00\x00\x00\x00\xff\xff\xff"
        b"!\xf9\x04\x01\x00\x00\x00\x00"
        b",\x00\x00\x00\x00\x01\x00\x01\x00\x00\x02\x02D\x01\x00;"
    )

    def __init__(self):
        self.requests: list[TranscodeRequest] = []
        logger.info("Initialized mock transcoder")

    async def transcode(self, request: TranscodeRequest) -> None:
        self.requests.append(request)
        request.output_path.write_bytes(self.PLACEHOLDER_GIF)


def create_transcoder(
    mock_mode: bool = False,
    ffmpeg_path: str = "ffmpeg",
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
) -> Transcoder:
    """
    Factory function for transcoders.

    Args:
        mock_mode: If True, return mock transcoder (no FFmpeg required)
        ffmpeg_path: ffmpeg binary for the real transcoder
        timeout_seconds: Per-run limit for the real transcoder

    Returns:
        Transcoder implementation
    """
    if mock_mode:
        return MockTranscoder()

    return FFmpegTranscoder(ffmpeg_path=ffmpeg_path, timeout_seconds=timeout_seconds)


def _format_seconds(seconds: float) -> str:
    return f"{seconds:.3f}"


def _is_jpeg(path: Path) -> bool:
    return path.suffix.lower() in (".jpg", ".jpeg")


def _has_content(path: Path) -> bool:
    try:
        return path.stat().st_size > 0
    except FileNotFoundError:
        return False
