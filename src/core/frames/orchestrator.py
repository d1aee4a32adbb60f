"""
Per-analysis extraction: one job per swing phase, plus the full swing.

Jobs run one after another. Each ffmpeg run already does two passes
(palette, then encode), and running several at once multiplies host
load for little gain on clips this short.

Failure policy:
- A phase that fails is logged, reported to the event sink and left
  out of the results. Its siblings still run.
- Failing to create the output directory is fatal and raises, because
  no job could write anything.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from .events import ExtractionEventSink, PhaseExtractionFailed, RecordingEventSink
from .models import (
    ExtractionJob,
    FrameExtraction,
    FrameExtractionError,
    OutputKind,
    SwingPhase,
)
from .naming import FULL_CLIP_FILENAME, phase_filename, validate_analysis_id
from .runner import FrameJobRunner
from .timestamps import parse_range

logger = logging.getLogger(__name__)

FULL_CLIP_PHASE_NAME = "Full Swing"


class ExtractionOrchestrator:
    """
    Extracts every phase of one analysis into <media_root>/frames/<id>/.

    Paths handed back to callers are relative to media_root, so they
    stay valid wherever the media directory is mounted.
    """

    def __init__(
        self,
        runner: FrameJobRunner,
        media_root: Union[str, Path],
        frames_dirname: str = "frames",
        event_sink: Optional[ExtractionEventSink] = None,
    ):
        self._runner = runner
        self._media_root = Path(media_root)
        self._frames_dirname = frames_dirname
        self._events = event_sink or RecordingEventSink()

    @property
    def media_root(self) -> Path:
        return self._media_root

    def frames_dir(self, analysis_id: str) -> Path:
        validate_analysis_id(analysis_id)
        return self._media_root / self._frames_dirname / analysis_id

    async def extract_phase_frames(
        self,
        video_path: Union[str, Path],
        analysis_id: str,
        phases: list[SwingPhase],
    ) -> list[FrameExtraction]:
        """
        Write a looping GIF for each phase.

        Returns one FrameExtraction per phase that succeeded, in phase
        order. Only a directory failure raises.
        """
        return await self._extract_phases(video_path, analysis_id, phases, OutputKind.GIF)

    async def extract_phase_stills(
        self,
        video_path: Union[str, Path],
        analysis_id: str,
        phases: list[SwingPhase],
    ) -> list[FrameExtraction]:
        """Same as extract_phase_frames, but one JPEG still per phase."""
        return await self._extract_phases(video_path, analysis_id, phases, OutputKind.STILL)

    async def extract_full_clip(
        self,
        video_path: Union[str, Path],
        analysis_id: str,
    ) -> Optional[str]:
        """
        Turn the whole video into full_swing.gif.

        Motion highlight is tried first, then standard filters. Returns
        the relative path, or None if both attempts failed.
        """
        output_dir = self._ensure_dir(analysis_id)
        output_path = output_dir / FULL_CLIP_FILENAME

        job = ExtractionJob(
            phase_name=FULL_CLIP_PHASE_NAME,
            source_video_path=Path(video_path),
            output_path=output_path,
            range=None,
            track_motion=True,
        )

        try:
            await self._runner.run(job)
        except FrameExtractionError as e:
            self._report_failure(analysis_id, job.phase_name, "", OutputKind.GIF, e)
            return None

        logger.info("Created full swing GIF", extra={"analysis_id": analysis_id})
        return self._relative(output_path)

    async def _extract_phases(
        self,
        video_path: Union[str, Path],
        analysis_id: str,
        phases: list[SwingPhase],
        kind: OutputKind,
    ) -> list[FrameExtraction]:
        output_dir = self._ensure_dir(analysis_id)
        extractions: list[FrameExtraction] = []

        for phase in phases:
            time_range = parse_range(phase.timestamp)
            output_path = output_dir / phase_filename(phase.name, kind)

            job = ExtractionJob(
                phase_name=phase.name,
                source_video_path=Path(video_path),
                output_path=output_path,
                range=time_range,
                track_motion=phase.tracks_motion,
            )

            logger.debug(
                "Extracting phase",
                extra={
                    "analysis_id": analysis_id,
                    "phase": phase.name,
                    "raw_timestamp": phase.timestamp,
                    "start": time_range.start,
                    "end": time_range.end,
                    "kind": kind.value,
                },
            )

            try:
                if kind is OutputKind.STILL:
                    await self._runner.run_single_frame(job)
                else:
                    await self._runner.run(job)
            except FrameExtractionError as e:
                self._report_failure(analysis_id, phase.name, phase.timestamp, kind, e)
                continue

            extractions.append(FrameExtraction(
                timestamp=phase.timestamp,
                frame_path=self._relative(output_path),
            ))

        logger.info(
            "Extracted phase frames",
            extra={
                "analysis_id": analysis_id,
                "requested": len(phases),
                "succeeded": len(extractions),
                "kind": kind.value,
            },
        )

        return extractions

    def _ensure_dir(self, analysis_id: str) -> Path:
        output_dir = self.frames_dir(analysis_id)
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(
                "Could not create frames directory",
                extra={"directory": str(output_dir), "error": str(e)},
            )
            raise FrameExtractionError(
                f"Could not create frames directory {output_dir}: {e}"
            ) from e
        return output_dir

    def _relative(self, path: Path) -> str:
        return path.relative_to(self._media_root).as_posix()

    def _report_failure(
        self,
        analysis_id: str,
        phase_name: str,
        timestamp: str,
        kind: OutputKind,
        error: Exception,
    ) -> None:
        self._events.record(PhaseExtractionFailed(
            analysis_id=analysis_id,
            phase_name=phase_name,
            timestamp=timestamp,
            output_kind=kind,
            error=str(error),
        ))
