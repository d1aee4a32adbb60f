"""
Swing phase frame endpoints.

Flow:
1. The upload/analysis service stores the video under the uploads
   directory and gets swing phases back from the AI model.
2. It posts the phases here. We extract one GIF per phase plus the
   full swing GIF, and persist the results.
3. The frontend fetches the files from /api/frames/{analysis_id}/...
   using the same file naming as extraction.

Extraction is best effort: phases that fail simply don't appear in the
response.
"""

import logging
import re
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import FileResponse
from pydantic import BaseModel, Field

from ...core.frames.models import FrameExtraction, FrameRecord, OutputKind, SwingPhase
from ...core.frames.naming import (
    FRAMES_URL_PREFIX,
    url_for_full_clip,
    validate_analysis_id,
)
from ..dependencies import OrchestratorDep, RecordRepositoryDep, SettingsDep

logger = logging.getLogger(__name__)

router = APIRouter()
files_router = APIRouter()

_FRAME_FILENAME = re.compile(r"^[a-z0-9_]+\.(gif|jpg)$")

_MEDIA_TYPES = {
    ".gif": "image/gif",
    ".jpg": "image/jpeg",
}


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class SwingPhaseIn(BaseModel):
    """A swing phase as returned by the AI analysis."""
    name: str = Field(min_length=1, description="Phase name, e.g. 'Backswing'")
    timestamp: str = Field(description="Model-written timestamp, e.g. '0.5s' or '00:01 - 00:02'")


class ExtractFramesRequest(BaseModel):
    """Request to extract frames for an analysis."""
    video_filename: str = Field(description="File name of the uploaded video in the uploads directory")
    phases: list[SwingPhaseIn] = Field(description="Swing phases from the analysis")
    output: OutputKind = Field(
        default=OutputKind.GIF,
        description="'gif' for looping clips, 'jpg' for single stills"
    )
    include_full_clip: bool = Field(
        default=True,
        description="Also render the whole video as full_swing.gif"
    )


class FrameExtractionOut(BaseModel):
    """One extracted phase."""
    timestamp: str = Field(description="Original timestamp text from the analysis")
    frame_path: str = Field(description="Path relative to the media root")
    url: str = Field(description="Public URL for the file")


class FrameRecordResponse(BaseModel):
    """Extraction results for an analysis."""
    analysis_id: str
    frames: list[FrameExtractionOut]
    full_clip_path: Optional[str] = None
    full_clip_url: Optional[str] = None


# ---------------------------------------------------------------------------
# Helper Functions
# ---------------------------------------------------------------------------

def _frame_url(frame_path: str) -> str:
    """frames/<id>/<file> -> /api/frames/<id>/<file>"""
    parts = Path(frame_path).parts
    return f"{FRAMES_URL_PREFIX}/{'/'.join(parts[-2:])}"


def _to_response(record: FrameRecord) -> FrameRecordResponse:
    return FrameRecordResponse(
        analysis_id=record.analysis_id,
        frames=[
            FrameExtractionOut(
                timestamp=extraction.timestamp,
                frame_path=extraction.frame_path,
                url=_frame_url(extraction.frame_path),
            )
            for extraction in record.extractions
        ],
        full_clip_path=record.full_clip_path,
        full_clip_url=url_for_full_clip(record.analysis_id) if record.full_clip_path else None,
    )


def _check_analysis_id(analysis_id: str) -> None:
    try:
        validate_analysis_id(analysis_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


def _resolve_upload(uploads_dir: Path, filename: str) -> Path:
    """Find an uploaded video, refusing anything outside the uploads directory."""
    if not filename or Path(filename).name != filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="video_filename must be a bare file name",
        )

    video_path = uploads_dir / filename
    if not video_path.is_file():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Video not found. Upload a video first.",
        )
    return video_path


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "/{analysis_id}/frames",
    response_model=FrameRecordResponse,
    status_code=status.HTTP_200_OK,
    summary="Extract swing phase frames",
    description="Render a GIF (or still) per swing phase and, optionally, the full swing GIF",
)
async def extract_frames(
    analysis_id: str,
    request: ExtractFramesRequest,
    orchestrator: OrchestratorDep,
    repository: RecordRepositoryDep,
    settings: SettingsDep,
) -> FrameRecordResponse:
    """
    Extract frames for every phase of an analysis.

    Phases run one at a time. Failed phases are left out of the
    response rather than failing the request. Only a problem with the
    output directory turns into an error.
    """
    _check_analysis_id(analysis_id)
    video_path = _resolve_upload(settings.uploads_path, request.video_filename)
    try:
        phases = [SwingPhase(name=p.name, timestamp=p.timestamp) for p in request.phases]
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    logger.info(
        "Frame extraction requested",
        extra={
            "analysis_id": analysis_id,
            "phase_count": len(phases),
            "output": request.output.value,
        }
    )

    extractions: list[FrameExtraction]
    if request.output is OutputKind.STILL:
        extractions = await orchestrator.extract_phase_stills(video_path, analysis_id, phases)
    else:
        extractions = await orchestrator.extract_phase_frames(video_path, analysis_id, phases)

    full_clip_path = None
    if request.include_full_clip:
        full_clip_path = await orchestrator.extract_full_clip(video_path, analysis_id)

    record = await repository.save(analysis_id, extractions, full_clip_path)
    return _to_response(record)


@router.get(
    "/{analysis_id}/frames",
    response_model=FrameRecordResponse,
    summary="Get extracted frames",
    description="Return stored extraction results for an analysis",
)
async def get_frames(
    analysis_id: str,
    repository: RecordRepositoryDep,
) -> FrameRecordResponse:
    _check_analysis_id(analysis_id)

    record = await repository.get(analysis_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No frames extracted for this analysis",
        )
    return _to_response(record)


@files_router.get(
    "/{analysis_id}/{frame_name}",
    summary="Serve a frame file",
    description="Serve a phase GIF/still or full_swing.gif",
    response_class=FileResponse,
)
async def serve_frame(
    analysis_id: str,
    frame_name: str,
    settings: SettingsDep,
) -> FileResponse:
    """
    Serve an extracted file.

    Names are checked against the sanitized-name pattern, so nothing
    outside the analysis's frames directory can be requested.
    """
    try:
        validate_analysis_id(analysis_id)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Frame not found")

    if not _FRAME_FILENAME.match(frame_name):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Frame not found")

    frame_path = settings.media_root_path / settings.frames_dirname / analysis_id / frame_name
    if not frame_path.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Frame not found")

    return FileResponse(frame_path, media_type=_MEDIA_TYPES[frame_path.suffix])
