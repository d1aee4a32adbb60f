"""
Output file naming and public URLs for extracted frames.

Extraction and the frontend both derive file names from the phase name.
Both sides must go through sanitize_phase_name, or the UI ends up
requesting files that were written under a different name.
"""

import re

from .models import OutputKind

FULL_CLIP_FILENAME = "full_swing.gif"
FRAMES_URL_PREFIX = "/api/frames"

_UNSAFE_CHARS = re.compile(r"[^a-z0-9]")
_SAFE_ANALYSIS_ID = re.compile(r"[A-Za-z0-9_-]+")


def sanitize_phase_name(phase_name: str) -> str:
    """Lowercase, and replace everything outside [a-z0-9] with an underscore."""
    return _UNSAFE_CHARS.sub("_", phase_name.lower())


def phase_filename(phase_name: str, kind: OutputKind = OutputKind.GIF) -> str:
    return f"{sanitize_phase_name(phase_name)}{kind.extension}"


def validate_analysis_id(analysis_id: str) -> str:
    """
    Make sure an analysis id is usable as a single path segment.

    Ids end up in directory names and URLs, so separators and dots
    are rejected outright.
    """
    if not _SAFE_ANALYSIS_ID.fullmatch(analysis_id):
        raise ValueError(f"Invalid analysis id: {analysis_id!r}")
    return analysis_id


def url_for_phase(
    analysis_id: str,
    phase_name: str,
    kind: OutputKind = OutputKind.GIF,
) -> str:
    """Public path the frontend uses to fetch a phase's GIF or still."""
    return f"{FRAMES_URL_PREFIX}/{analysis_id}/{phase_filename(phase_name, kind)}"


def url_for_full_clip(analysis_id: str) -> str:
    return f"{FRAMES_URL_PREFIX}/{analysis_id}/{FULL_CLIP_FILENAME}"
