"""
Failure events for phase extraction.

A failed phase is dropped from the results, and the user just sees no
GIF for it. That hides systematic problems (a codec that breaks every
upload, say). So each dropped phase is also reported as a structured
event. Operators can then count failures instead of grepping logs.
"""

import logging
from collections import Counter
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Protocol

from .models import OutputKind
from .naming import sanitize_phase_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PhaseExtractionFailed:
    """One phase (or the full clip) that produced no output."""
    analysis_id: str
    phase_name: str
    timestamp: str
    output_kind: OutputKind
    error: str
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_log_extra(self) -> dict:
        data = asdict(self)
        data["output_kind"] = self.output_kind.value
        data["occurred_at"] = self.occurred_at.isoformat()
        return data


class ExtractionEventSink(Protocol):
    """Where extraction failure events go."""

    def record(self, event: PhaseExtractionFailed) -> None:
        ...


class RecordingEventSink:
    """
    Logs each failure and keeps running counts.

    The counts are per process, not persisted. They feed the health
    endpoint. `recent` keeps the last few events for debugging.

    Phase names come from the AI model, so per-phase counts are keyed on
    the sanitized name and capped at `max_phases` distinct keys. Failures
    for phases beyond that are counted under OTHER_PHASES.
    """

    OTHER_PHASES = "_other"

    def __init__(self, max_recent: int = 50, max_phases: int = 50):
        self._max_recent = max_recent
        self._max_phases = max_phases
        self.recent: list[PhaseExtractionFailed] = []
        self.failures_by_phase: Counter[str] = Counter()

    @property
    def total_failures(self) -> int:
        return sum(self.failures_by_phase.values())

    def record(self, event: PhaseExtractionFailed) -> None:
        logger.warning("Phase extraction failed", extra=event.to_log_extra())

        self.failures_by_phase[self._phase_key(event.phase_name)] += 1
        self.recent.append(event)
        if len(self.recent) > self._max_recent:
            del self.recent[: len(self.recent) - self._max_recent]

    def _phase_key(self, phase_name: str) -> str:
        key = sanitize_phase_name(phase_name)
        if key in self.failures_by_phase:
            return key
        tracked = len(self.failures_by_phase) - (self.OTHER_PHASES in self.failures_by_phase)
        if tracked >= self._max_phases:
            return self.OTHER_PHASES
        return key
