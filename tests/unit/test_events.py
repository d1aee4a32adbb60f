"""Tests for extraction failure events and the recording sink."""

from src.core.frames.events import PhaseExtractionFailed, RecordingEventSink
from src.core.frames.models import OutputKind


def _event(phase_name: str) -> PhaseExtractionFailed:
    return PhaseExtractionFailed(
        analysis_id="a1",
        phase_name=phase_name,
        timestamp="1s",
        output_kind=OutputKind.GIF,
        error="boom",
    )


class TestRecordingEventSink:
    """Tests for failure counting."""

    def test_counts_keyed_on_sanitized_name(self):
        sink = RecordingEventSink()

        sink.record(_event("Top of Backswing"))
        sink.record(_event("top-of-backswing"))

        assert dict(sink.failures_by_phase) == {"top_of_backswing": 2}
        assert sink.total_failures == 2

    def test_distinct_phases_capped(self):
        sink = RecordingEventSink(max_phases=2)

        for name in ["Address", "Impact", "Waggle", "Practice swing 7", "Impact"]:
            sink.record(_event(name))

        assert dict(sink.failures_by_phase) == {
            "address": 1,
            "impact": 2,
            RecordingEventSink.OTHER_PHASES: 2,
        }
        assert sink.total_failures == 5

    def test_recent_events_bounded(self):
        sink = RecordingEventSink(max_recent=3)

        for i in range(5):
            sink.record(_event(f"Phase {i}"))

        assert [e.phase_name for e in sink.recent] == ["Phase 2", "Phase 3", "Phase 4"]

    def test_log_extra_is_plain_data(self):
        extra = _event("Impact").to_log_extra()

        assert extra["output_kind"] == "gif"
        assert isinstance(extra["occurred_at"], str)
