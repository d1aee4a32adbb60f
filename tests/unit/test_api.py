"""
API tests using FastAPI's TestClient.

Dependencies are overridden so each test gets a temporary media root,
the mock transcoder, and fresh in-memory record/event stores.
"""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from src.api.dependencies import (
    get_event_sink,
    get_record_repository,
    get_transcoder,
)
from src.config.settings import Settings, get_settings
from src.core.frames.events import RecordingEventSink
from src.infrastructure.storage.records import InMemoryFrameRecordRepository
from src.infrastructure.video.transcoder import MockTranscoder
from src.main import app

from conftest import FakeTranscoder

PHASES = [
    {"name": "Address", "timestamp": "0.5s", "score": 7},
    {"name": "Impact", "timestamp": "00:01 - 00:02", "score": 9},
]


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    settings = Settings(media_root=str(tmp_path), transcoder_mock_mode=True)
    settings.uploads_path.mkdir(parents=True)
    (settings.uploads_path / "swing.mp4").write_bytes(b"video bytes")
    return settings


@pytest.fixture
def event_sink() -> RecordingEventSink:
    return RecordingEventSink()


@pytest.fixture
def client(settings, event_sink):
    transcoder = MockTranscoder()
    repository = InMemoryFrameRecordRepository()

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_transcoder] = lambda: transcoder
    app.dependency_overrides[get_record_repository] = lambda: repository
    app.dependency_overrides[get_event_sink] = lambda: event_sink

    yield TestClient(app)

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Extraction Endpoints
# ---------------------------------------------------------------------------

class TestExtractFrames:
    """Tests for POST /api/v1/analyses/{id}/frames."""

    def test_extracts_phases_and_full_clip(self, client):
        response = client.post(
            "/api/v1/analyses/a1/frames",
            json={"video_filename": "swing.mp4", "phases": PHASES},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["analysis_id"] == "a1"
        assert [f["timestamp"] for f in body["frames"]] == ["0.5s", "00:01 - 00:02"]
        assert [f["url"] for f in body["frames"]] == [
            "/api/frames/a1/address.gif",
            "/api/frames/a1/impact.gif",
        ]
        assert body["frames"][0]["frame_path"] == "frames/a1/address.gif"
        assert body["full_clip_path"] == "frames/a1/full_swing.gif"
        assert body["full_clip_url"] == "/api/frames/a1/full_swing.gif"

    def test_stills_output(self, client):
        response = client.post(
            "/api/v1/analyses/a1/frames",
            json={
                "video_filename": "swing.mp4",
                "phases": PHASES,
                "output": "jpg",
                "include_full_clip": False,
            },
        )

        body = response.json()
        assert [f["url"] for f in body["frames"]] == [
            "/api/frames/a1/address.jpg",
            "/api/frames/a1/impact.jpg",
        ]
        assert body["full_clip_path"] is None
        assert body["full_clip_url"] is None

    def test_failed_phase_left_out(self, client, event_sink):
        failing = FakeTranscoder(fail_when=lambda request: request.output_path.name == "address.gif")
        app.dependency_overrides[get_transcoder] = lambda: failing

        response = client.post(
            "/api/v1/analyses/a1/frames",
            json={"video_filename": "swing.mp4", "phases": PHASES, "include_full_clip": False},
        )

        assert response.status_code == 200
        assert [f["timestamp"] for f in response.json()["frames"]] == ["00:01 - 00:02"]
        assert event_sink.total_failures == 1

    def test_unknown_video_is_404(self, client):
        response = client.post(
            "/api/v1/analyses/a1/frames",
            json={"video_filename": "missing.mp4", "phases": PHASES},
        )

        assert response.status_code == 404

    def test_path_traversal_rejected(self, client):
        response = client.post(
            "/api/v1/analyses/a1/frames",
            json={"video_filename": "../secrets.mp4", "phases": PHASES},
        )

        assert response.status_code == 400

    def test_unsafe_analysis_id_rejected(self, client):
        response = client.post(
            "/api/v1/analyses/a.b/frames",
            json={"video_filename": "swing.mp4", "phases": PHASES},
        )

        assert response.status_code == 400

    def test_trailing_newline_in_analysis_id_rejected(self, client, settings):
        response = client.post(
            "/api/v1/analyses/abc%0A/frames",
            json={"video_filename": "swing.mp4", "phases": PHASES},
        )

        assert response.status_code == 400
        assert not (settings.media_root_path / "frames" / "abc\n").exists()

    def test_blank_phase_name_rejected(self, client):
        response = client.post(
            "/api/v1/analyses/a1/frames",
            json={"video_filename": "swing.mp4", "phases": [{"name": "   ", "timestamp": "1s"}]},
        )

        assert response.status_code == 400


class TestGetFrames:
    """Tests for GET /api/v1/analyses/{id}/frames."""

    def test_returns_saved_record(self, client):
        client.post(
            "/api/v1/analyses/a1/frames",
            json={"video_filename": "swing.mp4", "phases": PHASES},
        )

        response = client.get("/api/v1/analyses/a1/frames")

        assert response.status_code == 200
        assert len(response.json()["frames"]) == 2

    def test_unknown_analysis_is_404(self, client):
        assert client.get("/api/v1/analyses/nope/frames").status_code == 404


# ---------------------------------------------------------------------------
# File Serving
# ---------------------------------------------------------------------------

class TestServeFrame:
    """Tests for GET /api/frames/{id}/{name}."""

    def test_serves_extracted_gif(self, client):
        client.post(
            "/api/v1/analyses/a1/frames",
            json={"video_filename": "swing.mp4", "phases": PHASES},
        )

        response = client.get("/api/frames/a1/impact.gif")

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/gif"
        assert response.content.startswith(b"GIF89a")

    def test_serves_full_clip(self, client):
        client.post(
            "/api/v1/analyses/a1/frames",
            json={"video_filename": "swing.mp4", "phases": PHASES},
        )

        assert client.get("/api/frames/a1/full_swing.gif").status_code == 200

    def test_missing_file_is_404(self, client):
        assert client.get("/api/frames/a1/impact.gif").status_code == 404

    @pytest.mark.parametrize("frame_name", ["Impact.GIF", "impact.png", "..%2Fswing.mp4"])
    def test_unexpected_names_are_404(self, client, frame_name):
        assert client.get(f"/api/frames/a1/{frame_name}").status_code == 404


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

class TestHealth:
    """Tests for the health endpoints."""

    def test_liveness_reports_failures(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["details"]["extraction_failures"]["total"] == 0
        assert body["details"]["mock_mode"]["transcoder"] is True

    def test_ready_in_mock_mode(self, client):
        response = client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    def test_not_ready_without_ffmpeg(self, client, tmp_path):
        broken = Settings(
            media_root=str(tmp_path),
            transcoder_mock_mode=False,
            ffmpeg_path="/nonexistent/ffmpeg-binary",
        )
        app.dependency_overrides[get_settings] = lambda: broken

        response = client.get("/health/ready")

        assert response.status_code == 503
        checks = {c["name"]: c for c in response.json()["checks"]}
        assert checks["configuration"]["status"] == "error"
        assert "FFMPEG_PATH" in checks["configuration"]["error"]
