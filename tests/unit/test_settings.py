"""Tests for application settings."""

import pytest
from pydantic import ValidationError

from src.config.settings import Settings


class TestSettings:
    """Tests for settings parsing and validation."""

    def test_defaults(self):
        settings = Settings()

        assert settings.gif_fps == 10
        assert settings.gif_width == 320
        assert settings.uploads_path.as_posix() == "uploads/videos"

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("GIF_WIDTH", "480")
        monkeypatch.setenv("TRANSCODER_MOCK_MODE", "true")

        settings = Settings()

        assert settings.gif_width == 480
        assert settings.transcoder_mock_mode is True

    def test_cors_origins_list(self):
        settings = Settings(cors_origins="https://a.example, https://b.example,")

        assert settings.cors_origins_list == ["https://a.example", "https://b.example"]

    def test_cors_wildcard(self):
        assert Settings(cors_origins="*").cors_origins_list == ["*"]

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ValidationError):
            Settings(transcode_timeout_seconds=0)

    def test_rejects_bad_highlight_colour(self):
        with pytest.raises(ValidationError):
            Settings(motion_highlight_color="yellow")

    def test_missing_ffmpeg_reported(self):
        settings = Settings(ffmpeg_path="/nonexistent/ffmpeg-binary", transcoder_mock_mode=False)

        assert "FFMPEG_PATH" in settings.validate_required_fields()

    def test_ffmpeg_found_on_path(self, monkeypatch):
        monkeypatch.setattr("src.config.settings.shutil.which", lambda name: f"/usr/bin/{name}")
        settings = Settings(ffmpeg_path="ffmpeg", transcoder_mock_mode=False)

        assert settings.validate_required_fields() == []

    def test_mock_mode_does_not_need_ffmpeg(self):
        settings = Settings(ffmpeg_path="/nonexistent/ffmpeg-binary", transcoder_mock_mode=True)

        assert settings.validate_required_fields() == []

    def test_media_root_writable(self, tmp_path):
        settings = Settings(media_root=str(tmp_path / "media"))

        assert settings.media_root_writable()
        assert (tmp_path / "media").is_dir()
