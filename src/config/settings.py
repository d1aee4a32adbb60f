"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables with sensible defaults.
Using Pydantic's BaseSettings means we get:
- Type validation at startup (fail fast if config is wrong)
- Documentation of what's required vs optional
- Easy testing with different configurations

Mock mode lets the API run without FFmpeg installed.
"""

import os
import shutil
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    For lists (like cors_origins), use comma-separated values in env.
    """

    # API Configuration
    api_title: str = "SwingFrames API"
    api_version: str = "v1"

    # Media layout
    media_root: str = Field(
        default="uploads",
        description="Root directory for uploaded videos and extracted frames. Stored frame paths are relative to it."
    )
    uploads_dirname: str = Field(
        default="videos",
        description="Subdirectory of media_root holding uploaded swing videos"
    )
    frames_dirname: str = Field(
        default="frames",
        description="Subdirectory of media_root holding per-analysis frame directories"
    )

    # FFmpeg Configuration
    ffmpeg_path: str = Field(
        default="ffmpeg",
        description="ffmpeg binary. Injected into the transcoder, never set globally."
    )
    transcode_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Hard limit per ffmpeg run. The process is killed and the job fails after this."
    )
    transcoder_mock_mode: bool = Field(
        default=False,
        description="Use a mock transcoder that writes placeholder files. Enables local dev without FFmpeg."
    )

    # GIF output
    gif_fps: int = Field(
        default=10,
        gt=0,
        le=50,
        description="Frame rate of phase GIFs. Higher is smoother but larger."
    )
    gif_width: int = Field(
        default=320,
        gt=0,
        description="Width of phase GIFs in pixels; height follows the aspect ratio."
    )
    motion_highlight_color: str = Field(
        default="#FFD600",
        pattern=r"^#?[0-9A-Fa-f]{6}$",
        description="Colour painted over moving regions on impact/follow-through GIFs"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:5173,capacitor://localhost",
        description="Comma-separated list of allowed CORS origins. Use * for development only."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def media_root_path(self) -> Path:
        return Path(self.media_root)

    @property
    def uploads_path(self) -> Path:
        """Where uploaded videos are looked up."""
        return self.media_root_path / self.uploads_dirname

    def validate_required_fields(self) -> list[str]:
        """
        Validate that required settings are usable.

        Returns list of problems.
        This is separate from Pydantic validation because it depends on
        the machine (is ffmpeg installed?) and on mock mode.
        """
        missing = []

        # ffmpeg only required if not in mock mode
        if not self.transcoder_mock_mode and shutil.which(self.ffmpeg_path) is None:
            missing.append("FFMPEG_PATH")

        if not self.media_root.strip():
            missing.append("MEDIA_ROOT")

        return missing

    def media_root_writable(self) -> bool:
        """True if media_root exists (or can be created) and is writable."""
        root = self.media_root_path
        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError:
            return False
        return os.access(root, os.W_OK)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache means we only load settings once per process.
    This is safe because settings don't change during runtime.
    For tests, you can call get_settings.cache_clear() to reset.
    """
    return Settings()
