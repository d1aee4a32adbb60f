"""
SwingFrames - swing phase GIF and thumbnail extraction for golf swing analysis.

This package contains the complete application:
- core: Framework-agnostic extraction logic
- infrastructure: FFmpeg and record storage integrations
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
