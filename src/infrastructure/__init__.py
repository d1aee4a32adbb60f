"""
Infrastructure layer - external service integrations.

Each subdirectory wraps an external dependency:
- video: FFmpeg transcoding
- storage: Frame extraction records

These wrappers translate between external formats and our domain models.
"""
