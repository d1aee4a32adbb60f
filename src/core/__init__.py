"""
Core business logic for swing frame extraction.

This module is framework-agnostic - it doesn't import FastAPI or run
ffmpeg itself. The transcoder is injected, so the extraction policy can
be tested with fakes.
"""
