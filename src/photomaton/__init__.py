"""
Photomaton
==========

Photo booth that captures a still image or video, restyles the frames with a
generative-image API and exports the result.

This package provides the capture-to-export pipeline:

Components:
    - source: Frame acquisition (upload, camera snapshot, video sampling)
    - stylize: Remote stylize clients (direct Gemini, trusted proxy, mock)
    - pipeline: Session state and the sequential stylize orchestrator
    - present: Presentation mode selection, timed playback, video assembly
    - export: Download, PDF and GitHub export plus persisted preferences

Example:
    from photomaton.config import settings
    from photomaton.pipeline import PipelineOrchestrator, Session
    from photomaton.stylize import create_stylize_client

    session = Session()
    orchestrator = PipelineOrchestrator(create_stylize_client(settings))

    # The proxy server is started via the FastAPI application
    # See main.py for entry point
"""

__version__ = "2.0.0"
__author__ = "Photomaton Project"

__all__ = [
    "__version__",
]
