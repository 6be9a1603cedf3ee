"""
Models Module
=============

Typed data models shared across the pipeline:
    - Frame, FrameSequence, MediaKind: captured and generated media
    - StyleRequest, StyleResult: one stylize call and its outcome
    - GenerateRequest, GenerateResponse, HealthResponse: proxy wire schemas
"""

from photomaton.models.frame import (
    Frame,
    FrameSequence,
    MediaKind,
    StyleRequest,
    StyleResult,
)
from photomaton.models.messages import (
    GenerateRequest,
    GenerateResponse,
    HealthResponse,
)


__all__ = [
    "Frame",
    "FrameSequence",
    "MediaKind",
    "StyleRequest",
    "StyleResult",
    "GenerateRequest",
    "GenerateResponse",
    "HealthResponse",
]
