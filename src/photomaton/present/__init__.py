"""
Presentation Module
===================

Turns an ordered output sequence into something to look at.

This module provides:
    - select_mode / PresentationMode: image for one frame, video for more
    - TimedFrameSequence / play: restartable (frame, hold) timeline and the
      task that paints it
    - VideoAssembler: timeline-to-clip encoder
    - ResultPresenter: writes the image or assembles the clip
"""

from photomaton.present.timeline import (
    PresentationMode,
    TimedFrame,
    TimedFrameSequence,
    play,
    select_mode,
)
from photomaton.present.video import VideoAssembler
from photomaton.present.presenter import Presentation, ResultPresenter


__all__ = [
    "Presentation",
    "PresentationMode",
    "ResultPresenter",
    "TimedFrame",
    "TimedFrameSequence",
    "VideoAssembler",
    "play",
    "select_mode",
]
