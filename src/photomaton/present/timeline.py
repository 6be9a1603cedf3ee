"""
Timed Frame Timeline
====================

Decouples "what to show next" from "how it gets painted".

A TimedFrameSequence is a lazy, restartable iterable of (frame, hold)
pairs. Consumers either paint it in real time (play) or encode it
(VideoAssembler).
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, Optional

from photomaton.errors import EmptySequenceError
from photomaton.models.frame import Frame, FrameSequence


logger = logging.getLogger(__name__)


class PresentationMode(str, Enum):
    """
    How an output sequence is shown.

    Attributes:
        IMAGE: Exactly one frame, shown directly
        VIDEO: More than one frame, assembled into a clip
    """

    IMAGE = "image"
    VIDEO = "video"


def select_mode(frames: FrameSequence) -> PresentationMode:
    """
    Choose the presentation mode for an output sequence.

    Raises:
        EmptySequenceError: If there is nothing to present
    """
    if not frames:
        raise EmptySequenceError("No output frames to present")
    return PresentationMode.IMAGE if len(frames) == 1 else PresentationMode.VIDEO


@dataclass(frozen=True, slots=True)
class TimedFrame:
    """One frame and how long it stays on screen."""

    frame: Frame
    hold_seconds: float


class TimedFrameSequence:
    """
    Restartable timeline with a fixed hold per frame.

    Every iteration starts again from the first frame.
    """

    def __init__(self, frames: FrameSequence, hold_seconds: float) -> None:
        if hold_seconds < 0:
            raise ValueError("hold_seconds must be >= 0")
        self._frames = tuple(frames)
        self.hold_seconds = hold_seconds

    @classmethod
    def at_fps(cls, frames: FrameSequence, fps: float) -> "TimedFrameSequence":
        return cls(frames, 1.0 / fps)

    def __iter__(self) -> Iterator[TimedFrame]:
        for frame in self._frames:
            yield TimedFrame(frame=frame, hold_seconds=self.hold_seconds)

    def __len__(self) -> int:
        return len(self._frames)

    @property
    def total_duration(self) -> float:
        return len(self._frames) * self.hold_seconds


async def play(
    timeline: TimedFrameSequence,
    paint: Callable[[Frame], None],
    loops: Optional[int] = 1,
) -> int:
    """
    Paint a timeline in real time.

    Runs as a dedicated presentation task; cancel the task to stop an
    endless preview.

    Args:
        timeline: Frames and hold durations
        paint: Called with each frame when it becomes visible
        loops: Passes over the timeline; None loops until cancelled

    Returns:
        Number of frames painted
    """
    if len(timeline) == 0:
        return 0

    painted = 0
    completed = 0
    while loops is None or completed < loops:
        for item in timeline:
            paint(item.frame)
            painted += 1
            await asyncio.sleep(item.hold_seconds)
        completed += 1

    logger.debug(f"Playback finished: {painted} frames painted")
    return painted
