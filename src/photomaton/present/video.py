"""
Video Assembly
==============

Re-encodes an ordered timeline of output frames into a playable clip.

Each frame is written for as many encoder ticks as its hold duration covers
(at least one), so the last frame is held for its delay before the clip is
finalized. Frames whose size differs from the first are resized to match.

Design Rules:
    - The encoder is released on every path
    - Frame order is timeline order
"""

import asyncio
import logging
from pathlib import Path
from typing import Callable, Optional

import cv2

from photomaton.errors import DeviceError, EmptySequenceError
from photomaton.present.timeline import TimedFrameSequence
from photomaton.source.encoding import decode_bgr


logger = logging.getLogger(__name__)


class VideoAssembler:
    """
    Timeline-to-video encoder backed by cv2.VideoWriter.

    Attributes:
        fps: Encoded frame rate
        codec: FourCC code
    """

    def __init__(
        self,
        fps: float = 10.0,
        codec: str = "mp4v",
        writer_factory: Callable[..., "cv2.VideoWriter"] = cv2.VideoWriter,
    ) -> None:
        if fps <= 0:
            raise ValueError("fps must be > 0")
        if len(codec) != 4:
            raise ValueError("codec must be a four-character code")
        self.fps = fps
        self.codec = codec
        self._writer_factory = writer_factory

    def ticks_for(self, hold_seconds: float) -> int:
        """Encoder frames covering a hold duration (at least one)."""
        return max(1, round(hold_seconds * self.fps))

    def assemble(self, timeline: TimedFrameSequence, path: Path) -> Path:
        """
        Encode a timeline to a video file.

        Args:
            timeline: Frames in presentation order
            path: Destination file

        Returns:
            The written path

        Raises:
            EmptySequenceError: Empty timeline
            DeviceError: Encoder could not be opened
            MediaDecodeError: A frame could not be decoded
        """
        if len(timeline) == 0:
            raise EmptySequenceError("No frames to assemble")

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        writer: Optional[cv2.VideoWriter] = None
        size = (0, 0)
        written = 0

        try:
            for item in timeline:
                image = decode_bgr(item.frame)

                if writer is None:
                    size = (image.shape[1], image.shape[0])
                    writer = self._writer_factory(
                        str(path),
                        cv2.VideoWriter_fourcc(*self.codec),
                        self.fps,
                        size,
                    )
                    if not writer.isOpened():
                        raise DeviceError(
                            f"Could not open video encoder ({self.codec}) for {path.name}"
                        )
                elif (image.shape[1], image.shape[0]) != size:
                    image = cv2.resize(image, size)

                for _ in range(self.ticks_for(item.hold_seconds)):
                    writer.write(image)
                    written += 1
        finally:
            if writer is not None:
                writer.release()

        logger.info(
            f"Assembled {len(timeline)} frames into {path.name} "
            f"({written} encoded frames @ {self.fps:g} fps, {size[0]}x{size[1]})"
        )
        return path

    async def assemble_async(self, timeline: TimedFrameSequence, path: Path) -> Path:
        """Encode off the event loop."""
        return await asyncio.to_thread(self.assemble, timeline, path)
