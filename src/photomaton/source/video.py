"""
Video Sampling
==============

Uniform frame extraction from an uploaded video.

For a target sample count n and a video of duration D, frames are taken at
timestamps i * (D / n) for i = 0..n-1. Each sample seeks the decoder, waits
for the seek to settle (the decode that follows it) and rasterizes the frame.

Design Rules:
    - Samples are appended in ascending timestamp order; reassembly relies on it
    - Sample JPEG quality is lower than single-photo capture
    - Zero-duration or undecodable video raises MediaDecodeError
    - The decoder is always released
"""

import logging
import math
from pathlib import Path
from typing import List, Optional, Protocol

import cv2
import numpy as np

from photomaton.errors import MediaDecodeError
from photomaton.models.frame import Frame, FrameSequence
from photomaton.source.encoding import encode_jpeg


logger = logging.getLogger(__name__)


def sample_timestamps(duration: float, count: int) -> List[float]:
    """
    Compute uniform sample timestamps.

    Args:
        duration: Video duration in seconds
        count: Number of samples (must be >= 1)

    Returns:
        [0, D/n, 2D/n, ..., (n-1)D/n]
    """
    if count < 1:
        raise ValueError("count must be >= 1")
    interval = duration / count
    return [i * interval for i in range(count)]


class VideoDecoder(Protocol):
    """Seekable decoder used by VideoSampler."""

    @property
    def duration(self) -> float: ...

    def seek(self, timestamp: float) -> None: ...

    def read(self) -> Optional[np.ndarray]: ...

    def release(self) -> None: ...


class OpenCVVideoDecoder:
    """
    VideoDecoder backed by cv2.VideoCapture.

    Seeking uses CAP_PROP_POS_MSEC; cv2 completes the seek before the
    following read() returns, so read() is the settle point.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._capture = cv2.VideoCapture(str(self.path))

        if not self._capture.isOpened():
            self._capture.release()
            raise MediaDecodeError(f"Could not decode video: {self.path.name}")

    @property
    def duration(self) -> float:
        fps = self._capture.get(cv2.CAP_PROP_FPS)
        frame_count = self._capture.get(cv2.CAP_PROP_FRAME_COUNT)
        if not fps or fps <= 0 or frame_count <= 0:
            return 0.0
        return frame_count / fps

    def seek(self, timestamp: float) -> None:
        self._capture.set(cv2.CAP_PROP_POS_MSEC, timestamp * 1000.0)

    def read(self) -> Optional[np.ndarray]:
        ok, image = self._capture.read()
        return image if ok else None

    def release(self) -> None:
        self._capture.release()


class VideoSampler:
    """
    Extracts a fixed number of uniformly spaced frames from a video.

    Attributes:
        jpeg_quality: Encoding quality for each sample
        min_count: Lower clamp for the requested sample count
        max_count: Upper clamp for the requested sample count
    """

    def __init__(
        self,
        jpeg_quality: int = 85,
        min_count: int = 1,
        max_count: int = 30,
    ) -> None:
        if min_count < 1 or min_count > max_count:
            raise ValueError("require 1 <= min_count <= max_count")

        self.jpeg_quality = jpeg_quality
        self.min_count = min_count
        self.max_count = max_count

    def clamp_count(self, count: int) -> int:
        """Clamp a requested sample count into [min_count, max_count]."""
        clamped = max(self.min_count, min(self.max_count, int(count)))
        if clamped != count:
            logger.warning(f"Sample count {count} clamped to {clamped}")
        return clamped

    def sample(self, decoder: VideoDecoder, count: int) -> FrameSequence:
        """
        Sample frames from an open decoder, releasing it afterwards.

        Args:
            decoder: Seekable video decoder
            count: Requested number of samples (clamped)

        Returns:
            Frames in ascending timestamp order

        Raises:
            MediaDecodeError: On zero/unknown duration or a failed decode
        """
        count = self.clamp_count(count)

        try:
            duration = decoder.duration
            if not duration or not math.isfinite(duration) or duration <= 0:
                raise MediaDecodeError("Video has zero or unknown duration")

            frames: List[Frame] = []
            for index, timestamp in enumerate(sample_timestamps(duration, count)):
                decoder.seek(timestamp)
                image = decoder.read()
                if image is None:
                    raise MediaDecodeError(
                        f"Could not decode frame {index} at {timestamp:.3f}s"
                    )
                frames.append(encode_jpeg(image, self.jpeg_quality))

            logger.info(
                f"Extracted {len(frames)} frames from {duration:.2f}s video "
                f"(interval={duration / count:.3f}s)"
            )
            return tuple(frames)
        finally:
            decoder.release()

    def sample_file(self, path: Path, count: int) -> FrameSequence:
        """Open a video file with OpenCV and sample it."""
        return self.sample(OpenCVVideoDecoder(path), count)
