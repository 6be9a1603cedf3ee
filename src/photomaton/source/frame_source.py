"""
Frame Source
============

Produces the session's captured FrameSequence from exactly one origin:
uploaded image, live camera snapshot or sampled video. Origins are never
mixed within one sequence; every new selection resets the session.
"""

import logging
from pathlib import Path
from typing import Callable, Optional

from photomaton.config import Settings
from photomaton.models.frame import FrameSequence, MediaKind
from photomaton.pipeline.session import Session
from photomaton.source.camera import Camera
from photomaton.source.upload import guess_media_kind, upload_image
from photomaton.source.video import VideoDecoder, VideoSampler


logger = logging.getLogger(__name__)


class FrameSource:
    """
    Loads media into a Session.

    Attributes:
        session: Session receiving the captured sequence
        sampler: Video sampler used for video uploads
        default_sample_count: Sample count when the caller gives none
    """

    def __init__(
        self,
        session: Session,
        sampler: Optional[VideoSampler] = None,
        camera_factory: Callable[[], Camera] = Camera,
        default_sample_count: int = 10,
    ) -> None:
        self.session = session
        self.sampler = sampler or VideoSampler()
        self.default_sample_count = default_sample_count
        self._camera_factory = camera_factory

    @classmethod
    def from_settings(cls, session: Session, settings: Settings) -> "FrameSource":
        """Build a FrameSource wired to the capture settings."""
        capture = settings.capture
        return cls(
            session=session,
            sampler=VideoSampler(
                jpeg_quality=capture.sample_jpeg_quality,
                min_count=capture.min_sample_count,
                max_count=capture.max_sample_count,
            ),
            camera_factory=lambda: Camera(
                index=capture.camera_index,
                width=capture.camera_width,
                height=capture.camera_height,
                jpeg_quality=capture.photo_jpeg_quality,
            ),
            default_sample_count=capture.default_sample_count,
        )

    def upload_image(self, data: bytes, mime_type: str) -> FrameSequence:
        """Load uploaded image bytes as a single frame."""
        frames = upload_image(data, mime_type)
        self.session.reset(frames, MediaKind.IMAGE)
        logger.info(f"Loaded uploaded {mime_type} image ({len(data)} bytes)")
        return frames

    def capture_camera(self) -> FrameSequence:
        """
        Take one photo from the live camera.

        The camera is released whether or not the capture succeeds. On
        failure the session keeps its previous media.

        Raises:
            DeviceError: If the camera cannot be opened or read
        """
        with self._camera_factory() as camera:
            frames = camera.capture()
        self.session.reset(frames, MediaKind.IMAGE)
        return frames

    def sample_video(self, decoder: VideoDecoder, count: Optional[int] = None) -> FrameSequence:
        """
        Sample frames from a decoded video.

        The session is reset to an empty video sequence first, so a failed
        decode leaves it empty.

        Raises:
            MediaDecodeError: If the video has no duration or cannot be decoded
        """
        self.session.reset((), MediaKind.VIDEO)
        frames = self.sampler.sample(
            decoder,
            self.default_sample_count if count is None else count,
        )
        self.session.reset(frames, MediaKind.VIDEO)
        return frames

    def load_file(self, path: Path, count: Optional[int] = None) -> FrameSequence:
        """
        Load an image or video file by its MIME type.

        Raises:
            MediaDecodeError: For unsupported types or undecodable media
        """
        path = Path(path)
        kind, mime_type = guess_media_kind(path)

        if kind is MediaKind.IMAGE:
            return self.upload_image(path.read_bytes(), mime_type)

        self.session.reset((), MediaKind.VIDEO)
        frames = self.sampler.sample_file(
            path,
            self.default_sample_count if count is None else count,
        )
        self.session.reset(frames, MediaKind.VIDEO)
        return frames
