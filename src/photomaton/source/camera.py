"""
Camera Source
=============

Scoped live-camera acquisition for single-photo capture.

Design Rules:
    - The device is acquired on open() and released on capture or close()
    - Release happens on every path, including read and encode failures
    - A device that cannot be opened raises DeviceError (no retry)
    - Frames are captured at the stream's native resolution

Example:
    with Camera(index=0) as camera:
        frames = camera.capture()
"""

import logging
from typing import Callable, Optional, Protocol, Tuple

import cv2
import numpy as np

from photomaton.errors import DeviceError
from photomaton.models.frame import FrameSequence
from photomaton.source.encoding import encode_jpeg


logger = logging.getLogger(__name__)


class CaptureDevice(Protocol):
    """Subset of the cv2.VideoCapture interface used by Camera."""

    def isOpened(self) -> bool: ...

    def read(self) -> Tuple[bool, Optional[np.ndarray]]: ...

    def set(self, prop_id: int, value: float) -> bool: ...

    def release(self) -> None: ...


class Camera:
    """
    Live camera wrapper that releases its device after every capture.

    Attributes:
        index: OpenCV device index
        width: Requested frame width (0 = leave device default)
        height: Requested frame height (0 = leave device default)
        jpeg_quality: Encoding quality for the captured photo
    """

    def __init__(
        self,
        index: int = 0,
        width: int = 1280,
        height: int = 720,
        jpeg_quality: int = 95,
        device_factory: Callable[[int], CaptureDevice] = cv2.VideoCapture,
    ) -> None:
        self.index = index
        self.width = width
        self.height = height
        self.jpeg_quality = jpeg_quality

        self._device_factory = device_factory
        self._device: Optional[CaptureDevice] = None

    @property
    def is_open(self) -> bool:
        """Whether a device is currently held."""
        return self._device is not None

    def open(self) -> "Camera":
        """
        Acquire the camera device.

        Raises:
            DeviceError: If the device cannot be opened (permission denied,
                missing hardware, device busy)
        """
        if self._device is not None:
            return self

        try:
            device = self._device_factory(self.index)
        except Exception as e:
            raise DeviceError(f"Could not access camera {self.index}: {e}") from e

        if not device.isOpened():
            device.release()
            raise DeviceError(
                f"Could not access camera {self.index}. Please check permissions."
            )

        if self.width and self.height:
            device.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
            device.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)

        self._device = device
        logger.info(f"Camera {self.index} opened")
        return self

    def capture(self) -> FrameSequence:
        """
        Capture one photo and release the device.

        Returns:
            Sequence of length 1 containing a JPEG frame

        Raises:
            DeviceError: If the camera is not open or the read fails
        """
        if self._device is None:
            raise DeviceError("Camera is not open")

        try:
            ok, image = self._device.read()
            if not ok or image is None:
                raise DeviceError(f"Camera {self.index} returned no frame")

            frame = encode_jpeg(image, self.jpeg_quality)
            logger.info(
                f"Captured photo {image.shape[1]}x{image.shape[0]} "
                f"({len(frame.pixel_data)} bytes)"
            )
            return (frame,)
        finally:
            self.close()

    def close(self) -> None:
        """Release the device. Safe to call repeatedly."""
        if self._device is None:
            return
        device, self._device = self._device, None
        device.release()
        logger.info(f"Camera {self.index} released")

    def __enter__(self) -> "Camera":
        return self.open()

    def __exit__(self, *args) -> None:
        self.close()
