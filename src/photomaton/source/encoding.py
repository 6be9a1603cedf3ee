"""
Image Encoding
==============

Conversion between OpenCV matrices and encoded frame payloads.

Design Rules:
    - This is the ONLY place in the codebase that encodes or decodes pixels
    - Validates shape and dtype
    - Fails fast on corrupt payloads
"""

import logging

import cv2
import numpy as np

from photomaton.errors import MediaDecodeError
from photomaton.models.frame import Frame


logger = logging.getLogger(__name__)


_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/bmp": ".bmp",
}


def extension_for(mime_type: str) -> str:
    """File extension for an image MIME type (defaults to .png)."""
    return _EXTENSIONS.get(mime_type.lower(), ".png")


def encode_jpeg(image: np.ndarray, quality: int) -> Frame:
    """
    Encode a BGR matrix into a JPEG frame.

    Args:
        image: BGR image as np.ndarray (H, W, 3), dtype=uint8
        quality: JPEG quality, 1-100

    Returns:
        Frame with image/jpeg pixel data

    Raises:
        MediaDecodeError: If the matrix is not a valid image
    """
    if image is None or image.ndim not in (2, 3) or image.size == 0:
        raise MediaDecodeError(f"Cannot encode image with shape {getattr(image, 'shape', None)}")

    ok, buffer = cv2.imencode(".jpg", image, [cv2.IMWRITE_JPEG_QUALITY, int(quality)])
    if not ok:
        raise MediaDecodeError("cv2.imencode failed to produce a JPEG")

    return Frame(pixel_data=buffer.tobytes(), mime_type="image/jpeg")


def decode_bgr(frame: Frame) -> np.ndarray:
    """
    Decode a frame to a BGR numpy array.

    Args:
        frame: Frame with encoded image data

    Returns:
        BGR image as np.ndarray (H, W, 3), dtype=uint8

    Raises:
        MediaDecodeError: If decoding fails or image is invalid
    """
    nparr = np.frombuffer(frame.pixel_data, np.uint8)
    bgr = cv2.imdecode(nparr, cv2.IMREAD_COLOR)

    if bgr is None:
        raise MediaDecodeError(
            f"Failed to decode {frame.mime_type} frame: cv2.imdecode returned None"
        )

    if len(bgr.shape) != 3 or bgr.shape[2] != 3:
        raise MediaDecodeError(f"Invalid image shape: {bgr.shape}")

    if bgr.dtype != np.uint8:
        raise MediaDecodeError(f"Invalid dtype: {bgr.dtype}")

    return bgr
