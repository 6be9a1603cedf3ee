"""
Upload Source
=============

Turn uploaded files into frames without transforming their bytes.
"""

import logging
import mimetypes
from pathlib import Path
from typing import Optional, Tuple

from photomaton.errors import MediaDecodeError
from photomaton.models.frame import Frame, FrameSequence, MediaKind


logger = logging.getLogger(__name__)


def upload_image(data: bytes, mime_type: str) -> FrameSequence:
    """
    Wrap raw uploaded image bytes in a single-frame sequence.

    Args:
        data: File bytes exactly as uploaded
        mime_type: Declared MIME type of the file

    Returns:
        Sequence of length 1

    Raises:
        MediaDecodeError: If the payload is empty or not an image type
    """
    if not data:
        raise MediaDecodeError("Uploaded image is empty")
    if not mime_type.startswith("image/"):
        raise MediaDecodeError(f"Not an image upload: {mime_type}")

    return (Frame(pixel_data=bytes(data), mime_type=mime_type),)


def guess_media_kind(path: Path, mime_type: Optional[str] = None) -> Tuple[MediaKind, str]:
    """
    Classify a file as image or video from its (declared or guessed) type.

    Raises:
        MediaDecodeError: If the type is neither image/* nor video/*
    """
    if mime_type is None:
        mime_type, _ = mimetypes.guess_type(str(path))

    if mime_type and mime_type.startswith("image/"):
        return MediaKind.IMAGE, mime_type
    if mime_type and mime_type.startswith("video/"):
        return MediaKind.VIDEO, mime_type

    raise MediaDecodeError(f"Unsupported media type for {path.name}: {mime_type}")
