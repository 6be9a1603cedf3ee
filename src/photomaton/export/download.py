"""
Download Export
===============

Writes output to the local download directory using the booth's
naming scheme: art-<epoch ms>.<ext> for images and art-video-<epoch ms>
for assembled clips.
"""

import logging
import time
from pathlib import Path
from typing import Optional

from photomaton.models.frame import Frame
from photomaton.source.encoding import extension_for


logger = logging.getLogger(__name__)


def timestamp_ms() -> int:
    return int(time.time() * 1000)


def image_filename(frame: Frame, stamp: Optional[int] = None) -> str:
    return f"art-{stamp or timestamp_ms()}{extension_for(frame.mime_type)}"


def video_filename(extension: str = ".mp4", stamp: Optional[int] = None) -> str:
    return f"art-video-{stamp or timestamp_ms()}{extension}"


def save_image(frame: Frame, output_dir: Path, stamp: Optional[int] = None) -> Path:
    """
    Write a frame's bytes unchanged to the download directory.

    Returns:
        Path of the written file
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    path = output_dir / image_filename(frame, stamp)
    path.write_bytes(frame.pixel_data)
    logger.info(f"Saved image download: {path}")
    return path
