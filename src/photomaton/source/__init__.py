"""
Source Module
=============

Frame acquisition for the photo booth.

This module provides the capture layer:
    - FrameSource: Loads one origin into a Session (never mixes origins)
    - Camera: Scoped live-camera snapshot (device always released)
    - VideoSampler: Uniform timestamp sampling of uploaded video
    - upload_image: Raw uploaded bytes as a single frame

Example:
    from photomaton.pipeline import Session
    from photomaton.source import FrameSource

    session = Session()
    source = FrameSource(session)
    source.load_file(Path("clip.mp4"), count=10)
"""

from photomaton.source.camera import Camera, CaptureDevice
from photomaton.source.encoding import decode_bgr, encode_jpeg, extension_for
from photomaton.source.frame_source import FrameSource
from photomaton.source.upload import guess_media_kind, upload_image
from photomaton.source.video import (
    OpenCVVideoDecoder,
    VideoDecoder,
    VideoSampler,
    sample_timestamps,
)


__all__ = [
    "Camera",
    "CaptureDevice",
    "FrameSource",
    "OpenCVVideoDecoder",
    "VideoDecoder",
    "VideoSampler",
    "decode_bgr",
    "encode_jpeg",
    "extension_for",
    "guess_media_kind",
    "sample_timestamps",
    "upload_image",
]
