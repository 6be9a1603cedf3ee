"""
Frame Data Model
=================

Internal frame representation shared by every pipeline stage.

Design Rules:
    - A Frame is immutable once captured (frozen dataclass, bytes payload)
    - pixel_data holds the encoded image exactly as captured or returned
    - preview_handle is display-only and carries no pipeline meaning
    - Order within a FrameSequence is capture/sample order and is significant
"""

import base64
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class MediaKind(str, Enum):
    """Origin of the media currently loaded into a session."""

    NONE = "none"
    IMAGE = "image"
    VIDEO = "video"


@dataclass(frozen=True, slots=True)
class Frame:
    """
    One captured or generated image plus its encoding metadata.

    Attributes:
        pixel_data: Encoded image bytes (JPEG, PNG, ...)
        mime_type: MIME type of pixel_data, used for remote-call encoding
        preview_handle: Optional renderable reference (e.g. a data URL)
    """

    pixel_data: bytes
    mime_type: str
    preview_handle: Optional[str] = None

    @classmethod
    def from_base64(cls, data: str, mime_type: str) -> "Frame":
        """Build a frame from a base64 payload as returned by remote APIs."""
        return cls(pixel_data=base64.b64decode(data, validate=True), mime_type=mime_type)

    def to_base64(self) -> str:
        """Base64-encode pixel data for JSON transport."""
        return base64.b64encode(self.pixel_data).decode("ascii")

    def __repr__(self) -> str:
        """Compact repr that doesn't dump the full image."""
        return (
            f"Frame(mime_type={self.mime_type!r}, "
            f"bytes={len(self.pixel_data)})"
        )


# Ordered, insertion-order-significant collection of frames
FrameSequence = Tuple[Frame, ...]


@dataclass(frozen=True, slots=True)
class StyleRequest:
    """A single frame paired with a style label or free-form edit text."""

    frame: Frame
    instruction: str


@dataclass(frozen=True, slots=True)
class StyleResult:
    """
    Outcome of one stylize call.

    A result without an output frame is NoOutput: the remote capability
    answered successfully but returned no image (e.g. a text-only refusal).
    NoOutput is a valid outcome, not an error.

    Attributes:
        output_frame: The transformed frame, or None for NoOutput
        advisory_text: Informational text returned alongside (or instead of)
            the image
    """

    output_frame: Optional[Frame]
    advisory_text: Optional[str] = None

    @classmethod
    def no_output(cls, advisory_text: Optional[str] = None) -> "StyleResult":
        return cls(output_frame=None, advisory_text=advisory_text)

    @property
    def is_no_output(self) -> bool:
        return self.output_frame is None
