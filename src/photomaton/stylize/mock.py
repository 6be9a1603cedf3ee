"""
Mock Stylize Client
===================

Deterministic offline stylize backend.

Produces a stable transformation without any remote call so the full
capture-to-export pipeline can run in demos and tests:
    - Colour-inverts the source frame (OpenCV) and returns it as PNG
    - Optional artificial latency to exercise cooperative scheduling
    - Instructions containing a refusal marker yield NoOutput
"""

import asyncio
import logging

import cv2

from photomaton.errors import MediaDecodeError, RemoteError
from photomaton.models.frame import Frame, StyleResult
from photomaton.source.encoding import decode_bgr


logger = logging.getLogger(__name__)


class MockStylizeClient:
    """
    Deterministic stylize backend for offline use.

    Attributes:
        latency_seconds: Simulated per-call latency
        refusal_marker: Instruction substring that triggers NoOutput
    """

    def __init__(
        self,
        latency_seconds: float = 0.0,
        refusal_marker: str = "[refuse]",
    ) -> None:
        self.latency_seconds = latency_seconds
        self.refusal_marker = refusal_marker
        self._call_count: int = 0

        logger.info(f"MockStylizeClient initialized: latency={latency_seconds}s")

    async def stylize(self, frame: Frame, instruction: str) -> StyleResult:
        self._call_count += 1

        if self.latency_seconds > 0:
            await asyncio.sleep(self.latency_seconds)

        if self.refusal_marker and self.refusal_marker in instruction:
            return StyleResult.no_output("Mock backend declined this instruction")

        try:
            image = decode_bgr(frame)
        except MediaDecodeError as e:
            raise RemoteError(f"Mock backend could not read frame: {e}") from e

        ok, buffer = cv2.imencode(".png", cv2.bitwise_not(image))
        if not ok:
            raise RemoteError("Mock backend failed to encode output")

        return StyleResult(
            output_frame=Frame(pixel_data=buffer.tobytes(), mime_type="image/png"),
            advisory_text=f"mock: {instruction}",
        )

    @property
    def call_count(self) -> int:
        return self._call_count

    def get_metrics(self) -> dict:
        return {"call_count": self._call_count}
