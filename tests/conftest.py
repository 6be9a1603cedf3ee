"""
Test Configuration
==================

Pytest fixtures and test doubles for Photomaton.

Remote APIs, cameras, video decoders and HTTP sessions are replaced by
small fakes; image payloads are real JPEGs produced with OpenCV so the
encode/decode paths run for real.
"""

import asyncio
from typing import Any, Dict, List, Optional, Set

import cv2
import numpy as np
import pytest

from photomaton.errors import RemoteError
from photomaton.models.frame import Frame, StyleResult


def make_jpeg(color=(0, 128, 255), width: int = 64, height: int = 48) -> bytes:
    image = np.full((height, width, 3), color, dtype=np.uint8)
    ok, buffer = cv2.imencode(".jpg", image)
    assert ok
    return buffer.tobytes()


# =============================================================================
# Fakes
# =============================================================================

class FakeStylizeClient:
    """
    Scriptable stylize backend.

    Output frames carry the source bytes behind a "styled:" prefix so tests
    can check which input produced which output.
    """

    def __init__(
        self,
        fail_on_call: Optional[int] = None,
        error: Optional[Exception] = None,
        no_output_on: Optional[Set[int]] = None,
        gate: Optional[asyncio.Event] = None,
        latency_seconds: float = 0.0,
    ) -> None:
        self.fail_on_call = fail_on_call
        self.error = error or RemoteError("Backend 500: boom", status_code=500)
        self.no_output_on = no_output_on or set()
        self.gate = gate
        self.latency_seconds = latency_seconds

        self.calls: List[tuple] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def stylize(self, frame: Frame, instruction: str) -> StyleResult:
        self.calls.append((frame, instruction))
        call_number = len(self.calls)

        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.gate is not None:
                await self.gate.wait()
            if self.latency_seconds:
                await asyncio.sleep(self.latency_seconds)
        finally:
            self.in_flight -= 1

        if call_number == self.fail_on_call:
            raise self.error
        if call_number in self.no_output_on:
            return StyleResult.no_output("I can't do that")

        return StyleResult(
            output_frame=Frame(pixel_data=b"styled:" + frame.pixel_data, mime_type="image/png"),
            advisory_text=f"done {call_number}",
        )


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code: int = 200, body: Any = None, text: str = "") -> None:
        self.status_code = status_code
        self._body = body
        self.text = text
        self.reason = "Reason"

    def json(self) -> Any:
        if self._body is None:
            raise ValueError("No JSON body")
        return self._body


class FakeHttp:
    """Records requests and answers with a canned response or exception."""

    def __init__(self, response: Optional[FakeResponse] = None, exc: Optional[Exception] = None) -> None:
        self.response = response or FakeResponse(200, {})
        self.exc = exc
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def _handle(self, method: str, url: str, **kwargs) -> FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        if self.exc is not None:
            raise self.exc
        return self.response

    def post(self, url: str, **kwargs) -> FakeResponse:
        return self._handle("POST", url, **kwargs)

    def put(self, url: str, **kwargs) -> FakeResponse:
        return self._handle("PUT", url, **kwargs)

    def close(self) -> None:
        self.closed = True


class FakeCaptureDevice:
    """cv2.VideoCapture replacement for Camera tests."""

    def __init__(self, opened: bool = True, image: Optional[np.ndarray] = None) -> None:
        self.opened = opened
        self.image = image
        self.released = False
        self.props: Dict[int, float] = {}

    def isOpened(self) -> bool:
        return self.opened

    def read(self):
        if self.image is None:
            return False, None
        return True, self.image

    def set(self, prop_id: int, value: float) -> bool:
        self.props[prop_id] = value
        return True

    def release(self) -> None:
        self.released = True


class FakeVideoDecoder:
    """Seekable decoder returning a frame whose color encodes the seek time."""

    def __init__(self, duration: float = 9.0, fail_at: Optional[int] = None) -> None:
        self._duration = duration
        self.fail_at = fail_at
        self.seeks: List[float] = []
        self.released = False

    @property
    def duration(self) -> float:
        return self._duration

    def seek(self, timestamp: float) -> None:
        self.seeks.append(timestamp)

    def read(self) -> Optional[np.ndarray]:
        if self.fail_at is not None and len(self.seeks) - 1 == self.fail_at:
            return None
        value = min(255, int(len(self.seeks) * 20))
        return np.full((24, 32, 3), value, dtype=np.uint8)

    def release(self) -> None:
        self.released = True


class FakeVideoWriter:
    """cv2.VideoWriter replacement recording written frames."""

    instances: List["FakeVideoWriter"] = []

    def __init__(self, path: str, fourcc: int, fps: float, size, opened: bool = True) -> None:
        self.path = path
        self.fourcc = fourcc
        self.fps = fps
        self.size = size
        self.opened = opened
        self.frames: List[np.ndarray] = []
        self.released = False
        FakeVideoWriter.instances.append(self)

    def isOpened(self) -> bool:
        return self.opened

    def write(self, image: np.ndarray) -> None:
        self.frames.append(image)

    def release(self) -> None:
        self.released = True


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def jpeg_bytes():
    """Provide a small real JPEG payload."""
    return make_jpeg()


@pytest.fixture
def sample_frame(jpeg_bytes):
    """Provide a single JPEG frame."""
    return Frame(pixel_data=jpeg_bytes, mime_type="image/jpeg")


@pytest.fixture
def make_frames():
    """Factory for n distinct JPEG frames."""

    def _make(count: int):
        return tuple(
            Frame(pixel_data=make_jpeg((i * 20 % 256, 100, 200)), mime_type="image/jpeg")
            for i in range(count)
        )

    return _make


@pytest.fixture
def fake_client_cls():
    return FakeStylizeClient


@pytest.fixture
def fake_http_cls():
    return FakeHttp


@pytest.fixture
def fake_response_cls():
    return FakeResponse


@pytest.fixture
def fake_device_cls():
    return FakeCaptureDevice


@pytest.fixture
def fake_decoder_cls():
    return FakeVideoDecoder


@pytest.fixture
def fake_writer_cls():
    FakeVideoWriter.instances = []
    return FakeVideoWriter
