"""
Result Presenter
================

Chooses how a session's output sequence is shown and materializes it.

    - length 1  -> the image itself (written as-is)
    - length >1 -> video assembled by timed redraw at a fixed inter-frame
                   delay (visual animation, not a frame-exact encode)

Presentation operates on the sequence passed in, which callers take as a
snapshot of the session output at invocation time; it never re-runs the
pipeline.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from photomaton.config import Settings
from photomaton.export.download import save_image, timestamp_ms, video_filename
from photomaton.models.frame import Frame, FrameSequence
from photomaton.present.timeline import (
    PresentationMode,
    TimedFrameSequence,
    play,
    select_mode,
)
from photomaton.present.video import VideoAssembler


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Presentation:
    """
    A materialized result.

    Attributes:
        mode: IMAGE or VIDEO
        path: File holding the image or clip
        frame_count: Frames in the presented sequence
    """

    mode: PresentationMode
    path: Path
    frame_count: int

    @property
    def export_actions_available(self) -> bool:
        """Download and document export become available once presented."""
        return self.frame_count > 0


class ResultPresenter:
    """
    Presents output sequences as an image or a video.

    Attributes:
        assembler: Video encoder for multi-frame output
        frame_delay_seconds: Hold per frame in assembled video
        preview_fps: Playback rate of the captured-frame preview
        video_extension: Container extension for clips
    """

    def __init__(
        self,
        assembler: VideoAssembler,
        frame_delay_seconds: float = 0.1,
        video_extension: str = ".mp4",
        preview_fps: float = 5.0,
    ) -> None:
        self.assembler = assembler
        self.frame_delay_seconds = frame_delay_seconds
        self.preview_fps = preview_fps
        self.video_extension = video_extension

    @classmethod
    def from_settings(cls, settings: Settings) -> "ResultPresenter":
        presentation = settings.presentation
        return cls(
            assembler=VideoAssembler(
                fps=presentation.video_fps,
                codec=presentation.video_codec,
            ),
            frame_delay_seconds=presentation.frame_delay_ms / 1000.0,
            video_extension=presentation.video_extension,
            preview_fps=presentation.preview_fps,
        )

    def timeline(self, frames: FrameSequence) -> TimedFrameSequence:
        """Timeline used for video assembly."""
        return TimedFrameSequence(frames, self.frame_delay_seconds)

    async def present(self, frames: FrameSequence, output_dir: Path) -> Presentation:
        """
        Materialize an output sequence.

        Raises:
            EmptySequenceError: Nothing to present
        """
        frames = tuple(frames)
        mode = select_mode(frames)
        stamp = timestamp_ms()

        if mode is PresentationMode.IMAGE:
            path = save_image(frames[0], output_dir, stamp)
        else:
            logger.info("Encoding video sequence...")
            path = await self.assembler.assemble_async(
                self.timeline(frames),
                Path(output_dir) / video_filename(self.video_extension, stamp),
            )

        return Presentation(mode=mode, path=path, frame_count=len(frames))

    async def preview(
        self,
        frames: FrameSequence,
        paint: Callable[[Frame], None],
        loops: Optional[int] = None,
    ) -> int:
        """
        Animate captured frames at the preview rate until cancelled.

        Returns:
            Number of frames painted
        """
        return await play(TimedFrameSequence.at_fps(frames, self.preview_fps), paint, loops)
