"""
Session State
=============

The single long-lived mutable holder of the captured and stylized sequences.

A Session is owned by one caller and passed explicitly to the FrameSource
and PipelineOrchestrator; nothing else mutates it.

Single-flight:
    - begin_run() sets busy and returns a run token (the current generation)
    - Only the run holding the current token may write output or clear busy
    - reset() (new media selected) bumps the generation: any in-flight run
      becomes stale, its late results are ignored and it can no longer
      touch busy. There is no way to cancel the remote call itself.

Example:
    session = Session()
    token = session.begin_run()
    try:
        session.append_output(token, frame)
    finally:
        session.end_run(token)
"""

import logging
from typing import List

from photomaton.errors import PipelineBusyError
from photomaton.models.frame import Frame, FrameSequence, MediaKind


logger = logging.getLogger(__name__)


class Session:
    """
    Current captured/stylized sequences plus the busy flag.

    Attributes:
        media_kind: Origin of the captured sequence
        busy: True while a pipeline run is in flight
    """

    def __init__(self) -> None:
        self.media_kind: MediaKind = MediaKind.NONE
        self.busy: bool = False

        self._captured: FrameSequence = ()
        self._stylized: List[Frame] = []
        self._generation: int = 0

    @property
    def captured(self) -> FrameSequence:
        """Captured input sequence."""
        return self._captured

    @property
    def stylized(self) -> FrameSequence:
        """Snapshot of the output sequence as it stands now."""
        return tuple(self._stylized)

    @property
    def generation(self) -> int:
        """Incremented every time new media is selected."""
        return self._generation

    def reset(
        self,
        captured: FrameSequence = (),
        media_kind: MediaKind = MediaKind.NONE,
    ) -> None:
        """
        Replace the captured media and discard all output.

        Any run still in flight becomes stale.
        """
        if self.busy:
            logger.info(
                f"Session reset while busy; run generation {self._generation} "
                f"will be ignored"
            )
        self._generation += 1
        self._captured = tuple(captured)
        self._stylized = []
        self.media_kind = media_kind
        self.busy = False

    # -------------------------------------------------------------------------
    # Run ownership
    # -------------------------------------------------------------------------

    def begin_run(self) -> int:
        """
        Claim the session for one run.

        Returns:
            Run token to pass to the output mutators

        Raises:
            PipelineBusyError: If a run is already in flight
        """
        if self.busy:
            raise PipelineBusyError("A pipeline run is already in progress")
        self.busy = True
        return self._generation

    def owns(self, token: int) -> bool:
        """Whether the run holding this token is still current."""
        return token == self._generation

    def end_run(self, token: int) -> None:
        """Release busy if the run is still current."""
        if self.owns(token):
            self.busy = False

    # -------------------------------------------------------------------------
    # Output mutators (ignored for stale runs)
    # -------------------------------------------------------------------------

    def clear_output(self, token: int) -> bool:
        if not self.owns(token):
            return False
        self._stylized = []
        return True

    def append_output(self, token: int, frame: Frame) -> bool:
        if not self.owns(token):
            return False
        self._stylized.append(frame)
        return True

    def replace_output(self, token: int, frames: FrameSequence) -> bool:
        if not self.owns(token):
            return False
        self._stylized = list(frames)
        return True

    def __repr__(self) -> str:
        return (
            f"Session(media_kind={self.media_kind.value}, "
            f"captured={len(self._captured)}, "
            f"stylized={len(self._stylized)}, busy={self.busy})"
        )
