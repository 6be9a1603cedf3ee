"""
Stylize Worker
==============

Single worker that drains a finite, ordered queue of frames through a
StylizeClient, one remote call at a time.

Design Rules:
    - Exactly one remote call in flight per worker, across all batches
    - Frames are processed in queue (input) order, so results are delivered
      in input order without any merge step
    - Each batch is exposed to the caller as an asyncio.Task
    - A stylize error ends the batch and propagates through the task
    - The result callback may stop the batch early by returning False
"""

import asyncio
import logging
from typing import Callable, Optional, Tuple

from photomaton.models.frame import Frame, FrameSequence, StyleRequest, StyleResult
from photomaton.stylize.client import StylizeClient


logger = logging.getLogger(__name__)


# (index, source frame, result) -> False to stop the batch
ResultCallback = Callable[[int, Frame, StyleResult], Optional[bool]]


class StylizeWorker:
    """
    Sequential stylize executor.

    Attributes:
        client: Stylize backend
        batches_submitted: Number of batches ever submitted
        frames_processed: Number of frames stylized successfully
    """

    def __init__(self, client: StylizeClient) -> None:
        self.client = client
        self._lock = asyncio.Lock()
        self._batches_submitted: int = 0
        self._frames_processed: int = 0
        self._batches_stopped: int = 0

    @property
    def batches_submitted(self) -> int:
        return self._batches_submitted

    @property
    def frames_processed(self) -> int:
        return self._frames_processed

    def submit(
        self,
        frames: FrameSequence,
        instruction: str,
        on_result: ResultCallback,
    ) -> "asyncio.Task[int]":
        """
        Queue a batch and start draining it.

        Args:
            frames: Frames in input order
            instruction: Instruction applied to every frame
            on_result: Called after each frame, in input order

        Returns:
            Task resolving to the number of frames processed
        """
        queue: "asyncio.Queue[Tuple[int, StyleRequest]]" = asyncio.Queue()
        for index, frame in enumerate(frames):
            queue.put_nowait((index, StyleRequest(frame, instruction)))

        self._batches_submitted += 1
        return asyncio.create_task(
            self._drain(queue, on_result),
            name=f"stylize_batch_{self._batches_submitted}",
        )

    async def _drain(
        self,
        queue: "asyncio.Queue[Tuple[int, StyleRequest]]",
        on_result: ResultCallback,
    ) -> int:
        processed = 0
        total = queue.qsize()

        async with self._lock:
            while True:
                try:
                    index, request = queue.get_nowait()
                except asyncio.QueueEmpty:
                    break

                result = await self.client.stylize(request.frame, request.instruction)
                processed += 1
                self._frames_processed += 1

                if on_result(index, request.frame, result) is False:
                    self._batches_stopped += 1
                    logger.info(
                        f"Batch stopped after {processed}/{total} frames"
                    )
                    break

        return processed

    def metrics(self) -> dict:
        """Worker metrics for observability."""
        return {
            "batches_submitted": self._batches_submitted,
            "batches_stopped": self._batches_stopped,
            "frames_processed": self._frames_processed,
        }
