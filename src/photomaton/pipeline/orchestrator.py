"""
Pipeline Orchestrator
=====================

Drives a session's captured FrameSequence through the stylize worker and
assembles the output sequence.

Bulk stylize (first transformation of a batch):
    1. Reject if the session is busy or has no captured frames
    2. Claim the session, clear prior output
    3. Stylize frames strictly in input order, appending each result at the
       same position as its input
    4. NoOutput: the original input frame is substituted, so a successful
       run always yields output[i] <-> input[i]
    5. A stylize error aborts the remaining frames; output produced so far
       stays visible on the session and the error is re-raised, unless the
       session was reset meanwhile (the run is then reported stale)
    6. busy is released on every path

Single-frame edit (after a prior stylize):
    Applies free-form text to the first output frame (or the first captured
    frame when nothing has been stylized yet) and replaces the whole output
    with the single edited frame. A multi-frame batch collapses to one
    result once an edit is applied.

Stale runs:
    If the session is reset while a run is in flight, late results and late
    errors are ignored and the run stops at the next frame boundary.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from photomaton.config import Settings, StylizeConfig
from photomaton.errors import (
    EmptyInstructionError,
    EmptySequenceError,
    PipelineBusyError,
    StylizeError,
)
from photomaton.models.frame import Frame, FrameSequence, StyleResult
from photomaton.pipeline.session import Session
from photomaton.pipeline.worker import StylizeWorker
from photomaton.stylize.client import StylizeClient, build_style_prompt


logger = logging.getLogger(__name__)


DEFAULT_STYLE_PROMPT = StylizeConfig().style_prompt_template

# (frames done, total frames)
ProgressCallback = Callable[[int, int], None]


@dataclass
class RunReport:
    """
    Summary of one pipeline run.

    Attributes:
        total: Frames submitted
        produced: Frames written to the output sequence
        substituted: Input indices kept as-is because the backend returned
            no image
        advisories: Advisory texts returned by the backend
        stale: True if the session was reset while the run was in flight
    """

    total: int
    produced: int = 0
    substituted: List[int] = field(default_factory=list)
    advisories: List[str] = field(default_factory=list)
    stale: bool = False


class PipelineOrchestrator:
    """
    Sequential stylize pipeline over a Session.

    Attributes:
        worker: Single worker issuing the remote calls
        style_prompt_template: Prompt built from a named style
    """

    def __init__(
        self,
        client: StylizeClient,
        style_prompt_template: str = DEFAULT_STYLE_PROMPT,
        worker: Optional[StylizeWorker] = None,
    ) -> None:
        self.worker = worker or StylizeWorker(client)
        self.style_prompt_template = style_prompt_template

    @classmethod
    def from_settings(cls, client: StylizeClient, settings: Settings) -> "PipelineOrchestrator":
        return cls(
            client=client,
            style_prompt_template=settings.stylize.style_prompt_template,
        )

    # -------------------------------------------------------------------------
    # Bulk stylize
    # -------------------------------------------------------------------------

    def start_bulk(
        self,
        session: Session,
        style: str,
        progress: Optional[ProgressCallback] = None,
    ) -> "asyncio.Task[RunReport]":
        """
        Validate and start a bulk run, returning its task.

        Must be called from a running event loop. Rejections are raised
        synchronously and leave the session untouched.

        Raises:
            PipelineBusyError: A run is already in flight
            EmptySequenceError: Nothing captured
        """
        asyncio.get_running_loop()

        if session.busy:
            raise PipelineBusyError("A pipeline run is already in progress")
        frames = session.captured
        if not frames:
            raise EmptySequenceError("No captured frames to stylize")

        prompt = build_style_prompt(style, self.style_prompt_template)
        token = session.begin_run()
        session.clear_output(token)

        task = asyncio.create_task(
            self._run_bulk(session, token, frames, prompt, progress),
            name="bulk_stylize",
        )
        task.add_done_callback(lambda _: session.end_run(token))
        return task

    async def bulk_stylize(
        self,
        session: Session,
        style: str,
        progress: Optional[ProgressCallback] = None,
    ) -> RunReport:
        """
        Stylize every captured frame with a named style.

        Returns:
            RunReport for the completed run

        Raises:
            PipelineBusyError, EmptySequenceError: Rejected before starting
            AuthError, RemoteError: Run aborted; partial output is kept
        """
        return await self.start_bulk(session, style, progress)

    async def _run_bulk(
        self,
        session: Session,
        token: int,
        frames: FrameSequence,
        prompt: str,
        progress: Optional[ProgressCallback],
    ) -> RunReport:
        report = RunReport(total=len(frames))
        logger.info(f"Bulk stylize started: {len(frames)} frame(s)")

        def on_result(index: int, source: Frame, result: StyleResult) -> bool:
            if not session.owns(token):
                report.stale = True
                return False

            if result.advisory_text:
                report.advisories.append(result.advisory_text)

            if result.is_no_output:
                report.substituted.append(index)
                session.append_output(token, source)
                logger.warning(f"Frame {index}: no image returned, keeping original")
            else:
                session.append_output(token, result.output_frame)
            report.produced += 1

            if len(frames) > 1:
                logger.info(f"Styling frame {index + 1}/{len(frames)} done")
            if progress is not None:
                progress(index + 1, len(frames))
            return True

        try:
            await self.worker.submit(frames, prompt, on_result)
        except StylizeError as e:
            if session.owns(token):
                logger.error(
                    f"Bulk stylize aborted after {report.produced}/{report.total} "
                    f"frame(s): {e}"
                )
                raise
            logger.info(f"Bulk stylize failed for a reset session; error ignored: {e}")
        finally:
            session.end_run(token)

        if not session.owns(token):
            report.stale = True
            logger.info("Bulk stylize finished for a reset session; results ignored")
        else:
            logger.info(
                f"Bulk stylize complete: {report.produced}/{report.total} frame(s), "
                f"{len(report.substituted)} substituted"
            )
        return report

    # -------------------------------------------------------------------------
    # Single-frame edit
    # -------------------------------------------------------------------------

    async def edit(self, session: Session, instruction: str) -> RunReport:
        """
        Apply free-form edit text to the first output frame.

        On success the output sequence becomes exactly that edited frame.
        On NoOutput the session is left unchanged.

        Raises:
            EmptyInstructionError: Blank instruction
            PipelineBusyError: A run is already in flight
            EmptySequenceError: Nothing to edit
            AuthError, RemoteError: Edit failed; previous output is kept
        """
        text = instruction.strip()
        if not text:
            raise EmptyInstructionError("Edit instruction is empty")
        if session.busy:
            raise PipelineBusyError("A pipeline run is already in progress")

        stylized = session.stylized
        source = stylized[0] if stylized else (session.captured[0] if session.captured else None)
        if source is None:
            raise EmptySequenceError("Nothing to edit")

        token = session.begin_run()
        report = RunReport(total=1)

        def on_result(index: int, frame: Frame, result: StyleResult) -> bool:
            if not session.owns(token):
                report.stale = True
                return False
            if result.advisory_text:
                report.advisories.append(result.advisory_text)
            if result.is_no_output:
                logger.warning("Edit returned no image; keeping previous output")
                return True
            session.replace_output(token, (result.output_frame,))
            report.produced = 1
            return True

        try:
            await self.worker.submit((source,), text, on_result)
        except StylizeError as e:
            if session.owns(token):
                logger.error(f"Edit failed: {e}")
                raise
            logger.info(f"Edit failed for a reset session; error ignored: {e}")
        finally:
            session.end_run(token)

        if not session.owns(token):
            report.stale = True
        return report
