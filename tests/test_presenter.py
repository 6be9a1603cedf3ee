"""
Presenter Tests
===============

Mode selection, timelines, video assembly and the image/video presenter.
"""

import pytest

from photomaton.errors import DeviceError, EmptySequenceError
from photomaton.models.frame import MediaKind
from photomaton.pipeline import PipelineOrchestrator, Session
from photomaton.source import FrameSource
from photomaton.present import (
    PresentationMode,
    ResultPresenter,
    TimedFrameSequence,
    VideoAssembler,
    play,
    select_mode,
)
from photomaton.stylize import MockStylizeClient


class TestTimeline:
    """Tests for mode selection and timed playback."""

    def test_select_mode(self, make_frames):
        assert select_mode(make_frames(1)) is PresentationMode.IMAGE
        assert select_mode(make_frames(3)) is PresentationMode.VIDEO

    def test_select_mode_empty(self):
        with pytest.raises(EmptySequenceError):
            select_mode(())

    def test_timeline_is_restartable(self, make_frames):
        frames = make_frames(3)
        timeline = TimedFrameSequence(frames, 0.1)

        first = [item.frame for item in timeline]
        second = [item.frame for item in timeline]

        assert first == second == list(frames)
        assert timeline.total_duration == pytest.approx(0.3)

    def test_at_fps(self, make_frames):
        timeline = TimedFrameSequence.at_fps(make_frames(2), 5)
        assert all(item.hold_seconds == pytest.approx(0.2) for item in timeline)

    def test_negative_hold_rejected(self, make_frames):
        with pytest.raises(ValueError):
            TimedFrameSequence(make_frames(1), -1)

    @pytest.mark.asyncio
    async def test_play_paints_in_order(self, make_frames):
        frames = make_frames(3)
        painted = []

        count = await play(TimedFrameSequence(frames, 0), painted.append, loops=2)

        assert count == 6
        assert painted == list(frames) * 2

    @pytest.mark.asyncio
    async def test_play_empty_timeline(self):
        assert await play(TimedFrameSequence((), 0), lambda frame: None, loops=None) == 0


class TestVideoAssembler:
    """Tests for timeline-to-video encoding."""

    def test_frames_written_in_order_with_hold(self, tmp_path, make_frames, fake_writer_cls):
        frames = make_frames(3)
        assembler = VideoAssembler(fps=10, writer_factory=fake_writer_cls)

        path = assembler.assemble(TimedFrameSequence(frames, 0.2), tmp_path / "clip.mp4")

        writer = fake_writer_cls.instances[0]
        assert path == tmp_path / "clip.mp4"
        assert writer.fps == 10
        assert writer.size == (64, 48)
        assert len(writer.frames) == 6
        assert writer.released

    def test_short_hold_writes_one_tick(self):
        assert VideoAssembler(fps=10).ticks_for(0.01) == 1
        assert VideoAssembler(fps=10).ticks_for(0.1) == 1
        assert VideoAssembler(fps=30).ticks_for(0.1) == 3

    def test_empty_timeline(self, tmp_path):
        with pytest.raises(EmptySequenceError):
            VideoAssembler().assemble(TimedFrameSequence((), 0.1), tmp_path / "x.mp4")

    def test_unopened_encoder_raises_and_releases(self, tmp_path, make_frames, fake_writer_cls):
        def factory(*args):
            return fake_writer_cls(*args, opened=False)

        with pytest.raises(DeviceError):
            VideoAssembler(writer_factory=factory).assemble(
                TimedFrameSequence(make_frames(2), 0.1), tmp_path / "x.mp4"
            )
        assert fake_writer_cls.instances[0].released

    def test_invalid_settings(self):
        with pytest.raises(ValueError):
            VideoAssembler(fps=0)
        with pytest.raises(ValueError):
            VideoAssembler(codec="h264x")


class TestResultPresenter:
    """Tests for image/video presentation."""

    @pytest.mark.asyncio
    async def test_single_frame_is_saved_as_image(self, tmp_path, sample_frame):
        presenter = ResultPresenter(VideoAssembler())

        presentation = await presenter.present((sample_frame,), tmp_path)

        assert presentation.mode is PresentationMode.IMAGE
        assert presentation.path.name.startswith("art-")
        assert presentation.path.suffix == ".jpg"
        assert presentation.path.read_bytes() == sample_frame.pixel_data
        assert presentation.export_actions_available

    @pytest.mark.asyncio
    async def test_multiple_frames_become_video(self, tmp_path, make_frames, fake_writer_cls):
        presenter = ResultPresenter(
            VideoAssembler(fps=10, writer_factory=fake_writer_cls),
            frame_delay_seconds=0.1,
        )

        presentation = await presenter.present(make_frames(4), tmp_path)

        assert presentation.mode is PresentationMode.VIDEO
        assert presentation.frame_count == 4
        assert presentation.path.name.startswith("art-video-")
        assert len(fake_writer_cls.instances[0].frames) == 4

    @pytest.mark.asyncio
    async def test_empty_output_is_rejected(self, tmp_path):
        with pytest.raises(EmptySequenceError):
            await ResultPresenter(VideoAssembler()).present((), tmp_path)

    @pytest.mark.asyncio
    async def test_uploaded_photo_watercolor_scenario(self, tmp_path, sample_frame):
        session = Session()
        session.reset((sample_frame,), MediaKind.IMAGE)

        await PipelineOrchestrator(MockStylizeClient()).bulk_stylize(session, "Watercolor Painting")
        presentation = await ResultPresenter(VideoAssembler()).present(session.stylized, tmp_path)

        assert len(session.stylized) == 1
        assert presentation.mode is PresentationMode.IMAGE
        assert presentation.path.suffix == ".png"
        assert presentation.export_actions_available

    @pytest.mark.asyncio
    async def test_sampled_video_pop_art_scenario(
        self, tmp_path, fake_decoder_cls, fake_writer_cls
    ):
        session = Session()
        decoder = fake_decoder_cls(duration=9.0)
        captured = FrameSource(session).sample_video(decoder, 3)

        report = await PipelineOrchestrator(MockStylizeClient()).bulk_stylize(session, "Pop Art")
        presenter = ResultPresenter(VideoAssembler(fps=10, writer_factory=fake_writer_cls))
        presentation = await presenter.present(session.stylized, tmp_path)

        assert decoder.seeks == [0.0, 3.0, 6.0]
        assert session.media_kind is MediaKind.VIDEO
        assert report.produced == 3
        assert len(session.stylized) == len(captured) == 3
        assert select_mode(session.stylized) is PresentationMode.VIDEO
        assert presentation.mode is PresentationMode.VIDEO
        assert presentation.frame_count == 3
        assert fake_writer_cls.instances[0].size == (32, 24)

    @pytest.mark.asyncio
    async def test_preview_animates_captured_frames(self, make_frames):
        frames = make_frames(3)
        painted = []
        presenter = ResultPresenter(VideoAssembler(), preview_fps=1000)

        count = await presenter.preview(frames, painted.append, loops=1)

        assert count == 3
        assert painted == list(frames)
