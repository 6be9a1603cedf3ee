"""
Photomaton Command Line
=======================

Runs the booth end to end: load media, stylize, apply edits, present and
export.

Usage:
    photomaton stylize portrait.jpg --style "Watercolor Painting"
    photomaton stylize clip.mp4 --frames 10 --style "Pop Art" --pdf
    photomaton stylize portrait.jpg --edit "add a red hat" --upload
    photomaton camera --style "Oil Painting"
    photomaton configure --repo owner/name --token ghp_...
    photomaton serve
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Callable, List, Optional

from photomaton.config import Settings, settings
from photomaton.errors import PhotomatonError, StylizeError
from photomaton.export import ExportPreferences, GitHubUploader, PreferenceStore, export_pdf
from photomaton.models.frame import FrameSequence
from photomaton.pipeline import PipelineOrchestrator, Session
from photomaton.present import ResultPresenter
from photomaton.source import FrameSource
from photomaton.stylize import create_stylize_client


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="photomaton",
        description="Restyle photos and video frames with a generative-image API",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    def add_run_options(sub: argparse.ArgumentParser) -> None:
        sub.add_argument(
            "--style",
            default=settings.stylize.default_style,
            help=f"Named style (default: {settings.stylize.default_style})",
        )
        sub.add_argument(
            "--edit",
            action="append",
            default=[],
            metavar="TEXT",
            help="Edit applied after stylizing (repeatable, in order)",
        )
        sub.add_argument("--out", type=Path, default=Path(settings.export.output_dir), help="Output directory")
        sub.add_argument("--pdf", action="store_true", help="Also export a PDF")
        sub.add_argument("--upload", action="store_true", help="Upload the first frame to GitHub")
        sub.add_argument(
            "--backend",
            choices=["gemini", "proxy", "mock"],
            default=None,
            help="Override the configured stylize backend",
        )

    stylize = commands.add_parser("stylize", help="Stylize an image or video file")
    stylize.add_argument("path", type=Path, help="Image or video file")
    stylize.add_argument(
        "--frames",
        type=int,
        default=settings.capture.default_sample_count,
        help="Frames sampled from a video",
    )
    add_run_options(stylize)

    camera = commands.add_parser("camera", help="Take a photo with the camera and stylize it")
    add_run_options(camera)

    configure = commands.add_parser("configure", help="Save GitHub upload settings")
    configure.add_argument("--repo", required=True, help="Repository, owner/name")
    configure.add_argument("--token", required=True, help="GitHub access token")

    commands.add_parser("serve", help="Run the stylize proxy server")

    return parser


def _effective_settings(args: argparse.Namespace) -> Settings:
    cfg = settings.model_copy(deep=True)
    if getattr(args, "backend", None):
        cfg.stylize.backend = args.backend
    return cfg


async def run_booth(
    args: argparse.Namespace,
    cfg: Settings,
    load: Callable[[FrameSource], FrameSequence],
) -> int:
    """
    Load, stylize, edit, present and export.

    Returns:
        Process exit code
    """
    session = Session()
    source = FrameSource.from_settings(session, cfg)
    frames = load(source)
    logger.info(f"Loaded {len(frames)} frame(s) ({session.media_kind.value})")

    client = create_stylize_client(cfg)
    orchestrator = PipelineOrchestrator.from_settings(client, cfg)
    presenter = ResultPresenter.from_settings(cfg)

    exit_code = 0
    try:
        report = await orchestrator.bulk_stylize(session, args.style)
        for text in report.advisories:
            logger.info(f"Model says: {text}")
        for instruction in args.edit:
            await orchestrator.edit(session, instruction)
    except StylizeError as e:
        logger.error(f"Stylize failed: {e}")
        exit_code = 1
        if not session.stylized:
            return exit_code
        logger.warning(f"Keeping {len(session.stylized)} partial frame(s)")

    output = session.stylized
    presentation = await presenter.present(output, args.out)
    print(f"{presentation.mode.value}: {presentation.path}")

    if args.pdf:
        path = export_pdf(
            output,
            args.out,
            margin_mm=cfg.export.pdf_margin_mm,
            dpi=cfg.export.pdf_dpi,
        )
        print(f"pdf: {path}")

    if args.upload:
        preferences = PreferenceStore(Path(cfg.export.preferences_path)).load()
        uploader = GitHubUploader(
            api_url=cfg.export.github_api_url,
            path_prefix=cfg.export.github_path_prefix,
        )
        repo_path = await asyncio.to_thread(uploader.upload, output[0], preferences)
        print(f"github: {preferences.repo}/{repo_path}")

    return exit_code


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "serve":
        from photomaton.main import run

        run()
        return 0

    if args.command == "configure":
        store = PreferenceStore(Path(settings.export.preferences_path))
        try:
            store.save(ExportPreferences(repo=args.repo, token=args.token))
        except OSError as e:
            logger.error(f"Could not save preferences: {e}")
            return 1
        print(f"Saved GitHub settings to {store.path}")
        return 0

    cfg = _effective_settings(args)
    if args.command == "stylize":
        load = lambda source: source.load_file(args.path, args.frames)
    else:
        load = lambda source: source.capture_camera()

    try:
        return asyncio.run(run_booth(args, cfg, load))
    except (PhotomatonError, OSError) as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
