"""
PDF Export
==========

Multi-page document export: one output frame per A4 portrait page, fixed
margins, the image scaled to the available width and captioned with its
page number.
"""

import io
import logging
from pathlib import Path
from typing import List, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont, UnidentifiedImageError

from photomaton.errors import EmptySequenceError, MediaDecodeError
from photomaton.export.download import timestamp_ms
from photomaton.models.frame import Frame, FrameSequence


logger = logging.getLogger(__name__)


A4_MM: Tuple[float, float] = (210.0, 297.0)
CAPTION_GAP_MM = 10.0


def _mm_to_px(mm: float, dpi: int) -> int:
    return int(round(mm / 25.4 * dpi))


def _load_rgb(frame: Frame, page: int) -> Image.Image:
    try:
        with Image.open(io.BytesIO(frame.pixel_data)) as image:
            return image.convert("RGB")
    except (UnidentifiedImageError, OSError) as e:
        raise MediaDecodeError(f"Page {page}: cannot read {frame.mime_type} frame: {e}") from e


def render_page(
    frame: Frame,
    page_number: int,
    margin_mm: float = 10.0,
    dpi: int = 150,
    caption: str = "Photomaton - Page {page}",
) -> Image.Image:
    """
    Lay out one frame on a white A4 page.

    The image fills the width between the margins and shrinks further if it
    would run past the caption line at the bottom of the page.
    """
    page_w = _mm_to_px(A4_MM[0], dpi)
    page_h = _mm_to_px(A4_MM[1], dpi)
    margin = _mm_to_px(margin_mm, dpi)
    caption_gap = _mm_to_px(CAPTION_GAP_MM, dpi)

    image = _load_rgb(frame, page_number)

    available_w = page_w - 2 * margin
    available_h = page_h - 2 * margin - caption_gap
    scale = min(available_w / image.width, available_h / image.height)
    draw_size = (max(1, int(image.width * scale)), max(1, int(image.height * scale)))

    page = Image.new("RGB", (page_w, page_h), "white")
    page.paste(image.resize(draw_size, Image.Resampling.LANCZOS), (margin, margin))

    draw = ImageDraw.Draw(page)
    draw.text(
        (margin, margin + draw_size[1] + caption_gap // 2),
        caption.format(page=page_number),
        fill="black",
        font=ImageFont.load_default(),
    )
    return page


def export_pdf(
    frames: FrameSequence,
    output_dir: Path,
    margin_mm: float = 10.0,
    dpi: int = 150,
    filename: Optional[str] = None,
) -> Path:
    """
    Write output frames to a paginated PDF, in sequence order.

    Args:
        frames: Snapshot of the output sequence
        output_dir: Destination directory
        margin_mm: Page margin on every side
        dpi: Raster resolution of each page
        filename: Override for the default photomaton-export-<ms>.pdf

    Returns:
        Path of the written PDF

    Raises:
        EmptySequenceError: No frames
        MediaDecodeError: A frame is not a readable image
    """
    if not frames:
        raise EmptySequenceError("No output frames to export")

    pages: List[Image.Image] = [
        render_page(frame, index + 1, margin_mm=margin_mm, dpi=dpi)
        for index, frame in enumerate(frames)
    ]

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / (filename or f"photomaton-export-{timestamp_ms()}.pdf")

    pages[0].save(
        path,
        "PDF",
        resolution=float(dpi),
        save_all=True,
        append_images=pages[1:],
    )
    logger.info(f"Exported {len(pages)} page(s) to {path}")
    return path
