"""
Export Module
=============

Export paths for the session's output sequence. Every export works on the
sequence as it stands when invoked and never re-runs the pipeline.

    - save_image: Download of a single image
    - export_pdf: One frame per A4 page
    - GitHubUploader: Remote upload of the first frame
    - PreferenceStore / ExportPreferences: Persisted upload destination
"""

from photomaton.export.download import (
    image_filename,
    save_image,
    video_filename,
)
from photomaton.export.github import GitHubUploader
from photomaton.export.pdf import export_pdf, render_page
from photomaton.export.preferences import ExportPreferences, PreferenceStore


__all__ = [
    "ExportPreferences",
    "GitHubUploader",
    "PreferenceStore",
    "export_pdf",
    "image_filename",
    "render_page",
    "save_image",
    "video_filename",
]
