"""
Command Line Tests
==================

End-to-end booth runs with the offline backend.
"""

import pytest

from photomaton import cli
from photomaton.config import settings
from photomaton.export import PreferenceStore


@pytest.fixture
def photo(tmp_path, jpeg_bytes):
    path = tmp_path / "portrait.jpg"
    path.write_bytes(jpeg_bytes)
    return path


class TestParser:
    """Tests for argument parsing."""

    def test_defaults(self, photo):
        args = cli.build_parser().parse_args(["stylize", str(photo)])

        assert args.style == settings.stylize.default_style
        assert args.frames == settings.capture.default_sample_count
        assert args.edit == []
        assert args.backend is None

    def test_repeatable_edits(self, photo):
        args = cli.build_parser().parse_args(
            ["stylize", str(photo), "--edit", "add a hat", "--edit", "make it snow"]
        )
        assert args.edit == ["add a hat", "make it snow"]

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])


class TestRun:
    """Tests for full runs."""

    def test_stylize_photo_with_pdf(self, tmp_path, photo, capsys):
        out = tmp_path / "out"

        code = cli.main(["stylize", str(photo), "--backend", "mock", "--out", str(out), "--pdf"])

        assert code == 0
        printed = capsys.readouterr().out
        assert "image:" in printed
        assert "pdf:" in printed
        assert len(list(out.glob("art-*.png"))) == 1
        assert len(list(out.glob("*.pdf"))) == 1

    def test_edit_after_stylize(self, tmp_path, photo):
        out = tmp_path / "out"

        code = cli.main([
            "stylize", str(photo),
            "--backend", "mock",
            "--edit", "add a red hat",
            "--out", str(out),
        ])

        assert code == 0
        assert len(list(out.glob("art-*"))) == 1

    def test_unsupported_file_fails(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")

        assert cli.main(["stylize", str(path), "--backend", "mock", "--out", str(tmp_path)]) == 1

    def test_missing_file_fails(self, tmp_path):
        code = cli.main(["stylize", str(tmp_path / "gone.jpg"), "--backend", "mock"])
        assert code == 1

    def test_upload_without_preferences_fails(self, tmp_path, photo, monkeypatch):
        monkeypatch.setattr(settings.export, "preferences_path", str(tmp_path / "prefs.yaml"))

        code = cli.main([
            "stylize", str(photo),
            "--backend", "mock",
            "--upload",
            "--out", str(tmp_path / "out"),
        ])

        assert code == 1

    def test_configure_persists_preferences(self, tmp_path, monkeypatch, capsys):
        path = tmp_path / "prefs.yaml"
        monkeypatch.setattr(settings.export, "preferences_path", str(path))

        assert cli.main(["configure", "--repo", "me/art", "--token", "ghp_x"]) == 0

        preferences = PreferenceStore(path).load()
        assert preferences.repo == "me/art"
        assert preferences.is_configured
