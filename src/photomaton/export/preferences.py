"""
Export Preferences
==================

The two user-supplied export settings (GitHub repository and access token),
persisted as YAML in the user's local directory across sessions. This is the
only durable state the booth keeps.
"""

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from photomaton.errors import ConfigError


logger = logging.getLogger(__name__)


class ExportPreferences(BaseModel):
    """
    Remote upload destination.

    Attributes:
        repo: Repository identifier, "owner/name"
        token: Access token used as the bearer credential
    """

    repo: str = Field(default="", description="GitHub repository (owner/name)")
    token: str = Field(default="", description="GitHub access token")

    @property
    def is_configured(self) -> bool:
        return bool(self.repo.strip() and self.token.strip())

    def __repr__(self) -> str:
        return f"ExportPreferences(repo={self.repo!r}, token={'***' if self.token else ''!r})"


class PreferenceStore:
    """
    YAML-backed persistence for ExportPreferences.

    Attributes:
        path: Preferences file location
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path).expanduser()

    def load(self) -> ExportPreferences:
        """Load preferences; a missing file yields empty preferences."""
        if not self.path.exists():
            return ExportPreferences()

        with open(self.path, "r") as f:
            data = yaml.safe_load(f) or {}

        try:
            return ExportPreferences.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid preferences file {self.path}: {e}") from e

    def save(self, preferences: ExportPreferences) -> None:
        """Persist preferences, readable by the current user only."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        cleaned = ExportPreferences(
            repo=preferences.repo.strip(),
            token=preferences.token.strip(),
        )
        with open(self.path, "w") as f:
            yaml.safe_dump(cleaned.model_dump(), f, default_flow_style=False)
        os.chmod(self.path, 0o600)
        logger.info(f"Saved export preferences to {self.path}")
