"""
GitHub Upload
=============

Pushes one output frame into a GitHub repository through the contents API.

    PUT {api_url}/repos/{repo}/contents/{prefix}/{filename}
    Authorization: token <token>
    {"message": "Add stylized artwork: <filename>", "content": "<base64>"}

Design Rules:
    - Missing repository or token raises ConfigError before any request
    - 401 / 403 -> AuthError, any other failure -> RemoteError
    - One attempt, no retry
"""

import logging
from typing import Optional

import requests

from photomaton.errors import AuthError, ConfigError, RemoteError
from photomaton.export.download import image_filename
from photomaton.export.preferences import ExportPreferences
from photomaton.models.frame import Frame


logger = logging.getLogger(__name__)


class GitHubUploader:
    """
    Contents-API uploader.

    Attributes:
        api_url: GitHub API root
        path_prefix: Directory inside the repository
        timeout_seconds: Request timeout
    """

    def __init__(
        self,
        api_url: str = "https://api.github.com",
        path_prefix: str = "output",
        timeout_seconds: float = 30.0,
        http: Optional[requests.Session] = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.path_prefix = path_prefix.strip("/")
        self.timeout_seconds = timeout_seconds
        self._http = http or requests.Session()

    def upload(
        self,
        frame: Frame,
        preferences: ExportPreferences,
        filename: Optional[str] = None,
    ) -> str:
        """
        Upload a frame.

        Args:
            frame: Frame to upload (the first output frame)
            preferences: Repository and token
            filename: Override for art-<epoch ms>.<ext>

        Returns:
            Repository path of the created file

        Raises:
            ConfigError: Repository or token not configured
            AuthError: Token rejected
            RemoteError: Upload failed
        """
        if not preferences.is_configured:
            raise ConfigError("Configure the GitHub repository and token first")

        filename = filename or image_filename(frame)
        repo_path = f"{self.path_prefix}/{filename}" if self.path_prefix else filename
        url = f"{self.api_url}/repos/{preferences.repo.strip()}/contents/{repo_path}"

        try:
            response = self._http.put(
                url,
                json={
                    "message": f"Add stylized artwork: {filename}",
                    "content": frame.to_base64(),
                },
                headers={
                    "Authorization": f"token {preferences.token.strip()}",
                    "Accept": "application/vnd.github+json",
                },
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as e:
            raise RemoteError(f"GitHub upload failed: {e}") from e

        if response.status_code in (401, 403):
            raise AuthError(f"GitHub rejected the token: {self._message(response)}")
        if not 200 <= response.status_code < 300:
            raise RemoteError(
                f"GitHub upload failed: {self._message(response)}",
                status_code=response.status_code,
            )

        logger.info(f"Uploaded {repo_path} to {preferences.repo}")
        return repo_path

    @staticmethod
    def _message(response: requests.Response) -> str:
        try:
            return response.json().get("message") or f"HTTP {response.status_code}"
        except (ValueError, AttributeError):
            return f"HTTP {response.status_code}"
