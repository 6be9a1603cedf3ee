"""
Stylize Clients
===============

One remote call per StyleRequest, mapped onto StyleResult or the error
taxonomy.

Two deployment shapes share the same contract:
    - GeminiStylizeClient: direct call with a caller-held API key
    - ProxyStylizeClient: call through the trusted proxy, which injects the
      credential server-side (the client never holds one)

Response Handling:
    The first inline-image part is the output frame. When there is none the
    result is NoOutput and any text parts are returned as advisory text.

Failure Mapping:
    - missing credential      -> AuthError (before any request)
    - HTTP 401 / 403          -> AuthError
    - other non-2xx, timeout,
      connection failure,
      malformed body          -> RemoteError

Design Rules:
    - Exactly one attempt per call, no automatic retry
    - Blocking HTTP runs in a worker thread so callers only suspend
    - Log NoOutput results
"""

import asyncio
import binascii
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Protocol

import requests

from photomaton.errors import AuthError, RemoteError
from photomaton.models.frame import Frame, StyleResult


logger = logging.getLogger(__name__)


class StylizeClient(Protocol):
    """
    Protocol for stylize backends.

    All implementations must provide an async `stylize` method that takes a
    Frame and an instruction and returns a StyleResult.
    """

    async def stylize(self, frame: Frame, instruction: str) -> StyleResult:
        """
        Transform one frame.

        Args:
            frame: Source frame
            instruction: Style prompt or free-form edit text

        Returns:
            StyleResult with an output frame, or NoOutput

        Raises:
            AuthError: Credential missing or rejected
            RemoteError: Call failed
        """
        ...


def build_style_prompt(style: str, template: str) -> str:
    """Expand a named style label into the first-transformation prompt."""
    return template.format(style=style.strip())


def _error_message(response: requests.Response) -> str:
    """Best-effort human-readable message from an error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text.strip() or response.reason or f"HTTP {response.status_code}"

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
        if body.get("message"):
            return str(body["message"])
    return f"HTTP {response.status_code}"


def _decode_image(data: str, mime_type: str) -> Frame:
    if not isinstance(data, str) or not isinstance(mime_type, str):
        raise RemoteError("Malformed image payload: expected base64 text")
    try:
        return Frame.from_base64(data, mime_type)
    except (binascii.Error, ValueError) as e:
        raise RemoteError(f"Malformed image payload: {e}") from e


class _HttpStylizeClient(ABC):
    """Shared request/failure handling for HTTP-backed clients."""

    def __init__(
        self,
        timeout_seconds: float = 120.0,
        http: Optional[requests.Session] = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self._http = http or requests.Session()

        self._call_count: int = 0
        self._error_count: int = 0
        self._no_output_count: int = 0

    # Hooks for subclasses ----------------------------------------------------

    @property
    @abstractmethod
    def endpoint(self) -> str:
        ...

    def _headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    def _check_credentials(self) -> None:
        pass

    @abstractmethod
    def _build_payload(self, frame: Frame, instruction: str) -> Dict[str, Any]:
        ...

    @abstractmethod
    def _parse(self, body: Dict[str, Any]) -> StyleResult:
        ...

    # -------------------------------------------------------------------------

    async def stylize(self, frame: Frame, instruction: str) -> StyleResult:
        self._check_credentials()
        payload = self._build_payload(frame, instruction)

        self._call_count += 1
        try:
            response = await asyncio.to_thread(
                self._http.post,
                self.endpoint,
                json=payload,
                headers=self._headers(),
                timeout=self.timeout_seconds,
            )
        except requests.Timeout as e:
            self._error_count += 1
            raise RemoteError(
                f"Stylize request timed out after {self.timeout_seconds:.0f}s"
            ) from e
        except requests.RequestException as e:
            self._error_count += 1
            raise RemoteError(f"Stylize request failed: {e}") from e

        if response.status_code in (401, 403):
            self._error_count += 1
            raise AuthError(f"Credential rejected: {_error_message(response)}")
        if not 200 <= response.status_code < 300:
            self._error_count += 1
            raise RemoteError(
                f"Backend {response.status_code}: {_error_message(response)}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as e:
            self._error_count += 1
            raise RemoteError("Backend returned a non-JSON body") from e
        if not isinstance(body, dict):
            self._error_count += 1
            raise RemoteError("Backend returned an unexpected body")

        try:
            result = self._parse(body)
        except RemoteError:
            self._error_count += 1
            raise
        except (AttributeError, TypeError, KeyError) as e:
            self._error_count += 1
            raise RemoteError("Backend returned an unexpected body") from e

        if result.is_no_output:
            self._no_output_count += 1
            logger.warning(f"Stylize returned no image: {result.advisory_text!r}")
        else:
            logger.debug(
                f"Stylize ok: {frame!r} -> {result.output_frame!r}"
            )
        return result

    def close(self) -> None:
        self._http.close()

    @property
    def call_count(self) -> int:
        """Total remote calls attempted."""
        return self._call_count

    @property
    def error_count(self) -> int:
        """Total failed calls."""
        return self._error_count

    def get_metrics(self) -> dict:
        """Get client metrics for observability."""
        return {
            "call_count": self._call_count,
            "error_count": self._error_count,
            "no_output_count": self._no_output_count,
        }


class GeminiStylizeClient(_HttpStylizeClient):
    """
    Direct client for the Gemini generateContent endpoint.

    Attributes:
        model: Image generation model name
        api_base_url: API root
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash-exp-image-generation",
        api_base_url: str = "https://generativelanguage.googleapis.com",
        timeout_seconds: float = 120.0,
        http: Optional[requests.Session] = None,
    ) -> None:
        super().__init__(timeout_seconds=timeout_seconds, http=http)
        self.model = model
        self.api_base_url = api_base_url.rstrip("/")
        self._api_key = api_key

    @property
    def has_credentials(self) -> bool:
        return bool(self._api_key)

    @property
    def endpoint(self) -> str:
        return f"{self.api_base_url}/v1beta/models/{self.model}:generateContent"

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-goog-api-key": self._api_key,
        }

    def _check_credentials(self) -> None:
        if not self._api_key:
            raise AuthError("API key not configured")

    def _build_payload(self, frame: Frame, instruction: str) -> Dict[str, Any]:
        return {
            "contents": [
                {
                    "role": "user",
                    "parts": [
                        {"inlineData": {"mimeType": frame.mime_type, "data": frame.to_base64()}},
                        {"text": instruction},
                    ],
                }
            ],
            "generationConfig": {"responseModalities": ["TEXT", "IMAGE"]},
        }

    def _parse(self, body: Dict[str, Any]) -> StyleResult:
        return parse_generate_content(body)


def parse_generate_content(body: Dict[str, Any]) -> StyleResult:
    """
    Map a generateContent response onto a StyleResult.

    No candidates (e.g. a blocked prompt) is NoOutput carrying the block
    reason, not an error.

    Raises:
        RemoteError: If the body does not have the generateContent shape
    """
    candidates = body.get("candidates") or []
    if not isinstance(candidates, list):
        raise RemoteError("Backend returned an unexpected body: candidates")
    if not candidates:
        feedback = body.get("promptFeedback")
        reason = feedback.get("blockReason") if isinstance(feedback, dict) else None
        return StyleResult.no_output(
            f"Request blocked: {reason}" if reason else "No candidates returned"
        )

    candidate = candidates[0]
    content = candidate.get("content") if isinstance(candidate, dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list) or not all(isinstance(part, dict) for part in parts):
        raise RemoteError("Backend returned an unexpected body: parts")

    texts: List[str] = [
        part["text"] for part in parts if isinstance(part.get("text"), str) and part["text"]
    ]
    advisory = "\n".join(texts) or None

    for part in parts:
        inline = part.get("inlineData") or part.get("inline_data")
        if isinstance(inline, dict) and inline.get("data"):
            mime_type = inline.get("mimeType") or inline.get("mime_type") or "image/png"
            return StyleResult(
                output_frame=_decode_image(inline["data"], mime_type),
                advisory_text=advisory,
            )

    return StyleResult.no_output(advisory)


class ProxyStylizeClient(_HttpStylizeClient):
    """
    Client for the trusted proxy's /generate endpoint.

    Holds no credential; the proxy injects it server-side.
    """

    def __init__(
        self,
        proxy_url: str,
        timeout_seconds: float = 120.0,
        http: Optional[requests.Session] = None,
    ) -> None:
        super().__init__(timeout_seconds=timeout_seconds, http=http)
        self.proxy_url = proxy_url.rstrip("/")

    @property
    def endpoint(self) -> str:
        return f"{self.proxy_url}/generate"

    def _build_payload(self, frame: Frame, instruction: str) -> Dict[str, Any]:
        return {
            "image_base64": frame.to_base64(),
            "mime_type": frame.mime_type,
            "instruction": instruction,
        }

    def _parse(self, body: Dict[str, Any]) -> StyleResult:
        text = body.get("text")
        if text is not None and not isinstance(text, str):
            raise RemoteError("Backend returned an unexpected body: text")

        data = body.get("image_base64")
        if not data:
            return StyleResult.no_output(text)
        return StyleResult(
            output_frame=_decode_image(data, body.get("mime_type") or "image/jpeg"),
            advisory_text=text,
        )
